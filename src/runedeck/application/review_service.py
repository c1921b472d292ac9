"""
Review Service — Application layer orchestrator for grading.

Couples the scheduler, the repository and the session cursor:
the new scheduling state is persisted before the session advances,
so a failed write leaves the card ungraded rather than skipped.
"""

import logging
from dataclasses import dataclass

from ulid import ULID

from runedeck.application.scheduler import (
    DEFAULT_SCHEDULER_CONFIG,
    SchedulerConfig,
    grade_card,
)
from runedeck.application.session import StudySession
from runedeck.domain.clock import Clock, now_ms
from runedeck.domain.exceptions import NoActiveCardError
from runedeck.domain.models import Grade, ReviewRecord, SchedulingState, StudyItem
from runedeck.domain.ports import StudyRepository

logger = logging.getLogger(__name__)


def generate_review_id() -> str:
    return str(ULID())


@dataclass(frozen=True)
class GradeOutcome:
    """What a single grading did."""

    item: StudyItem
    previous: SchedulingState
    updated: SchedulingState
    review: ReviewRecord


class ReviewService:
    """
    Grades the current card of a session and persists the result.

    Follows Dependency Inversion: depends on the StudyRepository abstraction.
    """

    def __init__(
        self,
        repository: StudyRepository,
        scheduler_config: SchedulerConfig | None = None,
        clock: Clock = now_ms,
    ):
        self._repo = repository
        self._config = scheduler_config or DEFAULT_SCHEDULER_CONFIG
        self._clock = clock

    async def grade(self, session: StudySession, grade: Grade | int | str) -> GradeOutcome:
        """
        Grade the session's current card, persist, then advance.

        Args:
            session: An active study session.
            grade: Grade, int 1-4 or grade name. Parsed before anything else.

        Returns:
            GradeOutcome with the old and new scheduling state.

        Raises:
            InvalidGradeError: If the grade cannot be parsed.
            NoActiveCardError: If the session has no current card.
            Exception: Whatever the repository raises; the cursor stays put.
        """
        parsed = Grade.parse(grade)
        item = session.current()
        if item is None:
            raise NoActiveCardError("No card to grade: session is not active")

        now = self._clock()
        elapsed_ms = session.elapsed()
        updated = grade_card(item.scheduling, parsed, now=now, config=self._config)
        review = ReviewRecord(
            id=generate_review_id(),
            card_id=item.card.id,
            ts=now,
            grade=parsed,
            elapsed_ms=elapsed_ms,
        )

        await self._repo.persist_scheduling(updated)
        await self._repo.record_review(review)

        logger.debug(
            f"Graded {item.card.id} {parsed.name}: "
            f"interval {item.scheduling.interval_days}->{updated.interval_days}, "
            f"ease {item.scheduling.ease:.2f}->{updated.ease:.2f}"
        )

        session.next()
        return GradeOutcome(
            item=item, previous=item.scheduling, updated=updated, review=review
        )
