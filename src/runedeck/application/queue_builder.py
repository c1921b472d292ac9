"""
Queue builder for study sessions.

Builds the session queue by:
1. Fetching due, new and leech subsets concurrently from the repository,
   cancelling the rest as soon as one fails
2. Capping due and new cards at their configured limits
3. Placing due cards ahead of new cards

Leeches are returned alongside the queue, never mixed into it.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass

from runedeck.domain.clock import Clock, now_ms
from runedeck.domain.constants import (
    DEFAULT_DUE_LIMIT,
    DEFAULT_LEECH_THRESHOLD,
    DEFAULT_NEW_PER_DAY,
)
from runedeck.domain.exceptions import QueueBuildError
from runedeck.domain.models import StudyItem, StudyQueue, StudyScope
from runedeck.domain.ports import StudyRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueConfig:
    """Limits applied when assembling a queue."""

    due_limit: int = DEFAULT_DUE_LIMIT
    new_per_day: int = DEFAULT_NEW_PER_DAY
    leech_threshold: int = DEFAULT_LEECH_THRESHOLD


@dataclass(frozen=True)
class QueueBuildResult:
    """Result of queue building operation."""

    cards: StudyQueue  # Due cards first, then new cards
    leeches: StudyQueue  # Clinic cards, most lapses first
    due_count: int
    new_count: int

    @property
    def is_empty(self) -> bool:
        return not self.cards


class StudyQueueBuilder:
    """
    Application service that composes a study queue.

    Depends on the StudyRepository abstraction, injected by the caller.
    """

    def __init__(
        self,
        repository: StudyRepository,
        config: QueueConfig | None = None,
        clock: Clock = now_ms,
    ):
        self._repo = repository
        self._config = config or QueueConfig()
        self._clock = clock

    @property
    def config(self) -> QueueConfig:
        return self._config

    async def build(self, scope: StudyScope, now: int | None = None) -> QueueBuildResult:
        """
        Build a queue for the given scope.

        Args:
            scope: Decks to draw from.
            now: Reference time for due checks. Defaults to the injected clock.

        Returns:
            QueueBuildResult with the ordered queue and the leech list.

        Raises:
            QueueBuildError: If any of the three fetches fails. No partial
                queue is returned.
        """
        if now is None:
            now = self._clock()
        cfg = self._config

        try:
            async with asyncio.TaskGroup() as tg:
                due_task = tg.create_task(
                    _fetch("due", self._repo.fetch_due(scope, cfg.due_limit, now))
                )
                new_task = tg.create_task(
                    _fetch("new", self._repo.fetch_new(scope, cfg.new_per_day))
                )
                leech_task = tg.create_task(
                    _fetch("leeches", self._repo.fetch_leeches(scope, cfg.leech_threshold))
                )
        except ExceptionGroup as eg:
            # The first failure cancels the remaining fetches
            raise eg.exceptions[0]

        due = due_task.result()[: cfg.due_limit]
        fresh = new_task.result()[: cfg.new_per_day]
        leeches = leech_task.result()

        logger.debug(
            f"Built queue: {len(due)} due, {len(fresh)} new, {len(leeches)} leeches"
        )

        return QueueBuildResult(
            cards=tuple(due) + tuple(fresh),
            leeches=tuple(leeches),
            due_count=len(due),
            new_count=len(fresh),
        )


async def _fetch(subset: str, pending: Awaitable[list[StudyItem]]) -> list[StudyItem]:
    try:
        return await pending
    except Exception as e:
        logger.warning(f"Fetching {subset} cards failed: {e}")
        raise QueueBuildError(subset, e) from e
