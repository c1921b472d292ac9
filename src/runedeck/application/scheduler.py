"""
SM-2 style scheduler.

Maps (scheduling state, grade, now) to a new scheduling state.
This is a pure computation module with no I/O.
"""

from dataclasses import dataclass, replace

from runedeck.application.utils.numbers import round_half_up
from runedeck.domain.clock import now_ms
from runedeck.domain.constants import (
    AGAIN_EASE_PENALTY,
    DEFAULT_EASY_BONUS,
    DEFAULT_EASY_INTERVAL_DAYS,
    DEFAULT_GOOD_INTERVAL_DAYS,
    DEFAULT_HARD_INTERVAL_DAYS,
    DEFAULT_LEECH_THRESHOLD,
    DEFAULT_MIN_EASE,
    INITIAL_EASE,
    MS_PER_DAY,
    RETENTION_MIN_INTERVAL_DAYS,
)
from runedeck.domain.models import CardStage, Grade, SchedulingState


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Tunables for the scheduler.

    Attributes:
        min_ease: Floor for the easiness factor.
        hard_interval_days: Interval shown for Hard on a new card.
        good_interval_days: Interval granted to a new card graded Hard or Good.
        easy_interval_days: Interval granted to a new card graded Easy.
        easy_bonus: Extra multiplier on top of ease for Easy on mature cards.
    """

    min_ease: float = DEFAULT_MIN_EASE
    hard_interval_days: int = DEFAULT_HARD_INTERVAL_DAYS
    good_interval_days: int = DEFAULT_GOOD_INTERVAL_DAYS
    easy_interval_days: int = DEFAULT_EASY_INTERVAL_DAYS
    easy_bonus: float = DEFAULT_EASY_BONUS


DEFAULT_SCHEDULER_CONFIG = SchedulerConfig()


def _scaled_interval(interval_days: int, ease: float, bonus: float = 1.0) -> int:
    return max(1, round_half_up(interval_days * ease * bonus))


def grade_card(
    state: SchedulingState,
    grade: Grade,
    now: int | None = None,
    config: SchedulerConfig = DEFAULT_SCHEDULER_CONFIG,
) -> SchedulingState:
    """
    Apply a grade to a card and return its next scheduling state.

    Branches, in precedence order:
    1. Again (new or mature): one more lapse, ease drops by 0.2, interval 1.
    2. New card: ease resets to 2.5, interval from config (Hard == Good).
    3. Mature card: SM-2 ease adjustment, interval scaled by the new ease.

    Args:
        state: Current state. Not mutated.
        grade: The grade given.
        now: Reference time in epoch ms. Defaults to the wall clock.
        config: Scheduler tunables.

    Returns:
        A new SchedulingState with is_new=False and due_at recomputed.
    """
    if now is None:
        now = now_ms()

    ease = state.ease
    lapses = state.lapses

    if grade == Grade.AGAIN:
        lapses += 1
        ease = max(config.min_ease, ease - AGAIN_EASE_PENALTY)
        interval = 1
    elif state.is_new:
        ease = INITIAL_EASE
        if grade == Grade.EASY:
            interval = config.easy_interval_days
        else:
            interval = config.good_interval_days
    else:
        q = 4 - int(grade)
        ease = max(config.min_ease, ease + (0.1 - q * (0.08 + q * 0.02)))
        if grade == Grade.EASY:
            interval = _scaled_interval(state.interval_days, ease, config.easy_bonus)
        else:
            # Hard shares Good's formula; only the ease adjustment differs.
            interval = _scaled_interval(state.interval_days, ease)

    return replace(
        state,
        due_at=now + interval * MS_PER_DAY,
        interval_days=interval,
        ease=ease,
        lapses=lapses,
        is_new=False,
    )


def mode_of(
    state: SchedulingState, leech_threshold: int = DEFAULT_LEECH_THRESHOLD
) -> CardStage:
    """
    Classify a card into its learning stage.

    Clinic wins over everything, including a card that is still new.
    """
    if state.lapses >= leech_threshold:
        return CardStage.CLINIC
    if state.is_new or state.interval_days < RETENTION_MIN_INTERVAL_DAYS:
        return CardStage.LEARNING
    return CardStage.RETENTION


def is_leech(state: SchedulingState, leech_threshold: int = DEFAULT_LEECH_THRESHOLD) -> bool:
    return mode_of(state, leech_threshold) is CardStage.CLINIC


def is_due(state: SchedulingState, now: int | None = None) -> bool:
    """True when the card's due time has arrived. The boundary is inclusive."""
    if now is None:
        now = now_ms()
    return state.is_due(now)


def preview_intervals(
    state: SchedulingState, config: SchedulerConfig = DEFAULT_SCHEDULER_CONFIG
) -> dict[Grade, int]:
    """
    Interval each grade would produce, for display next to the grade buttons.

    Mature previews use the card's current ease, so Hard and Good report
    the same value.
    """
    if state.is_new:
        return {
            Grade.AGAIN: 1,
            Grade.HARD: config.hard_interval_days,
            Grade.GOOD: config.good_interval_days,
            Grade.EASY: config.easy_interval_days,
        }

    scaled = _scaled_interval(state.interval_days, state.ease)
    return {
        Grade.AGAIN: 1,
        Grade.HARD: scaled,
        Grade.GOOD: scaled,
        Grade.EASY: _scaled_interval(state.interval_days, state.ease, config.easy_bonus),
    }


def initial_scheduling(card_id: str, now: int | None = None) -> SchedulingState:
    """State for a freshly imported card: due immediately, never graded."""
    if now is None:
        now = now_ms()
    return SchedulingState.initial(card_id, now)
