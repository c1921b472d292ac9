"""
Stage statistics over a set of cards.

Pure computation: every count goes through mode_of so stage thresholds
cannot drift between callers.
"""

from collections import Counter
from collections.abc import Iterable

from runedeck.application.scheduler import mode_of
from runedeck.domain.constants import DEFAULT_LEECH_THRESHOLD
from runedeck.domain.models import CardStage, StageSummary, StudyItem


def summarize_stages(
    items: Iterable[StudyItem], leech_threshold: int = DEFAULT_LEECH_THRESHOLD
) -> StageSummary:
    """
    Count cards per stage.

    `new` is reported alongside the stages; new cards are also counted
    under learning (or clinic, if their lapse count says so).
    """
    stages: Counter[CardStage] = Counter()
    total = 0
    new = 0

    for item in items:
        total += 1
        if item.scheduling.is_new:
            new += 1
        stages[mode_of(item.scheduling, leech_threshold)] += 1

    return StageSummary(
        total=total,
        new=new,
        learning=stages[CardStage.LEARNING],
        retention=stages[CardStage.RETENTION],
        clinic=stages[CardStage.CLINIC],
    )
