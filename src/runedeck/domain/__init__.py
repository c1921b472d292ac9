# Domain Package
from .models import (
    Card,
    CardStage,
    Grade,
    ReviewRecord,
    SchedulingState,
    SessionProgress,
    StageSummary,
    StudyItem,
    StudyQueue,
    StudyScope,
)
from .ports import StudyRepository

__all__ = [
    "Card",
    "CardStage",
    "Grade",
    "ReviewRecord",
    "SchedulingState",
    "SessionProgress",
    "StageSummary",
    "StudyItem",
    "StudyQueue",
    "StudyScope",
    "StudyRepository",
]
