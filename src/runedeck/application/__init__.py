# Application Package
from .queue_builder import QueueBuildResult, QueueConfig, StudyQueueBuilder
from .review_service import GradeOutcome, ReviewService
from .scheduler import (
    SchedulerConfig,
    grade_card,
    initial_scheduling,
    is_due,
    mode_of,
    preview_intervals,
)
from .session import SessionState, StudySession
from .stats import summarize_stages

__all__ = [
    "QueueBuildResult",
    "QueueConfig",
    "StudyQueueBuilder",
    "GradeOutcome",
    "ReviewService",
    "SchedulerConfig",
    "grade_card",
    "initial_scheduling",
    "is_due",
    "mode_of",
    "preview_intervals",
    "SessionState",
    "StudySession",
    "summarize_stages",
]
