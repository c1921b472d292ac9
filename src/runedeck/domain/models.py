"""
Domain models for vocabulary scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import NamedTuple

from .constants import INITIAL_EASE
from .exceptions import InvalidGradeError


class Grade(IntEnum):
    """
    Quality rating of a recall attempt.

    The numeric value drives the ease-adjustment formula (4 - grade).
    """

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value: "Grade | int | str") -> "Grade":
        """
        Convert user input into a Grade.

        Accepts Grade members, ints 1-4, digit strings and member names
        (case-insensitive). Anything else raises InvalidGradeError.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidGradeError(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isascii() and text.isdigit():
                value = int(text)
            else:
                try:
                    return cls[text.upper()]
                except KeyError:
                    raise InvalidGradeError(value) from None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidGradeError(value) from None
        raise InvalidGradeError(value)


class CardStage(str, Enum):
    """Derived learning stage of a card. Never persisted."""

    LEARNING = "learning"
    RETENTION = "retention"
    CLINIC = "clinic"


@dataclass(frozen=True)
class SchedulingState:
    """
    Scheduling state of a single card.

    Attributes:
        card_id: The card this state schedules.
        due_at: Epoch milliseconds when the card next becomes reviewable.
        interval_days: Days until next review, as of the last grading.
        ease: Easiness factor governing interval growth.
        lapses: Number of Again gradings ever applied.
        is_new: True until the first grading.
    """

    card_id: str
    due_at: int
    interval_days: int = 0
    ease: float = INITIAL_EASE
    lapses: int = 0
    is_new: bool = True

    @classmethod
    def initial(cls, card_id: str, due_at: int) -> "SchedulingState":
        """State for a card that has never been graded."""
        return cls(card_id=card_id, due_at=due_at)

    def is_due(self, now: int) -> bool:
        return self.due_at <= now


@dataclass(frozen=True)
class Card:
    """A vocabulary entry belonging to a deck."""

    id: str
    deck_id: str
    headword: str
    definition: str
    created_at: int  # Epoch ms
    pos: str = ""
    ipa: str = ""
    example: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class StudyItem:
    """A card paired with its scheduling state."""

    card: Card
    scheduling: SchedulingState


StudyQueue = tuple[StudyItem, ...]


@dataclass(frozen=True)
class StudyScope:
    """
    The set of decks a session draws cards from.

    deck_ids of None means every deck.
    """

    deck_ids: frozenset[str] | None = None

    @classmethod
    def all(cls) -> "StudyScope":
        return cls(None)

    @classmethod
    def decks(cls, *deck_ids: str) -> "StudyScope":
        return cls(frozenset(deck_ids))

    @property
    def is_all(self) -> bool:
        return self.deck_ids is None

    def includes(self, deck_id: str) -> bool:
        return self.deck_ids is None or deck_id in self.deck_ids


@dataclass(frozen=True)
class ReviewRecord:
    """
    A single grading event.

    Attributes:
        id: Unique review ID.
        card_id: The card that was graded.
        ts: Epoch ms of the grading.
        grade: Button pressed.
        elapsed_ms: Time spent on the card before grading.
    """

    id: str
    card_id: str
    ts: int
    grade: Grade
    elapsed_ms: int


class SessionProgress(NamedTuple):
    current: int
    total: int
    percent: int


@dataclass(frozen=True)
class StageSummary:
    """Card counts per stage. Every card lands in exactly one stage."""

    total: int = 0
    new: int = 0
    learning: int = 0
    retention: int = 0
    clinic: int = 0
