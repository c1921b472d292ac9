"""
Ports (interfaces) for card storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import ReviewRecord, SchedulingState, StudyItem, StudyScope


class StudyRepository(ABC):
    """
    Port for reading study subsets and writing scheduling updates.

    Implementations:
        - InMemoryStudyRepository: Dict-backed store, used by tests and as a query engine.
        - JsonDeckRepository: Reads and writes a JSON deck file.
    """

    @abstractmethod
    async def fetch_due(self, scope: StudyScope, limit: int, now: int) -> list[StudyItem]:
        """
        Fetch reviewed cards whose due_at <= now.

        Returns:
            At most `limit` items, ordered by ascending due_at.
        """

    @abstractmethod
    async def fetch_new(self, scope: StudyScope, limit: int) -> list[StudyItem]:
        """
        Fetch cards that have never been graded.

        Returns:
            At most `limit` items, ordered by ascending card creation time.
        """

    @abstractmethod
    async def fetch_leeches(self, scope: StudyScope, threshold: int) -> list[StudyItem]:
        """
        Fetch cards with lapses >= threshold.

        Returns:
            Items ordered by descending lapse count.
        """

    @abstractmethod
    async def persist_scheduling(self, state: SchedulingState) -> None:
        """Store an updated scheduling state. Raises on failure."""

    @abstractmethod
    async def record_review(self, review: ReviewRecord) -> None:
        """Append a review record to the card's history."""

    @abstractmethod
    async def list_items(self, scope: StudyScope) -> list[StudyItem]:
        """Return every card in scope with its scheduling state."""
