"""
In-Memory Study Repository — dict-backed implementation of StudyRepository.

Applies the due/new/leech selection and ordering rules directly in Python.
Also serves as the query engine behind the JSON deck adapter.
"""

from collections.abc import Iterable

from runedeck.domain.models import (
    Card,
    ReviewRecord,
    SchedulingState,
    StudyItem,
    StudyScope,
)
from runedeck.domain.ports import StudyRepository


class InMemoryStudyRepository(StudyRepository):
    """
    Holds cards, scheduling states and reviews in plain dicts.

    Cards without a stored scheduling state get the initial
    (new, due now) state when added.
    """

    def __init__(
        self,
        cards: Iterable[Card] = (),
        scheduling: Iterable[SchedulingState] = (),
        reviews: Iterable[ReviewRecord] = (),
    ):
        self.cards: dict[str, Card] = {}
        self.scheduling: dict[str, SchedulingState] = {s.card_id: s for s in scheduling}
        self.reviews: list[ReviewRecord] = list(reviews)
        for card in cards:
            self.add_card(card)

    def add_card(self, card: Card, state: SchedulingState | None = None) -> StudyItem:
        self.cards[card.id] = card
        if state is not None:
            self.scheduling[card.id] = state
        elif card.id not in self.scheduling:
            self.scheduling[card.id] = SchedulingState.initial(card.id, card.created_at)
        return StudyItem(card, self.scheduling[card.id])

    def items_in(self, scope: StudyScope) -> list[StudyItem]:
        items = []
        for card_id, card in self.cards.items():
            if not scope.includes(card.deck_id):
                continue
            state = self.scheduling.get(card_id)
            if state is None:
                continue
            items.append(StudyItem(card, state))
        return items

    def select_due(self, scope: StudyScope, limit: int, now: int) -> list[StudyItem]:
        due = [
            item
            for item in self.items_in(scope)
            if not item.scheduling.is_new and item.scheduling.is_due(now)
        ]
        due.sort(key=lambda item: item.scheduling.due_at)
        return due[:limit]

    def select_new(self, scope: StudyScope, limit: int) -> list[StudyItem]:
        fresh = [item for item in self.items_in(scope) if item.scheduling.is_new]
        fresh.sort(key=lambda item: item.card.created_at)
        return fresh[:limit]

    def select_leeches(self, scope: StudyScope, threshold: int) -> list[StudyItem]:
        leeches = [item for item in self.items_in(scope) if item.scheduling.lapses >= threshold]
        leeches.sort(key=lambda item: item.scheduling.lapses, reverse=True)
        return leeches

    def store_scheduling(self, state: SchedulingState) -> None:
        if state.card_id not in self.cards:
            raise KeyError(f"Unknown card: {state.card_id}")
        self.scheduling[state.card_id] = state

    async def fetch_due(self, scope: StudyScope, limit: int, now: int) -> list[StudyItem]:
        return self.select_due(scope, limit, now)

    async def fetch_new(self, scope: StudyScope, limit: int) -> list[StudyItem]:
        return self.select_new(scope, limit)

    async def fetch_leeches(self, scope: StudyScope, threshold: int) -> list[StudyItem]:
        return self.select_leeches(scope, threshold)

    async def persist_scheduling(self, state: SchedulingState) -> None:
        self.store_scheduling(state)

    async def record_review(self, review: ReviewRecord) -> None:
        self.reviews.append(review)

    async def list_items(self, scope: StudyScope) -> list[StudyItem]:
        return self.items_in(scope)
