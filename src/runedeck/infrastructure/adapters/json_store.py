"""
JSON Deck Repository — Infrastructure adapter for a deck file on disk.

Implements StudyRepository by loading a JSON document into an
InMemoryStudyRepository and writing it back after every update.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from runedeck.domain.exceptions import DeckFileError
from runedeck.domain.models import (
    Card,
    Grade,
    ReviewRecord,
    SchedulingState,
    StudyItem,
    StudyScope,
)
from runedeck.domain.ports import StudyRepository

from .memory_store import InMemoryStudyRepository

logger = logging.getLogger(__name__)


class CardEntry(BaseModel):
    id: str
    deck_id: str = "default"
    headword: str = Field(min_length=1)
    definition: str = Field(min_length=1)
    created_at: int
    pos: str = ""
    ipa: str = ""
    example: str = ""
    tags: list[str] = Field(default_factory=list)


class SchedulingEntry(BaseModel):
    card_id: str
    due_at: int
    interval_days: int = Field(default=0, ge=0)
    ease: float = 2.5
    lapses: int = Field(default=0, ge=0)
    is_new: bool = True


class ReviewEntry(BaseModel):
    id: str
    card_id: str
    ts: int
    grade: int = Field(ge=1, le=4)
    elapsed_ms: int = Field(default=0, ge=0)


class DeckDocument(BaseModel):
    cards: list[CardEntry] = Field(default_factory=list)
    scheduling: list[SchedulingEntry] = Field(default_factory=list)
    reviews: list[ReviewEntry] = Field(default_factory=list)


def _to_card(entry: CardEntry) -> Card:
    return Card(
        id=entry.id,
        deck_id=entry.deck_id,
        headword=entry.headword,
        definition=entry.definition,
        created_at=entry.created_at,
        pos=entry.pos,
        ipa=entry.ipa,
        example=entry.example,
        tags=tuple(entry.tags),
    )


def _to_state(entry: SchedulingEntry) -> SchedulingState:
    return SchedulingState(**entry.model_dump())


def _to_review(entry: ReviewEntry) -> ReviewRecord:
    return ReviewRecord(
        id=entry.id,
        card_id=entry.card_id,
        ts=entry.ts,
        grade=Grade(entry.grade),
        elapsed_ms=entry.elapsed_ms,
    )


class JsonDeckRepository(StudyRepository):
    """
    Reads and writes a single JSON deck file.

    The whole document is rewritten on every persist; fine for
    personal decks, not meant for concurrent writers.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._store = self._load()

    def _load(self) -> InMemoryStudyRepository:
        if not self.path.exists():
            raise DeckFileError(f"Deck file not found: {self.path}")

        try:
            doc = DeckDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (ValidationError, UnicodeDecodeError) as e:
            raise DeckFileError(f"Malformed deck file {self.path}: {e}") from e
        except OSError as e:
            raise DeckFileError(f"Could not read deck file {self.path}: {e}") from e

        store = InMemoryStudyRepository(
            scheduling=[_to_state(s) for s in doc.scheduling],
            reviews=[_to_review(r) for r in doc.reviews],
        )
        for entry in doc.cards:
            store.add_card(_to_card(entry))

        logger.debug(f"Loaded {len(store.cards)} cards from {self.path}")
        return store

    def _save(self) -> None:
        doc = DeckDocument(
            cards=[
                CardEntry(
                    id=c.id,
                    deck_id=c.deck_id,
                    headword=c.headword,
                    definition=c.definition,
                    created_at=c.created_at,
                    pos=c.pos,
                    ipa=c.ipa,
                    example=c.example,
                    tags=list(c.tags),
                )
                for c in self._store.cards.values()
            ],
            scheduling=[
                SchedulingEntry(
                    card_id=s.card_id,
                    due_at=s.due_at,
                    interval_days=s.interval_days,
                    ease=s.ease,
                    lapses=s.lapses,
                    is_new=s.is_new,
                )
                for s in self._store.scheduling.values()
            ],
            reviews=[
                ReviewEntry(
                    id=r.id,
                    card_id=r.card_id,
                    ts=r.ts,
                    grade=int(r.grade),
                    elapsed_ms=r.elapsed_ms,
                )
                for r in self._store.reviews
            ],
        )

        # Write to a sibling temp file, then swap it in
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(doc.model_dump_json(indent=2))
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise DeckFileError(f"Could not write deck file {self.path}: {e}") from e

    async def fetch_due(self, scope: StudyScope, limit: int, now: int) -> list[StudyItem]:
        return self._store.select_due(scope, limit, now)

    async def fetch_new(self, scope: StudyScope, limit: int) -> list[StudyItem]:
        return self._store.select_new(scope, limit)

    async def fetch_leeches(self, scope: StudyScope, threshold: int) -> list[StudyItem]:
        return self._store.select_leeches(scope, threshold)

    async def persist_scheduling(self, state: SchedulingState) -> None:
        previous = self._store.scheduling.get(state.card_id)
        self._store.store_scheduling(state)
        try:
            self._save()
        except DeckFileError:
            # Memory must keep matching what is on disk
            if previous is None:
                del self._store.scheduling[state.card_id]
            else:
                self._store.scheduling[state.card_id] = previous
            raise

    async def record_review(self, review: ReviewRecord) -> None:
        self._store.reviews.append(review)
        try:
            self._save()
        except DeckFileError:
            self._store.reviews.pop()
            raise

    async def list_items(self, scope: StudyScope) -> list[StudyItem]:
        return self._store.items_in(scope)

    @property
    def reviews(self) -> list[ReviewRecord]:
        return list(self._store.reviews)
