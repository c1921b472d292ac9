"""
Study session state machine.

Walks a built queue card by card, tracking the reveal flag, per-card
timing and overall progress. Time comes from an injected clock so that
elapsed values are deterministic under test.
"""

from collections.abc import Iterable
from enum import Enum

from runedeck.application.utils.numbers import round_half_up
from runedeck.domain.clock import Clock, now_ms
from runedeck.domain.models import SessionProgress, StudyItem, StudyQueue


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETE = "complete"


class StudySession:
    """
    Single-threaded cursor over a study queue.

    Every operation is total: none of them raise, and advancing past the
    last card leaves the session complete.
    """

    def __init__(self, queue: Iterable[StudyItem], clock: Clock = now_ms):
        self._queue: StudyQueue = tuple(queue)
        self._clock = clock
        self._index = 0
        self._started = False
        self._revealed = False
        self._session_start = 0
        self._card_start = 0

    @classmethod
    def begin(cls, queue: Iterable[StudyItem], clock: Clock = now_ms) -> "StudySession":
        session = cls(queue, clock)
        session.start()
        return session

    def start(self) -> None:
        now = self._clock()
        self._index = 0
        self._started = True
        self._revealed = False
        self._session_start = now
        self._card_start = now

    @property
    def state(self) -> SessionState:
        if not self._started:
            return SessionState.NOT_STARTED
        if self.is_complete():
            return SessionState.COMPLETE
        return SessionState.ACTIVE

    @property
    def queue(self) -> StudyQueue:
        return self._queue

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def revealed(self) -> bool:
        return self._revealed

    def current(self) -> StudyItem | None:
        if self.state is not SessionState.ACTIVE:
            return None
        return self._queue[self._index]

    def reveal(self) -> None:
        if self.state is SessionState.ACTIVE:
            self._revealed = True

    def next(self) -> None:
        if self.state is not SessionState.ACTIVE:
            return
        self._index += 1
        self._card_start = self._clock()
        self._revealed = False

    def elapsed(self) -> int:
        """Milliseconds spent on the current card."""
        if not self._started:
            return 0
        return self._clock() - self._card_start

    def total_elapsed(self) -> int:
        """Milliseconds since the session started."""
        if not self._started:
            return 0
        return self._clock() - self._session_start

    def progress(self) -> SessionProgress:
        total = len(self._queue)
        current = min(self._index + 1, total)
        percent = round_half_up(current / total * 100) if total else 0
        return SessionProgress(current=current, total=total, percent=percent)

    def is_complete(self) -> bool:
        return self._index >= len(self._queue)

    def __len__(self) -> int:
        return len(self._queue)
