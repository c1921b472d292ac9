"""Tests for the study session state machine."""

from factories import FakeClock, make_item

from runedeck.application.session import SessionState, StudySession
from runedeck.domain.models import SessionProgress


def three_card_queue():
    return [make_item("a"), make_item("b"), make_item("c")]


class TestLifecycle:
    def test_not_started_until_start(self, clock):
        session = StudySession(three_card_queue(), clock=clock)
        assert session.state is SessionState.NOT_STARTED
        assert session.current() is None
        assert session.elapsed() == 0

    def test_start_activates_non_empty_queue(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        assert session.state is SessionState.ACTIVE
        assert session.current().card.id == "a"

    def test_empty_queue_is_complete_immediately(self, clock):
        session = StudySession.begin([], clock=clock)
        assert session.state is SessionState.COMPLETE
        assert session.is_complete()
        assert session.current() is None
        assert session.progress() == SessionProgress(0, 0, 0)

    def test_next_walks_the_queue_in_order(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        seen = []
        while not session.is_complete():
            seen.append(session.current().card.id)
            session.next()
        assert seen == ["a", "b", "c"]
        assert session.state is SessionState.COMPLETE

    def test_next_past_the_end_is_a_no_op(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        for _ in range(10):
            session.next()
        assert session.is_complete()
        assert session.current_index == 3
        assert session.current() is None

    def test_next_before_start_does_nothing(self, clock):
        session = StudySession(three_card_queue(), clock=clock)
        session.next()
        assert session.current_index == 0

    def test_restart_rewinds(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        session.next()
        session.start()
        assert session.current().card.id == "a"

    def test_queue_is_a_snapshot(self, clock):
        queue = three_card_queue()
        session = StudySession.begin(queue, clock=clock)
        queue.clear()
        assert len(session) == 3


class TestReveal:
    def test_reveal_does_not_advance(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        session.reveal()
        assert session.revealed
        assert session.current().card.id == "a"

    def test_reveal_is_idempotent(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        session.reveal()
        session.reveal()
        assert session.revealed

    def test_next_hides_answer(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        session.reveal()
        session.next()
        assert not session.revealed

    def test_reveal_on_complete_session_is_ignored(self, clock):
        session = StudySession.begin([], clock=clock)
        session.reveal()
        assert not session.revealed


class TestTiming:
    def test_elapsed_tracks_current_card(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        clock.advance(1500)
        assert session.elapsed() == 1500

    def test_next_resets_card_timer(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        clock.advance(4000)
        session.next()
        clock.advance(250)
        assert session.elapsed() == 250
        assert session.total_elapsed() == 4250

    def test_injected_clock_is_the_only_time_source(self):
        clock = FakeClock(now=0)
        session = StudySession.begin(three_card_queue(), clock=clock)
        assert session.elapsed() == 0
        assert session.total_elapsed() == 0


class TestProgress:
    def test_initial_progress(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        assert session.progress() == SessionProgress(current=1, total=3, percent=33)

    def test_three_card_scenario(self, clock):
        session = StudySession.begin(three_card_queue(), clock=clock)
        session.next()
        session.next()
        assert session.progress() == SessionProgress(current=3, total=3, percent=100)
        session.next()
        assert session.is_complete()
        assert session.progress() == SessionProgress(current=3, total=3, percent=100)

    def test_percent_rounds_half_up(self, clock):
        queue = [make_item(str(i)) for i in range(8)]
        session = StudySession.begin(queue, clock=clock)
        # 1/8 = 12.5%
        assert session.progress().percent == 13
