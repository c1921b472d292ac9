"""Tests for the SM-2 scheduler and stage classifier."""

import itertools

import pytest
from factories import DAY, NOW, make_state

from runedeck.application.scheduler import (
    SchedulerConfig,
    grade_card,
    initial_scheduling,
    is_due,
    is_leech,
    mode_of,
    preview_intervals,
)
from runedeck.domain.models import CardStage, Grade

NEW_CARD = make_state(interval_days=0, ease=2.5, lapses=0, is_new=True)

# Mix of new, young, mature and floored cards
STATES = [
    NEW_CARD,
    make_state(interval_days=1, ease=2.5, is_new=False),
    make_state(interval_days=3, ease=1.3, lapses=2, is_new=False),
    make_state(interval_days=7, ease=2.5, is_new=False),
    make_state(interval_days=45, ease=2.9, lapses=1, is_new=False),
    make_state(interval_days=1, ease=1.35, lapses=9, is_new=False),
    make_state(interval_days=0, ease=1.1, lapses=0, is_new=True),
]


class TestGradeCardScenarios:
    def test_new_card_good(self):
        result = grade_card(NEW_CARD, Grade.GOOD, now=NOW)
        assert result.interval_days == 1
        assert result.ease == 2.5
        assert result.lapses == 0
        assert result.is_new is False

    def test_new_card_easy(self):
        result = grade_card(NEW_CARD, Grade.EASY, now=NOW)
        assert result.interval_days == 2
        assert result.ease == 2.5
        assert result.lapses == 0
        assert result.is_new is False

    def test_new_card_hard_matches_good(self):
        hard = grade_card(NEW_CARD, Grade.HARD, now=NOW)
        good = grade_card(NEW_CARD, Grade.GOOD, now=NOW)
        assert hard == good

    def test_new_card_again_takes_priority(self):
        result = grade_card(NEW_CARD, Grade.AGAIN, now=NOW)
        assert result.interval_days == 1
        assert result.lapses == 1
        assert result.ease == pytest.approx(2.3)
        assert result.is_new is False

    def test_new_card_resets_ease(self):
        state = make_state(ease=1.7, is_new=True)
        assert grade_card(state, Grade.HARD, now=NOW).ease == 2.5

    def test_mature_again(self):
        state = make_state(interval_days=7, ease=2.5, lapses=0, is_new=False)
        result = grade_card(state, Grade.AGAIN, now=NOW)
        assert result.interval_days == 1
        assert result.ease == pytest.approx(2.3)
        assert result.lapses == 1
        assert result.is_new is False

    def test_again_respects_ease_floor(self):
        state = make_state(interval_days=5, ease=1.3, lapses=10, is_new=False)
        result = grade_card(state, Grade.AGAIN, now=NOW)
        assert result.ease == 1.3
        assert result.interval_days == 1
        assert result.lapses == 11

    def test_mature_good_keeps_ease(self):
        state = make_state(interval_days=7, ease=2.5, is_new=False)
        result = grade_card(state, Grade.GOOD, now=NOW)
        assert result.ease == pytest.approx(2.5)
        assert result.interval_days == 18  # 17.5 rounds up

    def test_mature_hard_lowers_ease(self):
        state = make_state(interval_days=10, ease=2.5, is_new=False)
        result = grade_card(state, Grade.HARD, now=NOW)
        assert result.ease == pytest.approx(2.36)
        assert result.interval_days == 24

    def test_mature_easy_applies_bonus(self):
        state = make_state(interval_days=10, ease=2.5, is_new=False)
        easy = grade_card(state, Grade.EASY, now=NOW)
        good = grade_card(state, Grade.GOOD, now=NOW)
        assert easy.ease == pytest.approx(2.6)
        assert easy.interval_days == 34  # 10 * 2.6 * 1.3 = 33.8
        assert easy.interval_days > good.interval_days

    def test_hard_uses_good_interval_formula(self):
        # Hard is not dampened: same interval * ease formula as Good,
        # only fed a lower ease. Pinned so a change here is deliberate.
        state = make_state(interval_days=20, ease=2.0, is_new=False)
        hard = grade_card(state, Grade.HARD, now=NOW)
        assert hard.interval_days == round(20 * (2.0 - 0.14))

    def test_due_at_is_interval_days_from_now(self):
        state = make_state(interval_days=10, ease=2.5, is_new=False)
        result = grade_card(state, Grade.GOOD, now=NOW)
        assert result.due_at == NOW + 25 * DAY

    def test_input_state_is_not_mutated(self):
        state = make_state(interval_days=10, ease=2.5, is_new=False)
        grade_card(state, Grade.EASY, now=NOW)
        assert state.interval_days == 10
        assert state.ease == 2.5

    def test_card_id_is_preserved(self):
        state = make_state("abc", is_new=False, interval_days=3)
        assert grade_card(state, Grade.GOOD, now=NOW).card_id == "abc"

    def test_default_now_uses_wall_clock(self, monkeypatch):
        monkeypatch.setattr("runedeck.application.scheduler.now_ms", lambda: 5_000)
        result = grade_card(NEW_CARD, Grade.GOOD)
        assert result.due_at == 5_000 + DAY

    def test_custom_config(self):
        config = SchedulerConfig(min_ease=1.5, good_interval_days=3, easy_interval_days=5)
        assert grade_card(NEW_CARD, Grade.GOOD, now=NOW, config=config).interval_days == 3
        assert grade_card(NEW_CARD, Grade.EASY, now=NOW, config=config).interval_days == 5
        low = make_state(ease=1.6, is_new=False, interval_days=4)
        assert grade_card(low, Grade.AGAIN, now=NOW, config=config).ease == 1.5


class TestGradeCardProperties:
    @pytest.mark.parametrize("state,grade", itertools.product(STATES, list(Grade)))
    def test_ease_never_below_floor(self, state, grade):
        assert grade_card(state, grade, now=NOW).ease >= 1.3

    @pytest.mark.parametrize("state,grade", itertools.product(STATES, list(Grade)))
    def test_interval_is_positive_integer(self, state, grade):
        interval = grade_card(state, grade, now=NOW).interval_days
        assert isinstance(interval, int)
        assert interval >= 1

    @pytest.mark.parametrize("state,grade", itertools.product(STATES, list(Grade)))
    def test_never_new_after_grading(self, state, grade):
        assert grade_card(state, grade, now=NOW).is_new is False

    @pytest.mark.parametrize("state,grade", itertools.product(STATES, list(Grade)))
    def test_lapses_increase_only_on_again(self, state, grade):
        result = grade_card(state, grade, now=NOW)
        expected = state.lapses + 1 if grade is Grade.AGAIN else state.lapses
        assert result.lapses == expected

    @pytest.mark.parametrize("state", STATES)
    def test_again_always_resets_interval(self, state):
        assert grade_card(state, Grade.AGAIN, now=NOW).interval_days == 1

    def test_repeated_hard_bottoms_out_at_floor(self):
        state = make_state(interval_days=10, ease=2.5, is_new=False)
        for _ in range(20):
            state = grade_card(state, Grade.HARD, now=NOW)
        assert state.ease == 1.3
        assert state.interval_days >= 1


class TestModeOf:
    def test_leech_is_clinic(self):
        assert mode_of(make_state(lapses=8), 8) is CardStage.CLINIC

    def test_clinic_beats_new(self):
        assert mode_of(make_state(lapses=12, is_new=True, interval_days=0), 8) is CardStage.CLINIC

    def test_clinic_beats_retention_interval(self):
        state = make_state(lapses=8, is_new=False, interval_days=90)
        assert mode_of(state, 8) is CardStage.CLINIC

    def test_new_card_is_learning(self):
        assert mode_of(NEW_CARD, 8) is CardStage.LEARNING

    def test_short_interval_is_learning(self):
        assert mode_of(make_state(is_new=False, interval_days=6), 8) is CardStage.LEARNING

    def test_week_interval_is_retention(self):
        assert mode_of(make_state(is_new=False, interval_days=7), 8) is CardStage.RETENTION

    def test_mature_card_with_some_lapses_is_retention(self):
        state = make_state(is_new=False, interval_days=30, lapses=2)
        assert mode_of(state, 8) is CardStage.RETENTION

    def test_default_threshold_is_eight(self):
        assert mode_of(make_state(lapses=7)) is CardStage.LEARNING
        assert mode_of(make_state(lapses=8)) is CardStage.CLINIC

    def test_is_leech(self):
        assert is_leech(make_state(lapses=3), leech_threshold=3)
        assert not is_leech(make_state(lapses=2), leech_threshold=3)


class TestIsDue:
    def test_boundary_is_inclusive(self):
        assert is_due(make_state(due_at=NOW), NOW)

    def test_one_ms_later_is_not_due(self):
        assert not is_due(make_state(due_at=NOW + 1), NOW)

    def test_past_is_due(self):
        assert is_due(make_state(due_at=NOW - DAY), NOW)


class TestPreviewIntervals:
    def test_new_card(self):
        assert preview_intervals(NEW_CARD) == {
            Grade.AGAIN: 1,
            Grade.HARD: 1,
            Grade.GOOD: 1,
            Grade.EASY: 2,
        }

    def test_mature_card_hard_equals_good(self):
        state = make_state(is_new=False, interval_days=10, ease=2.5)
        intervals = preview_intervals(state)
        assert intervals[Grade.AGAIN] == 1
        assert intervals[Grade.HARD] == 25
        assert intervals[Grade.GOOD] == 25
        assert intervals[Grade.EASY] > intervals[Grade.GOOD]

    def test_preview_does_not_mutate(self):
        state = make_state(is_new=False, interval_days=10, ease=2.5)
        preview_intervals(state)
        assert state == make_state(is_new=False, interval_days=10, ease=2.5)

    def test_preview_uses_config(self):
        config = SchedulerConfig(hard_interval_days=2, good_interval_days=3, easy_interval_days=6)
        intervals = preview_intervals(NEW_CARD, config)
        assert intervals[Grade.HARD] == 2
        assert intervals[Grade.GOOD] == 3
        assert intervals[Grade.EASY] == 6

    def test_preview_floor_of_one(self):
        state = make_state(is_new=False, interval_days=0, ease=1.3)
        assert all(days >= 1 for days in preview_intervals(state).values())


def test_initial_scheduling():
    state = initial_scheduling("w1", now=NOW)
    assert state.card_id == "w1"
    assert state.due_at == NOW
    assert state.interval_days == 0
    assert state.ease == 2.5
    assert state.lapses == 0
    assert state.is_new is True
