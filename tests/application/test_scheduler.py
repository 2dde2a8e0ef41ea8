"""Tests for the four-button scheduler and due-label formatting."""

import math
from dataclasses import replace
from datetime import timedelta

import pytest

from flashdeck.application.scheduler import (
    format_due_label,
    new_review_state,
    preview_all,
    preview_next,
    round_half_up,
    schedule_next,
)
from flashdeck.domain.constants import MAX_INTERVAL_DAYS
from flashdeck.domain.models import Rating, ReviewState


@pytest.fixture
def initial(now):
    return new_review_state("card_1", now)


class TestAgain:
    def test_lapse_resets_and_shortens(self, initial, now):
        result = schedule_next(initial, Rating.AGAIN, now)

        assert result.interval_days == 0
        assert result.repetitions == 0
        assert result.lapses == 1
        assert result.ease_factor == pytest.approx(2.3)
        assert result.due_at == now + timedelta(minutes=10)

    def test_lapse_after_progress(self, now):
        state = ReviewState(
            card_id="c", due_at=now, interval_days=30, ease_factor=2.6, repetitions=5, lapses=2
        )
        result = schedule_next(state, Rating.AGAIN, now)

        assert result.due_at == now + timedelta(minutes=10)
        assert result.repetitions == 0
        assert result.lapses == 3
        assert result.interval_days == 0

    def test_ease_floor(self, now):
        state = ReviewState(card_id="c", due_at=now, ease_factor=1.35)
        result = schedule_next(state, Rating.AGAIN, now)
        assert result.ease_factor == pytest.approx(1.3)


class TestSuccessPath:
    def test_first_good(self, initial, now):
        result = schedule_next(initial, Rating.GOOD, now)

        assert result.interval_days == 1
        assert result.repetitions == 1
        assert result.ease_factor == pytest.approx(2.48)
        assert result.due_at == now + timedelta(days=1)

    @pytest.mark.parametrize(
        "rating, first, second",
        [(Rating.HARD, 1, 2), (Rating.GOOD, 1, 3), (Rating.EASY, 2, 5)],
    )
    def test_learning_steps(self, initial, now, rating, first, second):
        s1 = schedule_next(initial, rating, now)
        s2 = schedule_next(s1, rating, now)

        assert s1.interval_days == first
        assert s2.interval_days == second
        assert s2.repetitions == 2

    def test_three_goods_use_review_multiplier(self, initial, now):
        s1 = schedule_next(initial, Rating.GOOD, now)
        s2 = schedule_next(s1, Rating.GOOD, now)
        s3 = schedule_next(s2, Rating.GOOD, now)

        assert s3.repetitions == 3
        assert s3.interval_days == round_half_up(s2.interval_days * s3.ease_factor * 1.4)
        assert s3.interval_days == 10
        assert s3.due_at == now + timedelta(days=10)

    def test_easy_growth(self, initial, now):
        state = initial
        for _ in range(3):
            state = schedule_next(state, Rating.EASY, now)

        assert state.ease_factor == pytest.approx(2.8)
        assert state.interval_days == 24  # round(5 * 2.8 * 1.7)

    def test_hard_growth(self, initial, now):
        state = initial
        for _ in range(3):
            state = schedule_next(state, Rating.HARD, now)

        assert state.ease_factor == pytest.approx(2.05)
        assert state.interval_days == 5  # round(2 * 2.05 * 1.15)

    def test_hard_ease_floor(self, now):
        state = ReviewState(card_id="c", due_at=now, ease_factor=1.3, repetitions=4, interval_days=10)
        result = schedule_next(state, Rating.HARD, now)
        assert result.ease_factor == pytest.approx(1.3)

    def test_easy_has_no_ceiling(self, now):
        state = ReviewState(card_id="c", due_at=now, ease_factor=4.0)
        assert schedule_next(state, Rating.EASY, now).ease_factor == pytest.approx(4.1)

    def test_first_success_after_lapse(self, now):
        state = ReviewState(
            card_id="c", due_at=now, interval_days=0, ease_factor=2.3, repetitions=0, lapses=1
        )
        result = schedule_next(state, Rating.GOOD, now)
        assert result.interval_days == 1
        assert result.lapses == 1

    def test_review_interval_at_least_one_day(self, now):
        state = ReviewState(card_id="c", due_at=now, interval_days=0, repetitions=2)
        result = schedule_next(state, Rating.HARD, now)
        assert result.interval_days == 1


class TestNormalization:
    def test_low_ease_resets_to_default(self, now):
        state = ReviewState(card_id="c", due_at=now, ease_factor=1.0)
        result = schedule_next(state, Rating.GOOD, now)
        assert result.ease_factor == pytest.approx(2.48)

    def test_missing_values(self, now):
        state = ReviewState(
            card_id="c",
            due_at=now,
            interval_days=None,
            ease_factor=None,
            repetitions=None,
            lapses=None,
        )
        result = schedule_next(state, Rating.GOOD, now)

        assert result.repetitions == 1
        assert result.lapses == 0
        assert result.interval_days == 1
        assert result.ease_factor == pytest.approx(2.48)

    def test_negative_counters(self, now):
        state = ReviewState(
            card_id="c", due_at=now, interval_days=-4, repetitions=-2, lapses=-1
        )
        result = schedule_next(state, Rating.AGAIN, now)
        assert result.lapses == 1
        assert result.repetitions == 0


    @pytest.mark.parametrize("rating", [Rating.HARD, Rating.GOOD, Rating.EASY])
    def test_nan_ease_resets_to_default(self, now, rating):
        state = ReviewState(
            card_id="c", due_at=now, ease_factor=math.nan, interval_days=10, repetitions=4
        )
        result = schedule_next(state, rating, now)

        expected_ease = {Rating.HARD: 2.35, Rating.GOOD: 2.48, Rating.EASY: 2.6}[rating]
        assert result.ease_factor == pytest.approx(expected_ease)
        assert result.interval_days >= 1

    def test_non_finite_counters(self, now):
        state = ReviewState(
            card_id="c",
            due_at=now,
            interval_days=math.nan,
            repetitions=math.inf,
            lapses=math.nan,
            ease_factor=math.inf,
        )
        result = schedule_next(state, Rating.GOOD, now)

        assert result.repetitions == 1
        assert result.interval_days == 1
        assert result.lapses == 0
        assert result.ease_factor == pytest.approx(2.48)


class TestIntervalCap:
    def test_repeated_easy_stays_bounded(self, initial, now):
        state = initial
        for _ in range(15):
            state = schedule_next(state, Rating.EASY, now)

        assert state.repetitions == 15
        assert state.interval_days == MAX_INTERVAL_DAYS
        assert state.due_at == now + timedelta(days=MAX_INTERVAL_DAYS)

    def test_preview_of_huge_interval(self, now):
        state = ReviewState(
            card_id="c", due_at=now, interval_days=600_000, ease_factor=3.4, repetitions=8
        )
        previews = preview_all(state, now)

        assert previews[Rating.EASY].due_at == now + timedelta(days=MAX_INTERVAL_DAYS)
        assert previews[Rating.EASY].label == f"{MAX_INTERVAL_DAYS}d"
        assert previews[Rating.AGAIN].label == "10m"

    def test_overflowing_ease(self, now):
        state = ReviewState(
            card_id="c", due_at=now, interval_days=10, ease_factor=1e308, repetitions=5
        )
        assert schedule_next(state, Rating.EASY, now).interval_days == MAX_INTERVAL_DAYS


class TestInvariants:
    STATES = [
        dict(),
        dict(interval_days=1, repetitions=1, ease_factor=2.48),
        dict(interval_days=45, repetitions=7, ease_factor=1.3, lapses=4),
        dict(interval_days=3, repetitions=2, ease_factor=3.2),
        dict(interval_days=-1, repetitions=-1, ease_factor=0.5, lapses=-2),
    ]

    @pytest.mark.parametrize("fields", STATES)
    @pytest.mark.parametrize("rating", [Rating.HARD, Rating.GOOD, Rating.EASY])
    def test_success_is_due_in_future(self, now, fields, rating):
        state = ReviewState(card_id="c", due_at=now, **fields)
        assert schedule_next(state, rating, now).due_at > now

    @pytest.mark.parametrize("fields", STATES)
    @pytest.mark.parametrize("rating", list(Rating))
    def test_result_is_valid(self, now, fields, rating):
        state = ReviewState(card_id="c", due_at=now, **fields)
        result = schedule_next(state, rating, now)

        assert result.ease_factor >= 1.3
        assert result.interval_days >= 0
        assert result.repetitions >= 0
        assert result.lapses >= 0
        assert result.card_id == "c"
        assert result.last_reviewed_at == now

    def test_pure_and_repeatable(self, initial, now):
        first = schedule_next(initial, Rating.GOOD, now)
        second = schedule_next(initial, Rating.GOOD, now)

        assert first == second
        assert initial == new_review_state("card_1", now)

    def test_accepts_rating_value(self, initial, now):
        assert schedule_next(initial, "easy", now) == schedule_next(initial, Rating.EASY, now)

    def test_preserves_unrelated_fields(self, now):
        state = replace(new_review_state("keep_me", now), lapses=2)
        result = schedule_next(state, Rating.GOOD, now)
        assert result.card_id == "keep_me"
        assert result.lapses == 2


class TestFormatDueLabel:
    @pytest.mark.parametrize(
        "delta, label",
        [
            (timedelta(0), "<1m"),
            (timedelta(seconds=59), "<1m"),
            (timedelta(seconds=-30), "<1m"),
            (timedelta(seconds=90), "2m"),
            (timedelta(minutes=10), "10m"),
            (timedelta(minutes=59, seconds=29), "59m"),
            (timedelta(minutes=59, seconds=30), "1h"),
            (timedelta(hours=5, minutes=29), "5h"),
            (timedelta(hours=23, minutes=29), "23h"),
            (timedelta(hours=23, minutes=30), "1d"),
            (timedelta(hours=36), "2d"),
            (timedelta(days=10), "10d"),
        ],
    )
    def test_tiers(self, now, delta, label):
        assert format_due_label(now + delta, now) == label


class TestPreview:
    def test_preview_next(self, initial, now):
        preview = preview_next(initial, Rating.GOOD, now)
        assert preview.rating is Rating.GOOD
        assert preview.due_at == now + timedelta(days=1)
        assert preview.label == "1d"

    def test_preview_all_ratings(self, initial, now):
        previews = preview_all(initial, now)

        assert set(previews) == set(Rating)
        assert previews[Rating.AGAIN].label == "10m"
        assert previews[Rating.HARD].label == "1d"
        assert previews[Rating.GOOD].label == "1d"
        assert previews[Rating.EASY].label == "2d"

    def test_preview_does_not_commit(self, initial, now):
        preview_all(initial, now)
        assert initial.repetitions == 0
        assert initial.last_reviewed_at is None
