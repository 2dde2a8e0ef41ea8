"""
Four-button spaced-repetition scheduler.

A pragmatic SM-2 style variant:
- again: lapse, short relearn step measured in minutes
- hard: small interval growth, lower ease
- good: normal growth
- easy: large growth, higher ease

This is a pure computation module with no I/O. Every function takes the
reference time explicitly so previews and tests are deterministic.
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from flashdeck.domain.constants import (
    DEFAULT_EASE_FACTOR,
    EASE_DELTA_EASY,
    EASE_DELTA_GOOD,
    EASE_DELTA_HARD,
    FIRST_STEP_DAYS,
    INTERVAL_MULTIPLIERS,
    LAPSE_EASE_PENALTY,
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    RELEARN_DELAY_MINUTES,
    SECOND_STEP_DAYS,
)
from flashdeck.domain.models import DuePreview, Rating, ReviewState

_EASE_DELTAS = {
    Rating.HARD: EASE_DELTA_HARD,
    Rating.GOOD: EASE_DELTA_GOOD,
    Rating.EASY: EASE_DELTA_EASY,
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (no banker's rounding)."""
    return math.floor(value + 0.5)


def new_review_state(card_id: str, now: datetime) -> ReviewState:
    """Initial state for a freshly created card: due immediately."""
    return ReviewState(
        card_id=card_id,
        due_at=now,
        interval_days=0,
        ease_factor=DEFAULT_EASE_FACTOR,
        repetitions=0,
        lapses=0,
        last_reviewed_at=None,
    )


def _normalized(state: ReviewState) -> tuple[float, int, int, int]:
    ease = state.ease_factor
    if ease is None or not math.isfinite(ease) or ease < MIN_EASE_FACTOR:
        ease = DEFAULT_EASE_FACTOR

    def non_negative(value: int | None) -> int:
        if value is None or not math.isfinite(value) or value < 0:
            return 0
        return value

    return (
        ease,
        non_negative(state.interval_days),
        non_negative(state.repetitions),
        non_negative(state.lapses),
    )


def schedule_next(
    state: ReviewState,
    rating: Rating | str,
    now: datetime | None = None,
) -> ReviewState:
    """
    Compute the review state that follows `rating`.

    Pure and total: out-of-range or missing fields in `state` are normalized
    instead of rejected, and the input is never mutated, so this can be
    called once per rating to preview outcomes before one is chosen.

    Args:
        state: Current review state.
        rating: Button pressed (Rating or its string value).
        now: Reference time; wall-clock UTC when omitted.

    Returns:
        A new ReviewState with due_at, interval, ease and counters updated,
        last_reviewed_at set to `now` and card_id preserved.
    """
    rating = Rating(rating)
    if now is None:
        now = utc_now()

    ease, interval, repetitions, lapses = _normalized(state)

    if rating is Rating.AGAIN:
        return replace(
            state,
            lapses=lapses + 1,
            repetitions=0,
            interval_days=0,
            ease_factor=max(MIN_EASE_FACTOR, ease - LAPSE_EASE_PENALTY),
            due_at=now + timedelta(minutes=RELEARN_DELAY_MINUTES),
            last_reviewed_at=now,
        )

    ease = ease + _EASE_DELTAS[rating]
    if rating is not Rating.EASY:
        ease = max(MIN_EASE_FACTOR, ease)

    repetitions += 1

    if repetitions == 1:
        interval = FIRST_STEP_DAYS[rating.value]
    elif repetitions == 2:
        interval = SECOND_STEP_DAYS[rating.value]
    else:
        multiplier = INTERVAL_MULTIPLIERS[rating.value]
        # Capped before rounding so due_at stays within the datetime range.
        grown = min(interval * ease * multiplier, MAX_INTERVAL_DAYS)
        interval = max(1, round_half_up(grown))

    return replace(
        state,
        lapses=lapses,
        repetitions=repetitions,
        interval_days=interval,
        ease_factor=ease,
        due_at=now + timedelta(days=interval),
        last_reviewed_at=now,
    )


def format_due_label(due_at: datetime, now: datetime) -> str:
    """
    Render the time from `now` until `due_at` as a coarse label.

    Tiers: "<1m" under a minute, then "Nm", "Nh" below 24 hours, else "Nd".
    Each tier rounds (half-up) rather than truncates.
    """
    seconds = max(0.0, (due_at - now).total_seconds())
    if seconds < 60:
        return "<1m"
    minutes = round_half_up(seconds / 60)
    if minutes < 60:
        return f"{minutes}m"
    hours = round_half_up(minutes / 60)
    if hours < 24:
        return f"{hours}h"
    days = round_half_up(hours / 24)
    return f"{days}d"


def preview_next(
    state: ReviewState,
    rating: Rating | str,
    now: datetime | None = None,
) -> DuePreview:
    """Speculatively schedule `rating` and label the resulting due time."""
    if now is None:
        now = utc_now()
    rating = Rating(rating)
    nxt = schedule_next(state, rating, now)
    return DuePreview(rating=rating, due_at=nxt.due_at, label=format_due_label(nxt.due_at, now))


def preview_all(state: ReviewState, now: datetime | None = None) -> dict[Rating, DuePreview]:
    """Previews for all four ratings, shown on the answer buttons."""
    if now is None:
        now = utc_now()
    return {rating: preview_next(state, rating, now) for rating in Rating}
