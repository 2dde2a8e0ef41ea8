"""
Calendar-day metrics derived from the review log.

This is a pure computation module with no I/O. Days are local calendar
days: an entry belongs to the day containing it in the local timezone.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import date, timedelta

from flashdeck.application.utils.dates import day_key, days_back, local_date
from flashdeck.domain.constants import MAX_STREAK_DAYS, RECENT_DAYS_WINDOW
from flashdeck.domain.models import DailyCount, ReviewLogEntry


class MetricsCalculator:
    """
    Computes daily counts, learned-today and streaks from log entries.

    Stateless and side-effect free.
    """

    def count_by_day(self, entries: Iterable[ReviewLogEntry]) -> Counter[date]:
        return Counter(local_date(entry.reviewed_at) for entry in entries)

    def learned_on(self, entries: Iterable[ReviewLogEntry], day: date) -> int:
        """Distinct cards with at least one review on `day`."""
        return len({e.card_id for e in entries if local_date(e.reviewed_at) == day})

    def recent_days(
        self,
        per_day: Counter[date],
        today: date,
        window: int = RECENT_DAYS_WINDOW,
    ) -> list[DailyCount]:
        """
        One entry per day for the `window` days ending today, oldest first.

        Days without reviews are included with a count of 0.
        """
        return [DailyCount(day=day_key(d), count=per_day.get(d, 0)) for d in days_back(today, window)]

    def streak(
        self,
        active_days: Iterable[date],
        today: date,
        max_days: int = MAX_STREAK_DAYS,
    ) -> int:
        """
        Consecutive days with reviews, walking backward from today.

        Stops at the first gap; no review today means a streak of 0.
        """
        active = set(active_days)
        streak = 0
        day = today
        while streak < max_days and day in active:
            streak += 1
            day -= timedelta(days=1)
        return streak
