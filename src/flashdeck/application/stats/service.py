"""
Study Stats Service: Application layer orchestrator.

Coordinates count queries and log retrieval from the repository and
derives the daily metrics with MetricsCalculator.
"""

import logging
from datetime import datetime, timedelta

from flashdeck.application.deck_tree import DeckForest
from flashdeck.application.utils.dates import ensure_aware, local_date, start_of_local_day
from flashdeck.domain.constants import MAX_STREAK_DAYS, RECENT_DAYS_WINDOW
from flashdeck.domain.models import StudyStats
from flashdeck.domain.ports import FlashcardRepository

from .metrics_calculator import MetricsCalculator

logger = logging.getLogger(__name__)


class StudyStatsService:
    """
    Application service for the study statistics screen.

    Follows Dependency Inversion: depends on the FlashcardRepository
    abstraction, not a concrete store.
    """

    def __init__(
        self,
        repo: FlashcardRepository,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            repo: The repository (port) for counts and review history.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = repo
        self._calc = calculator or MetricsCalculator()

    def get_stats(self, now: datetime | None = None, deck_id: str | None = None) -> StudyStats:
        """
        Compute study statistics at `now`.

        Args:
            now: Reference time; wall-clock when omitted.
            deck_id: Restrict every figure to this deck and its descendants.

        Returns:
            StudyStats with totals, learned-today, streak and a 7-day history.
        """
        if now is None:
            now = datetime.now().astimezone()
        now = ensure_aware(now)

        deck_ids = None
        if deck_id is not None:
            deck_ids = DeckForest(self._repo.list_decks()).subtree_of(deck_id)

        today = local_date(now)
        history_start = start_of_local_day(
            today - timedelta(days=max(MAX_STREAK_DAYS, RECENT_DAYS_WINDOW) - 1)
        )
        entries = self._repo.list_reviews(since=history_start, deck_ids=deck_ids)
        per_day = self._calc.count_by_day(entries)

        stats = StudyStats(
            total_cards=self._repo.count_cards(deck_ids),
            due_cards=self._repo.count_due(now, deck_ids),
            learned_today=self._calc.learned_on(entries, today),
            streak_days=self._calc.streak(per_day.keys(), today),
            last_7_days=self._calc.recent_days(per_day, today),
        )
        logger.debug(f"Stats for {deck_id or 'all decks'}: {stats}")
        return stats
