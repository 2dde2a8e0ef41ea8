"""
Due-card query engine.

Selects cards whose review state is due at or before a reference time,
optionally scoped to a deck (and its descendants), earliest-due first.
"""

import logging
from datetime import datetime

from flashdeck.application.deck_tree import DeckForest
from flashdeck.application.utils.dates import ensure_aware
from flashdeck.domain.constants import DEFAULT_BATCH_SIZE, MAX_BATCH_SIZE
from flashdeck.domain.models import ALL_DECKS, DeckScope, DueCard
from flashdeck.domain.ports import FlashcardRepository

logger = logging.getLogger(__name__)


class DueCardQuery:
    """
    Read-only service answering "what should be reviewed now?".

    Depends on the FlashcardRepository port. The deck subtree is resolved
    once per call from a fresh DeckForest; nothing is cached across calls.
    """

    def __init__(self, repo: FlashcardRepository):
        self._repo = repo

    def scope_deck_ids(self, scope: DeckScope) -> frozenset[str] | None:
        """
        Deck ids covered by `scope`, or None when the scope is all decks.
        """
        if scope.is_all:
            return None
        if not scope.include_subdecks:
            return frozenset({scope.deck_id})
        forest = DeckForest(self._repo.list_decks())
        return forest.subtree_of(scope.deck_id)

    def due_cards(
        self,
        scope: DeckScope = ALL_DECKS,
        now: datetime | None = None,
        limit: int = DEFAULT_BATCH_SIZE,
    ) -> list[DueCard]:
        """
        Fetch due cards ordered by due time ascending.

        Args:
            scope: ALL_DECKS or a DeckScope for one deck.
            now: Reference time; wall-clock when omitted.
            limit: Maximum number of cards, clamped to 0..MAX_BATCH_SIZE.

        Returns:
            At most `limit` DueCards; empty when nothing is due.
        """
        if now is None:
            now = datetime.now().astimezone()
        now = ensure_aware(now)

        limit = max(0, min(limit, MAX_BATCH_SIZE))
        if limit == 0:
            return []

        deck_ids = self.scope_deck_ids(scope)
        cards = self._repo.fetch_due(now, deck_ids, limit)
        logger.debug(
            f"Fetched {len(cards)} due cards "
            f"(scope={scope.deck_id or 'all'}, decks={len(deck_ids) if deck_ids else 'all'})"
        )
        return cards
