"""Deck and card management: creation, nesting and the deck overview."""

import logging
from collections.abc import Collection, Iterable
from datetime import datetime

from flashdeck.application import id_service
from flashdeck.application.deck_tree import DeckForest, aggregate_counts, build_deck_rows
from flashdeck.application.scheduler import new_review_state
from flashdeck.application.utils.dates import ensure_aware
from flashdeck.domain.errors import DeckCycleError, DeckNotFoundError
from flashdeck.domain.models import Card, Deck, DeckNode
from flashdeck.domain.ports import FlashcardRepository

logger = logging.getLogger(__name__)

CardSpec = tuple[str, str, Iterable[str]]  # front, back, tags


def _now(now: datetime | None) -> datetime:
    return ensure_aware(now) if now is not None else datetime.now().astimezone()


class DeckService:
    def __init__(self, repo: FlashcardRepository):
        self._repo = repo

    def list_decks(self) -> list[Deck]:
        return self._repo.list_decks()

    def create_deck(
        self,
        name: str,
        parent_deck_id: str | None = None,
        now: datetime | None = None,
        deck_id: str | None = None,
    ) -> Deck:
        """
        Create a root deck, or a subdeck when `parent_deck_id` is given.

        Raises:
            ValueError: If the name is blank.
            DeckNotFoundError: If the parent does not exist.
        """
        name = name.strip()
        if not name:
            raise ValueError("Deck name must not be empty")
        if parent_deck_id is not None and self._repo.get_deck(parent_deck_id) is None:
            raise DeckNotFoundError(parent_deck_id)

        deck = Deck(
            id=deck_id or id_service.deck_id(),
            name=name,
            created_at=_now(now),
            parent_deck_id=parent_deck_id,
        )
        self._repo.insert_deck(deck)
        logger.info(f"Created deck {deck.name!r} ({deck.id})")
        return deck

    def reparent(self, deck_id: str, parent_deck_id: str | None) -> None:
        """
        Move a deck under a new parent, or to the root with None.

        Raises:
            DeckNotFoundError: If either deck does not exist.
            DeckCycleError: If the new parent is the deck or one of its descendants.
        """
        forest = DeckForest(self._repo.list_decks())
        if deck_id not in forest:
            raise DeckNotFoundError(deck_id)
        if parent_deck_id is not None and parent_deck_id not in forest:
            raise DeckNotFoundError(parent_deck_id)
        if forest.would_create_cycle(deck_id, parent_deck_id):
            raise DeckCycleError(deck_id, parent_deck_id)

        self._repo.update_deck_parent(deck_id, parent_deck_id)
        logger.info(f"Moved deck {deck_id} under {parent_deck_id or 'root'}")

    def add_cards(
        self,
        deck_id: str,
        cards: Iterable[CardSpec],
        now: datetime | None = None,
    ) -> list[Card]:
        """
        Create cards in a deck, each with a review state that is due at `now`.

        All cards and states are written in one transaction.
        """
        if self._repo.get_deck(deck_id) is None:
            raise DeckNotFoundError(deck_id)

        now = _now(now)
        created = [
            Card(
                id=id_service.card_id(),
                deck_id=deck_id,
                front=front,
                back=back,
                tags=list(tags),
                created_at=now,
            )
            for front, back, tags in cards
        ]
        if not created:
            return []

        self._repo.add_cards(created, [new_review_state(c.id, now) for c in created])
        logger.info(f"Added {len(created)} cards to deck {deck_id}")
        return created

    def deck_overview(
        self,
        now: datetime | None = None,
        expanded: Collection[str] | None = None,
    ) -> list[DeckNode]:
        """
        Flattened deck tree with own and subtree-aggregated card counts.

        Args:
            now: Reference time for due counts.
            expanded: Deck ids whose children are shown; None expands all.
        """
        now = _now(now)
        forest = DeckForest(self._repo.list_decks())
        rows = build_deck_rows(forest, expanded)
        return aggregate_counts(forest, rows, self._repo.card_counts_by_deck(now))
