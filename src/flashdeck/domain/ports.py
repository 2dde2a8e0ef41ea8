"""
Ports (interfaces) for persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from .models import Card, Deck, DueCard, ReviewLogEntry, ReviewState

Row = Mapping[str, Any]


class Store(ABC):
    """
    Port for a generic transactional relational store.

    Implementations:
        - SqliteStore: stdlib sqlite3, file-backed or in-memory.
    """

    @abstractmethod
    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        """Run a read-only selection and return all rows."""

    @abstractmethod
    def execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        """
        Run a mutation.

        Outside of transaction() the mutation is committed immediately.
        Inside, it joins the enclosing transaction.
        """

    @abstractmethod
    def transaction(self) -> AbstractContextManager["Store"]:
        """
        Scoped transaction.

        Commits when the block completes normally and rolls back when it
        raises; the original exception is re-raised after the rollback.
        """

    @abstractmethod
    def close(self) -> None:
        pass


class FlashcardRepository(ABC):
    """
    Port for reading and writing decks, cards, review states and the review log.

    Implementations:
        - SqliteFlashcardRepository: SQL over a Store.
    """

    # ---- decks ----

    @abstractmethod
    def list_decks(self) -> list[Deck]:
        """All decks, newest first."""

    @abstractmethod
    def get_deck(self, deck_id: str) -> Deck | None:
        pass

    @abstractmethod
    def insert_deck(self, deck: Deck) -> None:
        pass

    @abstractmethod
    def update_deck_parent(self, deck_id: str, parent_deck_id: str | None) -> None:
        pass

    # ---- cards and review states ----

    @abstractmethod
    def add_cards(self, cards: Iterable[Card], states: Iterable[ReviewState]) -> None:
        """Insert cards together with their initial review states in one transaction."""

    @abstractmethod
    def get_due_card(self, card_id: str) -> DueCard | None:
        pass

    @abstractmethod
    def fetch_due(
        self,
        now: datetime,
        deck_ids: Iterable[str] | None,
        limit: int,
    ) -> list[DueCard]:
        """
        Fetch cards whose review state is due at or before `now`.

        Args:
            now: Reference time.
            deck_ids: Restrict to cards in these decks; None means all decks.
            limit: Maximum number of rows.

        Returns:
            DueCards ordered by due_at ascending (earliest first).
        """

    # ---- review log ----

    @abstractmethod
    def record_review(self, state: ReviewState, entry: ReviewLogEntry) -> None:
        """
        Persist a new review state and append its log entry atomically.

        Either both writes survive or neither does. Raises CardNotFoundError
        when the card has no review state.
        """

    @abstractmethod
    def list_reviews(
        self,
        since: datetime | None = None,
        deck_ids: Iterable[str] | None = None,
    ) -> list[ReviewLogEntry]:
        """Log entries reviewed at or after `since`, oldest first."""

    # ---- counts ----

    @abstractmethod
    def count_cards(self, deck_ids: Iterable[str] | None = None) -> int:
        pass

    @abstractmethod
    def count_due(self, now: datetime, deck_ids: Iterable[str] | None = None) -> int:
        pass

    @abstractmethod
    def card_counts_by_deck(self, now: datetime) -> dict[str, tuple[int, int]]:
        """Map deck id -> (total cards, due cards) for decks that own cards."""

