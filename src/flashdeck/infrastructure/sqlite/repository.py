"""
SQLite Flashcard Repository: Infrastructure adapter for FlashcardRepository.

Translates domain objects to rows of the decks / cards / review_state /
review_log tables and back. Deck subtrees arrive as explicit id sets, so the
SQL never needs recursive queries.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from flashdeck.domain.errors import CardNotFoundError
from flashdeck.domain.models import Card, Deck, DueCard, Rating, ReviewLogEntry, ReviewState
from flashdeck.domain.ports import FlashcardRepository, Row, Store
from flashdeck.infrastructure.codecs import (
    decode_tags,
    encode_tags,
    from_epoch_ms,
    optional_from_epoch_ms,
    to_epoch_ms,
)

logger = logging.getLogger(__name__)

_DUE_COLUMNS = """
    c.id, c.deck_id, c.front, c.back, c.tags_json, c.created_at,
    rs.due_at, rs.interval_days, rs.ease_factor, rs.repetitions, rs.lapses,
    rs.last_reviewed_at
"""


def _in_clause(column: str, values: list[str]) -> tuple[str, list[str]]:
    if not values:
        # Empty scope matches nothing.
        return "0", []
    placeholders = ",".join("?" for _ in values)
    return f"{column} IN ({placeholders})", values


def _deck_from_row(row: Row) -> Deck:
    return Deck(
        id=row["id"],
        name=row["name"],
        created_at=from_epoch_ms(row["created_at"]),
        parent_deck_id=row["parent_deck_id"],
    )


def _due_card_from_row(row: Row) -> DueCard:
    card = Card(
        id=row["id"],
        deck_id=row["deck_id"],
        front=row["front"],
        back=row["back"],
        tags=decode_tags(row["tags_json"]),
        created_at=from_epoch_ms(row["created_at"]),
    )
    state = ReviewState(
        card_id=row["id"],
        due_at=from_epoch_ms(row["due_at"]),
        interval_days=row["interval_days"],
        ease_factor=row["ease_factor"],
        repetitions=row["repetitions"],
        lapses=row["lapses"],
        last_reviewed_at=optional_from_epoch_ms(row["last_reviewed_at"]),
    )
    return DueCard(card=card, state=state)


class SqliteFlashcardRepository(FlashcardRepository):
    """Repository over any Store speaking SQLite-compatible SQL."""

    def __init__(self, store: Store):
        self.store = store

    # ---- decks ----

    def list_decks(self) -> list[Deck]:
        rows = self.store.query(
            "SELECT id, name, created_at, parent_deck_id FROM decks "
            "ORDER BY created_at DESC, id"
        )
        return [_deck_from_row(r) for r in rows]

    def get_deck(self, deck_id: str) -> Deck | None:
        rows = self.store.query(
            "SELECT id, name, created_at, parent_deck_id FROM decks WHERE id = ?",
            (deck_id,),
        )
        return _deck_from_row(rows[0]) if rows else None

    def insert_deck(self, deck: Deck) -> None:
        self.store.execute(
            "INSERT INTO decks (id, name, created_at, parent_deck_id) VALUES (?, ?, ?, ?)",
            (deck.id, deck.name, to_epoch_ms(deck.created_at), deck.parent_deck_id),
        )

    def update_deck_parent(self, deck_id: str, parent_deck_id: str | None) -> None:
        self.store.execute(
            "UPDATE decks SET parent_deck_id = ? WHERE id = ?",
            (parent_deck_id, deck_id),
        )

    # ---- cards and review states ----

    def add_cards(self, cards: Iterable[Card], states: Iterable[ReviewState]) -> None:
        with self.store.transaction() as tx:
            for card in cards:
                created_at = card.created_at or datetime.now().astimezone()
                tx.execute(
                    "INSERT INTO cards (id, deck_id, front, back, tags_json, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        card.id,
                        card.deck_id,
                        card.front,
                        card.back,
                        encode_tags(card.tags),
                        to_epoch_ms(created_at),
                    ),
                )
            for state in states:
                tx.execute(
                    "INSERT INTO review_state (card_id, due_at, interval_days, ease_factor, "
                    "repetitions, lapses, last_reviewed_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        state.card_id,
                        to_epoch_ms(state.due_at),
                        state.interval_days,
                        state.ease_factor,
                        state.repetitions,
                        state.lapses,
                        to_epoch_ms(state.last_reviewed_at) if state.last_reviewed_at else None,
                    ),
                )

    def get_due_card(self, card_id: str) -> DueCard | None:
        rows = self.store.query(
            f"SELECT {_DUE_COLUMNS} FROM review_state rs "
            "JOIN cards c ON c.id = rs.card_id WHERE c.id = ?",
            (card_id,),
        )
        return _due_card_from_row(rows[0]) if rows else None

    def fetch_due(
        self,
        now: datetime,
        deck_ids: Iterable[str] | None,
        limit: int,
    ) -> list[DueCard]:
        where = ["rs.due_at <= ?"]
        params: list[Any] = [to_epoch_ms(now)]
        if deck_ids is not None:
            clause, values = _in_clause("c.deck_id", sorted(deck_ids))
            where.append(clause)
            params.extend(values)
        params.append(limit)

        rows = self.store.query(
            f"SELECT {_DUE_COLUMNS} FROM review_state rs "
            "JOIN cards c ON c.id = rs.card_id "
            f"WHERE {' AND '.join(where)} "
            "ORDER BY rs.due_at ASC, c.id ASC LIMIT ?",
            params,
        )
        return [_due_card_from_row(r) for r in rows]

    # ---- review log ----

    def record_review(self, state: ReviewState, entry: ReviewLogEntry) -> None:
        reviewed_at = to_epoch_ms(entry.reviewed_at)
        with self.store.transaction() as tx:
            tx.execute(
                "UPDATE review_state SET due_at = ?, interval_days = ?, ease_factor = ?, "
                "repetitions = ?, lapses = ?, last_reviewed_at = ? WHERE card_id = ?",
                (
                    to_epoch_ms(state.due_at),
                    state.interval_days,
                    state.ease_factor,
                    state.repetitions,
                    state.lapses,
                    reviewed_at,
                    state.card_id,
                ),
            )
            if tx.query("SELECT changes() AS n")[0]["n"] == 0:
                # No review state to advance; roll back instead of logging.
                raise CardNotFoundError(state.card_id)
            tx.execute(
                "INSERT INTO review_log (id, card_id, deck_id, rating, reviewed_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (entry.id, entry.card_id, entry.deck_id, entry.rating.value, reviewed_at),
            )
        logger.debug(f"Recorded {entry.rating.value} for card {entry.card_id}")

    def list_reviews(
        self,
        since: datetime | None = None,
        deck_ids: Iterable[str] | None = None,
    ) -> list[ReviewLogEntry]:
        where: list[str] = []
        params: list[Any] = []
        if since is not None:
            where.append("reviewed_at >= ?")
            params.append(to_epoch_ms(since))
        if deck_ids is not None:
            clause, values = _in_clause("deck_id", sorted(deck_ids))
            where.append(clause)
            params.extend(values)

        sql = "SELECT id, card_id, deck_id, rating, reviewed_at FROM review_log"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY reviewed_at ASC, id ASC"

        return [
            ReviewLogEntry(
                id=r["id"],
                card_id=r["card_id"],
                deck_id=r["deck_id"],
                rating=Rating(r["rating"]),
                reviewed_at=from_epoch_ms(r["reviewed_at"]),
            )
            for r in self.store.query(sql, params)
        ]

    # ---- counts ----

    def count_cards(self, deck_ids: Iterable[str] | None = None) -> int:
        sql = "SELECT COUNT(*) AS c FROM cards"
        params: list[Any] = []
        if deck_ids is not None:
            clause, params = _in_clause("deck_id", sorted(deck_ids))
            sql += f" WHERE {clause}"
        return self.store.query(sql, params)[0]["c"]

    def count_due(self, now: datetime, deck_ids: Iterable[str] | None = None) -> int:
        sql = "SELECT COUNT(*) AS c FROM review_state rs"
        params: list[Any] = [to_epoch_ms(now)]
        if deck_ids is None:
            sql += " WHERE rs.due_at <= ?"
        else:
            clause, values = _in_clause("c.deck_id", sorted(deck_ids))
            sql += f" JOIN cards c ON c.id = rs.card_id WHERE rs.due_at <= ? AND {clause}"
            params.extend(values)
        return self.store.query(sql, params)[0]["c"]

    def card_counts_by_deck(self, now: datetime) -> dict[str, tuple[int, int]]:
        rows = self.store.query(
            "SELECT c.deck_id AS deck_id, COUNT(*) AS total, "
            "COALESCE(SUM(CASE WHEN rs.due_at <= ? THEN 1 ELSE 0 END), 0) AS due "
            "FROM cards c LEFT JOIN review_state rs ON rs.card_id = c.id "
            "GROUP BY c.deck_id",
            (to_epoch_ms(now),),
        )
        return {r["deck_id"]: (r["total"], r["due"]) for r in rows}
