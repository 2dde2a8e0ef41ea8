"""Database schema and migration."""

import logging
import sqlite3

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

SCHEMA = """
CREATE TABLE IF NOT EXISTS decks (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    parent_deck_id TEXT REFERENCES decks(id)
);

CREATE TABLE IF NOT EXISTS cards (
    id TEXT PRIMARY KEY NOT NULL,
    deck_id TEXT NOT NULL REFERENCES decks(id) ON DELETE CASCADE,
    front TEXT NOT NULL,
    back TEXT NOT NULL,
    tags_json TEXT NOT NULL DEFAULT '[]',
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS review_state (
    card_id TEXT PRIMARY KEY NOT NULL REFERENCES cards(id) ON DELETE CASCADE,
    due_at INTEGER NOT NULL,
    interval_days INTEGER NOT NULL,
    ease_factor REAL NOT NULL,
    repetitions INTEGER NOT NULL,
    lapses INTEGER NOT NULL,
    last_reviewed_at INTEGER
);

CREATE TABLE IF NOT EXISTS review_log (
    id TEXT PRIMARY KEY NOT NULL,
    card_id TEXT NOT NULL REFERENCES cards(id) ON DELETE CASCADE,
    deck_id TEXT NOT NULL REFERENCES decks(id) ON DELETE CASCADE,
    rating TEXT NOT NULL CHECK(rating IN ('again','hard','good','easy')),
    reviewed_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_review_due ON review_state(due_at);
CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards(deck_id);
CREATE INDEX IF NOT EXISTS idx_decks_parent ON decks(parent_deck_id);
CREATE INDEX IF NOT EXISTS idx_review_log_time ON review_log(reviewed_at);
"""


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()}


def migrate(conn: sqlite3.Connection) -> None:
    """
    Bring the database up to SCHEMA_VERSION.

    Version 1 databases predate nested decks and lack decks.parent_deck_id.
    """
    version = conn.execute("PRAGMA user_version").fetchone()[0]
    if version >= SCHEMA_VERSION:
        return

    tables = {
        row[0]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    }
    if "decks" in tables and "parent_deck_id" not in _columns(conn, "decks"):
        logger.info("Migrating schema: adding decks.parent_deck_id")
        conn.execute("ALTER TABLE decks ADD COLUMN parent_deck_id TEXT REFERENCES decks(id)")

    conn.executescript(SCHEMA)
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    logger.info(f"Schema at version {SCHEMA_VERSION} (was {version})")
