"""Stable, sortable identifiers for decks, cards and review log entries."""

from ulid import ULID

DECK_PREFIX = "deck"
CARD_PREFIX = "card"
REVIEW_PREFIX = "rev"


def generate_id(prefix: str) -> str:
    """Generate a prefixed ULID, e.g. `card_01HZX...`."""
    return f"{prefix}_{ULID()}"


def deck_id() -> str:
    return generate_id(DECK_PREFIX)


def card_id() -> str:
    return generate_id(CARD_PREFIX)


def review_id() -> str:
    return generate_id(REVIEW_PREFIX)
