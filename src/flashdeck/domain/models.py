"""
Domain models for decks, cards and their review scheduling state.

These are pure data structures with no I/O or external dependencies.
All timestamps are timezone-aware datetimes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .constants import DEFAULT_EASE_FACTOR


class Rating(str, Enum):
    """Four-button quality signal given after revealing a card."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


@dataclass(frozen=True)
class Deck:
    """
    A named collection of cards, optionally nested under a parent deck.

    Attributes:
        id: Stable deck identifier.
        name: Display name.
        created_at: Creation time.
        parent_deck_id: Parent deck, or None for a root deck.
    """

    id: str
    name: str
    created_at: datetime
    parent_deck_id: str | None = None


@dataclass(frozen=True)
class Card:
    id: str
    deck_id: str
    front: str
    back: str
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass(frozen=True)
class ReviewState:
    """
    Scheduling state of a single card.

    Attributes:
        card_id: The card this state belongs to.
        due_at: When the card becomes eligible for review.
        interval_days: Current interval in days (0 while relearning).
        ease_factor: Interval growth multiplier, never below 1.3.
        repetitions: Successful reviews since the last lapse.
        lapses: Total number of "again" ratings.
        last_reviewed_at: Time of the most recent rating, if any.
    """

    card_id: str
    due_at: datetime
    interval_days: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    lapses: int = 0
    last_reviewed_at: datetime | None = None


@dataclass(frozen=True)
class ReviewLogEntry:
    """
    A single append-only review log row.

    Attributes:
        id: Log entry identifier.
        card_id: The card that was reviewed.
        deck_id: Deck the card belonged to at review time.
        rating: Button pressed.
        reviewed_at: When the rating was given.
    """

    id: str
    card_id: str
    deck_id: str
    rating: Rating
    reviewed_at: datetime


@dataclass(frozen=True)
class DueCard:
    """A card paired with its review state, as returned by due queries."""

    card: Card
    state: ReviewState

    @property
    def id(self) -> str:
        return self.card.id


@dataclass(frozen=True)
class DeckScope:
    """
    Restricts due-card queries and stats to part of the deck forest.

    A scope without a deck id covers all decks. With a deck id, the deck
    and (unless include_subdecks is False) all of its descendants are in scope.
    """

    deck_id: str | None = None
    include_subdecks: bool = True

    @property
    def is_all(self) -> bool:
        return self.deck_id is None


ALL_DECKS = DeckScope()


@dataclass(frozen=True)
class DuePreview:
    rating: Rating
    due_at: datetime
    label: str


@dataclass(frozen=True)
class DailyCount:
    day: str  # YYYY-MM-DD, local calendar day
    count: int


@dataclass
class StudyStats:
    """
    Aggregate study statistics at a reference time.

    Attributes:
        total_cards: Number of cards in scope.
        due_cards: Review states due at or before the reference time.
        learned_today: Distinct cards reviewed during the local day.
        streak_days: Consecutive local days with reviews, ending today.
        last_7_days: Review counts per local day, oldest first.
    """

    total_cards: int
    due_cards: int
    learned_today: int
    streak_days: int
    last_7_days: list[DailyCount] = field(default_factory=list)


@dataclass
class DeckNode:
    """
    A deck as displayed in the flattened deck tree.

    Counts are filled in by DeckService.deck_overview; own_* cover the deck
    alone and total/due cover the deck with all its descendants.
    """

    deck: Deck
    depth: int
    has_children: bool
    own_total: int = 0
    own_due: int = 0
    total: int = 0
    due: int = 0
