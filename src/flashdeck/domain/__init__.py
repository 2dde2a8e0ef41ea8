# Domain Package
from .errors import (
    CardNotFoundError,
    DeckCycleError,
    DeckNotFoundError,
    FlashdeckError,
    StorageError,
)
from .models import (
    ALL_DECKS,
    Card,
    DailyCount,
    Deck,
    DeckNode,
    DeckScope,
    DueCard,
    DuePreview,
    Rating,
    ReviewLogEntry,
    ReviewState,
    StudyStats,
)
from .ports import FlashcardRepository, Store

__all__ = [
    "ALL_DECKS",
    "Card",
    "CardNotFoundError",
    "DailyCount",
    "Deck",
    "DeckCycleError",
    "DeckNode",
    "DeckNotFoundError",
    "DeckScope",
    "DueCard",
    "DuePreview",
    "FlashcardRepository",
    "FlashdeckError",
    "Rating",
    "ReviewLogEntry",
    "ReviewState",
    "Store",
    "StorageError",
    "StudyStats",
]
