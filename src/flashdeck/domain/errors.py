"""Exception hierarchy shared by every flashdeck layer."""


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""


class StorageError(FlashdeckError):
    """The underlying store failed (aborted transaction, lost connection, ...)."""


class DeckNotFoundError(FlashdeckError, LookupError):
    def __init__(self, deck_id: str):
        super().__init__(f"Deck not found: {deck_id}")
        self.deck_id = deck_id


class CardNotFoundError(FlashdeckError, LookupError):
    def __init__(self, card_id: str):
        super().__init__(f"Card not found: {card_id}")
        self.card_id = card_id


class DeckCycleError(FlashdeckError, ValueError):
    """Re-parenting would make a deck its own ancestor."""

    def __init__(self, deck_id: str, parent_deck_id: str):
        super().__init__(
            f"Cannot move deck {deck_id} under {parent_deck_id}: "
            "the new parent is the deck itself or one of its descendants"
        )
        self.deck_id = deck_id
        self.parent_deck_id = parent_deck_id
