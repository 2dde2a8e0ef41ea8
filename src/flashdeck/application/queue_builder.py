"""
Interactive review queue.

Holds the batch of due cards a study session is working through and tops
it up from the due-card query when it runs low. Merging is a set union
keyed by card id, so overlapping fetches never duplicate a card and never
re-add the card that is currently on screen.
"""

import logging
from collections.abc import Callable, Iterable

from flashdeck.domain.constants import REFILL_LOW_WATER_MARK
from flashdeck.domain.models import DueCard

logger = logging.getLogger(__name__)

Fetcher = Callable[[], list[DueCard]]


def merge_due_cards(existing: list[DueCard], fetched: Iterable[DueCard]) -> list[DueCard]:
    """
    Append fetched cards whose id is not already queued.

    Keeps the existing order and the fetched order of newcomers.
    """
    seen = {item.id for item in existing}
    merged = list(existing)
    for item in fetched:
        if item.id in seen:
            continue
        seen.add(item.id)
        merged.append(item)
    return merged


class ReviewQueue:
    """
    Client-side queue of due cards.

    The head of the queue is the card being reviewed; it stays queued until
    pop() is called after it has been rated.
    """

    def __init__(self, fetch: Fetcher, low_water_mark: int = REFILL_LOW_WATER_MARK):
        self._fetch = fetch
        self.low_water_mark = low_water_mark
        self._items: list[DueCard] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    @property
    def current(self) -> DueCard | None:
        return self._items[0] if self._items else None

    @property
    def remaining(self) -> int:
        return len(self._items)

    def load(self) -> int:
        """Replace the queue with a fresh fetch."""
        self._items = merge_due_cards([], self._fetch())
        return len(self._items)

    def pop(self) -> DueCard | None:
        """Drop the head of the queue (after it has been rated)."""
        if not self._items:
            return None
        return self._items.pop(0)

    def needs_refill(self) -> bool:
        return len(self._items) <= self.low_water_mark

    def merge(self, fetched: Iterable[DueCard]) -> int:
        """Merge a fetch into the queue; returns how many cards were added."""
        before = len(self._items)
        self._items = merge_due_cards(self._items, fetched)
        return len(self._items) - before

    def refill_if_needed(self) -> int:
        """Re-run the query and merge when at or below the low-water mark."""
        if not self.needs_refill():
            return 0
        added = self.merge(self._fetch())
        logger.debug(f"Refilled review queue with {added} cards ({len(self._items)} queued)")
        return added
