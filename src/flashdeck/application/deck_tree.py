"""
Deck tree resolver.

Builds an in-memory parent-pointer graph from the deck list and provides
traversal utilities: subtree closure, re-parenting cycle checks and a flattened,
display-ordered view of the forest.

A DeckForest is a snapshot. Decks can be re-parented at any time, so build
a new forest per request instead of keeping one around.
"""

import logging
from collections import defaultdict
from collections.abc import Collection, Iterable, Mapping

from flashdeck.domain.models import Deck, DeckNode

logger = logging.getLogger(__name__)


class DeckForest:
    """Parent/child index over a set of decks."""

    def __init__(self, decks: Iterable[Deck]):
        self.decks: dict[str, Deck] = {}
        self._children: dict[str | None, list[str]] = defaultdict(list)
        self._subtrees: dict[str, frozenset[str]] = {}

        for deck in decks:
            self.decks[deck.id] = deck

        for deck in self.decks.values():
            parent = deck.parent_deck_id
            if parent is not None and parent not in self.decks:
                # Dangling parent reference: show the deck as a root.
                logger.warning(f"Deck {deck.id} references missing parent {parent}")
                parent = None
            self._children[parent].append(deck.id)

    def __contains__(self, deck_id: object) -> bool:
        return deck_id in self.decks

    def children_of(self, deck_id: str | None) -> list[str]:
        """Direct children of a deck; None returns the root decks."""
        return list(self._children.get(deck_id, []))

    def subtree_of(self, deck_id: str) -> frozenset[str]:
        """
        The deck itself plus all transitive descendants.

        Terminates on accidental cycles by tracking visited ids. The deck id
        is always included, even when it is not a known deck.
        Closures are cached for the lifetime of this forest.
        """
        cached = self._subtrees.get(deck_id)
        if cached is not None:
            return cached

        visited: set[str] = {deck_id}
        stack = [deck_id]
        while stack:
            current = stack.pop()
            for child_id in self._children.get(current, []):
                if child_id not in visited:
                    visited.add(child_id)
                    stack.append(child_id)

        result = frozenset(visited)
        self._subtrees[deck_id] = result
        return result

    def would_create_cycle(self, deck_id: str, new_parent_id: str | None) -> bool:
        """True if making `new_parent_id` the parent of `deck_id` would close a loop."""
        if new_parent_id is None:
            return False
        return new_parent_id in self.subtree_of(deck_id)


def subtree_of(decks: Iterable[Deck], deck_id: str) -> frozenset[str]:
    """Convenience wrapper: closure of `deck_id` over a one-off forest."""
    return DeckForest(decks).subtree_of(deck_id)


def build_deck_rows(
    forest: DeckForest,
    expanded: Collection[str] | None = None,
) -> list[DeckNode]:
    """
    Flatten the forest depth-first for display.

    Siblings are ordered by name (case-insensitive, then id for stability).
    Children of a deck are emitted only when the deck id is in `expanded`;
    pass None to expand everything.
    """
    rows: list[DeckNode] = []
    visited: set[str] = set()

    def sort_key(deck_id: str) -> tuple[str, str]:
        return (forest.decks[deck_id].name.casefold(), deck_id)

    def walk(parent_id: str | None, depth: int) -> None:
        for deck_id in sorted(forest.children_of(parent_id), key=sort_key):
            if deck_id in visited:
                continue
            visited.add(deck_id)
            has_children = bool(forest.children_of(deck_id))
            rows.append(
                DeckNode(deck=forest.decks[deck_id], depth=depth, has_children=has_children)
            )
            if has_children and (expanded is None or deck_id in expanded):
                walk(deck_id, depth + 1)

    walk(None, 0)
    return rows


def aggregate_counts(
    forest: DeckForest,
    rows: list[DeckNode],
    own_counts: Mapping[str, tuple[int, int]],
) -> list[DeckNode]:
    """
    Fill own and subtree-aggregated (total, due) counts into each row.

    Args:
        forest: Forest the rows were built from.
        rows: Output of build_deck_rows.
        own_counts: deck id -> (total, due) for cards directly in that deck.

    Returns:
        The same rows, updated in place.
    """
    for row in rows:
        own_total, own_due = own_counts.get(row.deck.id, (0, 0))
        row.own_total = own_total
        row.own_due = own_due

        total = 0
        due = 0
        for member_id in forest.subtree_of(row.deck.id):
            member_total, member_due = own_counts.get(member_id, (0, 0))
            total += member_total
            due += member_due
        row.total = total
        row.due = due

    return rows
