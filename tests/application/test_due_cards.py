"""Tests for the due-card query engine against an in-memory store."""

from datetime import timedelta

import pytest

from flashdeck.application.deck_tree import DeckForest
from flashdeck.domain.models import ALL_DECKS, Card, DeckScope, ReviewState


def add_card(repo, deck_id, card_id, due_at, created_at):
    repo.add_cards(
        [Card(id=card_id, deck_id=deck_id, front=f"Q {card_id}", back="A", tags=["t"], created_at=created_at)],
        [ReviewState(card_id=card_id, due_at=due_at)],
    )


@pytest.fixture
def seeded(deck_service, repo, now):
    """
    lang ─ spanish ─ verbs
         └ french
    math
    """
    deck_service.create_deck("Languages", deck_id="lang", now=now)
    deck_service.create_deck("Spanish", parent_deck_id="lang", deck_id="spanish", now=now)
    deck_service.create_deck("Verbs", parent_deck_id="spanish", deck_id="verbs", now=now)
    deck_service.create_deck("French", parent_deck_id="lang", deck_id="french", now=now)
    deck_service.create_deck("Math", deck_id="math", now=now)

    add_card(repo, "lang", "c_lang", now - timedelta(hours=1), now)
    add_card(repo, "spanish", "c_es", now - timedelta(days=3), now)
    add_card(repo, "verbs", "c_verb", now - timedelta(days=10), now)
    add_card(repo, "verbs", "c_verb_future", now + timedelta(days=1), now)
    add_card(repo, "french", "c_fr", now, now)
    add_card(repo, "math", "c_math", now - timedelta(days=5), now)
    return repo


class TestDueCards:
    def test_all_decks_sorted_by_due(self, seeded, due_query, now):
        result = due_query.due_cards(ALL_DECKS, now, limit=50)

        assert [d.id for d in result] == ["c_verb", "c_math", "c_es", "c_lang", "c_fr"]
        due_times = [d.state.due_at for d in result]
        assert due_times == sorted(due_times)

    def test_due_at_boundary_is_included(self, seeded, due_query, now):
        ids = {d.id for d in due_query.due_cards(ALL_DECKS, now, limit=50)}
        assert "c_fr" in ids
        assert "c_verb_future" not in ids

    def test_scoped_to_subtree(self, seeded, due_query, repo, now):
        result = due_query.due_cards(DeckScope("spanish"), now, limit=50)

        assert [d.id for d in result] == ["c_verb", "c_es"]
        subtree = DeckForest(repo.list_decks()).subtree_of("spanish")
        assert all(d.card.deck_id in subtree for d in result)

    def test_scoped_root_includes_all_descendants(self, seeded, due_query, now):
        result = due_query.due_cards(DeckScope("lang"), now, limit=50)
        assert [d.id for d in result] == ["c_verb", "c_es", "c_lang", "c_fr"]

    def test_without_subdecks(self, seeded, due_query, now):
        result = due_query.due_cards(DeckScope("spanish", include_subdecks=False), now, limit=50)
        assert [d.id for d in result] == ["c_es"]

    def test_limit_keeps_most_overdue(self, seeded, due_query, now):
        result = due_query.due_cards(ALL_DECKS, now, limit=2)
        assert [d.id for d in result] == ["c_verb", "c_math"]

    def test_zero_limit(self, seeded, due_query, now):
        assert due_query.due_cards(ALL_DECKS, now, limit=0) == []

    def test_unknown_deck_is_empty(self, seeded, due_query, now):
        assert due_query.due_cards(DeckScope("ghost"), now) == []

    def test_empty_store(self, due_query, now):
        assert due_query.due_cards(ALL_DECKS, now) == []

    def test_returns_card_and_state(self, seeded, due_query, now):
        (first,) = due_query.due_cards(DeckScope("verbs"), now, limit=1)

        assert first.card.front == "Q c_verb"
        assert first.card.tags == ["t"]
        assert first.state.card_id == "c_verb"
        assert first.state.due_at == now - timedelta(days=10)

    def test_subtree_reflects_reparenting(self, seeded, deck_service, due_query, now):
        deck_service.reparent("math", "french")
        ids = [d.id for d in due_query.due_cards(DeckScope("french"), now, limit=50)]
        assert ids == ["c_math", "c_fr"]


def test_scope_deck_ids(seeded, due_query):
    assert due_query.scope_deck_ids(ALL_DECKS) is None
    assert due_query.scope_deck_ids(DeckScope("lang")) == {"lang", "spanish", "verbs", "french"}
    assert due_query.scope_deck_ids(DeckScope("lang", include_subdecks=False)) == {"lang"}
