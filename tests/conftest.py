import os
from datetime import datetime

import pytest

from flashdeck.application.deck_service import DeckService
from flashdeck.application.due_cards import DueCardQuery
from flashdeck.application.review_service import ReviewService
from flashdeck.application.stats import StudyStatsService
from flashdeck.infrastructure.sqlite import SqliteFlashcardRepository, SqliteStore


@pytest.fixture
def now():
    """Local noon, far from midnight so day arithmetic never crosses a boundary."""
    return datetime(2024, 5, 15, 12, 0, 0).astimezone()


@pytest.fixture
def store():
    """In-memory SQLite store with schema applied."""
    s = SqliteStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def repo(store):
    return SqliteFlashcardRepository(store)


@pytest.fixture
def deck_service(repo):
    return DeckService(repo)


@pytest.fixture
def due_query(repo):
    return DueCardQuery(repo)


@pytest.fixture
def review_service(repo):
    return ReviewService(repo)


@pytest.fixture
def stats_service(repo):
    return StudyStatsService(repo)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Points HOME at a temp dir so no real config file is picked up."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("FLASHDECK_"):
            monkeypatch.delenv(key)
    return home
