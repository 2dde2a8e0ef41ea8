"""
Application factory.
Centralizes wiring of the store, repository and services from config.
"""

import logging
import sys
from dataclasses import dataclass

from flashdeck.application.config import AppConfig, resolve_config
from flashdeck.application.deck_service import DeckService
from flashdeck.application.due_cards import DueCardQuery
from flashdeck.application.queue_builder import ReviewQueue
from flashdeck.application.review_service import ReviewService
from flashdeck.application.stats import StudyStatsService
from flashdeck.domain.models import DeckScope
from flashdeck.domain.ports import FlashcardRepository, Store
from flashdeck.infrastructure.sqlite import SqliteFlashcardRepository, SqliteStore

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"

logger = logging.getLogger(__name__)


def configure_logging(config: AppConfig) -> None:
    """Configure root logging to stderr, plus a log file when log_dir is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_dir is not None:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_dir / "flashdeck.log", encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_store(config: AppConfig) -> Store:
    """Returns the Store implementation for the configured database."""
    return SqliteStore(config.db_path, timeout=config.busy_timeout)


@dataclass
class FlashcardApp:
    """Wired services sharing one store."""

    config: AppConfig
    store: Store
    repo: FlashcardRepository
    decks: DeckService
    due: DueCardQuery
    reviews: ReviewService
    stats: StudyStatsService

    def review_queue(self, deck_id: str | None = None) -> ReviewQueue:
        """A ReviewQueue over the configured batch size and low-water mark."""
        scope = DeckScope(deck_id=deck_id, include_subdecks=self.config.include_subdecks)
        queue = ReviewQueue(
            lambda: self.due.due_cards(scope, limit=self.config.batch_size),
            low_water_mark=self.config.low_water_mark,
        )
        queue.load()
        return queue

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "FlashcardApp":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def create_app(config: AppConfig | None = None, setup_logging: bool = False) -> FlashcardApp:
    """Build a FlashcardApp; resolves config from the environment when omitted."""
    config = config or resolve_config()
    if setup_logging:
        configure_logging(config)

    store = get_store(config)
    repo = SqliteFlashcardRepository(store)
    logger.debug(f"Flashdeck app ready (db={config.db_path})")
    return FlashcardApp(
        config=config,
        store=store,
        repo=repo,
        decks=DeckService(repo),
        due=DueCardQuery(repo),
        reviews=ReviewService(repo),
        stats=StudyStatsService(repo),
    )
