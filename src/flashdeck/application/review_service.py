"""Rate-a-card workflow: schedule the next review and record it atomically."""

import logging
from datetime import datetime

from flashdeck.application import id_service
from flashdeck.application.scheduler import schedule_next
from flashdeck.application.utils.dates import ensure_aware
from flashdeck.domain.errors import CardNotFoundError
from flashdeck.domain.models import DueCard, Rating, ReviewLogEntry, ReviewState
from flashdeck.domain.ports import FlashcardRepository

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, repo: FlashcardRepository):
        self._repo = repo

    def record_review(
        self,
        state: ReviewState,
        deck_id: str,
        rating: Rating | str,
        reviewed_at: datetime | None = None,
    ) -> ReviewLogEntry:
        """
        Persist an already-scheduled state together with its log entry.

        The state update and the log append share one transaction; a
        StorageError from either leaves both unwritten, as does a
        CardNotFoundError for a card without review state.
        """
        if reviewed_at is None:
            reviewed_at = state.last_reviewed_at or datetime.now().astimezone()
        entry = ReviewLogEntry(
            id=id_service.review_id(),
            card_id=state.card_id,
            deck_id=deck_id,
            rating=Rating(rating),
            reviewed_at=ensure_aware(reviewed_at),
        )
        self._repo.record_review(state, entry)
        return entry

    def rate(
        self,
        due_card: DueCard,
        rating: Rating | str,
        now: datetime | None = None,
    ) -> ReviewState:
        """
        Apply `rating` to a card from the due queue.

        Returns:
            The new review state, as persisted.
        """
        now = ensure_aware(now) if now is not None else datetime.now().astimezone()
        next_state = schedule_next(due_card.state, rating, now)
        self.record_review(next_state, due_card.card.deck_id, rating, now)
        logger.debug(
            f"Card {due_card.id} rated {Rating(rating).value}: "
            f"next due {next_state.due_at.isoformat()} ({next_state.interval_days}d)"
        )
        return next_state

    def rate_card(
        self,
        card_id: str,
        rating: Rating | str,
        now: datetime | None = None,
    ) -> ReviewState:
        """Look up a card's current state and rate it."""
        due_card = self._repo.get_due_card(card_id)
        if due_card is None:
            raise CardNotFoundError(card_id)
        return self.rate(due_card, rating, now)
