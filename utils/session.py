from __future__ import annotations

import uuid
from datetime import datetime
from typing import Dict, List, Optional, Union

from models.card import ReviewCard
from models.review import Rating, SessionCounts
from utils.sm2 import parse_rating
from utils.srs import SpacedRepetitionScheduler


class ReviewSession:
    """One pass over the cards that were due when the session started.

    The due list is fixed at creation; rating a card never reorders or
    refills it. Rating counts live only as long as the session object.
    """

    def __init__(self, scheduler: SpacedRepetitionScheduler, session_id: Optional[str] = None):
        self.id = session_id or uuid.uuid4().hex
        self.scheduler = scheduler
        self.started_at: datetime = scheduler.now()
        self.cards: List[ReviewCard] = scheduler.get_due_cards()
        self.index = 0
        self.counts: Dict[Rating, int] = {rating: 0 for rating in Rating}

    @property
    def finished(self) -> bool:
        return self.index >= len(self.cards)

    @property
    def remaining(self) -> int:
        return max(0, len(self.cards) - self.index)

    @property
    def current(self) -> Optional[ReviewCard]:
        if self.finished:
            return None
        return self.cards[self.index]

    def preview(self) -> Optional[Dict[Rating, str]]:
        card = self.current
        if card is None:
            return None
        return self.scheduler.get_next_review_preview(card)

    def rate(self, rating: Union[str, Rating]) -> ReviewCard:
        """Record a rating for the current card and advance to the next one."""
        rating = parse_rating(rating)
        card = self.current
        if card is None:
            raise IndexError("Review session has no cards left")
        updated = self.scheduler.record_review(card.question_id, card.channel, card.difficulty, rating)
        self.counts[rating] += 1
        self.index += 1
        return updated

    def session_counts(self) -> SessionCounts:
        return SessionCounts(**{rating.value: count for rating, count in self.counts.items()})
