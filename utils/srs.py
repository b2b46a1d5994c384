"""
Spaced-repetition scheduler.

Decides which cards are due and reschedules a card after the learner rates
their recall. Persistence goes through a KeyValueStore and time comes from an
injected clock, so the scheduler itself holds no global state.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable, Dict, List, Optional, Union
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from models.card import Difficulty, ReviewCard, ReviewEvent
from models.review import Rating
from models.stats import SRSStats, StreakState
from utils.errors import UnreadableRecordError
from utils.mastery import MASTERED_LEVEL, next_mastery_level
from utils.sm2 import SchedulerSettings, format_interval, next_interval, parse_rating
from utils.storage import CARD_PREFIX, STATS_KEY, KeyValueStore, card_key
from utils.streak import credit_review_day, visible_streak

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timezone_from_config(config: dict) -> Optional[tzinfo]:
    """Zone for calendar-day streaks; None means the system local zone."""
    name = config.get("srs", {}).get("timezone") or ""
    return ZoneInfo(name) if name else None


class SpacedRepetitionScheduler:
    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[SchedulerSettings] = None,
        clock: Optional[Clock] = None,
        tz: Optional[tzinfo] = None,
    ):
        self._store = store
        self.settings = settings or SchedulerSettings()
        self._clock = clock or utc_now
        self._tz = tz

    def now(self) -> datetime:
        current = self._clock()
        if current.tzinfo is None:
            raise ValueError("Scheduler clock must return timezone-aware datetimes")
        return current

    def local_date(self, moment: datetime) -> date:
        return moment.astimezone(self._tz).date()

    # Card access

    def _load_card(self, key: str) -> Optional[ReviewCard]:
        try:
            record = self._store.get(key)
            if record is None:
                return None
            return ReviewCard.model_validate(record)
        except (UnreadableRecordError, ValidationError) as exc:
            logger.warning("Skipping unreadable card record %s: %s", key, exc)
            return None

    def get_all_cards(self) -> List[ReviewCard]:
        cards = []
        for key in self._store.keys(CARD_PREFIX):
            card = self._load_card(key)
            if card is not None:
                cards.append(card)
        return cards

    def get_card(self, question_id: str) -> Optional[ReviewCard]:
        return self._load_card(card_key(question_id))

    def is_in_srs(self, question_id: str) -> bool:
        key = card_key(question_id)
        return key in self._store.keys(key)

    def new_card(
        self,
        question_id: str,
        channel: str,
        difficulty: Union[str, Difficulty],
        now: Optional[datetime] = None,
    ) -> ReviewCard:
        """Build an unsaved card that is due immediately."""
        now = now or self.now()
        return ReviewCard(
            question_id=question_id,
            channel=channel,
            difficulty=Difficulty(difficulty),
            ease_factor=self.settings.default_ease_factor,
            due_at=now,
            created_at=now,
        )

    def add_card(self, question_id: str, channel: str, difficulty: Union[str, Difficulty]) -> ReviewCard:
        """Start tracking a question; an already tracked card is returned untouched."""
        existing = self.get_card(question_id)
        if existing is not None:
            return existing
        card = self.new_card(question_id, channel, difficulty)
        self._store.set(card_key(question_id), card.model_dump(mode="json"))
        logger.info("Added %s (%s) to review", question_id, card.channel)
        return card

    # Due queries

    def get_due_cards(self) -> List[ReviewCard]:
        """Snapshot of due cards, most overdue first, weakest first on ties."""
        now = self.now()
        due = [card for card in self.get_all_cards() if card.due_at <= now]
        return sorted(due, key=lambda card: (card.due_at, card.mastery_level))

    def get_cards_due_in_range(self, days: int) -> List[ReviewCard]:
        horizon = self.now() + timedelta(days=days)
        return [card for card in self.get_all_cards() if card.due_at <= horizon]

    # Rating

    def apply_rating(self, card: ReviewCard, rating: Rating, now: datetime) -> ReviewCard:
        """Return a rescheduled copy of card, leaving card itself unchanged."""
        interval_days, ease_factor, repetitions = next_interval(
            card.interval_days, card.ease_factor, card.repetitions, rating, self.settings
        )
        event = ReviewEvent(rating=rating, reviewed_at=now, interval_days=interval_days)
        return card.model_copy(
            update={
                "interval_days": interval_days,
                "ease_factor": ease_factor,
                "repetitions": repetitions,
                "mastery_level": next_mastery_level(
                    card.mastery_level, rating, self.settings.max_mastery_level
                ),
                "correct_streak": 0 if rating is Rating.AGAIN else card.correct_streak + 1,
                "total_reviews": card.total_reviews + 1,
                "last_reviewed_at": now,
                "due_at": now + timedelta(days=interval_days),
                "review_history": [*card.review_history, event],
            }
        )

    def record_review(
        self,
        question_id: str,
        channel: str,
        difficulty: Union[str, Difficulty],
        rating: Union[str, Rating],
    ) -> ReviewCard:
        """Reschedule question_id after a rating, creating its card on first review.

        Raises InvalidRatingError before touching storage if rating is unknown.
        The card and the streak counters are written together.
        """
        rating = parse_rating(rating)
        now = self.now()
        card = self.get_card(question_id)
        if card is None:
            card = self.new_card(question_id, channel, difficulty, now)
        updated = self.apply_rating(card, rating, now)
        streak = credit_review_day(self.get_streak_state(), self.local_date(now))
        self._store.set_many(
            {
                card_key(question_id): updated.model_dump(mode="json"),
                STATS_KEY: streak.model_dump(mode="json"),
            }
        )
        logger.debug(
            "Reviewed %s as %s: interval=%sd ease=%.2f mastery=%s",
            question_id,
            rating.value,
            updated.interval_days,
            updated.ease_factor,
            updated.mastery_level,
        )
        return updated

    # Previews

    def preview_intervals(self, card: ReviewCard) -> Dict[Rating, int]:
        return {
            rating: next_interval(
                card.interval_days, card.ease_factor, card.repetitions, rating, self.settings
            )[0]
            for rating in Rating
        }

    def get_next_review_preview(self, card: ReviewCard) -> Dict[Rating, str]:
        return {rating: format_interval(days) for rating, days in self.preview_intervals(card).items()}

    # Stats

    def get_streak_state(self) -> StreakState:
        try:
            record = self._store.get(STATS_KEY)
            if record is None:
                return StreakState()
            return StreakState.model_validate(record)
        except (UnreadableRecordError, ValidationError) as exc:
            logger.warning("Resetting unreadable streak record: %s", exc)
            return StreakState()

    def get_srs_stats(self) -> SRSStats:
        now = self.now()
        today = self.local_date(now)
        tomorrow = today + timedelta(days=1)
        week_end = now + timedelta(days=7)
        cards = self.get_all_cards()
        streak = self.get_streak_state()
        return SRSStats(
            total_cards=len(cards),
            due_today=sum(1 for card in cards if card.due_at <= now),
            due_tomorrow=sum(1 for card in cards if self.local_date(card.due_at) == tomorrow),
            due_this_week=sum(1 for card in cards if card.due_at <= week_end),
            mastered=sum(1 for card in cards if card.mastery_level >= MASTERED_LEVEL),
            learning=sum(1 for card in cards if 0 < card.mastery_level < MASTERED_LEVEL),
            new_today=sum(
                1
                for card in cards
                if card.total_reviews == 1
                and card.last_reviewed_at is not None
                and self.local_date(card.last_reviewed_at) == today
            ),
            review_streak=visible_streak(streak, today),
            longest_streak=streak.longest_streak,
            last_streak_credit_date=streak.last_streak_credit_date,
        )

    def reset_progress(self) -> int:
        """Forget every card and the streak counters; returns the number of cards removed."""
        keys = self._store.keys(CARD_PREFIX)
        self._store.delete_many([*keys, STATS_KEY])
        logger.info("Reset review progress (%d cards)", len(keys))
        return len(keys)
