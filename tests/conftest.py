from datetime import datetime, timedelta, timezone

import pytest

from models.card import ReviewCard
from utils.srs import SpacedRepetitionScheduler
from utils.storage import MemoryKeyValueStore, card_key

START = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = START):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, days: float = 0, hours: float = 0) -> datetime:
        self.current = self.current + timedelta(days=days, hours=hours)
        return self.current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def scheduler(store, clock):
    return SpacedRepetitionScheduler(store, clock=clock, tz=timezone.utc)


def make_card(question_id: str = "q-1", **overrides) -> ReviewCard:
    fields = {
        "question_id": question_id,
        "channel": "system-design",
        "difficulty": "intermediate",
        "due_at": START,
    }
    fields.update(overrides)
    return ReviewCard(**fields)


def put_card(store, card: ReviewCard) -> None:
    store.set(card_key(card.question_id), card.model_dump(mode="json"))
