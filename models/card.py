from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from .review import Rating

class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class ReviewEvent(BaseModel):
    rating: Rating
    reviewed_at: datetime
    interval_days: int

class CardBase(BaseModel):
    question_id: str = Field(min_length=1)
    channel: str
    difficulty: Difficulty

class CardCreate(CardBase):
    pass

class ReviewCard(CardBase):
    mastery_level: int = 0
    interval_days: int = Field(default=0, ge=0)
    ease_factor: float = 2.5
    repetitions: int = 0
    correct_streak: int = 0
    total_reviews: int = 0
    due_at: datetime
    last_reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    review_history: List[ReviewEvent] = Field(default_factory=list)

class CardPreview(BaseModel):
    question_id: str
    mastery_level: int
    mastery_label: str
    mastery_color: str
    intervals: dict
    labels: dict

class ReviewCreate(CardBase):
    rating: str
