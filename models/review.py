from pydantic import BaseModel
from enum import Enum

class Rating(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

class RateRequest(BaseModel):
    # Plain string; the scheduler rejects unknown values with InvalidRatingError
    rating: str

class SessionCounts(BaseModel):
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0
