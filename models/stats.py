from pydantic import BaseModel
from typing import Optional
from datetime import date

class StreakState(BaseModel):
    review_streak: int = 0
    longest_streak: int = 0
    last_streak_credit_date: Optional[date] = None

class SRSStats(BaseModel):
    total_cards: int
    due_today: int
    due_tomorrow: int
    due_this_week: int
    mastered: int
    learning: int
    new_today: int
    review_streak: int
    longest_streak: int
    last_streak_credit_date: Optional[date] = None
