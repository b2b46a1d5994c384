from .review import Rating, RateRequest, SessionCounts
from .card import Difficulty, ReviewEvent, ReviewCard, CardCreate, CardPreview, ReviewCreate
from .stats import SRSStats, StreakState

__all__ = [
    'Rating', 'ReviewCreate', 'RateRequest', 'SessionCounts',
    'Difficulty', 'ReviewEvent', 'ReviewCard', 'CardCreate', 'CardPreview',
    'SRSStats', 'StreakState',
]
