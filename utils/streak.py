from __future__ import annotations

from datetime import date, timedelta

from models.stats import StreakState


def credit_review_day(state: StreakState, today: date) -> StreakState:
    """Return the streak state after a review completed on today.

    A second review on the same day changes nothing; a review the day after the
    last credited day extends the streak; any longer gap starts over at 1.
    """
    last = state.last_streak_credit_date
    if last == today:
        return state
    if last == today - timedelta(days=1):
        streak = state.review_streak + 1
    else:
        streak = 1
    return StreakState(
        review_streak=streak,
        longest_streak=max(state.longest_streak, streak),
        last_streak_credit_date=today,
    )


def visible_streak(state: StreakState, today: date) -> int:
    """Streak as shown to the learner; a streak not credited today or yesterday is over."""
    last = state.last_streak_credit_date
    if last is None or last < today - timedelta(days=1):
        return 0
    return state.review_streak
