"""
Interval arithmetic for the review scheduler.

A pragmatic SM-2 variant tuned for interview prep: short fixed learning steps
for the first successful reviews, then growth by the card's ease factor.
Everything here is pure so the rating preview and the real update share one
code path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from models.review import Rating
from utils.errors import InvalidRatingError


@dataclass(frozen=True)
class SchedulerSettings:
    default_ease_factor: float = 2.5
    min_ease_factor: float = 1.3
    max_ease_factor: float = 3.0
    again_ease_penalty: float = 0.2
    hard_ease_penalty: float = 0.15
    easy_ease_bonus: float = 0.15
    hard_multiplier: float = 1.2
    easy_multiplier: float = 1.3
    easy_step_multiplier: float = 1.5
    learning_steps: Tuple[int, ...] = (1, 3, 7)
    relearn_interval_days: int = 1
    max_interval_days: int = 180
    max_mastery_level: int = 5

    def __post_init__(self):
        if self.min_ease_factor <= 0 or self.min_ease_factor > self.max_ease_factor:
            raise ValueError("min_ease_factor must be positive and not above max_ease_factor")
        if not self.min_ease_factor <= self.default_ease_factor <= self.max_ease_factor:
            raise ValueError("default_ease_factor must lie between min_ease_factor and max_ease_factor")
        if self.relearn_interval_days < 1:
            raise ValueError("relearn_interval_days must be at least 1")
        if self.max_interval_days < self.relearn_interval_days:
            raise ValueError("max_interval_days must not be below relearn_interval_days")
        if any(step < 1 for step in self.learning_steps):
            raise ValueError("learning_steps must be positive day counts")

    @property
    def first_step(self) -> int:
        return self.learning_steps[0] if self.learning_steps else 1


def settings_from_config(config: Dict[str, Any]) -> SchedulerSettings:
    """Build scheduler settings from the [srs] table of load_config()."""
    srs = dict(config.get("srs", {}))
    srs.pop("timezone", None)
    if "learning_steps" in srs:
        srs["learning_steps"] = tuple(int(step) for step in srs["learning_steps"])
    known = SchedulerSettings.__dataclass_fields__
    return SchedulerSettings(**{key: value for key, value in srs.items() if key in known})


def parse_rating(value: Union[str, Rating]) -> Rating:
    """Return the Rating for value or raise InvalidRatingError."""
    if isinstance(value, Rating):
        return value
    if isinstance(value, str):
        try:
            return Rating(value)
        except ValueError:
            pass
    raise InvalidRatingError(value)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_ease(ease_factor: float, settings: SchedulerSettings) -> float:
    clamped = min(settings.max_ease_factor, max(settings.min_ease_factor, ease_factor))
    return round(clamped, 4)


def _cap_interval(days: int, settings: SchedulerSettings) -> int:
    return min(settings.max_interval_days, max(1, days))


def _success_intervals(
    interval_days: int,
    ease_factor: float,
    repetitions: int,
    settings: SchedulerSettings,
) -> Tuple[int, int, int]:
    """Uncapped (hard, good, easy) intervals; always hard <= good <= easy."""
    steps = settings.learning_steps
    in_learning = repetitions < len(steps)

    if interval_days <= 0:
        hard = settings.first_step
    else:
        hard = round_half_up(interval_days * settings.hard_multiplier)

    if in_learning:
        good = max(steps[repetitions], hard)
        if interval_days > 0:
            good = max(good, interval_days + 1)
        easy = round_half_up(steps[min(repetitions + 1, len(steps) - 1)] * settings.easy_step_multiplier)
    elif interval_days <= 0:
        good = settings.first_step
        easy = round_half_up(settings.first_step * settings.easy_step_multiplier)
    else:
        good = round_half_up(interval_days * ease_factor)
        easy = round_half_up(interval_days * ease_factor * settings.easy_multiplier)
    good = max(good, hard)
    return hard, good, max(easy, good)


def next_interval(
    interval_days: int,
    ease_factor: float,
    repetitions: int,
    rating: Rating,
    settings: SchedulerSettings,
) -> Tuple[int, float, int]:
    """Compute (interval_days, ease_factor, repetitions) after a rating."""
    if rating is Rating.AGAIN:
        return (
            settings.relearn_interval_days,
            clamp_ease(ease_factor - settings.again_ease_penalty, settings),
            0,
        )

    hard, good, easy = _success_intervals(interval_days, ease_factor, repetitions, settings)
    if rating is Rating.HARD:
        days = hard
        new_ease = clamp_ease(ease_factor - settings.hard_ease_penalty, settings)
    elif rating is Rating.GOOD:
        days = good
        new_ease = clamp_ease(ease_factor, settings)
    else:
        days = easy
        new_ease = clamp_ease(ease_factor + settings.easy_ease_bonus, settings)

    return _cap_interval(days, settings), new_ease, repetitions + 1


def format_interval(days: int) -> str:
    """Short human label for an interval, e.g. 3d, 2w, 4mo."""
    if days < 7:
        return f"{days}d"
    if days < 30:
        return f"{round_half_up(days / 7)}w"
    return f"{round_half_up(days / 30)}mo"
