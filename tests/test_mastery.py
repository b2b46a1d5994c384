import pytest

from models.review import Rating
from utils.mastery import (
    get_mastery_color,
    get_mastery_label,
    get_rating_label,
    mastery_percent,
    next_mastery_level,
)


@pytest.mark.parametrize(
    "level, label",
    [(0, "New"), (1, "Learning"), (2, "Familiar"), (3, "Proficient"), (4, "Expert"), (5, "Mastered"), (9, "Mastered")],
)
def test_every_tier_has_a_label(level, label):
    assert get_mastery_label(level) == label
    assert get_mastery_color(level).startswith("text-")


@pytest.mark.parametrize("level", [-1, None, "3", 2.5, True])
def test_invalid_tiers_fall_back_to_unknown(level):
    assert get_mastery_label(level) == "Unknown"
    assert get_mastery_color(level) == "text-gray-400"


def test_rating_labels():
    assert [get_rating_label(rating) for rating in Rating] == ["Again", "Hard", "Good", "Easy"]


def test_next_mastery_level():
    assert next_mastery_level(0, Rating.HARD, 5) == 1
    assert next_mastery_level(5, Rating.EASY, 5) == 5
    assert next_mastery_level(4, Rating.AGAIN, 5) == 0


def test_mastery_percent():
    assert mastery_percent(1, 3) == 33.3
    assert mastery_percent(0, 0) == 0.0
