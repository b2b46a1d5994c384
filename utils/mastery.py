from models.review import Rating

MASTERY_LABELS = ["New", "Learning", "Familiar", "Proficient", "Expert", "Mastered"]

MASTERY_COLORS = [
    "text-muted-foreground",
    "text-blue-500",
    "text-cyan-500",
    "text-green-500",
    "text-purple-500",
    "text-yellow-500",
]

UNKNOWN_LABEL = "Unknown"
UNKNOWN_COLOR = "text-gray-400"

# Tier at which a card counts as mastered in aggregate stats
MASTERED_LEVEL = 4

RATING_LABELS = {
    Rating.AGAIN: "Again",
    Rating.HARD: "Hard",
    Rating.GOOD: "Good",
    Rating.EASY: "Easy",
}


def _tier_index(level) -> int:
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        return -1
    return min(level, len(MASTERY_LABELS) - 1)


def get_mastery_label(level) -> str:
    index = _tier_index(level)
    return MASTERY_LABELS[index] if index >= 0 else UNKNOWN_LABEL


def get_mastery_color(level) -> str:
    index = _tier_index(level)
    return MASTERY_COLORS[index] if index >= 0 else UNKNOWN_COLOR


def get_rating_label(rating: Rating) -> str:
    return RATING_LABELS[rating]


def next_mastery_level(level: int, rating: Rating, max_level: int) -> int:
    """Success climbs one tier up to max_level; a lapse drops back to New."""
    if rating is Rating.AGAIN:
        return 0
    return min(max_level, max(0, level) + 1)


def mastery_percent(mastered: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round((mastered / total) * 100, 1)
