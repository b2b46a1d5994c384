class InvalidRatingError(ValueError):
    """Raised when a review rating is not one of again/hard/good/easy."""

    def __init__(self, rating):
        self.rating = rating
        super().__init__(f"Rating must be 'again', 'hard', 'good' or 'easy', got {rating!r}")


class StorageUnavailableError(RuntimeError):
    """Raised when the backing key-value store cannot be read or written."""


class UnreadableRecordError(ValueError):
    """Raised when a stored record is not valid JSON."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Stored record {key!r} is not valid JSON")
