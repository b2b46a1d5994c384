from fastapi import Depends

from config import load_config
from db.database import get_store
from utils.sm2 import settings_from_config
from utils.srs import SpacedRepetitionScheduler, timezone_from_config
from utils.storage import KeyValueStore


def get_scheduler(store: KeyValueStore = Depends(get_store)) -> SpacedRepetitionScheduler:
    """FastAPI dependency building a scheduler over the on-disk store."""
    config = load_config()
    return SpacedRepetitionScheduler(
        store,
        settings=settings_from_config(config),
        tz=timezone_from_config(config),
    )
