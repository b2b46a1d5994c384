from fastapi import APIRouter, Depends

from models.stats import SRSStats
from routes.deps import get_scheduler
from utils.srs import SpacedRepetitionScheduler

router = APIRouter()

@router.get("", response_model=SRSStats)
async def srs_stats(scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    """Due counts, mastery buckets and review streaks."""
    return scheduler.get_srs_stats()
