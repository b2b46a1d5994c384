from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from typing import List, Optional

from models.card import CardCreate, CardPreview, ReviewCard
from models.review import Rating
from routes.deps import get_scheduler
from utils.mastery import get_mastery_color, get_mastery_label, get_rating_label
from utils.srs import SpacedRepetitionScheduler

router = APIRouter()
base_dir = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(base_dir / "templates"))

RATING_STYLES = {
    Rating.AGAIN: "text-red-500 bg-red-500/10 border-red-500/30",
    Rating.HARD: "text-orange-500 bg-orange-500/10 border-orange-500/30",
    Rating.GOOD: "text-green-500 bg-green-500/10 border-green-500/30",
    Rating.EASY: "text-blue-500 bg-blue-500/10 border-blue-500/30",
}

def _require_card(scheduler: SpacedRepetitionScheduler, question_id: str) -> ReviewCard:
    card = scheduler.get_card(question_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    return card

def build_preview(scheduler: SpacedRepetitionScheduler, card: ReviewCard) -> CardPreview:
    intervals = scheduler.preview_intervals(card)
    labels = scheduler.get_next_review_preview(card)
    return CardPreview(
        question_id=card.question_id,
        mastery_level=card.mastery_level,
        mastery_label=get_mastery_label(card.mastery_level),
        mastery_color=get_mastery_color(card.mastery_level),
        intervals={rating.value: days for rating, days in intervals.items()},
        labels={rating.value: label for rating, label in labels.items()},
    )

@router.get("", response_model=List[ReviewCard])
async def list_cards(channel: Optional[str] = None, scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    """All tracked cards, optionally limited to one channel."""
    cards = scheduler.get_all_cards()
    if channel:
        cards = [card for card in cards if card.channel == channel]
    return cards

@router.post("", response_model=ReviewCard, status_code=status.HTTP_201_CREATED)
async def add_card(payload: CardCreate, scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    return scheduler.add_card(payload.question_id, payload.channel, payload.difficulty)

@router.delete("")
async def reset_progress(scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    removed = scheduler.reset_progress()
    return {"removed": removed}

@router.get("/due", response_model=List[ReviewCard])
async def due_cards(scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    return scheduler.get_due_cards()

@router.get("/due-range", response_model=List[ReviewCard])
async def due_in_range(
    days: int = Query(7, ge=0, le=365),
    scheduler: SpacedRepetitionScheduler = Depends(get_scheduler),
):
    return scheduler.get_cards_due_in_range(days)

@router.get("/{question_id}", response_model=ReviewCard)
async def get_card(question_id: str, scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    return _require_card(scheduler, question_id)

@router.get("/{question_id}/preview", response_model=CardPreview)
async def preview_card(question_id: str, scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    card = _require_card(scheduler, question_id)
    return build_preview(scheduler, card)

@router.get("/{question_id}/buttons", response_class=HTMLResponse)
async def rating_buttons(question_id: str, request: Request, scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    """HTMX partial with the four rating buttons and their next-review hints."""
    card = _require_card(scheduler, question_id)
    previews = scheduler.get_next_review_preview(card)
    buttons = [
        {
            "rating": rating.value,
            "label": get_rating_label(rating),
            "preview": previews[rating],
            "style": RATING_STYLES[rating],
        }
        for rating in Rating
    ]
    return templates.TemplateResponse(
        request,
        "partials/rating_buttons.html",
        {
            "card": card,
            "buttons": buttons,
            "mastery_label": get_mastery_label(card.mastery_level),
            "mastery_color": get_mastery_color(card.mastery_level),
        },
    )
