from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from typing import Dict

from models.card import Difficulty, ReviewCard, ReviewCreate
from models.review import RateRequest
from routes.deps import get_scheduler
from utils.mastery import get_mastery_color, get_mastery_label
from utils.session import ReviewSession
from utils.sm2 import format_interval
from utils.srs import SpacedRepetitionScheduler

router = APIRouter()
base_dir = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(base_dir / "templates"))

# Oldest open sessions are dropped once this many are held in memory
MAX_OPEN_SESSIONS = 32

def get_sessions(request: Request) -> Dict[str, ReviewSession]:
    return request.app.state.review_sessions

def session_payload(session: ReviewSession) -> dict:
    preview = session.preview()
    return {
        "id": session.id,
        "started_at": session.started_at,
        "total": len(session.cards),
        "position": session.index,
        "remaining": session.remaining,
        "finished": session.finished,
        "current": session.current,
        "preview": {rating.value: label for rating, label in preview.items()} if preview else None,
        "counts": session.session_counts(),
    }

def _require_session(sessions: Dict[str, ReviewSession], session_id: str) -> ReviewSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Review session not found")
    return session

def keep_session(sessions: Dict[str, ReviewSession], session: ReviewSession) -> None:
    """Hold an unfinished session, evicting the oldest ones past MAX_OPEN_SESSIONS."""
    if session.finished:
        return
    while len(sessions) >= MAX_OPEN_SESSIONS:
        sessions.pop(next(iter(sessions)))
    sessions[session.id] = session

@router.post("", response_model=ReviewCard)
async def submit_review(payload: ReviewCreate, scheduler: SpacedRepetitionScheduler = Depends(get_scheduler)):
    """Rate one question outside a session; creates its card on first review."""
    return scheduler.record_review(payload.question_id, payload.channel, payload.difficulty, payload.rating)

@router.post("/submit", response_class=HTMLResponse)
async def submit_review_form(
    request: Request,
    question_id: str = Form(...),
    channel: str = Form(...),
    difficulty: Difficulty = Form(...),
    rating: str = Form(...),
    scheduler: SpacedRepetitionScheduler = Depends(get_scheduler),
):
    """HTMX endpoint behind the rating buttons; returns the result partial."""
    card = scheduler.record_review(question_id, channel, difficulty, rating)
    ctx = {
        "card": card,
        "rating": rating,
        "next_review": format_interval(card.interval_days),
        "mastery_label": get_mastery_label(card.mastery_level),
        "mastery_color": get_mastery_color(card.mastery_level),
    }
    return templates.TemplateResponse(request, "partials/review_result.html", ctx)

@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def start_session(
    scheduler: SpacedRepetitionScheduler = Depends(get_scheduler),
    sessions: Dict[str, ReviewSession] = Depends(get_sessions),
):
    """Snapshot the currently due cards into a new review session.

    A session with nothing due is returned already finished and is not kept.
    """
    session = ReviewSession(scheduler)
    keep_session(sessions, session)
    return session_payload(session)

@router.get("/sessions/{session_id}")
async def get_session(session_id: str, sessions: Dict[str, ReviewSession] = Depends(get_sessions)):
    return session_payload(_require_session(sessions, session_id))

@router.post("/sessions/{session_id}/rate")
async def rate_current(
    session_id: str,
    payload: RateRequest,
    sessions: Dict[str, ReviewSession] = Depends(get_sessions),
):
    """Rate the current card; the session is released once its last card is rated."""
    session = _require_session(sessions, session_id)
    reviewed = session.rate(payload.rating)
    if session.finished:
        sessions.pop(session_id, None)
    body = session_payload(session)
    body["reviewed"] = reviewed
    return body

@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(session_id: str, sessions: Dict[str, ReviewSession] = Depends(get_sessions)):
    _require_session(sessions, session_id)
    del sessions[session_id]
