import argparse
import logging
import uvicorn
from fastapi import FastAPI, Request, Depends
from fastapi.templating import Jinja2Templates
from fastapi.responses import HTMLResponse, JSONResponse
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config
from routes import cards, review, stats  # Import routers
from routes.deps import get_scheduler
from utils.errors import InvalidRatingError, StorageUnavailableError
from utils.mastery import get_mastery_color, get_mastery_label, mastery_percent

logger = logging.getLogger("codereels")

def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()  # Ensures config exists
    setup_logging(config["logging"]["level"])
    init_db()
    yield

templates = Jinja2Templates(directory=str(base_dir / "templates"))
app = FastAPI(
    title="Code Reels SRS",
    description="Spaced-repetition review scheduler for interview questions",
    lifespan=lifespan,
)
app.state.review_sessions = {}

# Include routers
app.include_router(cards.router, prefix="/cards", tags=["cards"])
app.include_router(review.router, prefix="/review", tags=["review"])
app.include_router(stats.router, prefix="/stats", tags=["stats"])

@app.exception_handler(InvalidRatingError)
async def invalid_rating_handler(request: Request, exc: InvalidRatingError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})

@app.exception_handler(StorageUnavailableError)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError):
    logger.error("Storage unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Review storage is unavailable"})

# Home page - review dashboard
@app.get("/", response_class=HTMLResponse)
async def home(request: Request, scheduler = Depends(get_scheduler)):
    srs_stats = scheduler.get_srs_stats()
    due_cards = scheduler.get_due_cards()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "stats": srs_stats,
            "due_cards": due_cards,
            "mastered_percent": mastery_percent(srs_stats.mastered, srs_stats.total_cards),
            "mastery_labels": {card.question_id: get_mastery_label(card.mastery_level) for card in due_cards},
            "mastery_colors": {card.question_id: get_mastery_color(card.mastery_level) for card in due_cards},
        },
    )

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Code Reels SRS")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    setup_logging(config["logging"]["level"])
    if args.init:
        init_db()
        print("DB initialized and config copied to ~/.codereels/")
        exit(0)
    server = config["server"]
    uvicorn.run(
        "main:app",
        host=server["host"],
        port=server["port"],
        reload=args.dev,
        log_level=config["logging"]["level"].lower(),
    )
