"""
Scrumkit — FastAPI application entry-point.

Run with:
    uvicorn scrumkit.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import scrumkit.models  # noqa: F401  (register tables on Base.metadata)
from scrumkit import __version__
from scrumkit.config import settings
from scrumkit.database import Base, engine
from scrumkit.errors import ScrumkitError
from scrumkit.services.event_bus import EventBus
from scrumkit.services.event_stream import StreamRegistry
from scrumkit.services.text_generation import OpenAITextGenerator

# ── Import routers ──
from scrumkit.routers import action_items, events, items, reports, sessions, votes

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: create tables on startup, close change streams on shutdown ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{settings.APP_NAME} {__version__} started")
    yield
    await app.state.streams.close_all()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Sprint retrospectives — cards, votes, action items and AI-written reports.",
    version=__version__,
    lifespan=lifespan,
)

# ── Services shared by all requests ──
app.state.event_bus = EventBus()
app.state.streams = StreamRegistry(
    app.state.event_bus,
    heartbeat_interval=settings.SSE_HEARTBEAT_SECONDS,
    max_pending=settings.SSE_MAX_PENDING_EVENTS,
)
app.state.text_generator = OpenAITextGenerator.from_settings()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error rendering ──
@app.exception_handler(ScrumkitError)
async def scrumkit_error_handler(request: Request, exc: ScrumkitError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(problems) or "Invalid request"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Register API routers ──
app.include_router(sessions.router)
app.include_router(items.router)
app.include_router(votes.router)
app.include_router(action_items.router)
app.include_router(reports.router)
app.include_router(events.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "scrumkit"}
