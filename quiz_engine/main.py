"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from quiz_engine.api import attempts_router, health_router, quizzes_router
from quiz_engine.config import settings
from quiz_engine.core.errors import register_exception_handlers

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s  %(name)-25s  %(levelname)-8s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Quiz attempt engine starting (env=%s)", settings.ENV)
    yield
    logger.info("Quiz attempt engine shut down")


app = FastAPI(
    title="Quiz Attempt Engine API",
    description="Timed and untimed runs through a fixed quiz question bank",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware ─────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

register_exception_handlers(app)

# ── Routers ───────────────────────────────────────────────────────────────────

app.include_router(health_router, tags=["Health"])
app.include_router(attempts_router, prefix="/api/quizzes", tags=["Attempts"])
app.include_router(quizzes_router, prefix="/api/quizzes", tags=["Quizzes"])


@app.get("/")
async def root():
    return {
        "name": "Quiz Attempt Engine API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
