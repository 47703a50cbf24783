"""Dota Replays API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, one router per resource
    - Global error handlers map ReplayApiError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Rate limiting sits inside the access log, so rejected requests are still logged
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py so tests can build the same app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dotareplays.api.error_handlers import register_error_handlers
from dotareplays.api.routes import health, replays, tokens, users
from dotareplays.config import get_settings
from dotareplays.infrastructure import database
from dotareplays.infrastructure.observability import log_requests, setup_logging
from dotareplays.infrastructure.rate_limiter import RateLimiter, rate_limit

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"Dota Replays API started ({settings.environment})")
    yield
    logger.info("Dota Replays API shutting down")
    if database.db_manager is not None:
        await database.db_manager.dispose()


settings = get_settings()
app = FastAPI(
    title="Dota Replays API", version=settings.version, lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.rate_limiter = RateLimiter(
    settings.limiter_rps, settings.limiter_burst, enabled=settings.limiter_enabled,
)
app.middleware("http")(rate_limit)
app.middleware("http")(log_requests)

app.include_router(health.router)
app.include_router(replays.router)
app.include_router(users.router)
app.include_router(tokens.router)

register_error_handlers(app)
