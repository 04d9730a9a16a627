import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.deps import get_clock, get_document_store, get_news_cache, get_settings
from src.app_shell.config import ConfigError, configure_logging, validate_ops_rules
from src.components.news import NewsCache
from src.rules.loader import load_rules

logger = logging.getLogger(__name__)


def _news_cache(app: FastAPI) -> NewsCache:
    """Resolve the news cache, honouring test overrides."""
    override = app.dependency_overrides.get(get_news_cache)
    if override is not None:
        return override()
    settings = get_settings()
    return get_news_cache(get_document_store(settings, get_clock()))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        configure_logging(rules)
        validate_ops_rules(rules, settings.data_dir)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError, ConfigError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    news = _news_cache(app)
    news.start()
    try:
        yield
    finally:
        news.stop()


app = FastAPI(
    title="Bitcoin Community Site API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import (  # noqa: E402
    admin_newsletter,
    admin_submissions,
    admin_testimonials,
    media,
    public_content,
    public_events,
)

app.include_router(public_events.router, prefix="/api/events", tags=["Events"])
app.include_router(public_content.router, prefix="/api", tags=["Public"])
app.include_router(
    admin_submissions.router, prefix="/api/admin/submissions", tags=["Admin Submissions"]
)
app.include_router(
    admin_testimonials.router, prefix="/api/admin/testimonials", tags=["Admin Testimonials"]
)
app.include_router(
    admin_newsletter.router, prefix="/api/admin/newsletter", tags=["Admin Newsletter"]
)
app.include_router(media.router, prefix="/media", tags=["Media"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
