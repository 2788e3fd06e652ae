"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from draft_oracle.api.routes.analysis import router as analysis_router
from draft_oracle.api.routes.drafts import router as drafts_router
from draft_oracle.api.routes.insights import router as insights_router
from draft_oracle.config import settings
from draft_oracle.repositories.key_value_store import DuckDBKeyValueStore, InMemoryKeyValueStore
from draft_oracle.services.ai_client import AIClient, DraftAdvisor
from draft_oracle.services.analysis_service import DraftAnalysisService
from draft_oracle.services.analysis_worker import AnalysisWorker
from draft_oracle.services.cache_store import CacheStore
from draft_oracle.services.draft_service import DraftError
from draft_oracle.services.rate_limiter import RateLimiter, UpstashRateLimitBackend
from draft_oracle.services.session_manager import DraftSessionManager

logger = logging.getLogger(__name__)


def get_cache_database_path() -> Optional[Path]:
    """Get the cache database path from settings, or None for an in-memory store."""
    if not settings.cache_database_path:
        return None
    db_path = Path(settings.cache_database_path)
    if db_path.is_absolute():
        return db_path
    # Relative path - resolve from repo root
    repo_root = Path(__file__).parent.parent.parent
    return repo_root / settings.cache_database_path


def build_cache_store() -> CacheStore:
    db_path = get_cache_database_path()
    if db_path is not None:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        store = DuckDBKeyValueStore(str(db_path))
        logger.info(f"Cache store backed by DuckDB at {db_path}")
    else:
        store = InMemoryKeyValueStore()
        logger.info("Cache store backed by memory")
    return CacheStore(
        store=store,
        default_ttl=settings.cache_default_ttl_ms,
        sweep_interval=settings.cache_sweep_interval_ms,
        evict_batch=settings.cache_evict_batch_size,
    )


def build_rate_limiter() -> RateLimiter:
    backend = None
    if settings.redis_configured:
        backend = UpstashRateLimitBackend(
            settings.upstash_redis_rest_url,
            settings.upstash_redis_rest_token,
        )
        logger.info("Rate limiter using Upstash Redis")
    return RateLimiter(
        backend=backend,
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup: build services unless a test already installed them
    if not hasattr(app.state, "cache"):
        app.state.cache = build_cache_store()
    if not hasattr(app.state, "rate_limiter"):
        app.state.rate_limiter = build_rate_limiter()
    if not hasattr(app.state, "session_manager"):
        app.state.session_manager = DraftSessionManager()
    if not hasattr(app.state, "analysis_worker"):
        app.state.analysis_worker = AnalysisWorker() if settings.enable_analysis_worker else None
    if not hasattr(app.state, "analysis_service"):
        app.state.analysis_service = DraftAnalysisService(
            cache=app.state.cache,
            worker=app.state.analysis_worker,
        )
    if not hasattr(app.state, "advisor"):
        app.state.advisor = None
        if settings.enable_ai and settings.ai_api_key:
            app.state.advisor = DraftAdvisor(
                AIClient(
                    api_key=settings.ai_api_key,
                    api_url=settings.ai_api_url,
                    model=settings.ai_model,
                    timeout=settings.ai_timeout_seconds,
                ),
                app.state.rate_limiter,
            )
        else:
            logger.info("AI insights disabled (no API key or ENABLE_AI=false)")
    yield
    # Shutdown: Clean up resources
    if app.state.advisor is not None:
        await app.state.advisor.close()
    backend = app.state.rate_limiter.backend
    if isinstance(backend, UpstashRateLimitBackend):
        await backend.close()
    if app.state.analysis_worker is not None:
        app.state.analysis_worker.shutdown()


app = FastAPI(
    title="Draft Oracle",
    description="LoL Draft Assistant - draft state, composition analytics and AI insights",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DraftError)
async def draft_error_handler(request: Request, exc: DraftError):
    """Rejected draft actions leave the session unchanged and report a conflict."""
    return JSONResponse(status_code=409, content={"error": str(exc), "type": exc.code})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "draft-oracle"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Draft Oracle API",
        "version": "0.1.0",
        "docs": "/docs",
    }


# Register routers
app.include_router(drafts_router)
app.include_router(analysis_router)
app.include_router(insights_router)
