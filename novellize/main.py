"""Novellize API - FastAPI Application."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from novellize.api.chat import limiter
from novellize.api.deps import cache_service
from novellize.api.router import api_router
from novellize.config import get_settings
from novellize.core.cache import CacheService, get_cache
from novellize.core.llm_client import get_llm_client
from novellize.middleware import CorrelationIDFilter, CorrelationIDMiddleware

settings = get_settings()

# Configure logging - every record carries the request's correlation ID
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
for handler in logging.getLogger().handlers:
    handler.addFilter(CorrelationIDFilter())

# Suppress noisy loggers
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"{settings.app_name} starting, catalog key '{settings.novel_cache_key}'")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set - chat will use fallback preferences")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await get_cache().close()
    await get_llm_client().close()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Chat-based novel recommendations for Novellize",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - restricted methods and headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID"],
)

app.add_middleware(CorrelationIDMiddleware)

app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/health/cache")
async def cache_status(cache: CacheService = Depends(cache_service)):
    """Check cache reachability and catalog availability."""
    if not await cache.ping():
        return {
            "status": "error",
            "has_catalog": False,
            "novel_count": 0,
            "error": "Cache health check failed",
        }

    catalog = await cache.get_catalog()
    return {
        "status": "healthy",
        "has_catalog": bool(catalog),
        "novel_count": len(catalog) if catalog else 0,
        "catalog_key": settings.novel_cache_key,
    }


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }
