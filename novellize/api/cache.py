"""Key-value cache proxy endpoints.

Used by the ingestion job and admin tooling to read and write raw cache
entries, most importantly the novel catalog snapshot.
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from novellize.api.deps import cache_service
from novellize.config import get_settings
from novellize.core.auth import require_cache_writer
from novellize.core.cache import CacheService, serialize_value
from novellize.core.exceptions import CacheUnavailableError
from novellize.db import schemas

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("/redis", response_model=schemas.CacheGetResponse)
async def get_cache_value(
    key: str | None = Query(default=None, description="Cache key to read"),
    cache: CacheService = Depends(cache_service),
):
    """Return the raw stored value for a key (null when missing)."""
    if not key or not key.strip():
        return JSONResponse(status_code=400, content={"error": "Key is required"})

    try:
        value = await cache.fetch_raw(key)
    except CacheUnavailableError as e:
        logger.error(f"Redis GET error: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch data", "details": str(e)},
        )

    logger.info(f"Redis GET {key}: {'data found' if value is not None else 'no data found'}")
    return schemas.CacheGetResponse(data=value)


@router.post(
    "/redis",
    response_model=schemas.CacheSetResponse,
    dependencies=[Depends(require_cache_writer)],
)
async def set_cache_value(
    payload: schemas.CacheSetRequest,
    cache: CacheService = Depends(cache_service),
):
    """
    Store a value under a key, then read it back to verify the write.

    Non-string values are JSON-encoded first. Values larger than
    MAX_CACHE_VALUE_CHARS characters are rejected.
    """
    if not payload.key or payload.value is None:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Key and value are required",
                "receivedKey": payload.key,
                "receivedValue": type(payload.value).__name__,
            },
        )

    if payload.ttl is not None and payload.ttl <= 0:
        return JSONResponse(
            status_code=400,
            content={"error": "TTL must be a positive number of seconds", "ttl": payload.ttl},
        )

    string_value = serialize_value(payload.value)
    limit = settings.max_cache_value_chars
    if len(string_value) > limit:
        logger.warning(f"Rejected cache value for {payload.key}: {len(string_value)} chars")
        return JSONResponse(
            status_code=400,
            content={"error": "Value too large", "size": len(string_value), "limit": limit},
        )

    try:
        await cache.store_raw(payload.key, string_value, payload.ttl)
        stored = await cache.fetch_raw(payload.key)
    except CacheUnavailableError as e:
        logger.error(f"Redis operation failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Redis operation failed", "details": str(e)},
        )

    logger.info(
        f"Redis SET {payload.key} ({len(string_value)} chars, ttl={payload.ttl}), "
        f"verified={stored is not None}"
    )
    return schemas.CacheSetResponse(success=True, verification_result=stored is not None)
