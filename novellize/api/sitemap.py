"""Sitemap endpoint."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from novellize.api.deps import cache_service
from novellize.config import get_settings
from novellize.core.cache import CacheService
from novellize.services.recommendation_service import validate_catalog
from novellize.services.sitemap_service import collect_entries, render_sitemap

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("/sitemap")
async def get_sitemap(cache: CacheService = Depends(cache_service)):
    """XML sitemap of static pages, novel pages and author pages."""
    try:
        catalog = await cache.get_catalog() or []
        novels = validate_catalog(catalog)
        xml = render_sitemap(collect_entries(novels), settings.site_base_url)
    except Exception:
        logger.exception("Error generating sitemap")
        return PlainTextResponse("Error generating sitemap", status_code=500)

    return Response(
        content=xml,
        media_type="application/xml",
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
