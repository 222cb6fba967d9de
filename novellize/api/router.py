"""API router - aggregates all endpoint routers."""

from fastapi import APIRouter

from novellize.api import cache, chat, sitemap

api_router = APIRouter()

api_router.include_router(chat.router, tags=["chat"])
api_router.include_router(cache.router, tags=["cache"])
api_router.include_router(sitemap.router, tags=["sitemap"])
