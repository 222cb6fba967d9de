"""FastAPI dependencies wiring the services to their clients.

Routes never reach for module singletons directly; tests swap any of these
through app.dependency_overrides.
"""

from fastapi import Depends

from novellize.core.cache import CacheService, get_cache
from novellize.core.llm_client import CompletionClient, get_llm_client
from novellize.services.explanation_service import ExplanationService
from novellize.services.preference_extractor import PreferenceExtractor
from novellize.services.recommendation_service import RecommendationService


def cache_service() -> CacheService:
    return get_cache()


def completion_client() -> CompletionClient:
    return get_llm_client()


def recommendation_service(
    cache: CacheService = Depends(cache_service),
    llm: CompletionClient = Depends(completion_client),
) -> RecommendationService:
    """Build the orchestrator for one request."""
    return RecommendationService(
        cache=cache,
        extractor=PreferenceExtractor(llm),
        explainer=ExplanationService(llm),
    )
