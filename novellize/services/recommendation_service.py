"""
Chat recommendation orchestration.

============================================================================
DATA SOURCE: REDIS CATALOG SNAPSHOT
============================================================================
Every request reads the whole novel catalog from the cache key configured in
settings.novel_cache_key. The catalog is written by the ingestion job (see
scripts/seed_catalog.py for local development) and is assumed to fit in
memory. Entries are validated here, at the cache-read boundary; anything
malformed is dropped instead of failing the request.
============================================================================

Request lifecycle for chat():

    RECEIVED -> CATALOG_CHECKED -> EMPTY_RESPONSE
                                -> PREFERENCES_EXTRACTED -> SCORED -> EXPLAINED

Nothing is retried. Failed model calls degrade to fallbacks inside the
extractor and explanation services.
"""

import logging
from typing import Any, Sequence

from pydantic import ValidationError

from novellize.config import get_settings
from novellize.core.cache import CacheService
from novellize.db.schemas import ChatMessage, ChatRecommendationResponse, Novel, NovelPreference
from novellize.services.explanation_service import ExplanationService
from novellize.services.preference_extractor import PreferenceExtractor
from novellize.services.scoring import ScoringWeights, rank_novels

logger = logging.getLogger(__name__)
settings = get_settings()

EMPTY_CATALOG_EXPLANATION = (
    "😅 Oops! Our novel database seems to be empty at the moment. "
    "Please try again later! 📚"
)
NO_REQUEST_EXPLANATION = (
    "👋 Tell me what kind of novel you're in the mood for, "
    "like genres, tags or a vibe, and I'll find something for you!"
)


def weights_from_settings() -> ScoringWeights:
    """Scoring weights as configured in the environment."""
    return ScoringWeights(
        genre=settings.genre_weight,
        tags=settings.tag_weight,
        status=settings.status_weight,
        type=settings.type_weight,
        rating=settings.rating_weight,
        exclusion_penalty=settings.exclusion_penalty,
    )


def validate_catalog(entries: Sequence[Any]) -> list[Novel]:
    """Keep only entries with an id, a title and genre/tag lists."""
    valid = []
    dropped = 0
    for entry in entries:
        if not isinstance(entry, dict):
            dropped += 1
            continue
        try:
            valid.append(Novel.model_validate(entry))
        except ValidationError as e:
            dropped += 1
            logger.debug(f"Dropping invalid catalog entry: {e.error_count()} error(s)")

    if dropped:
        logger.warning(f"Dropped {dropped} invalid catalog entries, {len(valid)} remain")
    return valid


def latest_user_message(messages: Sequence[ChatMessage]) -> str | None:
    """Content of the most recent non-blank user turn."""
    for message in reversed(messages):
        if message.role == "user" and message.content.strip():
            return message.content
    return None


class RecommendationService:
    """Compose cache, preference extraction, scoring and explanation."""

    def __init__(
        self,
        cache: CacheService,
        extractor: PreferenceExtractor,
        explainer: ExplanationService,
        weights: ScoringWeights | None = None,
    ):
        self.cache = cache
        self.extractor = extractor
        self.explainer = explainer
        self.weights = weights or weights_from_settings()

    async def _read_catalog(self) -> list | None:
        catalog = await self.cache.get_catalog()
        if not catalog:
            logger.error("No novels found in cache or invalid data format")
            return None
        return catalog

    def _rank(self, catalog: Sequence[Any], preferences: NovelPreference, limit: int) -> list[Novel]:
        novels = validate_catalog(catalog)
        if not novels:
            logger.error("No valid novels found after validation")
            return []

        ranked = rank_novels(novels, preferences, limit, self.weights)
        if ranked:
            logger.info(
                f"Ranked {len(novels)} novels, top score {ranked[0][1]:.2f}, "
                f"returning {len(ranked)}"
            )
        else:
            logger.info(f"No positive scores among {len(novels)} novels")
        return [novel for novel, _ in ranked]

    async def recommend(
        self,
        preferences: NovelPreference,
        limit: int | None = None,
    ) -> list[Novel]:
        """
        Get the top-scoring novels for the given preferences.

        Args:
            preferences: Extracted (or fallback) preferences
            limit: Maximum number of novels to return

        Returns:
            Novels ordered by descending score; empty when the catalog is
            missing, holds no valid entries, or nothing scores above zero
        """
        if limit is None:
            limit = settings.recommendation_limit

        catalog = await self._read_catalog()
        if catalog is None:
            return []
        return self._rank(catalog, preferences, limit)

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        limit: int | None = None,
    ) -> ChatRecommendationResponse:
        """Run one full chat recommendation cycle."""
        if limit is None:
            limit = settings.recommendation_limit

        catalog = await self._read_catalog()
        if catalog is None:
            return ChatRecommendationResponse(
                explanation=EMPTY_CATALOG_EXPLANATION,
                recommendations=[],
                preferences=NovelPreference(),
            )

        user_input = latest_user_message(messages)
        if user_input is None:
            return ChatRecommendationResponse(
                explanation=NO_REQUEST_EXPLANATION,
                recommendations=[],
                preferences=NovelPreference(),
            )

        preferences = await self.extractor.extract(user_input)
        recommendations = self._rank(catalog, preferences, limit)
        explanation = await self.explainer.explain(recommendations, preferences)

        return ChatRecommendationResponse(
            explanation=explanation,
            recommendations=recommendations,
            preferences=preferences,
        )
