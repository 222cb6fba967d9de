"""
Chat recommendation endpoint.

The response body always has the same three keys (explanation,
recommendations, preferences) so the chat UI parses every outcome the same
way, including the degraded 500 response.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from novellize.api.deps import recommendation_service
from novellize.config import get_settings
from novellize.db import schemas
from novellize.services.recommendation_service import RecommendationService

logger = logging.getLogger(__name__)
settings = get_settings()

# Each chat request costs two model calls
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

ERROR_EXPLANATION = "😅 Oops! Something went wrong. Please try again! 🔄"

router = APIRouter()


@router.post(
    "/chat",
    response_model=schemas.ChatRecommendationResponse,
    response_model_exclude_unset=True,
)
@limiter.limit(settings.chat_rate_limit)
async def chat(
    request: Request,
    payload: schemas.ChatRequest,
    service: RecommendationService = Depends(recommendation_service),
):
    """
    Recommend novels for a chat transcript.

    The latest user message is turned into structured preferences, the
    cached catalog is scored against them and the top matches are returned
    with a short explanation.

    Outcomes:
    - 200 with recommendations (possibly empty when nothing matched)
    - 200 with a fixed message when the catalog cache is empty
    - 500 with a fixed apology on any unexpected error
    """
    try:
        return await service.chat(payload.messages)
    except Exception:
        logger.exception("Error in chat API")
        return JSONResponse(
            status_code=500,
            content={
                "explanation": ERROR_EXPLANATION,
                "recommendations": [],
                "preferences": {},
            },
        )
