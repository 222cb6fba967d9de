"""
Generate a short, friendly explanation for a set of recommendations.

The explanation is prose written by the language model from the extracted
preferences and the recommended titles. It is decoration on top of the
recommendations: a failed call yields a generic message and never discards
the novels already picked.
"""

import json
import logging
from typing import Sequence

from novellize.config import get_settings
from novellize.core.exceptions import LLMError
from novellize.core.llm_client import ChatCompleter
from novellize.db.schemas import Novel, NovelPreference

logger = logging.getLogger(__name__)
settings = get_settings()

FALLBACK_EXPLANATION = (
    "Here are some novels that match what you're looking for. Happy reading! 📚"
)
NO_MATCHES_EXPLANATION = (
    "🤔 I couldn't find any novels matching those preferences. "
    "Try describing different genres, tags or moods!"
)


def build_explanation_prompt(recommendations: Sequence[Novel], preferences: NovelPreference) -> str:
    """Prompt asking for a brief rationale of the picks."""
    prefs_json = json.dumps(
        preferences.model_dump(by_alias=True, exclude_none=True),
        indent=2,
        ensure_ascii=False,
    )
    titles = ", ".join(novel.title for novel in recommendations)
    return (
        f"Based on the user's preferences:\n{prefs_json}\n\n"
        f"I recommended these novels:\n{titles}\n\n"
        "Generate a brief, friendly explanation of why these novels match their "
        "preferences. Keep it under 100 words."
    )


class ExplanationService:
    """Explain recommendations with one completion call."""

    def __init__(self, llm: ChatCompleter, max_tokens: int | None = None):
        self.llm = llm
        self.max_tokens = max_tokens or settings.explanation_max_tokens

    async def explain(
        self,
        recommendations: Sequence[Novel],
        preferences: NovelPreference,
    ) -> str:
        """
        Explain why the recommendations fit the preferences.

        Returns NO_MATCHES_EXPLANATION without calling the model when there
        is nothing to explain, and FALLBACK_EXPLANATION if the call fails.
        """
        if not recommendations:
            return NO_MATCHES_EXPLANATION

        prompt = build_explanation_prompt(recommendations, preferences)
        try:
            text = await self.llm.complete(
                [{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
            )
        except LLMError as e:
            logger.warning(f"Explanation generation failed: {e}")
            return FALLBACK_EXPLANATION

        text = text.strip()
        if not text:
            logger.warning("Explanation generation returned empty text")
            return FALLBACK_EXPLANATION
        return text
