"""
Extract structured reading preferences from free-text chat input.

One chat completion turns the user's message into a NovelPreference. The
extraction is best-effort: if the model call fails or its output is not a
usable JSON object, a minimal preference built from the raw input is
returned instead, so scoring always has something to work with.
"""

import logging

from pydantic import ValidationError

from novellize.core.exceptions import LLMError
from novellize.core.llm_client import ChatCompleter, parse_json_object
from novellize.db.schemas import NovelPreference

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a novel recommendation expert. Analyze the user's preferences and extract key features they're looking for in a novel.
Return a JSON object with the following structure:
{
  "genres": ["genre1", "genre2"],
  "tags": ["tag1", "tag2"],
  "mood": ["mood1", "mood2"],
  "status": "ONGOING" | "COMPLETED" | "ON HOLD" | "CANCELLED" | "UPCOMING",
  "type": "Web Novel" | "Light Novel" | "Novel",
  "seriesType": "ORIGINAL" | "TRANSLATED" | "FAN_FIC",
  "minRating": number,
  "excludedGenres": ["genre1", "genre2"],
  "excludedTags": ["tag1", "tag2"],
  "availability": "FREE" | "FREEMIUM" | "PAID"
}

Focus on:
- Genres they mention
- Themes or tags they're interested in
- The mood they're looking for
- Any specific requirements (status, type, etc.)
- What they want to avoid

Only include fields that are explicitly mentioned or can be clearly inferred from the user's request.
Respond with the JSON object only."""


def fallback_preferences(user_input: str) -> NovelPreference:
    """Degenerate preference: the raw input as a single genre token."""
    return NovelPreference(genres=[user_input.lower()])


def validate_preferences(data: dict) -> NovelPreference:
    """Validate model output, discarding only the fields that fail.

    Keys whose values have the wrong shape (a list where one value is
    expected, a word where a number is expected) are dropped and the rest
    of the object is kept. Raises ValidationError when no field survives.
    """
    try:
        return NovelPreference.model_validate(data)
    except ValidationError as e:
        bad = {err["loc"][0] for err in e.errors() if err["loc"]}
        kept = {k: v for k, v in data.items() if k not in bad}
        if not kept:
            raise
        logger.warning(f"Ignoring malformed preference fields: {sorted(map(str, bad))}")
        return NovelPreference.model_validate(kept)


class PreferenceExtractor:
    """Turn a chat message into a NovelPreference via the language model."""

    def __init__(self, llm: ChatCompleter):
        self.llm = llm

    async def extract(self, user_input: str) -> NovelPreference:
        """
        Extract preferences from the user's request.

        Never raises: API failures and malformed model output both fall
        back to fallback_preferences().
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_input},
        ]

        try:
            response = await self.llm.complete(messages)
        except LLMError as e:
            logger.error(f"Error extracting preferences: {e}")
            return fallback_preferences(user_input)

        try:
            preferences = validate_preferences(parse_json_object(response))
        except (LLMError, ValidationError) as e:
            logger.error(f"Error parsing preference response: {e}")
            return fallback_preferences(user_input)

        logger.info(
            "Extracted preferences: "
            f"{preferences.model_dump(by_alias=True, exclude_none=True)}"
        )
        return preferences
