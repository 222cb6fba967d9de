"""
Async OpenAI chat-completion client.

Both language-model calls made per chat request go through CompletionClient:
one for preference extraction, one for the explanation text. The client
enforces a bounded timeout and never retries; callers degrade to their own
fallbacks when it raises.
"""

import json
import logging
import re
from typing import Protocol

import httpx
import openai
from openai import AsyncOpenAI

from novellize.config import get_settings
from novellize.core.exceptions import LLMResponseParseError, LLMUnavailableError

logger = logging.getLogger(__name__)
settings = get_settings()

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


class ChatCompleter(Protocol):
    """Anything that can turn a message list into completion text."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
    ) -> str:
        ...


def parse_json_object(text: str | None) -> dict:
    """Parse model output that must be a single JSON object.

    A Markdown code fence around the object is tolerated. Arrays, scalars
    and prose raise LLMResponseParseError.
    """
    if not text or not text.strip():
        raise LLMResponseParseError("Empty LLM response")

    candidate = text.strip()
    match = _JSON_FENCE_RE.search(candidate)
    if match:
        candidate = match.group(1).strip()

    try:
        result = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise LLMResponseParseError(f"LLM response is not JSON: {e.msg}", raw_response=text) from e

    if not isinstance(result, dict):
        raise LLMResponseParseError(
            f"Expected a JSON object, got {type(result).__name__}",
            raw_response=text,
        )
    return result


class CompletionClient:
    """OpenAI chat completions with a bounded timeout."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.temperature = settings.openai_temperature if temperature is None else temperature
        self.timeout = timeout or settings.llm_timeout_seconds
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise LLMUnavailableError("OpenAI API key is not configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
                max_retries=0,
            )
        return self._client

    async def close(self):
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
    ) -> str:
        """Run one chat completion and return the first choice's text.

        Raises LLMUnavailableError for any API or transport failure.
        """
        client = self._get_client()
        kwargs = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            completion = await client.chat.completions.create(**kwargs)
        except openai.RateLimitError as e:
            raise LLMUnavailableError("OpenAI rate limit exceeded", {"error": str(e)}) from e
        except openai.APITimeoutError as e:
            raise LLMUnavailableError(
                "OpenAI request timed out", {"timeout": self.timeout}
            ) from e
        except openai.OpenAIError as e:
            raise LLMUnavailableError("OpenAI request failed", {"error": str(e)}) from e

        if not completion.choices:
            raise LLMUnavailableError("No choices in OpenAI response")

        content = completion.choices[0].message.content or ""
        logger.debug(f"Completion from {self.model}: {len(content)} chars")
        return content


# Singleton completion client
_llm_client: CompletionClient | None = None


def get_llm_client() -> CompletionClient:
    """Get the singleton completion client."""
    global _llm_client
    if _llm_client is None:
        _llm_client = CompletionClient()
    return _llm_client
