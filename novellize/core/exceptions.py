"""Exception hierarchy for the recommendation backend.

Inner components raise these at their boundaries and convert them to
neutral values (None, False, fallback objects). Only route handlers decide
HTTP status codes.
"""

from typing import Optional


class NovellizeError(Exception):
    """Base exception for all Novellize backend errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Cache Errors ----

class CacheUnavailableError(NovellizeError):
    """The Redis cache could not be reached or rejected the command."""


# ---- LLM Errors ----

class LLMError(NovellizeError):
    """Base exception for language-model errors."""


class LLMUnavailableError(LLMError):
    """The completion API failed (network, auth, rate limit, timeout)."""


class LLMResponseParseError(LLMError):
    """The model returned text that is not the expected JSON object."""

    def __init__(self, message: str = "Failed to parse LLM response", raw_response: str = ""):
        details = {"raw_response": raw_response[:200]} if raw_response else {}
        super().__init__(message, details)
        self.raw_response = raw_response
