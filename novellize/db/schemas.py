"""Pydantic schemas for cached catalog entries and API request/response bodies."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============ Catalog Schemas ============

class Genre(BaseModel):
    """Genre entry on a novel."""
    model_config = ConfigDict(extra="allow")

    name: Any = None


def _as_text(value: Any) -> str | None:
    """String form of a scalar catalog value, None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


class Novel(BaseModel):
    """Read-only projection of a novel document as stored in the catalog cache.

    An entry is only rejected when its id or title is missing, or when
    genres/tags are not lists. The scored fields (status, type, rating,
    availability) are kept exactly as stored, whatever their shape, and read
    through the coercing properties below. Everything else (cover,
    publishers, synopsis, likes, uploader...) is kept as extra data and
    serialized back unchanged.
    """
    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    novel_id: str = Field(alias="novelId")
    title: str
    genres: list[Genre]
    tags: list[Any]
    series_status: Any = Field(default=None, alias="seriesStatus")
    chapter_type: Any = Field(default=None, alias="chapterType")
    type: Any = None
    rating: Any = None
    availability: Any = None

    @model_validator(mode="before")
    @classmethod
    def accept_plain_id(cls, data: Any) -> Any:
        # Older exports used "id" instead of "novelId"
        if isinstance(data, dict) and data.get("novelId") is None and data.get("id") is not None:
            data = {**data, "novelId": data["id"]}
        return data

    @field_validator("genres", mode="before")
    @classmethod
    def wrap_genre_names(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [g if isinstance(g, dict) else {"name": g} for g in v]
        return v

    @property
    def genre_names(self) -> list[str]:
        return [name for name in (_as_text(g.name) for g in self.genres) if name]

    @property
    def tag_names(self) -> list[str]:
        return [name for name in (_as_text(t) for t in self.tags) if name]

    @property
    def status_value(self) -> str | None:
        return _as_text(self.series_status)

    @property
    def classification(self) -> str | None:
        """chapterType, falling back to the generic type field."""
        if self.chapter_type is not None:
            return _as_text(self.chapter_type)
        return _as_text(self.type)

    @property
    def rating_value(self) -> float | None:
        """Numeric rating, None when missing or unparseable ("N/A")."""
        return _as_number(self.rating)


class NovelPreference(BaseModel):
    """Reading preferences extracted from a chat message.

    None means "not mentioned", which is different from an empty list.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    genres: list[str] | None = None
    tags: list[str] | None = None
    mood: list[str] | None = None
    status: str | None = None  # ONGOING, COMPLETED, ON HOLD, CANCELLED, UPCOMING
    type: str | None = None  # Web Novel, Light Novel, Novel
    series_type: str | None = Field(default=None, alias="seriesType")
    min_rating: float | None = Field(default=None, alias="minRating")
    excluded_genres: list[str] | None = Field(default=None, alias="excludedGenres")
    excluded_tags: list[str] | None = Field(default=None, alias="excludedTags")
    availability: str | None = None  # FREE, FREEMIUM, PAID

    @field_validator("genres", "tags", "mood", "excluded_genres", "excluded_tags", mode="before")
    @classmethod
    def wrap_single_string(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v


# ============ Chat Schemas ============

class ChatMessage(BaseModel):
    """One turn of the chat transcript."""
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""
    messages: list[ChatMessage]


class ChatRecommendationResponse(BaseModel):
    """Body returned by POST /api/chat on every path."""
    explanation: str
    recommendations: list[Novel]
    preferences: NovelPreference


# ============ Cache Proxy Schemas ============

class CacheGetResponse(BaseModel):
    """Raw cached value for GET /api/redis."""
    data: Any = None


class CacheSetRequest(BaseModel):
    """Body of POST /api/redis. Presence checks happen in the handler."""
    key: str | None = None
    value: Any = None
    ttl: int | None = None


class CacheSetResponse(BaseModel):
    """Result of a cache write with read-back verification."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    verification_result: bool = Field(alias="verificationResult")
