# catalog/schemas.py
from datetime import datetime, timezone
from enum import Enum
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional


class ContentType(str, Enum):
    MOVIE = "movie"
    TV_SHOW = "tv_show"

class ContentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"

class EventType(str, Enum):
    VIEW = "view"
    PLAY = "play"
    LIKE = "like"
    ADD_TO_LIST = "add_to_list"


class CatalogModel(BaseModel):
    """Base for every schema: camelCase on the wire, snake_case in Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        use_enum_values = True


def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value

def parse_release_date(value):
    """
    Coerces a date-like string ('2025-01-01', '2025-01-01T20:00:00Z') into a
    UTC datetime. Offsets are converted to UTC; values without one are taken as UTC.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return value

def _check_episodes(model, partial: bool = False):
    # A tv show needs a positive episode count; a movie never carries one
    if model.type == ContentType.TV_SHOW and model.episodes is None:
        if not partial or "episodes" in model.model_fields_set:
            raise ValueError("episodes is required when type is tv_show")
    if model.type == ContentType.MOVIE and model.episodes is not None:
        model.episodes = None
    return model


# --- Content Schemas ---
class ContentCreate(CatalogModel):
    title: str = Field(..., min_length=1)
    type: ContentType
    genres: List[str] = Field(..., min_length=1)
    duration: Optional[str] = None
    rating: str
    status: ContentStatus = Field(ContentStatus.DRAFT, validate_default=True)
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    trailer_url: Optional[str] = None
    release_year: Optional[int] = None
    director: Optional[str] = None
    writer: Optional[str] = None
    cast: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    episodes: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def check_episodes(self):
        return _check_episodes(self)

class ContentUpdate(CatalogModel):
    """Patch payload: only fields present in the request are applied."""
    title: Optional[str] = Field(None, min_length=1)
    type: Optional[ContentType] = None
    genres: Optional[List[str]] = Field(None, min_length=1)
    duration: Optional[str] = None
    rating: Optional[str] = None
    status: Optional[ContentStatus] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    trailer_url: Optional[str] = None
    release_year: Optional[int] = None
    director: Optional[str] = None
    writer: Optional[str] = None
    cast: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    episodes: Optional[int] = Field(None, gt=0)

    @field_validator("title", "type", "genres", "rating", "status")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    @model_validator(mode="after")
    def check_episodes(self):
        return _check_episodes(self, partial=True)

class Content(CatalogModel):
    id: int
    title: str
    type: ContentType
    genres: List[str]
    duration: Optional[str] = None
    rating: str
    status: ContentStatus
    views: Optional[int] = 0
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    trailer_url: Optional[str] = None
    release_year: Optional[int] = None
    director: Optional[str] = None
    writer: Optional[str] = None
    cast: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    episodes: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# --- Upcoming Content Schemas ---
class UpcomingContentCreate(CatalogModel):
    title: str = Field(..., min_length=1)
    type: ContentType
    genres: List[str] = Field(..., min_length=1)
    episodes: Optional[int] = Field(None, gt=0)
    release_date: datetime
    description: str = Field(..., min_length=1)
    thumbnail_url: Optional[str] = None
    trailer_url: Optional[str] = None
    section_order: int = 0

    @field_validator("release_date", mode="before")
    @classmethod
    def coerce_release_date(cls, value):
        return parse_release_date(value)

    @model_validator(mode="after")
    def check_episodes(self):
        return _check_episodes(self)

class UpcomingContentUpdate(CatalogModel):
    title: Optional[str] = Field(None, min_length=1)
    type: Optional[ContentType] = None
    genres: Optional[List[str]] = Field(None, min_length=1)
    episodes: Optional[int] = Field(None, gt=0)
    release_date: Optional[datetime] = None
    description: Optional[str] = Field(None, min_length=1)
    thumbnail_url: Optional[str] = None
    trailer_url: Optional[str] = None
    section_order: Optional[int] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def coerce_release_date(cls, value):
        return parse_release_date(value)

    @field_validator("title", "type", "genres", "release_date", "description", "section_order")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    @model_validator(mode="after")
    def check_episodes(self):
        return _check_episodes(self, partial=True)

class UpcomingContent(CatalogModel):
    id: int
    title: str
    type: ContentType
    genres: List[str]
    episodes: Optional[int] = None
    release_date: datetime
    description: str
    thumbnail_url: Optional[str] = None
    trailer_url: Optional[str] = None
    section_order: Optional[int] = 0
    created_at: datetime


# --- Analytics Schemas ---
# The ORM attribute is 'event_metadata' (declarative classes reserve 'metadata'),
# the wire name is 'metadata'.
_metadata_field = dict(
    validation_alias=AliasChoices("event_metadata", "metadata"),
    serialization_alias="metadata",
)

class AnalyticsEventCreate(CatalogModel):
    content_id: Optional[int] = None
    event_type: EventType
    user_id: Optional[int] = None
    event_metadata: Optional[Any] = Field(None, **_metadata_field)

class AnalyticsEvent(CatalogModel):
    id: int
    content_id: Optional[int] = None
    event_type: EventType
    user_id: Optional[int] = None
    timestamp: datetime
    event_metadata: Optional[Any] = Field(None, **_metadata_field)

class AnalyticsSummary(CatalogModel):
    total_views: int
    total_content: int
    popular_content: List[Content]
    recent_views: List[AnalyticsEvent]


# --- User Schemas ---
class UserCreate(CatalogModel):
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)


# --- Generic responses ---
class DeleteResponse(BaseModel):
    success: bool

