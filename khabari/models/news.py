from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DESCRIPTION = "Click to read the full article"
NO_LINK = "#"
REMOVED_TITLE = "[Removed]"


class Category(str, Enum):
    GENERAL = "general"
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    SPORTS = "sports"
    HEALTH = "health"

    @classmethod
    def coerce(cls, value: str | Category | None) -> Category:
        if isinstance(value, Category):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.GENERAL


class Article(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1, description="Article headline")
    description: str = Field(
        default=DEFAULT_DESCRIPTION, description="Plain-text teaser"
    )
    url: str = Field(default=NO_LINK, description="Article link or the no-link sentinel")
    image_url: str = Field(description="Absolute https URL of the display image")
    published_at: str = Field(
        description="ISO 8601 timestamp, or the provider's raw value if unparseable"
    )
    source_name: str = Field(min_length=1, description="Publisher name")

    @field_validator("title", "source_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("image_url")
    @classmethod
    def _absolute_image(cls, value: str) -> str:
        if not value.startswith("https://") or not urlsplit(value).hostname:
            raise ValueError("image_url must be an absolute https URL")
        return value

    @property
    def has_link(self) -> bool:
        return bool(self.url) and self.url != NO_LINK

    @property
    def published_datetime(self) -> datetime | None:
        return parse_datetime(self.published_at)

    def age_label(self, now: datetime | None = None) -> str:
        """Relative age such as ``"3h ago"``; unparseable dates read as just now."""
        now = now or datetime.now(timezone.utc)
        published = self.published_datetime
        if published is None:
            return "0m ago"
        minutes = max(int((now - published).total_seconds() // 60), 0)
        if minutes < 60:
            return f"{minutes}m ago"
        if minutes < 60 * 24:
            return f"{minutes // 60}h ago"
        return f"{minutes // (60 * 24)}d ago"


class RawPayload(BaseModel):
    provider: str = Field(description="Provider that produced the payload")
    shape: str = Field(description="Item layout, used to pick a normalizer")
    items: list[Any] = Field(default_factory=list)


class FeedResponse(BaseModel):
    category: Category
    query: str = ""
    count: int = 0
    articles: list[Article] = Field(default_factory=list)


def parse_datetime(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="seconds").replace(
        "+00:00", "Z"
    )
