"""Typed representations of the content entities served by a content source."""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..utils import slugify, strip_tags

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 200
AVERAGE_READING_SPEED_WPM = 200

EntityId = Union[int, str]

_NUMBER = re.compile(r"\d+")


def _coerce_read_time(value: Any) -> Optional[int]:
    """Pull a minute count out of values like ``5``, ``4.2`` or ``"5 min read"``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return math.ceil(value) if value >= 0 else None
    match = _NUMBER.search(str(value))
    return int(match.group()) if match else None


class ContentModel(BaseModel):
    """Base for content entities: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Author(ContentModel):
    """Byline attached to a post."""

    id: Optional[EntityId] = Field(default=None)
    name: str = Field(default="")

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data.strip()}
        if isinstance(data, dict) and not data.get("name"):
            full_name = data.get("fullName") or " ".join(
                part for part in (data.get("firstName"), data.get("lastName")) if part
            )
            return {**data, "name": str(full_name or "").strip()}
        return data


class Post(ContentModel):
    """Article/post as consumed by page sections."""

    id: Optional[EntityId] = Field(default=None)
    title: str = Field(default="")
    slug: str = Field(default="")
    excerpt: str = Field(default="")
    image_url: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None)
    category_id: Optional[EntityId] = Field(default=None)
    author: Optional[Author] = Field(default=None)
    published_at: Optional[datetime] = Field(default=None)
    read_time: Optional[int] = Field(default=None, ge=0)
    views: int = Field(default=0, ge=0)
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        content = strip_tags(str(payload.get("content") or ""))

        for key in ("title", "slug", "excerpt"):
            if key in payload:
                payload[key] = "" if payload[key] is None else str(payload[key])

        if not payload.get("imageUrl") and not payload.get("image_url") and payload.get("featuredImage"):
            payload["imageUrl"] = payload["featuredImage"]

        if payload.get("author") in (None, "") and payload.get("user"):
            payload["author"] = payload["user"]
        if payload.get("author") in ("", {}):
            payload["author"] = None

        raw_category = payload.get("category")
        if isinstance(raw_category, dict):
            payload["category"] = raw_category.get("name")
            if payload.get("categoryId") is None and payload.get("category_id") is None:
                payload["categoryId"] = raw_category.get("id")
        elif raw_category == "":
            payload["category"] = None

        if not payload.get("excerpt") and content:
            payload["excerpt"] = (
                f"{content[:EXCERPT_LENGTH]}..." if len(content) > EXCERPT_LENGTH else content
            )

        for key in ("readTime", "read_time"):
            if key in payload:
                payload[key] = _coerce_read_time(payload[key])

        if not payload.get("readTime") and not payload.get("read_time") and content.strip():
            words = len(content.split())
            payload["readTime"] = max(1, math.ceil(words / AVERAGE_READING_SPEED_WPM))

        if not payload.get("slug") and payload.get("title"):
            payload["slug"] = slugify(str(payload["title"]))

        if payload.get("views") is None:
            payload["views"] = 0
        return payload

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            items: Iterable[Any] = value.split(",")
        else:
            items = value
        tags: list[str] = []
        for item in items:
            name = item.get("name") if isinstance(item, dict) else item
            text = str(name or "").strip()
            if text:
                tags.append(text)
        return tags

    @field_validator("published_at", mode="before")
    @classmethod
    def _parse_date_only(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        if isinstance(value, str) and len(value.strip()) == 10:
            parsed = date.fromisoformat(value.strip())
            return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)
        if value == "":
            return None
        return value

    @field_validator("published_at")
    @classmethod
    def _ensure_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def author_name(self) -> str | None:
        if self.author and self.author.name:
            return self.author.name
        return None


class Category(ContentModel):
    """Category listed by the categories widget."""

    id: Optional[EntityId] = Field(default=None)
    name: str = Field(default="")
    slug: str = Field(default="")
    count: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, str):
            data = {"name": data}
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        if payload.get("count") is None and payload.get("postCount") is not None:
            payload["count"] = payload["postCount"]
        if not payload.get("slug") and payload.get("name"):
            payload["slug"] = slugify(str(payload["name"]))
        return payload


class Tag(ContentModel):
    """Tag listed by the tags widget."""

    id: Optional[EntityId] = Field(default=None)
    name: str = Field(default="")
    slug: str = Field(default="")
    count: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data.strip()}
        return data


class Event(ContentModel):
    """Entry shown by the calendar widget."""

    title: str = Field(default="")
    date: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)
    url: Optional[str] = Field(default=None)

    @field_validator("date", mode="before")
    @classmethod
    def _stringify_date(cls, value: Any) -> Any:
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value


def parse_posts(items: Iterable[Any]) -> list[Post]:
    """Validate a sequence of raw payloads (or models) into posts.

    Payloads that fail validation are logged and skipped.
    """
    posts: list[Post] = []
    for index, item in enumerate(items):
        if isinstance(item, Post):
            posts.append(item)
            continue
        try:
            posts.append(Post.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed post at index %s: %s", index, exc)
    return posts


def parse_categories(items: Iterable[Any]) -> list[Category]:
    return [item if isinstance(item, Category) else Category.model_validate(item) for item in items]


def parse_tags(items: Iterable[Any]) -> list[Tag]:
    return [item if isinstance(item, Tag) else Tag.model_validate(item) for item in items]
