"""Declarative page, section and widget models used by the composition engine."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .content import Category, EntityId, Event, Post, Tag, parse_posts


class PageTemplate(str, Enum):
    """Top-level arrangement rule for a page."""

    HOMEPAGE = "homepage"
    FULL_WIDTH = "full-width"
    TWO_COLUMN = "two-column"
    DEFAULT = "default"

    @classmethod
    def coerce(cls, value: Any) -> "PageTemplate":
        """Map any value onto a known template, falling back to ``DEFAULT``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.DEFAULT


class PageStatus(str, Enum):
    """Publication state of a page definition."""

    DRAFT = "draft"
    PUBLISHED = "published"
    PRIVATE = "private"


class SectionType(str, Enum):
    """Known section types; anything else renders nothing."""

    HERO = "hero"
    FEATURED_POSTS = "featured-posts"
    POST_GRID = "post-grid"
    POST_LIST = "post-list"
    CATEGORY = "category"
    SIDEBAR = "sidebar"

    @classmethod
    def lookup(cls, value: Any) -> "SectionType | None":
        try:
            return cls(value)
        except ValueError:
            return None


CONTENT_SECTION_TYPES = frozenset(
    {
        SectionType.HERO,
        SectionType.FEATURED_POSTS,
        SectionType.POST_GRID,
        SectionType.POST_LIST,
        SectionType.CATEGORY,
    }
)


class Column(str, Enum):
    """Column placement honored by the two-column template."""

    LEFT = "left"
    RIGHT = "right"


class WidgetType(str, Enum):
    """Known sidebar widget types; anything else is skipped."""

    TRENDING = "trending"
    CATEGORIES = "categories"
    NEWSLETTER = "newsletter"
    TAGS = "tags"
    CALENDAR = "calendar"
    CUSTOM = "custom"

    @classmethod
    def lookup(cls, value: Any) -> "WidgetType | None":
        try:
            return cls(value)
        except ValueError:
            return None


class Widget(BaseModel):
    """Typed sub-block nested in a sidebar section."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    type: str = Field(...)
    title: Optional[str] = Field(default=None)
    limit: Optional[int] = Field(default=None, ge=0)
    posts: list[Post] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    content: str = Field(default="")
    description: Optional[str] = Field(default=None)
    button_text: Optional[str] = Field(default=None)
    button_link: Optional[str] = Field(default=None)

    @field_validator("posts", mode="before")
    @classmethod
    def _parse_posts(cls, value: Any) -> Any:
        if value is None:
            return []
        return parse_posts(value) if isinstance(value, (list, tuple)) else value

    @field_validator("categories", "tags", "events", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def kind(self) -> WidgetType | None:
        return WidgetType.lookup(self.type)


class Section(BaseModel):
    """Typed content block with a free-form, type-specific property bag."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str = Field(...)
    props: dict[str, Any] = Field(default_factory=dict)
    column: Optional[str] = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def _normalize_props(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        props = dict(payload.get("props") or {})
        kind = SectionType.lookup(payload.get("type"))
        if kind in CONTENT_SECTION_TYPES or "posts" in props:
            props["posts"] = parse_posts(props.get("posts") or [])
        if kind is SectionType.SIDEBAR or "widgets" in props:
            props["widgets"] = [
                widget if isinstance(widget, Widget) else Widget.model_validate(widget)
                for widget in props.get("widgets") or []
            ]
        payload["props"] = props
        column = payload.get("column")
        payload["column"] = str(column).strip().lower() if column else None
        return payload

    @property
    def kind(self) -> SectionType | None:
        return SectionType.lookup(self.type)

    @property
    def posts(self) -> list[Post]:
        return list(self.props.get("posts") or [])

    @property
    def widgets(self) -> list[Widget]:
        return list(self.props.get("widgets") or [])

    @property
    def post_ids(self) -> list[EntityId]:
        raw = self.props.get("postIds") or []
        return [item for item in raw if item not in (None, "")]

    def with_props(self, **updates: Any) -> "Section":
        """Return a new section whose props are updated with ``updates``."""
        return self.model_copy(update={"props": {**self.props, **updates}})


class Page(BaseModel):
    """Named, templated composition of sections addressable by slug."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: Optional[EntityId] = Field(default=None)
    slug: str = Field(...)
    title: str = Field(default="")
    template: PageTemplate = Field(default=PageTemplate.DEFAULT)
    status: PageStatus = Field(default=PageStatus.PUBLISHED)
    sections: list[Section] = Field(default_factory=list)

    @field_validator("slug")
    @classmethod
    def _normalize_slug(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("slug cannot be empty")
        return cleaned

    @field_validator("template", mode="before")
    @classmethod
    def _coerce_template(cls, value: Any) -> PageTemplate:
        return PageTemplate.coerce(value)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        if value is None or value == "":
            return PageStatus.PUBLISHED
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("sections", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def with_sections(self, sections: list[Section]) -> "Page":
        return self.model_copy(update={"sections": list(sections)})
