"""Content entities consumed by page sections."""

from .models import (
    Author,
    Category,
    EntityId,
    Event,
    Post,
    Tag,
    parse_categories,
    parse_posts,
    parse_tags,
)

__all__ = [
    "Author",
    "Category",
    "EntityId",
    "Event",
    "Post",
    "Tag",
    "parse_categories",
    "parse_posts",
    "parse_tags",
]
