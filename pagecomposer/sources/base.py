"""Contract for the external service that supplies pages and content."""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from ..content import Category, EntityId, Post, Tag
from ..models import Page

LIST_ENVELOPE_KEYS = ("posts", "items", "data")


class ContentSourceError(RuntimeError):
    """Raised when the content source cannot answer a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class ContentSource(Protocol):
    """Async data-fetching contract consumed by the resolvers."""

    async def get_page_by_slug(self, slug: str) -> Page | None:
        ...

    async def get_post_by_id(self, post_id: EntityId) -> Post | None:
        ...

    async def get_posts(self, page: int, limit: int) -> list[Post]:
        ...

    async def get_posts_by_category(self, category_id: EntityId, page: int, limit: int) -> list[Post]:
        ...

    async def get_trending_articles(self, limit: int) -> list[Post]:
        ...

    async def get_categories(self) -> list[Category]:
        ...

    async def get_tags(self) -> list[Tag]:
        ...

    async def aclose(self) -> None:
        ...


@runtime_checkable
class PageCatalog(Protocol):
    """Optional capability of sources that can enumerate their page definitions."""

    async def list_pages(self, status: str | None = None) -> list[Page]:
        ...


def extract_items(payload: Any, *, keys: Sequence[str] = LIST_ENVELOPE_KEYS) -> list[Any]:
    """Unwrap a list payload that may arrive bare or inside a paging envelope."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
            if isinstance(value, dict):
                try:
                    return extract_items(value, keys=keys)
                except ContentSourceError:
                    continue
    raise ContentSourceError(f"Expected a list payload, received {type(payload).__name__}.")


def collect_tags(posts: Sequence[Post]) -> list[Tag]:
    """Derive a distinct, first-seen-ordered tag list from post tags."""
    seen: dict[str, Tag] = {}
    for post in posts:
        for name in post.tags:
            key = name.lower()
            if key not in seen:
                seen[key] = Tag(name=name)
    return list(seen.values())
