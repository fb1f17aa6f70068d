from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import pytest
import yaml

from pagecomposer.content import Category, EntityId, Post, Tag, parse_categories, parse_posts, parse_tags
from pagecomposer.models import Page
from pagecomposer.sources import ContentSourceError, collect_tags

CONTENT_METHODS = (
    "get_post_by_id",
    "get_posts",
    "get_posts_by_category",
    "get_trending_articles",
    "get_categories",
    "get_tags",
)


def sample_post_payloads() -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "title": "Alpha",
            "category": "Tech",
            "categoryId": 10,
            "tags": ["python", "web"],
            "publishedAt": "2024-01-01T09:00:00Z",
            "views": 50,
            "author": {"id": 7, "name": "Ada"},
        },
        {
            "id": 2,
            "title": "Beta",
            "category": "Science",
            "categoryId": 20,
            "tags": ["space"],
            "publishedAt": "2024-03-01T09:00:00Z",
            "views": 200,
        },
        {
            "id": 3,
            "title": "Gamma",
            "category": "Tech",
            "categoryId": 10,
            "tags": ["Python"],
            "publishedAt": "2024-02-01T09:00:00Z",
            "views": 10,
        },
        {
            "id": 4,
            "title": "Delta",
            "category": "Life",
            "categoryId": 30,
            "tags": [],
            "views": 5,
        },
    ]


class FakeSource:
    """In-memory content source recording every call.

    ``failing`` names content methods that raise ``ContentSourceError``; the
    wildcard ``"*"`` fails all of them. Page lookups never fail.
    """

    def __init__(
        self,
        *,
        pages: Iterable[dict[str, Any]] = (),
        posts: Iterable[Any] | None = None,
        categories: Iterable[Any] = (),
        tags: Iterable[Any] | None = None,
        failing: Iterable[str] = (),
    ) -> None:
        self.pages = {page["slug"]: page for page in pages}
        self.posts: list[Post] = parse_posts(sample_post_payloads() if posts is None else posts)
        self.categories: list[Category] = parse_categories(categories)
        self.tags: list[Tag] | None = parse_tags(tags) if tags is not None else None
        self.failing = set(failing)
        self.calls: list[tuple[Any, ...]] = []
        self.closed = False

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.failing or ("*" in self.failing and name in CONTENT_METHODS):
            raise ContentSourceError(f"{name} unavailable", status_code=503)

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    async def get_page_by_slug(self, slug: str) -> Page | None:
        self._record("get_page_by_slug", slug)
        data = self.pages.get(slug)
        return Page.model_validate(data) if data is not None else None

    async def list_pages(self, status: str | None = None) -> list[Page]:
        self._record("list_pages", status)
        pages = [Page.model_validate(data) for data in self.pages.values()]
        if status:
            pages = [page for page in pages if page.status.value == status]
        return pages

    async def get_post_by_id(self, post_id: EntityId) -> Post | None:
        self._record("get_post_by_id", post_id)
        for post in self.posts:
            if str(post.id) == str(post_id):
                return post
        return None

    async def get_posts(self, page: int, limit: int) -> list[Post]:
        self._record("get_posts", page, limit)
        start = (page - 1) * limit
        return self.posts[start : start + limit]

    async def get_posts_by_category(self, category_id: EntityId, page: int, limit: int) -> list[Post]:
        self._record("get_posts_by_category", category_id, page, limit)
        matches = [post for post in self.posts if str(post.category_id) == str(category_id)]
        start = (page - 1) * limit
        return matches[start : start + limit]

    async def get_trending_articles(self, limit: int) -> list[Post]:
        self._record("get_trending_articles", limit)
        return sorted(self.posts, key=lambda post: post.views, reverse=True)[:limit]

    async def get_categories(self) -> list[Category]:
        self._record("get_categories")
        return list(self.categories)

    async def get_tags(self) -> list[Tag]:
        self._record("get_tags")
        return list(self.tags) if self.tags is not None else collect_tags(self.posts)

    async def aclose(self) -> None:
        self.closed = True


def write_workspace(root: Path, pages: Iterable[dict[str, Any]] = ()) -> Path:
    """Lay out a local-source project (config, posts and pages) under ``root``."""
    (root / "pagecomposer.yml").write_text(
        "project_name: Test Project\nsite_title: Test Birds\n",
        encoding="utf-8",
    )
    content = root / "content"
    (content / "pages").mkdir(parents=True, exist_ok=True)
    (content / "posts.yml").write_text(
        yaml.safe_dump({"posts": sample_post_payloads()}, sort_keys=False),
        encoding="utf-8",
    )
    for page in pages:
        filename = page["slug"].replace("/", "-") + ".yml"
        (content / "pages" / filename).write_text(yaml.safe_dump(page, sort_keys=False), encoding="utf-8")
    return root / "pagecomposer.yml"


@pytest.fixture
def posts() -> list[Post]:
    return parse_posts(sample_post_payloads())


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource(categories=[{"id": 10, "name": "Tech", "postCount": 2}])
