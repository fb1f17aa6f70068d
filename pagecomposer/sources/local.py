"""Content source reading page definitions and content from YAML/JSON files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

import yaml
from pydantic import ValidationError

from ..content import (
    Category,
    EntityId,
    Post,
    Tag,
    parse_categories,
    parse_posts,
    parse_tags,
)
from ..models import Page
from ..utils import slugify
from .base import collect_tags, extract_items

logger = logging.getLogger(__name__)

PAGE_SUFFIXES = (".yml", ".yaml", ".json")
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class PageDefinitionError(ValueError):
    """Raised when a page definition file cannot be parsed."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


@dataclass(frozen=True, slots=True)
class PageFile:
    """Raw page definition alongside the file it was read from."""

    path: Path
    data: dict[str, Any]


def read_data_file(path: Path) -> Any:
    """Load a YAML or JSON document from ``path``."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            if path.suffix.lower() == ".json":
                return json.load(handle)
            return yaml.safe_load(handle)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise PageDefinitionError(f"Unable to parse {path}: {exc}", path=path) from exc


class LocalContentSource:
    """Serve pages and content from a directory on disk.

    Layout::

        content/
          pages/<any>.yml     one page definition per file (identity is the 'slug' key)
          posts.yml           list of posts (or an envelope with 'posts'/'items'/'data')
          categories.yml      optional; derived from posts when absent
          tags.yml            optional; derived from posts when absent
    """

    def __init__(self, content_dir: Path) -> None:
        self.content_dir = Path(content_dir)
        self._posts: list[Post] | None = None

    @property
    def pages_dir(self) -> Path:
        return self.content_dir / "pages"

    async def __aenter__(self) -> "LocalContentSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._posts = None

    def iter_page_paths(self) -> Iterator[Path]:
        if not self.pages_dir.exists():
            return
        for path in sorted(self.pages_dir.iterdir()):
            if path.is_file() and path.suffix.lower() in PAGE_SUFFIXES:
                yield path

    def iter_page_files(self) -> Iterator[PageFile]:
        """Yield raw page definitions in filename order."""
        for path in self.iter_page_paths():
            yield self._read_page_file(path)

    @staticmethod
    def _read_page_file(path: Path) -> PageFile:
        data = read_data_file(path)
        if not isinstance(data, dict):
            raise PageDefinitionError(
                f"Page definition {path} must be a mapping, received {type(data).__name__}.",
                path=path,
            )
        return PageFile(path=path, data=data)

    def load_pages(self) -> list[Page]:
        """Parse every page definition; invalid files raise ``PageDefinitionError``."""
        pages: list[Page] = []
        for page_file in self.iter_page_files():
            try:
                pages.append(Page.model_validate(page_file.data))
            except ValidationError as exc:
                raise PageDefinitionError(
                    f"Invalid page definition {page_file.path}: {exc}",
                    path=page_file.path,
                ) from exc
        return pages

    async def list_pages(self, status: str | None = None) -> list[Page]:
        pages = self.load_pages()
        if status:
            pages = [page for page in pages if page.status.value == status]
        return pages

    async def get_page_by_slug(self, slug: str) -> Page | None:
        """Find the page declaring ``slug``.

        Unreadable files are skipped with a warning unless their filename
        matches the slug, since their declared slug cannot be known.
        """
        for path in self.iter_page_paths():
            try:
                page_file = self._read_page_file(path)
            except PageDefinitionError as exc:
                if path.stem == slug:
                    raise
                logger.warning("Skipping page file while looking up '%s': %s", slug, exc)
                continue
            if str(page_file.data.get("slug") or "").strip() != slug:
                continue
            try:
                return Page.model_validate(page_file.data)
            except ValidationError as exc:
                raise PageDefinitionError(
                    f"Invalid page definition {page_file.path}: {exc}",
                    path=page_file.path,
                ) from exc
        return None

    async def get_post_by_id(self, post_id: EntityId) -> Post | None:
        wanted = str(post_id)
        for post in self._load_posts():
            if str(post.id) == wanted:
                return post
        return None

    async def get_posts(self, page: int, limit: int) -> list[Post]:
        ordered = sorted(self._load_posts(), key=_published_key, reverse=True)
        return _paginate(ordered, page, limit)

    async def get_posts_by_category(self, category_id: EntityId, page: int, limit: int) -> list[Post]:
        wanted = str(category_id).strip().lower()
        matches = [
            post
            for post in self._load_posts()
            if str(post.category_id).lower() == wanted
            or (post.category and (post.category.lower() == wanted or slugify(post.category) == wanted))
        ]
        ordered = sorted(matches, key=_published_key, reverse=True)
        return _paginate(ordered, page, limit)

    async def get_trending_articles(self, limit: int) -> list[Post]:
        ordered = sorted(self._load_posts(), key=lambda post: post.views, reverse=True)
        return ordered[:limit]

    async def get_categories(self) -> list[Category]:
        raw = self._read_optional("categories")
        if raw is not None:
            return parse_categories(extract_items(raw, keys=("categories", "items", "data")))
        counts: dict[str, int] = {}
        for post in self._load_posts():
            if post.category:
                counts[post.category] = counts.get(post.category, 0) + 1
        return [Category(name=name, slug=slugify(name), count=count) for name, count in counts.items()]

    async def get_tags(self) -> list[Tag]:
        raw = self._read_optional("tags")
        if raw is not None:
            return parse_tags(extract_items(raw, keys=("tags", "items", "data")))
        return collect_tags(self._load_posts())

    def _load_posts(self) -> list[Post]:
        if self._posts is None:
            raw = self._read_optional("posts")
            self._posts = parse_posts(extract_items(raw)) if raw is not None else []
        return self._posts

    def _read_optional(self, stem: str) -> Any:
        for suffix in PAGE_SUFFIXES:
            candidate = self.content_dir / f"{stem}{suffix}"
            if candidate.exists():
                return read_data_file(candidate)
        logger.debug("No %s file found under %s", stem, self.content_dir)
        return None


def _published_key(post: Post) -> datetime:
    return post.published_at or _OLDEST


def _paginate(posts: list[Post], page: int, limit: int) -> list[Post]:
    start = max(page - 1, 0) * limit
    return posts[start : start + limit]
