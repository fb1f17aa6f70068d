"""Content source backed by the site's REST API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..content import Category, EntityId, Post, Tag, parse_categories, parse_posts, parse_tags
from ..models import Page
from .base import ContentSourceError, collect_tags, extract_items

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5001/api"
DEFAULT_TIMEOUT = 15.0
TAG_FALLBACK_PAGE_SIZE = 1000
PAGE_LIST_SIZE = 100


class HttpContentSource:
    """Fetch pages, posts, categories and tags over HTTP with a shared async client."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        token: str | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=self._headers(token, headers),
            transport=transport,
        )

    @staticmethod
    def _headers(token: str | None, extra: dict[str, str] | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    async def __aenter__(self) -> "HttpContentSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_page_by_slug(self, slug: str) -> Page | None:
        data = await self._get_json(f"/Pages/slug/{quote(slug, safe='')}", allow_missing=True)
        if not data:
            return None
        if isinstance(data, dict) and "slug" not in data and isinstance(data.get("data"), dict):
            data = data["data"]
        try:
            return Page.model_validate(data)
        except ValidationError as exc:
            raise ContentSourceError(f"Malformed page payload for '{slug}': {exc}") from exc

    async def list_pages(self, status: str | None = None) -> list[Page]:
        params = {"page": "1", "pageSize": str(PAGE_LIST_SIZE)}
        if status:
            params["status"] = status
        payload = await self._get_json("/Pages", params=params)
        items = extract_items(payload, keys=("pages", "items", "data"))
        try:
            return [Page.model_validate(item) for item in items]
        except ValidationError as exc:
            raise ContentSourceError(f"Malformed page listing: {exc}") from exc

    async def get_post_by_id(self, post_id: EntityId) -> Post | None:
        data = await self._get_json(f"/posts/{quote(str(post_id), safe='')}", allow_missing=True)
        if not data:
            return None
        if isinstance(data, dict) and "title" not in data and isinstance(data.get("data"), dict):
            data = data["data"]
        return self._validate(parse_posts, [data], f"post {post_id}")[0]

    async def get_posts(self, page: int, limit: int) -> list[Post]:
        params = self._post_query(page=page, limit=limit)
        return await self._get_posts(params)

    async def get_posts_by_category(self, category_id: EntityId, page: int, limit: int) -> list[Post]:
        params = self._post_query(page=page, limit=limit)
        params["categoryId"] = str(category_id)
        return await self._get_posts(params)

    async def get_trending_articles(self, limit: int) -> list[Post]:
        params = self._post_query(page=1, limit=limit, sort_by="views")
        return await self._get_posts(params)

    async def get_categories(self) -> list[Category]:
        payload = await self._get_json("/categories")
        items = extract_items(payload, keys=("categories", "items", "data"))
        return self._validate(parse_categories, items, "categories")

    async def get_tags(self) -> list[Tag]:
        try:
            payload = await self._get_json("/admin/tags")
            items = extract_items(payload, keys=("tags", "items", "data"))
            return self._validate(parse_tags, items, "tags")
        except ContentSourceError as exc:
            logger.info("Tag endpoint unavailable (%s); deriving tags from posts.", exc)
        params = self._post_query(page=1, limit=TAG_FALLBACK_PAGE_SIZE)
        return collect_tags(await self._get_posts(params))

    async def _get_posts(self, params: dict[str, str]) -> list[Post]:
        payload = await self._get_json("/posts", params=params)
        return self._validate(parse_posts, extract_items(payload), "posts")

    @staticmethod
    def _post_query(*, page: int, limit: int, sort_by: str = "createdAt") -> dict[str, str]:
        return {
            "page": str(page),
            "pageSize": str(limit),
            "status": "published",
            "sortBy": sort_by,
            "sortOrder": "desc",
        }

    @staticmethod
    def _validate(parser: Any, items: list[Any], label: str) -> Any:
        try:
            return parser(items)
        except ValidationError as exc:
            raise ContentSourceError(f"Malformed {label} payload: {exc}") from exc

    async def _get_json(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        allow_missing: bool = False,
    ) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise ContentSourceError(f"GET {path} failed: {exc}") from exc

        if allow_missing and response.status_code == 404:
            logger.debug("GET %s returned 404", path)
            return None
        if response.is_error:
            raise ContentSourceError(
                f"GET {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ContentSourceError(f"GET {path} returned invalid JSON: {exc}") from exc
