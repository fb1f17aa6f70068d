"""Fetch the content each section and widget of a page needs.

Resolution is "settle-all": every section, every widget of a sidebar and every
post of a ``postIds`` list is fetched concurrently, and a failure only empties
the content list it was meant to fill. The only error that escapes
:meth:`PageResolver.resolve_page` is :class:`PageNotFoundError` (plus a
:class:`~pagecomposer.sources.ContentSourceError` when the page definition
itself cannot be fetched).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence

from pydantic import ValidationError

from .config import SectionSettings
from .content import EntityId, Post, parse_categories, parse_posts, parse_tags
from .models import CONTENT_SECTION_TYPES, Page, Section, SectionType, Widget, WidgetType
from .sources import ContentSource, ContentSourceError

logger = logging.getLogger(__name__)


class PageNotFoundError(LookupError):
    """Raised when no page definition exists for a slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Page '{slug}' not found.")
        self.slug = slug


class ResolutionSource(str, Enum):
    """How a section obtained its content."""

    EMBEDDED = "embedded"
    IDS = "ids"
    DEFAULT = "default"
    NONE = "none"
    WIDGETS = "widgets"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class SectionReport:
    """Diagnostic summary of one section's resolution."""

    index: int
    type: str
    source: ResolutionSource
    fetched: int = 0
    errors: tuple[str, ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.errors)


@dataclass(frozen=True, slots=True)
class ResolvedPage:
    """A page whose sections carry hydrated content."""

    page: Page
    reports: tuple[SectionReport, ...] = ()

    @property
    def slug(self) -> str:
        return self.page.slug

    @property
    def sections(self) -> list[Section]:
        return self.page.sections


def _describe(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


class SectionResolver:
    """Populate ``props.posts`` (or widget payloads) for a single section."""

    def __init__(self, source: ContentSource, settings: SectionSettings | None = None) -> None:
        self._source = source
        self._settings = settings or SectionSettings()

    async def resolve(self, section: Section, *, index: int = 0) -> Section:
        """Return a hydrated copy of ``section``; never raises on fetch failures."""
        resolved, _ = await self.resolve_with_report(section, index=index)
        return resolved

    async def resolve_with_report(self, section: Section, *, index: int = 0) -> tuple[Section, SectionReport]:
        kind = section.kind
        label = f"section {index} ({section.type})"

        if kind is SectionType.SIDEBAR:
            return await self._resolve_sidebar(section, index=index, label=label)

        if kind not in CONTENT_SECTION_TYPES:
            logger.debug("Skipping resolution for %s: unknown section type", label)
            return section, SectionReport(index=index, type=section.type, source=ResolutionSource.SKIPPED)

        if section.posts:
            logger.debug("Using %d embedded post(s) for %s", len(section.posts), label)
            return section, SectionReport(
                index=index,
                type=section.type,
                source=ResolutionSource.EMBEDDED,
                fetched=0,
            )

        post_ids = section.post_ids
        if post_ids:
            posts, errors = await self._fetch_by_ids(post_ids, label=label)
            return section.with_props(posts=posts), SectionReport(
                index=index,
                type=section.type,
                source=ResolutionSource.IDS,
                fetched=len(posts),
                errors=errors,
            )

        limit = self._fetch_limit(section, kind)
        if kind is SectionType.CATEGORY:
            category_id = section.props.get("categoryId")
            if category_id in (None, ""):
                logger.debug("No categoryId declared for %s; leaving it empty", label)
                return section.with_props(posts=[]), SectionReport(
                    index=index,
                    type=section.type,
                    source=ResolutionSource.NONE,
                )
            posts, error = await self._fetch(
                lambda: self._source.get_posts_by_category(category_id, 1, limit),
                parse_posts,
                label=label,
            )
        else:
            posts, error = await self._fetch(
                lambda: self._source.get_posts(1, limit),
                parse_posts,
                label=label,
            )

        return section.with_props(posts=posts), SectionReport(
            index=index,
            type=section.type,
            source=ResolutionSource.DEFAULT,
            fetched=len(posts),
            errors=(error,) if error else (),
        )

    def _fetch_limit(self, section: Section, kind: SectionType) -> int:
        raw = section.props.get("limit")
        try:
            limit = int(raw) if raw is not None else 0
        except (TypeError, ValueError):
            limit = 0
        if limit > 0:
            return limit
        return self._settings.for_type(kind).fetch_limit

    async def _fetch(
        self,
        call: Callable[[], Awaitable[Any]],
        parser: Callable[[Any], list[Any]],
        *,
        label: str,
    ) -> tuple[list[Any], str | None]:
        try:
            payload = await call()
            return parser(payload or []), None
        except (ContentSourceError, ValidationError) as exc:
            logger.warning("Content unavailable for %s: %s", label, _describe(exc))
            return [], _describe(exc)
        except Exception as exc:
            logger.warning("Unexpected failure resolving %s: %s", label, _describe(exc), exc_info=True)
            return [], _describe(exc)

    async def _fetch_by_ids(self, post_ids: Sequence[EntityId], *, label: str) -> tuple[list[Post], tuple[str, ...]]:
        results = await asyncio.gather(
            *(self._source.get_post_by_id(post_id) for post_id in post_ids),
            return_exceptions=True,
        )
        posts: list[Post] = []
        errors: list[str] = []
        for post_id, result in zip(post_ids, results):
            if isinstance(result, Exception):
                logger.warning("Could not fetch post %s for %s: %s", post_id, label, _describe(result))
                errors.append(f"post {post_id}: {_describe(result)}")
                continue
            if isinstance(result, BaseException):
                raise result
            if result is None:
                logger.debug("Post %s referenced by %s does not exist", post_id, label)
                continue
            try:
                posts.extend(parse_posts([result]))
            except ValidationError as exc:
                logger.warning("Malformed post %s for %s: %s", post_id, label, _describe(exc))
                errors.append(f"post {post_id}: {_describe(exc)}")
        return posts, tuple(errors)

    async def _resolve_sidebar(self, section: Section, *, index: int, label: str) -> tuple[Section, SectionReport]:
        widgets = section.widgets
        results = await asyncio.gather(
            *(self._resolve_widget(widget, label=f"{label} widget {position} ({widget.type})")
              for position, widget in enumerate(widgets)),
            return_exceptions=True,
        )

        resolved: list[Widget] = []
        errors: list[str] = []
        fetched = 0
        for widget, result in zip(widgets, results):
            if isinstance(result, Exception):
                logger.warning("Widget %s in %s failed: %s", widget.type, label, _describe(result))
                resolved.append(_empty_widget(widget))
                errors.append(f"{widget.type}: {_describe(result)}")
                continue
            if isinstance(result, BaseException):
                raise result
            new_widget, count, error = result
            resolved.append(new_widget)
            fetched += count
            if error:
                errors.append(f"{widget.type}: {error}")

        return section.with_props(widgets=resolved), SectionReport(
            index=index,
            type=section.type,
            source=ResolutionSource.WIDGETS,
            fetched=fetched,
            errors=tuple(errors),
        )

    async def _resolve_widget(self, widget: Widget, *, label: str) -> tuple[Widget, int, str | None]:
        kind = widget.kind
        if kind is WidgetType.TRENDING and not widget.posts:
            limit = widget.limit or self._settings.trending_limit
            posts, error = await self._fetch(
                lambda: self._source.get_trending_articles(limit),
                parse_posts,
                label=label,
            )
            return widget.model_copy(update={"posts": posts}), len(posts), error
        if kind is WidgetType.CATEGORIES and not widget.categories:
            categories, error = await self._fetch(self._source.get_categories, parse_categories, label=label)
            return widget.model_copy(update={"categories": categories}), len(categories), error
        if kind is WidgetType.TAGS and not widget.tags:
            tags, error = await self._fetch(self._source.get_tags, parse_tags, label=label)
            return widget.model_copy(update={"tags": tags}), len(tags), error
        return widget, 0, None


def _empty_widget(widget: Widget) -> Widget:
    kind = widget.kind
    if kind is WidgetType.TRENDING:
        return widget.model_copy(update={"posts": []})
    if kind is WidgetType.CATEGORIES:
        return widget.model_copy(update={"categories": []})
    if kind is WidgetType.TAGS:
        return widget.model_copy(update={"tags": []})
    return widget


def _empty_section(section: Section) -> Section:
    if section.kind is SectionType.SIDEBAR:
        return section.with_props(widgets=[_empty_widget(widget) for widget in section.widgets])
    if section.kind in CONTENT_SECTION_TYPES:
        return section.with_props(posts=[])
    return section


class PageResolver:
    """Fetch a page definition by slug and hydrate every section concurrently."""

    def __init__(
        self,
        source: ContentSource,
        settings: SectionSettings | None = None,
        *,
        section_resolver: SectionResolver | None = None,
    ) -> None:
        self._source = source
        self._sections = section_resolver or SectionResolver(source, settings)

    async def resolve_page(self, slug: str) -> ResolvedPage:
        """Return the hydrated page for ``slug`` or raise :class:`PageNotFoundError`."""
        definition = await self._source.get_page_by_slug(slug)
        if definition is None:
            raise PageNotFoundError(slug)
        page = self._coerce_page(definition, slug)

        results = await asyncio.gather(
            *(
                self._sections.resolve_with_report(section, index=index)
                for index, section in enumerate(page.sections)
            ),
            return_exceptions=True,
        )

        sections: list[Section] = []
        reports: list[SectionReport] = []
        for index, (section, result) in enumerate(zip(page.sections, results)):
            if isinstance(result, Exception):
                logger.warning(
                    "Section %d (%s) of page '%s' failed to resolve: %s",
                    index,
                    section.type,
                    slug,
                    _describe(result),
                )
                sections.append(_empty_section(section))
                reports.append(
                    SectionReport(
                        index=index,
                        type=section.type,
                        source=ResolutionSource.NONE,
                        errors=(_describe(result),),
                    )
                )
                continue
            if isinstance(result, BaseException):
                raise result
            resolved, report = result
            sections.append(resolved)
            reports.append(report)

        degraded = sum(1 for report in reports if report.degraded)
        if degraded:
            logger.info("Page '%s' resolved with %d degraded section(s)", slug, degraded)
        return ResolvedPage(page=page.with_sections(sections), reports=tuple(reports))

    @staticmethod
    def _coerce_page(definition: Any, slug: str) -> Page:
        if isinstance(definition, Page):
            return definition
        try:
            return Page.model_validate(definition)
        except ValidationError as exc:
            raise ContentSourceError(f"Malformed page definition for '{slug}': {exc}") from exc
