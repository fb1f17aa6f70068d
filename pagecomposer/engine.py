"""High level entry point: slug in, composed (and optionally HTML) page out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .config import Config, SectionSettings
from .layout import Composition, layout
from .models import Page, PageTemplate
from .resolver import PageResolver, ResolvedPage, SectionReport
from .sources import ContentSource, build_content_source
from .templates import TemplateAssets

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """A hydrated page together with its template composition."""

    page: Page
    composition: Composition
    reports: tuple[SectionReport, ...] = ()

    @property
    def slug(self) -> str:
        return self.page.slug

    @property
    def template(self) -> PageTemplate:
        return self.composition.template

    @property
    def degraded_sections(self) -> list[SectionReport]:
        return [report for report in self.reports if report.degraded]


class PageEngine:
    """Wire a content source, the resolvers, the layout dispatcher and the theme.

    The engine owns the content source: closing the engine (or leaving its
    ``async with`` block) closes the source as well.
    """

    def __init__(
        self,
        source: ContentSource,
        *,
        settings: SectionSettings | None = None,
        config: Config | None = None,
        assets: TemplateAssets | None = None,
    ) -> None:
        self._source = source
        self._config = config
        self._settings = settings or (config.sections if config else SectionSettings())
        self._resolver = PageResolver(source, self._settings)
        self._assets = assets

    @classmethod
    def from_config(cls, config: Config) -> "PageEngine":
        return cls(build_content_source(config), config=config)

    @property
    def source(self) -> ContentSource:
        return self._source

    @property
    def settings(self) -> SectionSettings:
        return self._settings

    @property
    def assets(self) -> TemplateAssets:
        if self._assets is None:
            self._assets = TemplateAssets(self._config or Config())
        return self._assets

    async def __aenter__(self) -> "PageEngine":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._source.aclose()

    async def resolve(self, slug: str) -> ResolvedPage:
        return await self._resolver.resolve_page(slug)

    async def render(self, slug: str) -> RenderedPage:
        """Resolve ``slug`` and arrange its sections; raises ``PageNotFoundError``."""
        resolved = await self._resolver.resolve_page(slug)
        composition = layout(resolved.page.template, resolved.sections, self._settings)
        logger.debug(
            "Composed page '%s' (%s) into %d region(s)",
            slug,
            composition.template.value,
            len(composition.regions),
        )
        return RenderedPage(page=resolved.page, composition=composition, reports=resolved.reports)

    def to_html(self, rendered: RenderedPage) -> str:
        return self.assets.render_composition(rendered.page, rendered.composition)

    async def render_html(self, slug: str) -> str:
        return self.to_html(await self.render(slug))
