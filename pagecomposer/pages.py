"""Write composed pages and static error responses into the site output directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Sequence

from .config import Config
from .engine import PageEngine
from .models import PageStatus
from .resolver import PageNotFoundError
from .sources import PageCatalog
from .templates import TemplateAssets

logger = logging.getLogger(__name__)

HOME_SLUGS = ("home", "homepage")


class SiteBuildError(RuntimeError):
    """Raised when the configured source cannot enumerate its pages."""


@dataclass(frozen=True, slots=True)
class ErrorPageAction:
    """Link surfaced on an error page to help visitors recover."""

    label: str
    href: str


@dataclass(frozen=True, slots=True)
class ErrorPageDefinition:
    """Structured metadata describing a rendered error page."""

    code: int
    title: str
    message: str
    description: str | None = None
    suggestions: Sequence[str] = ()
    actions: Sequence[ErrorPageAction] = ()
    filename: str | None = None

    def output_filename(self) -> str:
        """Generate the filename used for the rendered error page."""
        if self.filename:
            return self.filename
        return f"{self.code}.html"


DEFAULT_ERROR_PAGES: tuple[ErrorPageDefinition, ...] = (
    ErrorPageDefinition(
        code=404,
        title="Page Not Found",
        message="We couldn't find the page you were looking for.",
        suggestions=(
            "Check the URL for typos or outdated links.",
            "Head back to the home page to browse the latest content.",
        ),
    ),
    ErrorPageDefinition(
        code=500,
        title="Something Went Wrong",
        message="An unexpected error occurred while processing your request.",
        suggestions=(
            "Refresh the page to try again.",
            "If the problem continues, let us know so we can investigate.",
        ),
    ),
    ErrorPageDefinition(
        code=503,
        title="Temporarily Unavailable",
        message="We're performing maintenance right now. Please check back soon.",
        suggestions=("Try reloading after a few minutes.",),
    ),
)


@dataclass(slots=True)
class SiteBuildResult:
    """Summary of a static build."""

    pages: list[Path] = field(default_factory=list)
    error_pages: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    degraded: dict[str, int] = field(default_factory=dict)


def page_output_path(output_dir: Path, slug: str) -> Path:
    """Return ``<output_dir>/<slug>/index.html``; slugs may contain '/' but never '..'."""
    relative = PurePosixPath(slug.strip("/"))
    if not relative.parts or ".." in relative.parts:
        raise ValueError(f"Page slug '{slug}' cannot be written inside the site root.")
    return output_dir.joinpath(*relative.parts, "index.html")


def _write(destination: Path, html: str) -> Path:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(html, encoding="utf-8")
    return destination


def _ensure_home_link(actions: Sequence[ErrorPageAction]) -> list[ErrorPageAction]:
    items = list(actions)
    if not any(action.href.strip() in {"", "/", "./", "index.html"} for action in items):
        items.insert(0, ErrorPageAction(label="Return Home", href="/"))
    return items


def write_error_pages(
    config: Config,
    assets: TemplateAssets | None = None,
    *,
    definitions: Sequence[ErrorPageDefinition] | None = None,
) -> list[Path]:
    """Render the theme's error template for each definition into the output directory."""
    resources = assets or TemplateAssets(config)
    specs = tuple(definitions) if definitions is not None else DEFAULT_ERROR_PAGES

    written: list[Path] = []
    for definition in specs:
        filename = Path(definition.output_filename())
        if filename.is_absolute() or ".." in filename.parts:
            msg = f"Error page filename '{filename}' must be relative to the site root."
            raise ValueError(msg)
        context = {
            "code": definition.code,
            "title": definition.title,
            "message": definition.message,
            "description": definition.description,
            "suggestions": list(definition.suggestions),
            "actions": _ensure_home_link(definition.actions),
        }
        written.append(_write(config.output_dir / filename, resources.render_error(context)))
    return written


async def write_dynamic_pages(
    config: Config,
    engine: PageEngine,
    *,
    include_drafts: bool = False,
) -> SiteBuildResult:
    """Render every published page (and drafts when requested) plus the error pages."""
    source = engine.source
    if not isinstance(source, PageCatalog):
        raise SiteBuildError(f"{type(source).__name__} cannot list pages; render pages individually instead.")

    allowed = {PageStatus.PUBLISHED}
    if include_drafts:
        allowed.add(PageStatus.DRAFT)

    result = SiteBuildResult()
    for summary in await source.list_pages():
        if summary.status not in allowed:
            logger.debug("Skipping page '%s' with status %s", summary.slug, summary.status.value)
            result.skipped.append(summary.slug)
            continue
        try:
            rendered = await engine.render(summary.slug)
        except PageNotFoundError:
            logger.warning("Page '%s' disappeared while building; skipping.", summary.slug)
            result.skipped.append(summary.slug)
            continue
        html = engine.to_html(rendered)
        result.pages.append(_write(page_output_path(config.output_dir, rendered.slug), html))
        if rendered.slug in HOME_SLUGS:
            result.pages.append(_write(config.output_dir / "index.html", html))
        if rendered.degraded_sections:
            result.degraded[rendered.slug] = len(rendered.degraded_sections)

    result.error_pages = write_error_pages(config, engine.assets)
    logger.info(
        "Wrote %d page file(s) and %d error page(s) to %s",
        len(result.pages),
        len(result.error_pages),
        config.output_dir,
    )
    return result
