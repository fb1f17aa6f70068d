"""Utilities for scaffolding new page definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import yaml

from .config import Config
from .models import PageStatus, PageTemplate, SectionType
from .utils import slugify, title_from_slug


class ScaffoldError(RuntimeError):
    """Raised when scaffolding cannot continue."""


@dataclass(slots=True)
class ScaffoldResult:
    """Details about filesystem writes performed during scaffolding."""

    created: list[Path] = field(default_factory=list)
    updated: list[Path] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def record(self, path: Path, existed: bool) -> None:
        if existed:
            self.updated.append(path)
        else:
            self.created.append(path)


STARTER_SECTIONS: dict[PageTemplate, tuple[SectionType, ...]] = {
    PageTemplate.HOMEPAGE: (
        SectionType.HERO,
        SectionType.FEATURED_POSTS,
        SectionType.POST_GRID,
        SectionType.SIDEBAR,
    ),
    PageTemplate.FULL_WIDTH: (SectionType.HERO, SectionType.POST_GRID),
    PageTemplate.TWO_COLUMN: (SectionType.POST_GRID, SectionType.POST_LIST),
    PageTemplate.DEFAULT: (SectionType.POST_LIST, SectionType.SIDEBAR),
}


def normalize_slug(raw: str) -> str:
    """Convert arbitrary user input into a filesystem-safe slug."""
    slug = slugify(raw)
    if not slug:
        raise ScaffoldError("Unable to derive a valid slug. Provide letters, numbers, or hyphens.")
    return slug


def default_section_props(kind: SectionType) -> dict[str, Any]:
    """Starter props for a freshly added section of ``kind``."""
    if kind is SectionType.HERO:
        return {"layout": "standard", "showExcerpt": True, "showAuthor": True, "showDate": True, "maxPosts": 2}
    if kind is SectionType.FEATURED_POSTS:
        return {"title": "Featured Articles", "layout": "default", "limit": 3, "showImage": True}
    if kind is SectionType.POST_GRID:
        return {"title": "Latest Articles", "columns": 3, "limit": 6, "showViewMore": True, "sortBy": "date"}
    if kind is SectionType.POST_LIST:
        return {"title": "Recent News", "layout": "standard", "limit": 5}
    if kind is SectionType.CATEGORY:
        return {"title": "Category Name", "categoryId": None, "categoryName": "", "layout": "grid", "limit": 4}
    return {
        "widgets": [
            {"type": "trending", "title": "Trending Now"},
            {"type": "newsletter", "title": "Stay Updated"},
        ]
    }


def default_section(kind: SectionType, template: PageTemplate, *, position: int = 0) -> dict[str, Any]:
    section: dict[str, Any] = {"type": kind.value, "props": default_section_props(kind)}
    if template is PageTemplate.TWO_COLUMN:
        if kind is SectionType.SIDEBAR:
            section["column"] = "right"
        else:
            section["column"] = "left" if position % 2 == 0 else "right"
    return section


def build_page_definition(
    slug: str,
    title: str,
    template: PageTemplate,
    *,
    sections: Sequence[SectionType] | None = None,
    status: PageStatus = PageStatus.DRAFT,
) -> dict[str, Any]:
    kinds = tuple(sections) if sections else STARTER_SECTIONS[template]
    return {
        "slug": slug,
        "title": title,
        "template": template.value,
        "status": status.value,
        "sections": [default_section(kind, template, position=index) for index, kind in enumerate(kinds)],
    }


def scaffold_page(
    config: Config,
    slug: str,
    title: str | None = None,
    *,
    template: PageTemplate | str = PageTemplate.DEFAULT,
    sections: Sequence[SectionType] | None = None,
    force: bool = False,
) -> ScaffoldResult:
    """Write ``<content_dir>/pages/<slug>.yml`` with starter sections for ``template``."""
    slug = normalize_slug(slug)
    title = title.strip() if title else ""
    if not title:
        title = title_from_slug(slug)
    resolved_template = _parse_template(template)

    pages_dir = config.source.content_dir / "pages"
    page_path = pages_dir / f"{slug}.yml"
    payload = build_page_definition(slug, title, resolved_template, sections=sections)
    existed = _write_yaml(page_path, payload, force=force)

    result = ScaffoldResult()
    result.record(page_path, existed)
    result.notes.append("New pages start as drafts; set 'status: published' to include them in 'pagecomposer build'.")
    if config.source.kind != "local":
        result.notes.append(
            "The configured source is remote; upload this definition to the content API to publish it."
        )
    return result


def _parse_template(value: PageTemplate | str) -> PageTemplate:
    if isinstance(value, PageTemplate):
        return value
    try:
        return PageTemplate(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(template.value for template in PageTemplate)
        raise ScaffoldError(f"Unknown template '{value}'. Choose one of: {choices}.") from exc


def _write_yaml(path: Path, payload: dict[str, Any], *, force: bool) -> bool:
    path.parent.mkdir(parents=True, exist_ok=True)
    existed = path.exists()
    if existed and not force:
        raise ScaffoldError(f"Path already exists: {path}")
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, sort_keys=False, allow_unicode=True)
    return existed
