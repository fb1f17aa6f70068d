"""Arrange resolved sections into template regions and render them.

Each template maps to a :class:`LayoutRule`: an ordered set of regions, each
accepting certain section types (and, for the two-column template, a
column). Within a region sections keep their declared order; sections no
region accepts, and sections of unknown type, are omitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .config import SectionSettings
from .models import Column, PageTemplate, Section, SectionType
from .sections import SectionView, render_section

WIDTH_FULL = "full"
WIDTH_TWO_THIRDS = "two-thirds"
WIDTH_ONE_THIRD = "one-third"
WIDTH_HALF = "half"

LISTING_TYPES = frozenset(
    {
        SectionType.FEATURED_POSTS,
        SectionType.POST_GRID,
        SectionType.POST_LIST,
        SectionType.CATEGORY,
    }
)


@dataclass(frozen=True, slots=True)
class RegionRule:
    name: str
    width: str
    types: frozenset[SectionType]
    column: Column | None = None

    def accepts(self, section: Section) -> bool:
        if section.kind not in self.types:
            return False
        if self.column is not None:
            return section.column == self.column.value
        return True


@dataclass(frozen=True, slots=True)
class LayoutRule:
    template: PageTemplate
    regions: tuple[RegionRule, ...]


@dataclass(frozen=True, slots=True)
class Region:
    name: str
    width: str
    sections: tuple[SectionView, ...] = ()


@dataclass(frozen=True, slots=True)
class Composition:
    """Template-specific arrangement of rendered sections."""

    template: PageTemplate
    regions: tuple[Region, ...]

    def region(self, name: str) -> Region | None:
        for region in self.regions:
            if region.name == name:
                return region
        return None

    @property
    def sections(self) -> list[SectionView]:
        return [view for region in self.regions for view in region.sections]

    def to_template_dict(self) -> dict[str, Any]:
        return {
            "template": self.template.value,
            "regions": {region.name: region for region in self.regions},
            "region_order": [region.name for region in self.regions],
        }


TEMPLATE_LAYOUTS: dict[PageTemplate, LayoutRule] = {
    PageTemplate.HOMEPAGE: LayoutRule(
        template=PageTemplate.HOMEPAGE,
        regions=(
            RegionRule("hero", WIDTH_FULL, frozenset({SectionType.HERO})),
            RegionRule("main", WIDTH_TWO_THIRDS, LISTING_TYPES),
            RegionRule("side", WIDTH_ONE_THIRD, frozenset({SectionType.SIDEBAR})),
        ),
    ),
    PageTemplate.FULL_WIDTH: LayoutRule(
        template=PageTemplate.FULL_WIDTH,
        regions=(RegionRule("body", WIDTH_FULL, LISTING_TYPES | {SectionType.HERO}),),
    ),
    PageTemplate.TWO_COLUMN: LayoutRule(
        template=PageTemplate.TWO_COLUMN,
        regions=(
            RegionRule("left", WIDTH_HALF, LISTING_TYPES, column=Column.LEFT),
            RegionRule("right", WIDTH_HALF, LISTING_TYPES, column=Column.RIGHT),
        ),
    ),
    PageTemplate.DEFAULT: LayoutRule(
        template=PageTemplate.DEFAULT,
        regions=(RegionRule("body", WIDTH_FULL, frozenset(SectionType)),),
    ),
}


def region_for(template: PageTemplate | str | None, section: Section) -> str | None:
    """Name of the region ``section`` lands in under ``template``; ``None`` when omitted."""
    rule = TEMPLATE_LAYOUTS.get(PageTemplate.coerce(template), TEMPLATE_LAYOUTS[PageTemplate.DEFAULT])
    for region_rule in rule.regions:
        if region_rule.accepts(section):
            return region_rule.name
    return None


def layout(
    template: PageTemplate | str | None,
    sections: Iterable[Section],
    settings: SectionSettings | None = None,
) -> Composition:
    """Dispatch ``sections`` into the regions of ``template`` and render each one."""
    resolved_template = PageTemplate.coerce(template)
    rule = TEMPLATE_LAYOUTS.get(resolved_template, TEMPLATE_LAYOUTS[PageTemplate.DEFAULT])
    settings = settings or SectionSettings()
    ordered = list(sections)

    regions: list[Region] = []
    for region_rule in rule.regions:
        views: list[SectionView] = []
        for section in ordered:
            if not region_rule.accepts(section):
                continue
            view = render_section(section, settings)
            if view is not None:
                views.append(view)
        regions.append(Region(name=region_rule.name, width=region_rule.width, sections=tuple(views)))
    return Composition(template=rule.template, regions=tuple(regions))
