"""Lint diagnostics for page definitions stored in the local content directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import Config
from .layout import TEMPLATE_LAYOUTS
from .models import Column, Page, PageStatus, PageTemplate, SectionType
from .sections import SORT_KEYS
from .sources import LocalContentSource, PageDefinitionError, read_data_file


class IssueSeverity(Enum):
    """Severity level for lint issues."""

    ERROR = auto()
    WARNING = auto()


@dataclass(slots=True)
class PageIssue:
    """Represents a lint finding for a page definition."""

    slug: str
    source_path: str
    message: str
    severity: IssueSeverity
    pointer: str | None = None


@dataclass(slots=True)
class LintReport:
    """Aggregate lint results for a content directory."""

    issues: list[PageIssue] = field(default_factory=list)
    page_count: int = 0

    def add(self, issue: PageIssue) -> None:
        self.issues.append(issue)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.WARNING)


def _rendered_types(template: PageTemplate) -> frozenset[SectionType]:
    rule = TEMPLATE_LAYOUTS[template]
    types: frozenset[SectionType] = frozenset()
    for region in rule.regions:
        types = types | region.types
    return types


def lint_page_data(data: dict[str, Any], source_path: str) -> list[PageIssue]:
    """Run lint checks against one raw page definition."""
    slug = str(data.get("slug") or "").strip() or Path(source_path).stem
    issues: list[PageIssue] = []

    def report(message: str, severity: IssueSeverity, pointer: str | None = None) -> None:
        issues.append(PageIssue(slug=slug, source_path=source_path, message=message, severity=severity, pointer=pointer))

    try:
        page = Page.model_validate(data)
    except ValidationError as exc:
        report(f"Invalid page definition: {exc}", IssueSeverity.ERROR)
        return issues

    raw_template = data.get("template")
    if raw_template not in (None, "") and str(raw_template).strip().lower() != page.template.value:
        report(
            f"Unknown template '{raw_template}'; the page renders with the default template.",
            IssueSeverity.WARNING,
            pointer="template",
        )

    if page.status is not PageStatus.PUBLISHED:
        report(
            f"Page status is '{page.status.value}'. Publish before deployment.",
            IssueSeverity.WARNING,
            pointer="status",
        )

    rendered = _rendered_types(page.template)
    two_column = page.template is PageTemplate.TWO_COLUMN
    columns = {column.value for column in Column}

    for index, section in enumerate(page.sections):
        pointer = f"sections[{index}]"
        kind = section.kind
        if kind is None:
            report(f"Unknown section type '{section.type}' renders nothing.", IssueSeverity.WARNING, pointer)
            continue

        if kind not in rendered:
            report(
                f"Section type '{kind.value}' is not rendered by the '{page.template.value}' template.",
                IssueSeverity.WARNING,
                pointer,
            )

        if section.column is not None and section.column not in columns:
            report(
                f"Column '{section.column}' is invalid; use 'left' or 'right'.",
                IssueSeverity.ERROR,
                f"{pointer}.column",
            )
        elif section.column is not None and not two_column:
            report(
                f"Column '{section.column}' is ignored by the '{page.template.value}' template.",
                IssueSeverity.WARNING,
                f"{pointer}.column",
            )
        elif two_column and section.column is None and kind in rendered:
            report(
                "Sections on a two-column page need a 'column' (left or right) to render.",
                IssueSeverity.WARNING,
                f"{pointer}.column",
            )

        if kind is SectionType.CATEGORY and section.props.get("categoryId") in (None, ""):
            if not section.posts and not section.post_ids:
                report(
                    "Category section declares no categoryId, posts or postIds; it will render empty.",
                    IssueSeverity.WARNING,
                    f"{pointer}.props.categoryId",
                )

        sort_by = section.props.get("sortBy")
        if sort_by not in (None, "") and str(sort_by).strip().lower() not in SORT_KEYS:
            report(
                f"Unknown sortBy '{sort_by}' keeps the source order; use one of: {', '.join(SORT_KEYS)}.",
                IssueSeverity.WARNING,
                f"{pointer}.props.sortBy",
            )

        if kind is SectionType.SIDEBAR:
            for position, widget in enumerate(section.widgets):
                if widget.kind is None:
                    report(
                        f"Unknown widget type '{widget.type}' is skipped.",
                        IssueSeverity.WARNING,
                        f"{pointer}.props.widgets[{position}]",
                    )

    return issues


def lint_workspace(config: Config) -> LintReport:
    """Lint every page definition under the configured content directory."""
    report = LintReport()
    source = LocalContentSource(config.source.content_dir)
    seen: dict[str, str] = {}

    for path in source.iter_page_paths():
        source_path = path.as_posix()
        report.page_count += 1
        try:
            data = read_data_file(path)
        except PageDefinitionError as exc:
            report.add(PageIssue(slug=path.stem, source_path=source_path, message=str(exc), severity=IssueSeverity.ERROR))
            continue
        if not isinstance(data, dict):
            report.add(
                PageIssue(
                    slug=path.stem,
                    source_path=source_path,
                    message="Page definition must be a mapping.",
                    severity=IssueSeverity.ERROR,
                )
            )
            continue

        for issue in lint_page_data(data, source_path):
            report.add(issue)

        slug = str(data.get("slug") or "").strip()
        if slug and slug in seen:
            report.add(
                PageIssue(
                    slug=slug,
                    source_path=source_path,
                    message=f"Duplicate slug '{slug}' (also defined in {seen[slug]}).",
                    severity=IssueSeverity.ERROR,
                    pointer="slug",
                )
            )
        elif slug:
            seen[slug] = source_path

    return report
