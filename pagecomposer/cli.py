"""CLI entrypoints for the pagecomposer page composition toolkit."""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Annotated, Any, Coroutine, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import CONFIG_FILENAME, Config, load_config
from .engine import PageEngine, RenderedPage
from .layout import region_for
from .models import PageTemplate, SectionType
from .pages import SiteBuildError, SiteBuildResult, write_dynamic_pages
from .resolver import PageNotFoundError, ResolvedPage
from .scaffold import ScaffoldError, ScaffoldResult, normalize_slug, scaffold_page
from .sources import ContentSourceError, PageDefinitionError
from .themes import ThemeError
from .validation import IssueSeverity, PageIssue, lint_workspace

console = Console()
app = typer.Typer(help="Compose dynamic content pages from declarative section definitions.")

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

T = TypeVar("T")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file."),
]
SlugArgument = Annotated[
    str,
    typer.Argument(..., help="Slug of the page definition."),
]
TitleOption = Annotated[
    Optional[str],
    typer.Option("--title", "-t", help="Override the default title derived from the slug."),
]
ForceFlag = Annotated[
    bool,
    typer.Option("--force", "-f", help="Overwrite existing files if they already exist."),
]


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", "-l", help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)."),
    ] = "WARNING",
) -> None:
    """Configure logging for every command."""
    level = log_level.strip().upper()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(f"Unknown log level '{log_level}'.", param_hint="--log-level")
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def render(
    slug: SlugArgument,
    config_path: ConfigPathOption = CONFIG_FILENAME,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the HTML to this file instead of stdout."),
    ] = None,
) -> None:
    """Render a single page to HTML."""
    config: Config = _load(config_path)
    rendered, html = _run(_render_page(config, slug))

    if output is None:
        typer.echo(html)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html, encoding="utf-8")
        console.print(f"[bold green]Rendered[/]: '{rendered.slug}' -> {_display_path(output)}")

    for report in rendered.degraded_sections:
        _print_degraded(report.index, report.type, report.errors)


@app.command()
def build(
    config_path: ConfigPathOption = CONFIG_FILENAME,
    include_drafts: Annotated[
        bool,
        typer.Option("--include-drafts", help="Also render pages whose status is 'draft'."),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Clear the output directory before rendering."),
    ] = False,
) -> None:
    """Render every published page plus error pages into the output directory."""
    config: Config = _load(config_path)
    if force and config.output_dir.exists():
        console.print(f"[bold yellow]Force rebuild[/]: clearing {_display_path(config.output_dir)}")
        shutil.rmtree(config.output_dir)
    config.output_dir.mkdir(parents=True, exist_ok=True)

    result = _run(_build_site(config, include_drafts=include_drafts))
    _print_build_summary(config, result)


@app.command()
def inspect(
    slug: SlugArgument,
    config_path: ConfigPathOption = CONFIG_FILENAME,
) -> None:
    """Show how each section of a page was resolved and where it is placed."""
    config: Config = _load(config_path)
    resolved: ResolvedPage = _run(_resolve_page(config, slug))
    page = resolved.page

    console.print(
        f"[bold blue]Page[/]: '{page.slug}' ({page.title or 'untitled'}) "
        f"template={page.template.value} status={page.status.value}"
    )
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Column")
    table.add_column("Region")
    table.add_column("Source")
    table.add_column("Fetched", justify="right")
    table.add_column("Errors")
    for section, report in zip(page.sections, resolved.reports):
        region = region_for(page.template, section)
        table.add_row(
            str(report.index),
            section.type,
            section.column or "-",
            region or "[dim]omitted[/]",
            report.source.value,
            str(report.fetched),
            escape("; ".join(report.errors)) or "-",
        )
    console.print(table)

    degraded = sum(1 for report in resolved.reports if report.degraded)
    style = "yellow" if degraded else "green"
    console.print(f"[bold {style}]Summary[/]: {len(resolved.reports)} section(s), {degraded} degraded.")


@app.command()
def lint(
    config_path: ConfigPathOption = CONFIG_FILENAME,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
) -> None:
    """Run lightweight checks for common page definition issues."""
    config: Config = _load(config_path)
    report = lint_workspace(config)

    if not report.issues:
        console.print("[bold green]Lint clean[/]: no issues detected.")
        raise typer.Exit()

    for issue in sorted(report.issues, key=_lint_sort_key):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        location = issue.source_path
        if issue.pointer:
            location = f"{location} :: {issue.pointer}"
        console.print(f"[bold {style}]{issue.severity.name}[/] {escape(location)} - {escape(issue.message)}")

    console.print(
        f"[bold blue]Summary[/]: {report.error_count} error(s), {report.warning_count} warning(s) "
        f"across {report.page_count} page(s)."
    )

    exit_code = 0
    if report.error_count > 0 or (strict and report.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


@app.command()
def new(  # noqa: PLR0913
    slug: Annotated[
        str,
        typer.Argument(..., help="Slug identifier for the new page."),
    ],
    title: TitleOption = None,
    template: Annotated[
        PageTemplate,
        typer.Option("--template", help="Page template to scaffold."),
    ] = PageTemplate.DEFAULT,
    section: Annotated[
        Optional[list[SectionType]],
        typer.Option("--section", "-s", help="Section type to include (repeatable); defaults per template."),
    ] = None,
    config_path: ConfigPathOption = CONFIG_FILENAME,
    force: ForceFlag = False,
) -> None:
    """Create a new page definition with starter sections for its template."""
    try:
        normalized_slug = normalize_slug(slug)
    except ScaffoldError as exc:
        console.print(f"[bold red]Cannot scaffold[/]: {exc}")
        raise typer.Exit(code=1) from exc

    config: Config = _load(config_path)

    try:
        result = scaffold_page(
            config,
            normalized_slug,
            title,
            template=template,
            sections=section,
            force=force,
        )
    except ScaffoldError as exc:
        console.print(f"[bold red]Cannot scaffold[/]: {exc}")
        raise typer.Exit(code=1) from exc

    if normalized_slug != slug:
        console.print(f"[bold yellow]Note[/]: slug normalized to '{normalized_slug}'.")

    _print_scaffold_summary(normalized_slug, template, result)


async def _render_page(config: Config, slug: str) -> tuple[RenderedPage, str]:
    async with PageEngine.from_config(config) as engine:
        rendered = await engine.render(slug)
        return rendered, engine.to_html(rendered)


async def _resolve_page(config: Config, slug: str) -> ResolvedPage:
    async with PageEngine.from_config(config) as engine:
        return await engine.resolve(slug)


async def _build_site(config: Config, *, include_drafts: bool) -> SiteBuildResult:
    async with PageEngine.from_config(config) as engine:
        return await write_dynamic_pages(config, engine, include_drafts=include_drafts)


def _run(coroutine: Coroutine[Any, Any, T]) -> T:
    """Run ``coroutine`` and translate domain errors into a failed exit."""
    try:
        return asyncio.run(coroutine)
    except PageNotFoundError as exc:
        console.print(f"[bold red]Page not found[/]: '{exc.slug}'")
        raise typer.Exit(code=1) from exc
    except ContentSourceError as exc:
        console.print(f"[bold red]Content source failed[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except PageDefinitionError as exc:
        console.print(f"[bold red]Invalid page definition[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except ThemeError as exc:
        console.print(f"[bold red]Theme error[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except SiteBuildError as exc:
        console.print(f"[bold red]Build failed[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _print_degraded(index: int, section_type: str, errors: tuple[str, ...]) -> None:
    console.print(
        f"[bold yellow]Degraded[/]: section {index} ({section_type}) rendered without content: "
        + escape("; ".join(errors))
    )


def _print_build_summary(config: Config, result: SiteBuildResult) -> None:
    console.print(
        f"[bold green]Pages[/]: wrote {len(result.pages)} file(s) to {_display_path(config.output_dir)}"
    )
    for path in result.pages:
        console.print(f"- {_display_path(path)}")
    console.print(
        "[bold green]Error pages[/]: " + ", ".join(_display_path(path) for path in result.error_pages)
    )
    if result.skipped:
        console.print(f"[bold yellow]Skipped[/]: {', '.join(result.skipped)} (not published)")
    for slug, count in sorted(result.degraded.items()):
        console.print(f"[bold yellow]Degraded[/]: '{slug}' rendered with {count} empty section(s)")


def _print_scaffold_summary(slug: str, template: PageTemplate, result: ScaffoldResult) -> None:
    console.print(f"[bold green]Scaffold ready[/]: page '{slug}' ({template.value})")

    for path in result.created:
        console.print(f"- {_display_path(path)} (new)")
    for path in result.updated:
        console.print(f"- {_display_path(path)} (updated)")

    if result.notes:
        console.print("[bold blue]Next steps[/]:")
        for note in result.notes:
            console.print(f"- {note}")


def _lint_sort_key(issue: PageIssue) -> tuple[int, str, str]:
    severity_order = 0 if issue.severity is IssueSeverity.ERROR else 1
    pointer = issue.pointer or ""
    return (severity_order, issue.source_path, pointer)


def _display_path(path: Path) -> str:
    try:
        return path.resolve().relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.as_posix()


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
