from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from .models import SectionType

CONFIG_FILENAME = "pagecomposer.yml"


class SectionDefaults(BaseModel):
    """Named defaults for one section type, shared by resolution and rendering."""

    fetch_limit: int = Field(
        default=10,
        ge=1,
        description="Posts requested from the content source when the section sets no 'limit'.",
    )
    display_limit: int = Field(
        default=6,
        ge=0,
        description="Maximum entries rendered when the section sets no 'limit'/'maxPosts'.",
    )
    layout: str = Field(default="standard", description="Layout variant used when none is declared.")
    columns: int = Field(default=2, ge=1, le=4)
    sort_by: str | None = Field(default=None, description="Default sort order ('date', 'title', 'popularity').")
    show_view_more: bool = Field(default=False)
    view_more_link: str | None = Field(default=None)
    view_more_text: str | None = Field(default=None)


def _hero_defaults() -> SectionDefaults:
    return SectionDefaults(display_limit=2, layout="standard")


def _featured_defaults() -> SectionDefaults:
    return SectionDefaults(
        display_limit=3,
        layout="default",
        view_more_link="/featured",
        view_more_text="View All Featured",
    )


def _grid_defaults() -> SectionDefaults:
    return SectionDefaults(
        display_limit=6,
        layout="grid",
        columns=2,
        sort_by="date",
        view_more_link="/latest",
        view_more_text="View All",
    )


def _list_defaults() -> SectionDefaults:
    return SectionDefaults(
        display_limit=5,
        layout="standard",
        sort_by="date",
        view_more_link="/latest",
        view_more_text="View All",
    )


def _category_defaults() -> SectionDefaults:
    return SectionDefaults(display_limit=4, layout="grid", columns=2, show_view_more=True)


class SectionSettings(BaseModel):
    """Per-section-type defaults consumed uniformly by resolvers and renderers."""

    hero: SectionDefaults = Field(default_factory=_hero_defaults)
    featured_posts: SectionDefaults = Field(default_factory=_featured_defaults)
    post_grid: SectionDefaults = Field(default_factory=_grid_defaults)
    post_list: SectionDefaults = Field(default_factory=_list_defaults)
    category: SectionDefaults = Field(default_factory=_category_defaults)
    trending_limit: int = Field(
        default=5,
        ge=1,
        description="Posts requested for trending widgets that declare no 'limit'.",
    )

    def for_type(self, kind: SectionType) -> SectionDefaults:
        """Return the defaults record for ``kind`` (sidebar sections share the hero record)."""
        mapping = {
            SectionType.HERO: self.hero,
            SectionType.FEATURED_POSTS: self.featured_posts,
            SectionType.POST_GRID: self.post_grid,
            SectionType.POST_LIST: self.post_list,
            SectionType.CATEGORY: self.category,
        }
        return mapping.get(kind, self.hero)


class SourceConfig(BaseModel):
    """Where page definitions and content are fetched from."""

    kind: Literal["http", "local"] = Field(
        default="local",
        description="'http' for a remote content API, 'local' for YAML/JSON files on disk.",
    )
    base_url: str = Field(default="http://localhost:5001/api")
    timeout: float = Field(default=15.0, gt=0, description="Per-request timeout in seconds.")
    token: str | None = Field(default=None, description="Optional bearer token sent to the content API.")
    headers: dict[str, str] = Field(default_factory=dict)
    content_dir: Path = Field(default=Path("content"))

    @field_validator("content_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("base_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class Config(BaseModel):
    project_name: str = Field(default="Pagecomposer Project")
    site_title: str = Field(default="TechBirds")
    output_dir: Path = Field(default=Path("site"))
    themes_dir: Path | None = Field(
        default=None,
        description="Optional directory holding override themes; the bundled theme is the fallback.",
    )
    theme_name: str = Field(default="default")
    source: SourceConfig = Field(default_factory=SourceConfig)
    sections: SectionSettings = Field(default_factory=SectionSettings)

    @field_validator("output_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("themes_dir", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None:
            return None
        return Path(value)


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/site/pagecomposer.yml``) or a
    directory containing that file. All relative paths inside the configuration
    are interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    base_dir: Path
    if candidate.is_dir():
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            with config_file.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        with candidate.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        base_dir = candidate.parent.resolve()

    if not isinstance(data, dict):
        raise ValueError(f"Configuration at {candidate} must be a mapping.")

    cfg = Config(**data)

    def _abs_required(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.output_dir = _abs_required(cfg.output_dir)
    if cfg.themes_dir is not None:
        cfg.themes_dir = _abs_required(cfg.themes_dir)
    cfg.source.content_dir = _abs_required(cfg.source.content_dir)

    return cfg
