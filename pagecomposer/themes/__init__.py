"""Theme loading and rendering utilities for composed pages."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "theme.json"
TEMPLATES_DIRNAME = "templates"
DEFAULT_THEME_NAME = "default"
BUNDLED_THEMES_ROOT = Path(__file__).resolve().parent
REQUIRED_ENTRYPOINTS = ("page", "error")


class ThemeError(RuntimeError):
    """Raised when a theme cannot be loaded or validated."""


class ThemeAssets(BaseModel):
    """Stylesheets linked from every rendered page."""

    styles: list[str] = Field(default_factory=list)

    def merge_with(self, fallback: "ThemeAssets | None") -> "ThemeAssets":
        if fallback is None or self.styles:
            return ThemeAssets(styles=list(self.styles))
        return ThemeAssets(styles=list(fallback.styles))


class ThemeManifest(BaseModel):
    """Structured representation of the theme.json manifest."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="Unnamed Theme")
    version: str | None = Field(default=None)
    entrypoints: dict[str, str] = Field(default_factory=dict)
    assets: ThemeAssets = Field(default_factory=ThemeAssets)

    def merge_with(self, fallback: "ThemeManifest | None") -> "ThemeManifest":
        if fallback is None:
            return self
        return ThemeManifest(
            name=self.name or fallback.name,
            version=self.version or fallback.version,
            entrypoints={**fallback.entrypoints, **self.entrypoints},
            assets=self.assets.merge_with(fallback.assets),
        )

    def to_template_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "entrypoints": dict(self.entrypoints),
            "styles": list(self.assets.styles),
        }


def format_date(value: Any, fmt: str = "%B %d, %Y") -> str:
    """Jinja filter rendering datetimes (or ISO strings) for display."""
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, datetime):
        return value.strftime(fmt)
    return str(value)


class ThemeLoader:
    """Load theme manifests and associated Jinja environments.

    Themes are looked up first under ``themes_root`` (when given) and then in
    the themes bundled with the package, so an override theme only needs to
    ship the templates it changes.
    """

    def __init__(
        self,
        *,
        themes_root: Path | None = None,
        active_theme: str = DEFAULT_THEME_NAME,
        fallback_theme: str = DEFAULT_THEME_NAME,
    ) -> None:
        self._themes_root = themes_root
        self._active_theme = active_theme or DEFAULT_THEME_NAME
        self._fallback_theme = fallback_theme or DEFAULT_THEME_NAME
        self._environment: Environment | None = None
        self._manifest: ThemeManifest | None = None
        self._load()

    @property
    def manifest(self) -> ThemeManifest:
        assert self._manifest is not None  # pragma: no cover - construction guarantees
        return self._manifest

    @property
    def environment(self) -> Environment:
        assert self._environment is not None  # pragma: no cover - construction guarantees
        return self._environment

    @property
    def active_theme(self) -> str:
        return self._active_theme

    def render_page(self, key: str, context: dict[str, Any]) -> str:
        template_path = self.manifest.entrypoints.get(key)
        if not template_path:
            raise ThemeError(f"Theme '{self._active_theme}' does not define an entrypoint named '{key}'.")
        try:
            template = self.environment.get_template(template_path)
        except TemplateNotFound as exc:
            raise ThemeError(f"Template '{template_path}' not found in theme '{self._active_theme}'.") from exc
        return template.render(**context)

    def ensure_templates(self, template_keys: Sequence[str]) -> None:
        for key in template_keys:
            if not key:
                continue
            template_path = self.manifest.entrypoints.get(key, key)
            try:
                self.environment.get_template(template_path)
            except TemplateNotFound as exc:
                raise ThemeError(
                    f"Required template '{template_path}' not found while loading theme '{self._active_theme}'."
                ) from exc

    def _load(self) -> None:
        if self._themes_root is not None and not self._themes_root.exists():
            raise ThemeError(f"Themes root '{self._themes_root}' does not exist.")

        fallback_dir = self._find_theme_dir(self._fallback_theme)
        fallback_manifest = self._load_manifest(fallback_dir) if fallback_dir else None
        if self._active_theme == self._fallback_theme:
            active_dir, active_manifest = fallback_dir, fallback_manifest
        else:
            active_dir = self._find_theme_dir(self._active_theme)
            active_manifest = self._load_manifest(active_dir) if active_dir else None

        if active_manifest is None and fallback_manifest is None:
            raise ThemeError(
                f"Neither active theme '{self._active_theme}' nor fallback '{self._fallback_theme}' could be loaded."
            )

        search_paths: list[Path] = []
        if active_manifest is None:
            logger.warning(
                "Active theme '%s' not available. Falling back to '%s'.",
                self._active_theme,
                self._fallback_theme,
            )
            assert fallback_manifest is not None and fallback_dir is not None
            merged_manifest = fallback_manifest
            search_paths.append(fallback_dir / TEMPLATES_DIRNAME)
        else:
            assert active_dir is not None
            merged_manifest = active_manifest.merge_with(
                fallback_manifest if fallback_manifest is not active_manifest else None
            )
            search_paths.append(active_dir / TEMPLATES_DIRNAME)
            if fallback_dir is not None and fallback_dir != active_dir:
                search_paths.append(fallback_dir / TEMPLATES_DIRNAME)

        existing_paths = [path for path in search_paths if path.exists()]
        if not existing_paths:
            raise ThemeError(
                f"No template directories could be resolved for theme '{self._active_theme}' "
                f"(fallback '{self._fallback_theme}')."
            )

        environment = Environment(
            loader=FileSystemLoader([str(path) for path in existing_paths]),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        environment.globals["theme"] = merged_manifest.to_template_dict()
        environment.filters["format_date"] = format_date

        self._environment = environment
        self._manifest = merged_manifest
        self.ensure_templates([merged_manifest.entrypoints.get(key, "") for key in REQUIRED_ENTRYPOINTS])

    def _find_theme_dir(self, theme_name: str) -> Path | None:
        roots = [BUNDLED_THEMES_ROOT]
        if self._themes_root is not None:
            roots.insert(0, self._themes_root)
        for root in roots:
            candidate = root / theme_name
            if (candidate / MANIFEST_FILENAME).exists():
                return candidate
        logger.debug("Theme '%s' not found under %s", theme_name, ", ".join(str(root) for root in roots))
        return None

    def _load_manifest(self, theme_dir: Path) -> ThemeManifest:
        manifest_path = theme_dir / MANIFEST_FILENAME
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ThemeError(f"Failed to load theme manifest at {manifest_path}: {exc}") from exc
        try:
            return ThemeManifest.model_validate(data)
        except ValidationError as exc:
            raise ThemeError(f"Theme manifest validation failed for {manifest_path}: {exc}") from exc


def build_theme_loader(
    *,
    themes_root: Path | None = None,
    active_theme: str = DEFAULT_THEME_NAME,
    fallback_theme: str = DEFAULT_THEME_NAME,
) -> ThemeLoader:
    """Construct a ThemeLoader with helpful error reporting."""
    try:
        return ThemeLoader(
            themes_root=themes_root,
            active_theme=active_theme,
            fallback_theme=fallback_theme,
        )
    except ThemeError:
        raise
    except Exception as exc:  # pragma: no cover
        raise ThemeError(f"Unexpected error loading theme '{active_theme}': {exc}") from exc
