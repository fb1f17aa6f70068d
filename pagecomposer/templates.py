"""Shared template utilities used to render composed pages with Jinja2."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .config import Config
from .layout import Composition
from .models import Page
from .themes import DEFAULT_THEME_NAME, ThemeError, ThemeLoader, build_theme_loader

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TemplateAssets:
    """Load the configured theme and build the context handed to its templates."""

    config: Config
    theme: ThemeLoader

    def __init__(self, config: Config) -> None:
        self.config = config
        self.theme = self._load_theme()

    def _load_theme(self) -> ThemeLoader:
        try:
            return build_theme_loader(
                themes_root=self.config.themes_dir,
                active_theme=self.config.theme_name,
                fallback_theme=DEFAULT_THEME_NAME,
            )
        except ThemeError as exc:
            raise ThemeError(f"Unable to load theme '{self.config.theme_name}': {exc}") from exc

    def base_context(self) -> dict[str, Any]:
        return {
            "site_title": self.config.site_title,
            "project_name": self.config.project_name,
        }

    def render_composition(self, page: Page, composition: Composition) -> str:
        """Render a page whose sections were arranged by the layout dispatcher."""
        context = self.base_context()
        context["page"] = page
        context["composition"] = composition.to_template_dict()
        logger.debug("Rendering page '%s' with template '%s'", page.slug, composition.template.value)
        return self.theme.render_page("page", context)

    def render_error(self, error: Any) -> str:
        context = self.base_context()
        context["error"] = error
        return self.theme.render_page("error", context)
