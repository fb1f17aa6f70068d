from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from pagecomposer.themes import ThemeError, ThemeLoader, build_theme_loader, format_date


def _write_theme(root: Path, name: str, templates: dict[str, str], entrypoints: dict[str, str] | None = None) -> Path:
    theme_dir = root / name
    (theme_dir / "templates").mkdir(parents=True)
    manifest = {"name": name.title(), "version": "0.1.0", "entrypoints": entrypoints or {}}
    (theme_dir / "theme.json").write_text(json.dumps(manifest), encoding="utf-8")
    for relative, body in templates.items():
        target = theme_dir / "templates" / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(body, encoding="utf-8")
    return theme_dir


def test_bundled_theme_loads_without_themes_dir() -> None:
    loader = ThemeLoader()

    assert loader.active_theme == "default"
    assert loader.manifest.entrypoints["page"] == "page.html"
    assert loader.manifest.entrypoints["error"] == "error.html"


def test_override_theme_only_replaces_its_own_templates(tmp_path: Path) -> None:
    _write_theme(
        tmp_path,
        "midnight",
        {"widgets/newsletter.html": "<div class='night'>{{ widget.title }}</div>"},
        entrypoints={},
    )

    loader = build_theme_loader(themes_root=tmp_path, active_theme="midnight")

    assert loader.manifest.name == "Midnight"
    assert loader.manifest.entrypoints["page"] == "page.html"
    rendered = loader.environment.get_template("widgets/newsletter.html").render(widget={"title": "Hi"})
    assert rendered == "<div class='night'>Hi</div>"
    assert loader.environment.get_template("sections/hero.html") is not None


def test_unknown_active_theme_falls_back_with_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="pagecomposer.themes"):
        loader = ThemeLoader(themes_root=tmp_path, active_theme="nope")

    assert loader.manifest.name == "Default"
    assert any("Falling back" in record.getMessage() for record in caplog.records)


def test_missing_themes_root_raises(tmp_path: Path) -> None:
    with pytest.raises(ThemeError):
        ThemeLoader(themes_root=tmp_path / "absent")


def test_invalid_manifest_raises(tmp_path: Path) -> None:
    theme_dir = tmp_path / "broken"
    (theme_dir / "templates").mkdir(parents=True)
    (theme_dir / "theme.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ThemeError):
        ThemeLoader(themes_root=tmp_path, active_theme="broken")


def test_render_page_rejects_unknown_entrypoint() -> None:
    loader = ThemeLoader()

    with pytest.raises(ThemeError):
        loader.render_page("sitemap", {})


def test_render_error_entrypoint() -> None:
    html = ThemeLoader().render_page(
        "error",
        {
            "site_title": "TechBirds",
            "error": {
                "code": 404,
                "title": "Page Not Found",
                "message": "Gone",
                "actions": [{"label": "Home", "href": "/"}],
            },
        },
    )

    assert "<title>404 Page Not Found | TechBirds</title>" in html
    assert 'href="/"' in html


def test_format_date_filter() -> None:
    moment = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    assert format_date(moment) == "March 01, 2024"
    assert format_date("2024-03-01T09:00:00+00:00", "%Y/%m/%d") == "2024/03/01"
    assert format_date("soon") == "soon"
    assert format_date(None) == ""
