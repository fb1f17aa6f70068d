from __future__ import annotations

import re
from pathlib import Path

import yaml
from typer.testing import CliRunner

from pagecomposer.cli import app


def _write_default_config(path: Path) -> None:
    path.write_text("project_name: Test Project\n", encoding="utf-8")


def test_new_page_scaffolds_starter_sections() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_default_config(Path("pagecomposer.yml"))
        result = runner.invoke(app, ["new", "landing", "--template", "homepage"])
        assert result.exit_code == 0, result.output
        assert re.search(r"Scaffold\s+ready", result.output)

        page_path = Path("content/pages/landing.yml")
        data = yaml.safe_load(page_path.read_text(encoding="utf-8"))
        assert data["slug"] == "landing"
        assert data["title"] == "Landing"
        assert data["template"] == "homepage"
        assert data["status"] == "draft"
        assert [section["type"] for section in data["sections"]] == [
            "hero",
            "featured-posts",
            "post-grid",
            "sidebar",
        ]
        assert data["sections"][0]["props"]["maxPosts"] == 2
        assert [widget["type"] for widget in data["sections"][3]["props"]["widgets"]] == ["trending", "newsletter"]


def test_new_two_column_page_assigns_columns() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_default_config(Path("pagecomposer.yml"))
        result = runner.invoke(
            app,
            [
                "new",
                "Compare Stacks",
                "--title",
                "Stack Showdown",
                "--template",
                "two-column",
                "--section",
                "post-list",
                "-s",
                "category",
                "-s",
                "sidebar",
            ],
        )
        assert result.exit_code == 0, result.output
        assert re.search(r"slug\s+normalized\s+to\s+'compare-stacks'", result.output)

        data = yaml.safe_load(Path("content/pages/compare-stacks.yml").read_text(encoding="utf-8"))
        assert data["title"] == "Stack Showdown"
        assert [(section["type"], section["column"]) for section in data["sections"]] == [
            ("post-list", "left"),
            ("category", "right"),
            ("sidebar", "right"),
        ]


def test_new_page_refuses_to_overwrite_without_force() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_default_config(Path("pagecomposer.yml"))
        first = runner.invoke(app, ["new", "about"])
        assert first.exit_code == 0, first.output

        second = runner.invoke(app, ["new", "about"])
        assert second.exit_code == 1
        assert re.search(r"Path\s+already\s+exists", second.output)

        forced = runner.invoke(app, ["new", "about", "--force", "--title", "About Us"])
        assert forced.exit_code == 0, forced.output
        assert "(updated)" in forced.output
        data = yaml.safe_load(Path("content/pages/about.yml").read_text(encoding="utf-8"))
        assert data["title"] == "About Us"


def test_new_page_rejects_unusable_slug() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_default_config(Path("pagecomposer.yml"))
        result = runner.invoke(app, ["new", "!!!"])
        assert result.exit_code == 1
        assert re.search(r"Cannot\s+scaffold", result.output)


def test_new_page_mentions_remote_source() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("pagecomposer.yml").write_text(
            "project_name: Test Project\nsource:\n  kind: http\n  base_url: http://api.test/api\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["new", "remote-page"])
        assert result.exit_code == 0, result.output
        assert re.search(r"content\s+API", result.output)
        assert Path("content/pages/remote-page.yml").exists()
