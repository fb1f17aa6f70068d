from __future__ import annotations

import re
from pathlib import Path

from typer.testing import CliRunner

from conftest import write_workspace
from pagecomposer.cli import app

PAGES = [
    {"slug": "home", "title": "Home", "template": "homepage", "sections": [{"type": "hero"}]},
    {"slug": "about-us", "title": "About", "template": "full-width", "sections": [{"type": "post-grid"}]},
    {"slug": "upcoming", "title": "Upcoming", "status": "draft", "sections": []},
]


def test_build_writes_published_pages_and_error_pages() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_workspace(Path("."), PAGES)

        result = runner.invoke(app, ["build"])

        assert result.exit_code == 0, result.output
        site = Path("site")
        assert (site / "index.html").exists()
        assert (site / "home" / "index.html").exists()
        assert (site / "about-us" / "index.html").exists()
        assert not (site / "upcoming").exists()
        for code in ("404", "500", "503"):
            assert (site / f"{code}.html").exists()
        assert re.search(r"Skipped.*upcoming", result.output)


def test_build_include_drafts() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_workspace(Path("."), PAGES)

        result = runner.invoke(app, ["build", "--include-drafts"])

        assert result.exit_code == 0, result.output
        assert Path("site/upcoming/index.html").exists()


def test_build_force_clears_stale_output() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_workspace(Path("."), PAGES)
        stale = Path("site/old-page/index.html")
        stale.parent.mkdir(parents=True)
        stale.write_text("stale", encoding="utf-8")

        kept = runner.invoke(app, ["build"])
        assert kept.exit_code == 0, kept.output
        assert stale.exists()

        result = runner.invoke(app, ["build", "--force"])

        assert result.exit_code == 0, result.output
        assert not stale.exists()
        assert Path("site/home/index.html").exists()
        assert re.search(r"Force\s+rebuild", result.output)


def test_build_honors_output_dir_from_config() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        config_path = write_workspace(Path("."), PAGES)
        config_path.write_text("project_name: Test Project\noutput_dir: public\n", encoding="utf-8")

        result = runner.invoke(app, ["build"])

        assert result.exit_code == 0, result.output
        assert Path("public/home/index.html").exists()
        assert not Path("site").exists()


def test_build_fails_on_invalid_page_definition() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_workspace(Path("."), PAGES)
        Path("content/pages/zzz.yml").write_text("title: missing slug\n", encoding="utf-8")

        result = runner.invoke(app, ["build"])

        assert result.exit_code == 1
        assert re.search(r"Invalid\s+page\s+definition", result.output)
