from __future__ import annotations

import re
from pathlib import Path

from typer.testing import CliRunner

from conftest import write_workspace
from pagecomposer.cli import app


def test_lint_flags_page_definition_problems() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_workspace(
            Path("."),
            [
                {
                    "slug": "landing",
                    "template": "two-column",
                    "status": "draft",
                    "sections": [
                        {"type": "post-grid", "column": "centre"},
                        {"type": "category", "column": "left", "props": {"categoryName": "Tech"}},
                    ],
                }
            ],
        )

        result = runner.invoke(app, ["lint"])
        assert result.exit_code == 1, result.output
        assert re.search(r"Column\s+'centre'\s+is\s+invalid", result.output)
        assert "sections[1].props.categoryId" in result.output
        assert re.search(r"Page\s+status\s+is\s+'draft'", result.output)
        assert re.search(r"1\s+error\(s\),\s+2\s+warning\(s\)", result.output)


def test_lint_clean_when_pages_are_valid() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_workspace(
            Path("."),
            [{"slug": "home", "template": "homepage", "sections": [{"type": "hero"}, {"type": "sidebar"}]}],
        )

        result = runner.invoke(app, ["lint"])
        assert result.exit_code == 0, result.output
        assert re.search(r"Lint\s+clean", result.output)


def test_lint_strict_fails_on_warnings() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_workspace(Path("."), [{"slug": "home", "sections": [{"type": "ticker"}]}])

        relaxed = runner.invoke(app, ["lint"])
        strict = runner.invoke(app, ["lint", "--strict"])

        assert relaxed.exit_code == 0, relaxed.output
        assert "WARNING" in relaxed.output
        assert strict.exit_code == 1, strict.output
