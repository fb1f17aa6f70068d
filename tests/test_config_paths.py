from __future__ import annotations

from pathlib import Path

import pytest

from pagecomposer.config import Config, SectionSettings, load_config
from pagecomposer.models import SectionType


def _write_project_config(root: Path) -> Path:
    config_text = (
        "project_name: External Project\n"
        "site_title: Birdwatch\n"
        "output_dir: public\n"
        "themes_dir: themes\n"
        "theme_name: midnight\n"
        "source:\n"
        "  kind: local\n"
        "  content_dir: data/content\n"
        "sections:\n"
        "  post_grid:\n"
        "    fetch_limit: 12\n"
        "    columns: 3\n"
        "  trending_limit: 8\n"
    )
    cfg_path = root / "pagecomposer.yml"
    cfg_path.write_text(config_text, encoding="utf-8")
    return cfg_path


def test_load_config_resolves_paths_relative_to_config_directory(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    _write_project_config(project)

    # Pass a directory path; loader should find pagecomposer.yml inside it.
    cfg = load_config(project)

    assert cfg.output_dir == (project / "public").resolve()
    assert cfg.themes_dir == (project / "themes").resolve()
    assert cfg.source.content_dir == (project / "data" / "content").resolve()
    assert cfg.site_title == "Birdwatch"
    assert cfg.theme_name == "midnight"


def test_load_config_reads_section_defaults(tmp_path: Path) -> None:
    config_file = _write_project_config(tmp_path)

    cfg = load_config(config_file)

    assert cfg.sections.post_grid.fetch_limit == 12
    assert cfg.sections.post_grid.columns == 3
    assert cfg.sections.trending_limit == 8
    # Untouched section types keep their built-in defaults.
    assert cfg.sections.hero.display_limit == 2
    assert cfg.sections.featured_posts.view_more_link == "/featured"


def test_load_config_uses_defaults_when_directory_has_no_config(tmp_path: Path) -> None:
    project = tmp_path / "emptyproj"
    project.mkdir()

    cfg = load_config(project)

    assert cfg.output_dir == (project / "site").resolve()
    assert cfg.source.content_dir == (project / "content").resolve()
    assert cfg.source.kind == "local"
    assert cfg.themes_dir is None
    assert cfg.site_title == "TechBirds"


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    cfg_path = tmp_path / "pagecomposer.yml"
    cfg_path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(cfg_path)


def test_http_source_base_url_is_normalized() -> None:
    cfg = Config.model_validate({"source": {"kind": "http", "base_url": "https://api.example.com/api/", "token": "t"}})

    assert cfg.source.base_url == "https://api.example.com/api"
    assert cfg.source.token == "t"


def test_section_settings_lookup_by_type() -> None:
    settings = SectionSettings()

    assert settings.for_type(SectionType.POST_LIST) is settings.post_list
    assert settings.for_type(SectionType.CATEGORY).show_view_more is True
    assert settings.for_type(SectionType.SIDEBAR) is settings.hero
    assert all(settings.for_type(kind).fetch_limit == 10 for kind in SectionType)
