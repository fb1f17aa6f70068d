"""Content source adapters and the factory selecting one from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import ContentSource, ContentSourceError, PageCatalog, collect_tags, extract_items
from .http import HttpContentSource
from .local import LocalContentSource, PageDefinitionError, PageFile, read_data_file

if TYPE_CHECKING:
    from ..config import Config


def build_content_source(config: "Config") -> ContentSource:
    """Instantiate the content source described by ``config.source``."""
    source = config.source
    if source.kind == "http":
        return HttpContentSource(
            source.base_url,
            timeout=source.timeout,
            token=source.token,
            headers=source.headers,
        )
    return LocalContentSource(source.content_dir)


__all__ = [
    "ContentSource",
    "ContentSourceError",
    "HttpContentSource",
    "LocalContentSource",
    "PageCatalog",
    "PageDefinitionError",
    "PageFile",
    "build_content_source",
    "collect_tags",
    "extract_items",
    "read_data_file",
]
