"""Small text helpers shared across content normalization and rendering."""

from __future__ import annotations

import re

SLUG_PATTERN = re.compile(r"[^a-z0-9\-]+")
WHITESPACE_PATTERN = re.compile(r"\s+")
TAG_PATTERN = re.compile(r"<[^>]*>")


def slugify(value: str) -> str:
    """Convert arbitrary text into a URL-safe slug (empty input yields an empty slug)."""
    text = value.strip().lower()
    text = WHITESPACE_PATTERN.sub("-", text)
    text = re.sub(r"_+", "-", text)
    text = SLUG_PATTERN.sub("-", text)
    text = re.sub(r"-{2,}", "-", text)
    return text.strip("-")


def title_from_slug(slug: str) -> str:
    """Generate a human-friendly title from a slug."""
    text = slug.replace("_", " ").replace("-", " ")
    text = WHITESPACE_PATTERN.sub(" ", text).strip()
    if not text:
        return "Untitled"
    words = [word.capitalize() if not word.isupper() else word for word in text.split()]
    return " ".join(words)


def strip_tags(value: str) -> str:
    """Remove HTML tags from ``value``."""
    return TAG_PATTERN.sub("", value)
