"""Section and widget renderers plus the view models they produce."""

from __future__ import annotations

from .filters import SORT_KEYS, matches_category, matches_tag, select_posts, sort_posts
from .renderers import SECTION_RENDERERS, category_slug, render_section
from .sidebar import WIDGET_RENDERERS, render_sidebar, render_widget
from .views import LinkItem, PostCard, SectionView, ViewMoreLink, WidgetView, article_href

__all__ = [
    "LinkItem",
    "PostCard",
    "SECTION_RENDERERS",
    "SORT_KEYS",
    "SectionView",
    "ViewMoreLink",
    "WIDGET_RENDERERS",
    "WidgetView",
    "article_href",
    "category_slug",
    "matches_category",
    "matches_tag",
    "render_section",
    "render_sidebar",
    "render_widget",
    "select_posts",
    "sort_posts",
]
