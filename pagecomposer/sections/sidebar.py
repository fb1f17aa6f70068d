"""Sidebar section rendering and the per-widget renderers it dispatches to."""

from __future__ import annotations

import logging
from typing import Callable

from ..config import SectionSettings
from ..content import Category, Tag
from ..models import Section, Widget, WidgetType
from .views import LinkItem, PostCard, SectionView, WidgetView

logger = logging.getLogger(__name__)

WidgetRenderer = Callable[[Widget, SectionSettings], WidgetView]

NEWSLETTER_DESCRIPTION = "Get the latest tech news delivered to your inbox"
NEWSLETTER_BUTTON_TEXT = "Subscribe Now"
NEWSLETTER_BUTTON_LINK = "/newsletter"


def _term_href(prefix: str, term: Category | Tag) -> str:
    return f"/{prefix}/{term.slug or term.name.lower()}"


def render_trending(widget: Widget, settings: SectionSettings) -> WidgetView:
    limit = widget.limit or settings.trending_limit
    return WidgetView(
        type=widget.type,
        title=widget.title or "Trending Now",
        cards=tuple(
            PostCard(post=post, treatment="compact", rank=index + 1)
            for index, post in enumerate(widget.posts[:limit])
        ),
    )


def render_categories(widget: Widget, settings: SectionSettings) -> WidgetView:
    return WidgetView(
        type=widget.type,
        title=widget.title or "Categories",
        links=tuple(
            LinkItem(label=category.name, href=_term_href("category", category), count=category.count)
            for category in widget.categories
            if category.name or category.slug
        ),
    )


def render_newsletter(widget: Widget, settings: SectionSettings) -> WidgetView:
    return WidgetView(
        type=widget.type,
        title=widget.title or "Stay Updated",
        description=widget.description or NEWSLETTER_DESCRIPTION,
        button_text=widget.button_text or NEWSLETTER_BUTTON_TEXT,
        button_link=widget.button_link or NEWSLETTER_BUTTON_LINK,
    )


def render_tags(widget: Widget, settings: SectionSettings) -> WidgetView:
    return WidgetView(
        type=widget.type,
        title=widget.title or "Popular Tags",
        links=tuple(
            LinkItem(label=tag.name, href=_term_href("tag", tag), count=tag.count)
            for tag in widget.tags
            if tag.name or tag.slug
        ),
    )


def render_calendar(widget: Widget, settings: SectionSettings) -> WidgetView:
    return WidgetView(
        type=widget.type,
        title=widget.title or "Event Calendar",
        events=tuple(widget.events),
    )


def render_custom(widget: Widget, settings: SectionSettings) -> WidgetView:
    return WidgetView(type=widget.type, title=widget.title or "", html=widget.content)


WIDGET_RENDERERS: dict[WidgetType, WidgetRenderer] = {
    WidgetType.TRENDING: render_trending,
    WidgetType.CATEGORIES: render_categories,
    WidgetType.NEWSLETTER: render_newsletter,
    WidgetType.TAGS: render_tags,
    WidgetType.CALENDAR: render_calendar,
    WidgetType.CUSTOM: render_custom,
}


def render_widget(widget: Widget, settings: SectionSettings | None = None) -> WidgetView | None:
    kind = widget.kind
    renderer = WIDGET_RENDERERS.get(kind) if kind is not None else None
    if renderer is None:
        logger.debug("Skipping unknown widget type '%s'", widget.type)
        return None
    return renderer(widget, settings or SectionSettings())


def render_sidebar(section: Section, settings: SectionSettings) -> SectionView:
    views = (render_widget(widget, settings) for widget in section.widgets)
    return SectionView(
        type=section.type,
        variant="sidebar",
        title=section.props.get("title"),
        widgets=tuple(view for view in views if view is not None),
    )
