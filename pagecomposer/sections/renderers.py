"""Pure renderers turning resolved sections into :class:`SectionView` values."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..config import SectionDefaults, SectionSettings
from ..content import Post
from ..models import Section, SectionType
from ..utils import slugify
from .filters import select_posts
from .sidebar import render_sidebar
from .views import PostCard, SectionView, ViewMoreLink

SectionRenderer = Callable[[Section, SectionSettings], SectionView]

HERO_VARIANTS = ("standard", "large", "split")
FEATURED_VARIANTS = ("default", "horizontal", "carousel")
LIST_VARIANTS = ("standard", "compact", "featured")
CATEGORY_VARIANTS = ("grid", "list", "featured")
GRID_COLUMNS = (2, 3, 4)

HERO_FLAGS = {"showExcerpt": True, "showAuthor": True, "showDate": True, "showReadTime": False}
CARD_FLAGS = {
    "showImage": True,
    "showExcerpt": True,
    "showAuthor": True,
    "showDate": True,
    "showReadTime": False,
    "showCategory": True,
}
FEATURED_FLAGS = {**CARD_FLAGS, "showReadTime": True, "showTags": False}
LIST_FLAGS = {**CARD_FLAGS, "showReadTime": True}


def _int_prop(props: Mapping[str, Any], name: str, default: int) -> int:
    value = props.get(name)
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 0 else default


def _bool_prop(props: Mapping[str, Any], name: str, default: bool) -> bool:
    value = props.get(name)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _text_prop(props: Mapping[str, Any], name: str) -> str | None:
    value = props.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _variant(props: Mapping[str, Any], allowed: Sequence[str], default: str) -> str:
    value = str(props.get("layout") or "").strip().lower()
    return value if value in allowed else default


def _columns(props: Mapping[str, Any], defaults: SectionDefaults) -> int:
    value = _int_prop(props, "columns", defaults.columns)
    return value if value in GRID_COLUMNS else defaults.columns


def _flags(props: Mapping[str, Any], defaults: Mapping[str, bool]) -> dict[str, bool]:
    return {name: _bool_prop(props, name, default) for name, default in defaults.items()}


def _view_more(props: Mapping[str, Any], defaults: SectionDefaults) -> ViewMoreLink | None:
    if not _bool_prop(props, "showViewMore", defaults.show_view_more):
        return None
    href = _text_prop(props, "viewMoreLink") or defaults.view_more_link
    if not href:
        return None
    text = _text_prop(props, "viewMoreText") or defaults.view_more_text or "View All"
    return ViewMoreLink(href=href, text=text)


def _cards(posts: Sequence[Post], treatments: Callable[[int], str]) -> tuple[PostCard, ...]:
    return tuple(PostCard(post=post, treatment=treatments(index)) for index, post in enumerate(posts))


def render_hero(section: Section, settings: SectionSettings) -> SectionView:
    defaults = settings.hero
    props = section.props
    variant = _variant(props, HERO_VARIANTS, defaults.layout)
    limit = _int_prop(props, "maxPosts", defaults.display_limit)
    lead = {"large": "large", "split": "tall"}.get(variant, "standard")
    posts = section.posts[:limit]
    return SectionView(
        type=section.type,
        variant=variant,
        title=_text_prop(props, "title"),
        subtitle=_text_prop(props, "subtitle"),
        cards=_cards(posts, lambda index: lead if index == 0 else "standard"),
        columns=2 if variant == "split" or len(posts) > 1 else 1,
        options=_flags(props, HERO_FLAGS),
    )


def render_featured_posts(section: Section, settings: SectionSettings) -> SectionView:
    defaults = settings.featured_posts
    props = section.props
    variant = _variant(props, FEATURED_VARIANTS, defaults.layout)
    if variant == "carousel":
        variant = "default"
    limit = _int_prop(props, "limit", defaults.display_limit)
    return SectionView(
        type=section.type,
        variant=variant,
        title=_text_prop(props, "title"),
        subtitle=_text_prop(props, "subtitle"),
        cards=_cards(section.posts[:limit], lambda index: "standard"),
        view_more=_view_more(props, defaults),
        options=_flags(props, FEATURED_FLAGS),
    )


def _selected_posts(section: Section, defaults: SectionDefaults) -> list[Post]:
    props = section.props
    return select_posts(
        section.posts,
        category_filter=props.get("categoryFilter"),
        tag_filter=props.get("tagFilter"),
        sort_by=_text_prop(props, "sortBy") or defaults.sort_by,
        limit=_int_prop(props, "limit", defaults.display_limit),
    )


def render_post_grid(section: Section, settings: SectionSettings) -> SectionView:
    defaults = settings.post_grid
    props = section.props
    return SectionView(
        type=section.type,
        variant="grid",
        title=_text_prop(props, "title"),
        subtitle=_text_prop(props, "subtitle"),
        cards=_cards(_selected_posts(section, defaults), lambda index: "standard"),
        columns=_columns(props, defaults),
        view_more=_view_more(props, defaults),
        options=_flags(props, CARD_FLAGS),
    )


def render_post_list(section: Section, settings: SectionSettings) -> SectionView:
    defaults = settings.post_list
    props = section.props
    variant = _variant(props, LIST_VARIANTS, defaults.layout)

    def treatment(index: int) -> str:
        if variant == "compact":
            return "compact"
        if variant == "featured" and index == 0:
            return "featured"
        return "standard"

    return SectionView(
        type=section.type,
        variant=variant,
        title=_text_prop(props, "title"),
        subtitle=_text_prop(props, "subtitle"),
        cards=_cards(_selected_posts(section, defaults), treatment),
        view_more=_view_more(props, defaults),
        options=_flags(props, LIST_FLAGS),
    )


def category_slug(props: Mapping[str, Any]) -> str:
    """Return ``categorySlug`` or the slugified ``categoryName`` (possibly empty)."""
    explicit = _text_prop(props, "categorySlug")
    if explicit:
        return explicit
    name = _text_prop(props, "categoryName")
    return slugify(name) if name else ""


def render_category(section: Section, settings: SectionSettings) -> SectionView:
    defaults = settings.category
    props = section.props
    variant = _variant(props, CATEGORY_VARIANTS, defaults.layout)
    limit = _int_prop(props, "limit", defaults.display_limit)
    slug = category_slug(props)

    def treatment(index: int) -> str:
        if variant == "featured":
            return "large" if index == 0 else "small"
        return "standard"

    view_more = None
    if slug and _bool_prop(props, "showViewMore", defaults.show_view_more):
        view_more = ViewMoreLink(
            href=f"/category/{slug}",
            text=_text_prop(props, "viewMoreText") or defaults.view_more_text or "More",
        )

    return SectionView(
        type=section.type,
        variant=variant,
        title=_text_prop(props, "title") or _text_prop(props, "categoryName") or "Category",
        subtitle=_text_prop(props, "subtitle"),
        cards=_cards(section.posts[:limit], treatment),
        columns=_columns(props, defaults),
        view_more=view_more,
        options={"showHeader": _bool_prop(props, "showHeader", True)},
    )


SECTION_RENDERERS: dict[SectionType, SectionRenderer] = {
    SectionType.HERO: render_hero,
    SectionType.FEATURED_POSTS: render_featured_posts,
    SectionType.POST_GRID: render_post_grid,
    SectionType.POST_LIST: render_post_list,
    SectionType.CATEGORY: render_category,
    SectionType.SIDEBAR: render_sidebar,
}


def render_section(section: Section, settings: SectionSettings | None = None) -> SectionView | None:
    """Render ``section`` with its type's renderer; unknown types yield ``None``."""
    kind = section.kind
    if kind is None:
        return None
    renderer = SECTION_RENDERERS.get(kind)
    if renderer is None:
        return None
    return renderer(section, settings or SectionSettings())
