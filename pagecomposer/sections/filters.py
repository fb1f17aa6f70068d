"""Filter, sort and limit helpers shared by the post grid and post list renderers."""

from __future__ import annotations

from typing import Any, Iterable

from ..content import Post

SORT_DATE = "date"
SORT_TITLE = "title"
SORT_POPULARITY = "popularity"
SORT_KEYS = (SORT_DATE, SORT_TITLE, SORT_POPULARITY)


def matches_category(post: Post, category_filter: Any) -> bool:
    """Case-insensitive exact match on the category name or id."""
    wanted = str(category_filter).strip()
    if post.category and post.category.lower() == wanted.lower():
        return True
    return post.category_id is not None and str(post.category_id).lower() == wanted.lower()


def matches_tag(post: Post, tag_filter: Any) -> bool:
    wanted = str(tag_filter).strip().lower()
    return any(tag.lower() == wanted for tag in post.tags)


def sort_posts(posts: Iterable[Post], sort_by: str | None) -> list[Post]:
    """Return a stably sorted copy of ``posts``; unknown keys keep the input order."""
    items = list(posts)
    key = (sort_by or "").strip().lower()
    if key == SORT_DATE:
        dated = [post for post in items if post.published_at is not None]
        undated = [post for post in items if post.published_at is None]
        return sorted(dated, key=lambda post: post.published_at, reverse=True) + undated
    if key == SORT_TITLE:
        return sorted(items, key=lambda post: post.title.casefold())
    if key == SORT_POPULARITY:
        return sorted(items, key=lambda post: post.views, reverse=True)
    return items


def select_posts(
    posts: Iterable[Post],
    *,
    category_filter: Any = None,
    tag_filter: Any = None,
    sort_by: str | None = None,
    limit: int | None = None,
) -> list[Post]:
    """Apply filter, then sort, then limit."""
    selected = list(posts)
    if category_filter not in (None, ""):
        selected = [post for post in selected if matches_category(post, category_filter)]
    if tag_filter not in (None, ""):
        selected = [post for post in selected if matches_tag(post, tag_filter)]
    selected = sort_posts(selected, sort_by)
    if limit is not None:
        selected = selected[: max(limit, 0)]
    return selected
