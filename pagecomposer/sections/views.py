"""Immutable view models produced by section and widget renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..content import Event, Post


def article_href(post: Post) -> str:
    """Return the public link for a post."""
    identifier = post.id if post.id not in (None, "") else post.slug
    return f"/article/{identifier}"


@dataclass(frozen=True, slots=True)
class PostCard:
    """A post placed in a section with a display treatment.

    ``treatment`` is one of ``standard``, ``large``, ``tall``, ``small``,
    ``compact`` or ``featured``. ``rank`` is set for ranked lists such as the
    trending widget.
    """

    post: Post
    treatment: str = "standard"
    rank: int | None = None

    @property
    def href(self) -> str:
        return article_href(self.post)


@dataclass(frozen=True, slots=True)
class ViewMoreLink:
    href: str
    text: str


@dataclass(frozen=True, slots=True)
class LinkItem:
    """Label/href pair used by the categories and tags widgets."""

    label: str
    href: str
    count: int | None = None


@dataclass(frozen=True, slots=True)
class WidgetView:
    type: str
    title: str
    cards: tuple[PostCard, ...] = ()
    links: tuple[LinkItem, ...] = ()
    events: tuple[Event, ...] = ()
    description: str | None = None
    button_text: str | None = None
    button_link: str | None = None
    html: str = ""

    @property
    def template(self) -> str:
        return f"widgets/{self.type}.html"


@dataclass(frozen=True, slots=True)
class SectionView:
    """Rendered form of one section, ready to hand to a theme template."""

    type: str
    variant: str
    title: str | None = None
    subtitle: str | None = None
    cards: tuple[PostCard, ...] = ()
    columns: int | None = None
    view_more: ViewMoreLink | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    widgets: tuple[WidgetView, ...] = ()

    @property
    def template(self) -> str:
        return f"sections/{self.type}.html"

    @property
    def posts(self) -> list[Post]:
        return [card.post for card in self.cards]

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)
