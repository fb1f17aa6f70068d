from __future__ import annotations

import logging
from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from pagecomposer.content import Category, Event, Post, Tag, parse_posts
from pagecomposer.models import Page, PageStatus, PageTemplate, Section, SectionType, Widget, WidgetType


def test_page_normalizes_template_status_and_sections() -> None:
    page = Page.model_validate({"slug": " about-us ", "template": "magazine", "sections": None})

    assert page.slug == "about-us"
    assert page.template is PageTemplate.DEFAULT
    assert page.status is PageStatus.PUBLISHED
    assert page.sections == []


def test_page_accepts_known_template_case_insensitively() -> None:
    page = Page.model_validate({"slug": "home", "template": "Two-Column", "status": "Draft"})

    assert page.template is PageTemplate.TWO_COLUMN
    assert page.status is PageStatus.DRAFT


def test_page_requires_non_empty_slug() -> None:
    with pytest.raises(ValidationError):
        Page.model_validate({"slug": "   "})


def test_unknown_section_type_is_preserved() -> None:
    section = Section.model_validate({"type": "carousel-3d", "props": {"foo": "bar"}})

    assert section.type == "carousel-3d"
    assert section.kind is None
    assert section.props == {"foo": "bar"}


def test_content_section_posts_are_parsed_and_column_lowercased() -> None:
    section = Section.model_validate(
        {
            "type": "post-grid",
            "column": "LEFT",
            "props": {"posts": [{"id": 1, "title": "Hello World"}], "postIds": [1, None, "2"]},
        }
    )

    assert section.kind is SectionType.POST_GRID
    assert section.column == "left"
    assert isinstance(section.posts[0], Post)
    assert section.posts[0].slug == "hello-world"
    assert section.post_ids == [1, "2"]


def test_content_section_without_posts_gets_empty_list() -> None:
    section = Section.model_validate({"type": "hero"})

    assert section.props["posts"] == []


def test_sidebar_widgets_are_parsed() -> None:
    section = Section.model_validate(
        {
            "type": "sidebar",
            "props": {
                "widgets": [
                    {"type": "newsletter", "buttonText": "Join"},
                    {"type": "weather"},
                ]
            },
        }
    )

    first, second = section.widgets
    assert isinstance(first, Widget)
    assert first.kind is WidgetType.NEWSLETTER
    assert first.button_text == "Join"
    assert second.kind is None


def test_with_props_returns_new_section_leaving_source_untouched() -> None:
    section = Section.model_validate({"type": "post-list", "props": {"limit": 3}})

    updated = section.with_props(limit=5)

    assert updated is not section
    assert updated.props["limit"] == 5
    assert section.props["limit"] == 3


def test_post_normalizes_alternate_payload_shapes() -> None:
    post = Post.model_validate(
        {
            "id": 9,
            "title": "Rust vs Python",
            "featuredImage": "/img/cover.png",
            "user": "Grace Hopper",
            "tags": "python, rust ,",
            "category": {"id": 4, "name": "Languages"},
            "content": "<p>" + " ".join(["word"] * 450) + "</p>",
            "publishedAt": "2024-05-06",
        }
    )

    assert post.image_url == "/img/cover.png"
    assert post.author_name == "Grace Hopper"
    assert post.tags == ["python", "rust"]
    assert post.category == "Languages"
    assert post.category_id == 4
    assert post.read_time == 3
    assert post.excerpt.endswith("...")
    assert "<p>" not in post.excerpt
    assert len(post.excerpt) == 203
    assert post.published_at == datetime(2024, 5, 6, tzinfo=timezone.utc)
    assert post.slug == "rust-vs-python"


def test_post_short_content_becomes_excerpt_with_minimum_read_time() -> None:
    post = Post.model_validate({"title": "Tiny", "content": "Just a few words."})

    assert post.excerpt == "Just a few words."
    assert post.read_time == 1


def test_post_author_from_first_and_last_name() -> None:
    post = Post.model_validate({"title": "X", "author": {"firstName": "Alan", "lastName": "Turing"}})

    assert post.author_name == "Alan Turing"


def test_post_naive_datetime_is_made_utc() -> None:
    post = Post.model_validate({"title": "X", "publishedAt": datetime(2024, 1, 2, 3, 4)})

    assert post.published_at is not None
    assert post.published_at.tzinfo is timezone.utc


def test_category_and_tag_coercion() -> None:
    category = Category.model_validate({"name": "Machine Learning", "postCount": 12})
    tag = Tag.model_validate("  devops ")

    assert category.slug == "machine-learning"
    assert category.count == 12
    assert tag.name == "devops"


def test_event_date_is_stringified() -> None:
    event = Event.model_validate({"title": "PyCon", "date": date(2025, 5, 14)})

    assert event.date == "2025-05-14"


def test_models_are_immutable() -> None:
    page = Page.model_validate({"slug": "home"})

    with pytest.raises(ValidationError):
        page.title = "Changed"  # type: ignore[misc]


def test_post_null_fields_fall_back_to_defaults() -> None:
    post = Post.model_validate({"title": None, "slug": None, "excerpt": None, "tags": None, "views": None})

    assert post.title == ""
    assert post.slug == ""
    assert post.excerpt == ""
    assert post.tags == []
    assert post.views == 0


def test_post_null_excerpt_is_rebuilt_from_content() -> None:
    post = Post.model_validate({"title": "A", "excerpt": None, "content": "Short body."})

    assert post.excerpt == "Short body."


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("5 min read", 5), ("7", 7), (4.2, 5), ("soon", None), (-3, None)],
)
def test_post_read_time_is_coerced(raw: object, expected: int | None) -> None:
    assert Post.model_validate({"title": "A", "readTime": raw}).read_time == expected


def test_unreadable_read_time_is_recomputed_from_content() -> None:
    post = Post.model_validate({"title": "A", "readTime": "n/a", "content": "a few words"})

    assert post.read_time == 1


def test_parse_posts_drops_only_the_malformed_entry(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="pagecomposer.content.models"):
        posts = parse_posts([{"title": "Good"}, {"title": "Bad", "views": -1}, {"title": None}])

    assert [post.title for post in posts] == ["Good", ""]
    assert any("index 1" in record.getMessage() for record in caplog.records)


def test_section_keeps_valid_embedded_posts_when_one_is_malformed() -> None:
    section = Section.model_validate(
        {
            "type": "post-grid",
            "props": {"posts": [{"title": "Kept", "excerpt": None}, {"title": "Dropped", "views": -5}]},
        }
    )

    assert [post.title for post in section.posts] == ["Kept"]
    assert section.posts[0].excerpt == ""
