from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from techblog.content.permalinks import (
    canonical_url,
    collection_permalink,
    expand,
    page_permalink,
    post_permalink,
)

WHEN = datetime(2023, 4, 1, 10, 0, tzinfo=UTC)


def test_date_style_includes_categories_and_html_extension() -> None:
    url = post_permalink(
        site_permalink="date",
        title="caching-basics",
        when=WHEN,
        categories=("Systems", "Caching"),
    )

    assert url == "/systems/caching/2023/04/01/caching-basics.html"


def test_pretty_style_without_categories_has_no_empty_segments() -> None:
    url = post_permalink(site_permalink="pretty", title="caching-basics", when=WHEN)

    assert url == "/2023/04/01/caching-basics/"


def test_custom_template_with_title_placeholder() -> None:
    url = post_permalink(site_permalink="/posts/:title/", title="caching-basics", when=WHEN)

    assert url == "/posts/caching-basics/"


def test_front_matter_permalink_wins_over_site_setting() -> None:
    url = post_permalink(
        site_permalink="date",
        title="caching-basics",
        when=WHEN,
        front_matter_permalink="/caching/",
    )

    assert url == "/caching/"


def test_slug_overrides_filename_title() -> None:
    url = post_permalink(site_permalink="/posts/:title/", title="caching-basics", when=WHEN, slug="cache-101")

    assert url == "/posts/cache-101/"


def test_slug_placeholder_hyphenates_punctuation_and_lowercases() -> None:
    url = post_permalink(site_permalink="/:slug/", title="v1.2-Release~notes!", when=WHEN)

    assert url == "/v1-2-release-notes/"


def test_title_placeholder_keeps_pretty_characters() -> None:
    url = post_permalink(site_permalink="/:title/", title="v1.2-Release~notes!", when=WHEN)

    assert url == "/v1.2-Release~notes!/"


def test_dates_use_site_timezone() -> None:
    late = datetime(2023, 4, 1, 23, 30, tzinfo=UTC)

    url = post_permalink(site_permalink="pretty", title="t", when=late, tz=ZoneInfo("Asia/Tokyo"))

    assert url == "/2023/04/02/t/"


def test_expand_handles_adjacent_placeholders() -> None:
    assert expand("/:title:output_ext", {"title": "a", "output_ext": ".html"}) == "/a.html"


def test_expand_leaves_unknown_placeholders() -> None:
    assert expand("/:nope/", {}) == "/:nope/"


@pytest.mark.parametrize(
    ("relative_path", "site_permalink", "expected"),
    [
        ("about.md", "date", "/about.html"),
        ("about.md", "pretty", "/about/"),
        ("index.html", "date", "/"),
        ("docs/index.md", "date", "/docs/"),
        ("docs/setup.md", "date", "/docs/setup.html"),
    ],
)
def test_page_permalink(relative_path: str, site_permalink: str, expected: str) -> None:
    assert page_permalink(relative_path, site_permalink=site_permalink) == expected


def test_page_front_matter_permalink() -> None:
    assert page_permalink("about.md", site_permalink="date", front_matter_permalink="/me/") == "/me/"


def test_collection_permalink_defaults_to_collection_path() -> None:
    url = collection_permalink("tabs", "about.md", template=None)

    assert url == "/tabs/about.html"


def test_collection_permalink_with_title_template() -> None:
    assert collection_permalink("tabs", "about.md", template="/:title/") == "/about/"


def test_collection_slug_and_name_use_default_mode() -> None:
    assert collection_permalink("tabs", "Read.Me.md", template="/:collection/:slug/") == "/tabs/read-me/"
    assert collection_permalink("tabs", "Read.Me.md", template="/:name/") == "/read-me/"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("/about/", "/about"),
        ("/about", "/about"),
        ("/about.html", "/about"),
        ("/about/index.html", "/about"),
        ("/about/#team", "/about"),
        ("/about/?ref=x", "/about"),
        ("/a%20b/", "/a b"),
        ("/docs/../about/", "/about"),
        ("/", "/"),
        ("/index.html", "/"),
    ],
)
def test_canonical_url(url: str, expected: str) -> None:
    assert canonical_url(url) == expected
