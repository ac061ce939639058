from __future__ import annotations

from textwrap import dedent

from techblog.content.markdown import LinkKind, anchor_ids, expand_liquid_urls, extract_links, relative_url


def _targets(body: str) -> list[tuple[str, int, LinkKind]]:
    return [(link.target, link.line, link.kind) for link in extract_links(dedent(body))]


def test_extracts_inline_links_and_images_with_lines() -> None:
    body = """\
    Intro with [a link](/about/).

    ![img](/assets/img/a.png "title")
    """

    assert _targets(body) == [
        ("/about/", 0, LinkKind.URL),
        ("/assets/img/a.png", 2, LinkKind.URL),
    ]


def test_extracts_reference_definitions_and_html_attributes() -> None:
    body = """\
    See [the docs][docs].

    [docs]: /docs/setup.html
    <a href="/contact/">contact</a> <img src='/logo.png'>
    """

    targets = [target for target, _, _ in _targets(body)]
    assert targets == ["/docs/setup.html", "/contact/", "/logo.png"]


def test_liquid_tags_are_recorded_once() -> None:
    body = "Read [this]({% post_url 2023-04-01-caching-basics %}) and [that]({% link _tabs/about.md %}).\n"

    assert _targets(body) == [
        ("2023-04-01-caching-basics", 0, LinkKind.POST_URL),
        ("_tabs/about.md", 0, LinkKind.LINK_TAG),
    ]


def test_code_is_ignored() -> None:
    body = """\
    Use `[x](/inline-code/)` carefully.

    ```markdown
    [x](/fenced/)
    ```

    {% raw %}[x](/raw/){% endraw %}
    <!-- [x](/commented/) -->
    [real](/real/)
    """

    assert [target for target, _, _ in _targets(body)] == ["/real/"]


def test_liquid_url_idioms_are_expanded() -> None:
    assert expand_liquid_urls("[a]({{ site.baseurl }}/about/)") == "[a](/about/)"
    assert expand_liquid_urls("[a]({{ '/about/' | relative_url }})") == "[a](/about/)"


def test_liquid_url_idioms_use_the_baseurl() -> None:
    site = {"baseurl": "blog/", "site_url": "https://example.com/"}

    assert expand_liquid_urls("[a]({{ site.baseurl }}/about/)", **site) == "[a](/blog/about/)"
    assert expand_liquid_urls("[a]({{ 'about/' | relative_url }})", **site) == "[a](/blog/about/)"
    assert expand_liquid_urls("[a]({{ '/about/' | absolute_url }})", **site) == "[a](https://example.com/blog/about/)"
    assert (
        expand_liquid_urls("[a]({{ site.url }}{{ site.baseurl }}/about/)", **site)
        == "[a](https://example.com/blog/about/)"
    )


def test_extract_links_reports_urls_with_baseurl() -> None:
    body = "[a]({{ site.baseurl }}/about/) [b](/raw/) [c]({{ site.baseurl }}{% post_url 2023-04-01-caching-basics %})\n"

    assert [(link.target, link.kind) for link in extract_links(body, baseurl="/blog")] == [
        ("2023-04-01-caching-basics", LinkKind.POST_URL),
        ("/blog/about/", LinkKind.URL),
        ("/raw/", LinkKind.URL),
    ]


def test_relative_url() -> None:
    assert relative_url("/about/", "/blog") == "/blog/about/"
    assert relative_url("about/") == "/about/"
    assert relative_url("mailto:me@example.com", "/blog") == "mailto:me@example.com"


def test_unexpanded_liquid_targets_are_skipped() -> None:
    assert _targets("[a]({{ page.url }})\n") == []


def test_angle_bracket_targets() -> None:
    assert [t for t, _, _ in _targets("[a](</with space/>)\n")] == ["/with space/"]


def test_anchor_ids_from_headings() -> None:
    body = """\
    ## Why cache

    ## Why cache

    Setext Title
    ------------

    ### Custom {#custom-id}
    """

    ids = anchor_ids(dedent(body))

    assert {"why-cache", "why-cache-1", "setext-title", "custom-id"} <= ids


def test_anchor_ids_include_html_ids_and_skip_code() -> None:
    body = """\
    <div id="appendix"></div>
    <a name="legacy"></a>

    ```
    ## not a heading
    ```
    """

    ids = anchor_ids(dedent(body))

    assert {"appendix", "legacy"} <= ids
    assert "not-a-heading" not in ids


def test_anchor_ids_use_link_text() -> None:
    assert "see-the-docs" in anchor_ids("## See [the docs](/docs/)\n")
