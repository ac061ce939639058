from __future__ import annotations

import os
import time
from pathlib import Path

from techblog.config.schema import FrontMatterDefault
from techblog.content.models import DocumentKind
from techblog.site import Site, apply_defaults, load_site


def test_load_site_computes_permalinks(site: Site) -> None:
    urls = {doc.relative_path: doc.permalink for doc in site.documents}

    assert urls == {
        "_posts/2023-04-01-caching-basics.md": "/posts/caching-basics/",
        "_posts/2023-05-02-postgres-tuning.md": "/posts/postgres-tuning/",
        "_tabs/about.md": "/about/",
        "index.html": "/",
    }


def test_load_site_from_subdirectory(site_root: Path) -> None:
    loaded = load_site(site_root / "_posts")

    assert loaded.root == site_root


def test_posts_are_newest_first(site: Site) -> None:
    titles = [post.title for post in site.posts()]

    assert titles == ["Tuning PostgreSQL for write-heavy loads", "Caching basics"]


def test_post_metadata_is_normalised(site: Site) -> None:
    post = site.document_at("_posts/2023-04-01-caching-basics.md")

    assert post is not None
    assert post.meta is not None
    assert post.meta.categories == ("Systems", "Caching")
    assert post.meta.tags == ("cache", "latency")
    assert post.meta.layout == "post"
    assert post.output


def test_resolve_url_accepts_equivalent_spellings(site: Site) -> None:
    for url in ("/about/", "/about", "/about/index.html", "/about.html"):
        target = site.resolve_url(url)
        assert target is not None
        assert target.relative_path == "_tabs/about.md"

    asset = site.resolve_url("/assets/img/cache.png")
    assert asset is not None
    assert asset.is_asset
    assert site.resolve_url("/missing/") is None


def test_find_post_by_filename_stem(site: Site) -> None:
    post = site.find_post("2023-05-02-postgres-tuning")

    assert post is not None
    assert post.relative_path == "_posts/2023-05-02-postgres-tuning.md"
    assert site.find_post("2020-01-01-nothing") is None


def test_source_exists_covers_documents_and_assets(site: Site) -> None:
    assert site.source_exists("_tabs/about.md")
    assert site.source_exists("/assets/img/cache.png")
    assert not site.source_exists("_tabs/contact.md")


def test_anchors_for_document(site: Site) -> None:
    post = site.document_at("_posts/2023-04-01-caching-basics.md")

    assert post is not None
    assert "why-cache" in site.anchors_for(post)


def test_unpublished_and_future_posts_are_not_rendered(site_root: Path, write_file) -> None:
    write_file("_posts/2023-06-01-hidden.md", "---\ntitle: Hidden\npublished: false\n---\n")
    write_file("_posts/2999-01-01-someday.md", "---\ntitle: Someday\n---\n")
    write_file("_posts/no-date-prefix.md", "---\ntitle: Bad name\n---\n")

    loaded = load_site(site_root)

    for name in ("2023-06-01-hidden.md", "2999-01-01-someday.md", "no-date-prefix.md"):
        doc = loaded.document_at(f"_posts/{name}")
        assert doc is not None
        assert not doc.output
    assert [post.title for post in loaded.posts()] == ["Tuning PostgreSQL for write-heavy loads", "Caching basics"]


def test_drafts_render_only_when_requested(site_root: Path, write_file) -> None:
    draft = write_file("_drafts/rollouts.md", "---\ntitle: Rollouts\n---\n")
    stamp = time.mktime((2024, 1, 2, 12, 0, 0, 0, 0, -1))
    os.utime(draft, (stamp, stamp))

    hidden = load_site(site_root).document_at("_drafts/rollouts.md")
    shown = load_site(site_root, include_drafts=True).document_at("_drafts/rollouts.md")

    assert hidden is not None
    assert not hidden.output
    assert shown is not None
    assert shown.output
    assert shown.kind is DocumentKind.DRAFT
    assert shown.permalink == "/posts/rollouts/"


def test_broken_front_matter_is_kept_with_error(site_root: Path, write_file) -> None:
    write_file("_posts/2023-07-01-broken.md", "---\ntitle: [oops\n---\n")

    doc = load_site(site_root).document_at("_posts/2023-07-01-broken.md")

    assert doc is not None
    assert doc.error is not None
    assert doc.meta is None
    assert not doc.output


def test_defaults_apply_by_scope_and_type() -> None:
    defaults = [
        FrontMatterDefault.model_validate({"scope": {"path": ""}, "values": {"layout": "page", "comments": False}}),
        FrontMatterDefault.model_validate({"scope": {"path": "", "type": "posts"}, "values": {"layout": "post"}}),
        FrontMatterDefault.model_validate({"scope": {"path": "_posts/2023"}, "values": {"toc": True}}),
    ]

    merged = apply_defaults(defaults, "_posts/2023/2023-01-01-a.md", ("posts",), {"comments": True})

    assert merged == {"layout": "post", "comments": True, "toc": True}
    assert apply_defaults(defaults, "about.md", ("pages",), {}) == {"layout": "page", "comments": False}


def test_url_collisions(site_root: Path, write_file) -> None:
    write_file("about.md", "---\ntitle: About again\n---\n")

    loaded = load_site(site_root)
    collisions = loaded.url_collisions()

    assert list(collisions) == ["/about"]
    assert {target.relative_path for target in collisions["/about"]} == {"_tabs/about.md", "about.md"}
