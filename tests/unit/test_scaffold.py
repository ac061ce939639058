from __future__ import annotations

from datetime import UTC, datetime

import pytest

from techblog.content.frontmatter import parse_frontmatter
from techblog.scaffold import create_post
from techblog.site import Site, load_site

NOW = datetime(2024, 3, 9, 22, 15, 30, tzinfo=UTC)


def test_create_post_writes_dated_file_with_front_matter(site: Site) -> None:
    path = create_post(
        site,
        "Rolling out Kubernetes safely",
        categories=["Ops"],
        tags=["Kubernetes"],
        description="Surge, readiness and rollbacks.",
        now=NOW,
    )

    assert path == site.root / "_posts" / "2024-03-09-rolling-out-kubernetes-safely.md"
    parsed = parse_frontmatter(path.read_text(encoding="utf-8"))
    assert list(parsed.metadata) == ["layout", "title", "date", "categories", "tags", "description", "comments"]
    assert parsed.metadata["title"] == "Rolling out Kubernetes safely"
    assert parsed.metadata["date"] == "2024-03-09 22:15:30 +0000"
    assert parsed.metadata["tags"] == ["kubernetes"]
    assert "Surge, readiness and rollbacks." in parsed.body


def test_create_post_never_overwrites(site: Site) -> None:
    first = create_post(site, "Same title", now=NOW)
    second = create_post(site, "Same title", now=NOW)
    third = create_post(site, "Same title", now=NOW)

    assert first.name == "2024-03-09-same-title.md"
    assert second.name == "2024-03-09-same-title-2.md"
    assert third.name == "2024-03-09-same-title-3.md"


def test_created_post_passes_checks(site: Site) -> None:
    from techblog.checks import run_checks

    create_post(site, "A clean post", description="d", now=NOW)

    reloaded = load_site(site.root)
    assert [f for f in run_checks(reloaded) if f.path.endswith("a-clean-post.md")] == []


def test_create_post_uses_site_timezone(tmp_path, write_file) -> None:
    write_file("_config.yml", "timezone: Asia/Tokyo\n")
    site = load_site(tmp_path)

    path = create_post(site, "Late night", now=NOW)

    assert path.name == "2024-03-10-late-night.md"
    assert "+0900" in path.read_text(encoding="utf-8")


def test_create_post_rejects_blank_title(site: Site) -> None:
    with pytest.raises(ValueError, match="blank"):
        create_post(site, "   ")
