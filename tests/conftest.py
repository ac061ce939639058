from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest

from techblog.site import Site, load_site

SITE_CONFIG = """\
title: Notes on Systems
url: https://example.com
baseurl: /blog
timezone: UTC
permalink: /posts/:title/
collections:
  tabs:
    output: true
    permalink: /:title/
    sort_by: order
exclude:
  - README.md
"""

CACHING_POST = """\
---
layout: post
title: Caching basics
date: 2023-04-01 10:00:00 +0000
categories: [Systems, Caching]
tags: [cache, latency]
description: What a cache buys you and what it costs.
---

## Why cache

Reads are cheap when they never reach the database. See the
[tuning notes]({% post_url 2023-05-02-postgres-tuning %}) and [about me]({{ site.baseurl }}/about/).

![diagram]({{ '/assets/img/cache.png' | relative_url }})
"""

POSTGRES_POST = """\
---
layout: post
title: Tuning PostgreSQL for write-heavy loads
date: 2023-05-02 08:30:00 +0000
categories: [Databases]
tags: [postgresql]
description: Checkpoints, WAL and autovacuum.
---

## Write-heavy loads

Start from the [caching post](/blog/posts/caching-basics/#why-cache).
"""

ABOUT_TAB = """\
---
layout: page
title: About
icon: fas fa-info-circle
order: 4
---

I write about the systems I operate.
"""

INDEX_PAGE = """\
---
layout: home
title: Home
---
"""

SiteWriter = Callable[[str, str], Path]


@pytest.fixture
def write_file(tmp_path: Path) -> SiteWriter:
    """Write ``text`` (dedented) at a path relative to ``tmp_path``."""

    def _write(relative_path: str, text: str) -> Path:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def site_root(tmp_path: Path, write_file: SiteWriter) -> Path:
    """A small, valid site: two posts, one tab, a home page and an image."""
    write_file("_config.yml", SITE_CONFIG)
    write_file("_posts/2023-04-01-caching-basics.md", CACHING_POST)
    write_file("_posts/2023-05-02-postgres-tuning.md", POSTGRES_POST)
    write_file("_tabs/about.md", ABOUT_TAB)
    write_file("index.html", INDEX_PAGE)
    write_file("README.md", "# Not part of the site\n")
    image = tmp_path / "assets" / "img" / "cache.png"
    image.parent.mkdir(parents=True)
    image.write_bytes(b"\x89PNG\r\n")
    return tmp_path


@pytest.fixture
def site(site_root: Path) -> Site:
    return load_site(site_root)
