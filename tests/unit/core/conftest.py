"""Shared fixtures for core unit tests"""

from pathlib import Path

import pytest

from mdcontent.core.parse import parse_text


POST_MD = """\
---
title: Building a REST API in Go with Gin
date: 2019-07-04 10:15:00
category: Go
tags: [Go, Gin]
keywords: golang, gin
---

Gin is a small HTTP framework.

<!-- more -->

## Getting started

```go
r := gin.Default()
```

Run the server.
"""

PAGE_MD = """\
---
title: About
---

# About

Hi there.
"""


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    """Factory: parse text as if it lived at the given path under the content root."""
    def _make(text: str, path: str = "posts/post.md"):
        return parse_text(text, Path(path))
    return _make


@pytest.fixture(name="post_doc")
def post_doc_fixture(make_doc):
    return make_doc(POST_MD, "posts/gin.md")


@pytest.fixture(name="page_doc")
def page_doc_fixture(make_doc):
    return make_doc(PAGE_MD, "about.md")


@pytest.fixture(name="content_root")
def content_root_fixture(tmp_path):
    """A small on-disk collection: one page and one post."""
    root = tmp_path / "content"
    (root / "posts").mkdir(parents=True)
    (root / "about.md").write_text(PAGE_MD)
    (root / "posts" / "gin.md").write_text(POST_MD)
    return root
