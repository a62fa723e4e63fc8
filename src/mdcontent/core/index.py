"""Collection index: ordering, category/tag grouping, and filtering"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from mdcontent.core.models import DocStats
from mdcontent.crud.models import DocKind


class IndexEntry(BaseModel):
    """Summary of one document as it appears in listings and index.json."""
    slug:      str
    path:      str
    kind:      DocKind
    title:     str
    published: Optional[datetime] = None
    category:  Optional[str] = None
    tags:      list[str] = []
    keywords:  list[str] = []
    stats:     DocStats = DocStats()


def _sort_key(entry: IndexEntry) -> tuple:
    """Posts first, newest first; then pages (and undated posts) by title."""
    if entry.kind == DocKind.post and entry.published is not None:
        return (0, -entry.published.timestamp(), entry.slug)
    return (1, entry.title.casefold(), entry.slug)


def order_entries(entries: list[IndexEntry]) -> list[IndexEntry]:
    return sorted(entries, key=_sort_key)


def filter_entries(
    entries: list[IndexEntry],
    kind: DocKind | None = None,
    category: str | None = None,
    tag: str | None = None,
    ) -> list[IndexEntry]:
    """Keep entries matching every given criterion; category and tag compare case-insensitively."""
    def _match(e: IndexEntry) -> bool:
        if kind is not None and e.kind != kind:
            return False
        if category is not None and (e.category or '').casefold() != category.casefold():
            return False
        if tag is not None and tag.casefold() not in {t.casefold() for t in e.tags}:
            return False
        return True
    return [e for e in entries if _match(e)]


def build_index(entries: list[IndexEntry]) -> dict[str, Any]:
    """Return a JSON-ready index: ordered documents plus category and tag maps of slugs."""
    ordered = order_entries(entries)
    categories: dict[str, list[str]] = defaultdict(list)
    tags: dict[str, list[str]] = defaultdict(list)
    for e in ordered:
        if e.category:
            categories[e.category].append(e.slug)
        for t in dict.fromkeys(e.tags):
            tags[t].append(e.slug)
    return {
        "documents": [e.model_dump(mode='json') for e in ordered],
        "categories": dict(sorted(categories.items())),
        "tags": dict(sorted(tags.items())),
    }
