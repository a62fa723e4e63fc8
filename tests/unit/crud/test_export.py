"""Unit tests for core/export.py"""

import json
from datetime import datetime

import pytest
import yaml

from mdcontent.core.export import build_markdown, build_sidecar, export_docs, stats_for, write_doc
from mdcontent.crud.documents import commit_doc


PAGE_MD = "---\ntitle: About\nlayout: page\n---\n\n# About\n\nHi.\n"
POST_MD_WITH_SLUG = "---\ntitle: Escape\nslug: ../../escaped\n---\n\nBody.\n"


def _split(md: str) -> tuple[dict, str]:
    _, header, body = md.split("---\n", 2)
    return yaml.safe_load(header), body


def test_build_markdown_frontmatter_order(session, doc):
    """Frontmatter is canonical-ordered with the slug included."""
    fm, body = _split(build_markdown(doc))
    assert list(fm) == ["title", "slug", "date", "category", "tags", "keywords"]
    assert fm["slug"] == "celery"
    assert body.startswith("\nCelery hands slow work")


def test_build_markdown_restores_native_date(session, doc):
    """The ISO date stored in the database is written back as a YAML timestamp."""
    fm, _ = _split(build_markdown(doc))
    assert fm["date"] == datetime(2018, 3, 12, 21, 40)


def test_build_markdown_keeps_extras(session, parse):
    page, _ = commit_doc(session, parse(PAGE_MD, "about.md"))
    fm, _ = _split(build_markdown(page))
    assert list(fm) == ["title", "slug", "layout"]


def test_build_sidecar(session, doc):
    stats = stats_for(doc)
    sidecar = build_sidecar(doc, stats)
    assert sidecar["slug"] == "celery"
    assert sidecar["kind"] == "post"
    assert sidecar["committed_at"] is None
    assert sidecar["frontmatter"]["category"] == "Python"
    assert sidecar["stats"]["headings"] == [{"level": 2, "text": "Running a worker"}]
    json.dumps(sidecar)


def test_stats_for_counts_words(session, doc):
    stats = stats_for(doc)
    assert stats.words == 16
    assert stats.reading_minutes == 1
    assert stats.excerpt == "Celery hands slow work to background workers."


def test_export_docs_writes_files(tmp_path, session, parse, doc):
    """Each document gets .md + .json under its source directory; index.json at the root."""
    page, _ = commit_doc(session, parse(PAGE_MD, "about.md"))
    results, index_path = export_docs(session, [doc, page], tmp_path)

    assert dict(results) == {"celery": tmp_path / "posts" / "celery.md", "about": tmp_path / "about.md"}
    assert (tmp_path / "posts" / "celery.json").exists()
    assert (tmp_path / "about.json").exists()

    index = json.loads(index_path.read_text())
    assert index_path == tmp_path / "index.json"
    assert [d["slug"] for d in index["documents"]] == ["celery", "about"]
    assert index["tags"] == {"Celery": ["celery"], "Django": ["celery"]}
    assert index["categories"] == {"Python": ["celery"]}
    assert index["documents"][0]["keywords"] == ["django", "celery"]


def test_write_doc_stays_under_output_dir(tmp_path, session, doc):
    """A slug that climbs out of the output directory is refused."""
    doc.slug = "../../escaped"
    out = tmp_path / "a" / "b" / "dist"
    with pytest.raises(ValueError, match="outside"):
        write_doc(doc, out, stats_for(doc))
    assert not (tmp_path / "a" / "escaped.md").exists()
    assert not out.exists()


def test_frontmatter_slug_is_slugified_before_export(tmp_path, session, parse):
    post, _ = commit_doc(session, parse(POST_MD_WITH_SLUG, "posts/celery.md"))
    md_path, _ = write_doc(post, tmp_path, stats_for(post))
    assert post.slug == "escaped"
    assert md_path == tmp_path / "posts" / "escaped.md"
