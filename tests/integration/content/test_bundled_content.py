"""The documents shipped in content/ must stay well-formed"""

from pathlib import Path

from mdcontent.core.stats import doc_stats
from mdcontent.core.validate import validate_collection
from mdcontent.crud.models import DocKind


CONTENT_DIR = Path(__file__).parents[3] / "content"


def test_bundled_content_is_well_formed():
    """Every document has valid frontmatter followed by a non-empty body."""
    docs, report = validate_collection(CONTENT_DIR, strict=True)
    assert report.ok, [i.model_dump() for i in report.issues]
    assert report.checked == 3


def test_bundled_content_kinds():
    docs, _ = validate_collection(CONTENT_DIR)
    kinds = {d.slug: d.kind for d in docs}
    assert kinds == {
        "about": DocKind.page,
        "django-celery-task-queues": DocKind.post,
        "go-gin-web-framework": DocKind.post,
    }


def test_bundled_posts_have_excerpt_marker():
    for path in (CONTENT_DIR / "posts").glob("*.md"):
        assert "<!-- more -->" in path.read_text(encoding="utf-8"), path.name


def test_bundled_post_excerpts_are_plain_text():
    docs, _ = validate_collection(CONTENT_DIR)
    for doc in docs:
        text = doc_stats(doc).excerpt
        assert text, doc.slug
        assert "`" not in text and "**" not in text and "](" not in text, doc.slug
