"""Document columns and tag links derived from front matter"""

from typing import Any

from sqlmodel import Session, select

from mdcontent.core.models import FrontMatter
from mdcontent.core.utils.slug import doc_slug
from mdcontent.crud.models import Document, DocumentTag, Tag


def document_fields(meta: FrontMatter, path: str) -> dict[str, Any]:
    """Columns a Document takes from its front matter.

    The frontmatter column holds the JSON form (ISO dates) in canonical order.
    """
    return dict(
        slug=doc_slug(path, meta.slug),
        title=meta.title,
        category=meta.category,
        published=meta.published,
        frontmatter=meta.ordered(mode='json') or None,
    )


def replace_tags(session: Session, doc_id, tags: list[str]) -> None:
    """Delete existing tag links for a document and insert the new ordered set."""
    for row in session.exec(select(DocumentTag).where(DocumentTag.document_id == doc_id)).all():
        session.delete(row)
    session.flush()

    for position, name in enumerate(dict.fromkeys(tags)):
        if not session.get(Tag, name):
            session.add(Tag(name=name))
            session.flush()
        session.add(DocumentTag(document_id=doc_id, tag_name=name, position=position))
    session.flush()


def apply_frontmatter(session: Session, doc: Document, frontmatter: dict[str, Any]) -> FrontMatter:
    """Set every front-matter derived column on doc and relink its tags.

    Raises pydantic.ValidationError when frontmatter does not fit the schema.
    """
    meta = FrontMatter.model_validate(frontmatter)
    for name, value in document_fields(meta, doc.path).items():
        setattr(doc, name, value)
    session.add(doc)
    session.flush()
    replace_tags(session, doc.id, meta.tags)
    return meta
