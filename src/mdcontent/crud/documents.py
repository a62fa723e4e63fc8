"""Document persistence: upsert by path and lookups"""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from mdcontent.core.models import ParsedDoc
from mdcontent.crud.frontmatter import apply_frontmatter, document_fields, replace_tags
from mdcontent.crud.models import DocKind, Document, DocumentTag
from mdcontent.crud.versioning import save_version


logger = logging.getLogger(__name__)


def get_by_path(session: Session, path: str) -> Document | None:
    """Return the Document with the given source path, or None if not found."""
    return session.exec(select(Document).where(Document.path == path)).one_or_none()


def get_all_by_slug(session: Session, slug: str) -> list[Document]:
    """Return every Document with the given slug, ordered by path."""
    return list(session.exec(select(Document).where(Document.slug == slug).order_by(Document.path)).all())


def get_by_slug(session: Session, slug: str) -> Document | None:
    """Return the Document with the given slug, or None if not found.

    Raises ValueError when documents at different paths share the slug.
    """
    docs = get_all_by_slug(session, slug)
    if len(docs) > 1:
        paths = ', '.join(d.path for d in docs)
        raise ValueError(f"Slug '{slug}' is ambiguous; it matches: {paths}")
    return docs[0] if docs else None


def get_last_committed(session: Session) -> list[Document]:
    """Return documents from the most recent commit batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(Document.committed_at))).one()
    if max_ts is None:
        return []
    return list(session.exec(select(Document).where(Document.committed_at == max_ts)).all())


def get_all_documents(session: Session, kind: DocKind | None = None) -> list[Document]:
    """Return all documents, optionally only one kind."""
    stmt = select(Document)
    if kind is not None:
        stmt = stmt.where(Document.kind == kind)
    return list(session.exec(stmt).all())


def get_by_category(session: Session, category: str) -> list[Document]:
    """Return documents whose category matches case-insensitively."""
    return list(session.exec(
        select(Document).where(func.lower(Document.category) == category.lower())
    ).all())


def get_by_tag(session: Session, tag: str) -> list[Document]:
    """Return documents carrying the given tag."""
    return list(session.exec(
        select(Document)
        .join(DocumentTag, DocumentTag.document_id == Document.id)
        .where(func.lower(DocumentTag.tag_name) == tag.lower())
    ).all())


def get_tags(session: Session, doc: Document) -> list[str]:
    """Return the document's tags in frontmatter order."""
    return list(session.exec(
        select(DocumentTag.tag_name)
        .where(DocumentTag.document_id == doc.id)
        .order_by(DocumentTag.position)
    ).all())


def list_tags(session: Session) -> list[tuple[str, int]]:
    """Return (tag, document count) pairs sorted by tag name."""
    rows = session.exec(
        select(DocumentTag.tag_name, func.count(DocumentTag.document_id))
        .group_by(DocumentTag.tag_name)
        .order_by(DocumentTag.tag_name)
    ).all()
    return [(name, count) for name, count in rows]


def commit_doc(
    session: Session,
    parsed: ParsedDoc,
    max_versions: int = 10,
    committed_at: datetime | None = None,
    ) -> tuple[Document, str]:
    """Upsert a parsed, valid document.

    Returns (doc, status) where status is 'created', 'updated', or 'unchanged'.
    Flushes but does not commit; caller controls the transaction.
    committed_at is set on created/updated docs only.
    """
    meta = parsed.meta()
    path = parsed.path.as_posix()
    doc = get_by_path(session, path)

    if doc:
        if doc.hash == parsed.hash:
            return doc, 'unchanged'
        save_version(session, doc, max_versions)
        doc.kind = parsed.kind
        doc.markdown = parsed.markdown
        doc.hash = parsed.hash
        doc.updated_at = datetime.now()
        doc.committed_at = committed_at
        apply_frontmatter(session, doc, parsed.frontmatter)
        logger.debug("Updated %s", path)
        return doc, 'updated'

    doc = Document(
        path=path,
        kind=parsed.kind,
        markdown=parsed.markdown,
        hash=parsed.hash,
        committed_at=committed_at,
        **document_fields(meta, path),
    )
    session.add(doc)
    session.flush()
    replace_tags(session, doc.id, meta.tags)
    logger.debug("Created %s", path)
    return doc, 'created'
