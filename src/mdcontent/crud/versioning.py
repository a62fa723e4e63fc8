"""Document history: front matter and body snapshots, pruning, diffs, and revert"""

import json
import logging
from datetime import datetime
from uuid import UUID

import yaml
from sqlalchemy import func
from sqlmodel import Session, select

from mdcontent.core.models import native_date
from mdcontent.core.utils.diff import unified_diff
from mdcontent.crud.frontmatter import apply_frontmatter
from mdcontent.crud.models import Document, DocumentVersion


logger = logging.getLogger(__name__)


def get_version(session: Session, document_id: UUID, num: int) -> DocumentVersion:
    """Return one snapshot of a document. Raises ValueError if it is not stored."""
    version = session.exec(
        select(DocumentVersion)
        .where(DocumentVersion.document_id == document_id)
        .where(DocumentVersion.version_num == num)
    ).one_or_none()
    if version is None:
        raise ValueError(f"Version {num} not found for document {document_id}")
    return version


def snapshot_frontmatter(version: DocumentVersion) -> dict | None:
    """The front matter a snapshot was taken with, or None when it had none."""
    return json.loads(version.frontmatter) if version.frontmatter else None


def version_text(version: DocumentVersion) -> str:
    """A snapshot as source text: its front-matter block followed by the body."""
    fm = snapshot_frontmatter(version)
    if not fm:
        return version.markdown
    if 'date' in fm:
        fm['date'] = native_date(fm['date'])
    header = yaml.safe_dump(fm, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n{version.markdown}"


def diff_versions(session: Session, document_id: UUID, from_num: int, to_num: int, context: int = 3) -> list[str]:
    """Unified diff of two snapshots, front matter included. Raises ValueError if either is missing."""
    old = get_version(session, document_id, from_num)
    new = get_version(session, document_id, to_num)
    return unified_diff(version_text(old), version_text(new), f"v{from_num}", f"v{to_num}", context)


def list_versions(session: Session, document_id: UUID) -> list[DocumentVersion]:
    """Snapshots of one document, oldest first."""
    return list(session.exec(
        select(DocumentVersion)
        .where(DocumentVersion.document_id == document_id)
        .order_by(DocumentVersion.version_num)
    ).all())


def prune_versions(session: Session, document_id: UUID, max_versions: int) -> int:
    """Keep only the newest max_versions snapshots; 0 keeps them all. Returns the number deleted."""
    if max_versions <= 0:
        return 0
    stale = list_versions(session, document_id)[:-max_versions]
    for version in stale:
        session.delete(version)
    if stale:
        session.flush()
        logger.debug("Pruned %d version(s) of %s", len(stale), document_id)
    return len(stale)


def save_version(session: Session, doc: Document, max_versions: int = 10) -> DocumentVersion:
    """Snapshot the document's current body and front matter.

    Version numbers rise by one per document and are never reused, even after
    pruning.
    """
    latest = session.exec(
        select(func.max(DocumentVersion.version_num)).where(DocumentVersion.document_id == doc.id)
    ).one()
    version = DocumentVersion(
        document_id=doc.id,
        version_num=(latest or 0) + 1,
        markdown=doc.markdown,
        hash=doc.hash,
        frontmatter=json.dumps(doc.frontmatter) if doc.frontmatter is not None else None,
    )
    session.add(version)
    session.flush()
    prune_versions(session, doc.id, max_versions)
    return version


def revert_to_version(session: Session, doc: Document, version_num: int, max_versions: int = 10) -> Document:
    """Make a stored snapshot the document's current state.

    The state being replaced is snapshotted first. Slug, title, category,
    published date and tags are derived again from the restored front matter,
    the same way a commit derives them. Flushes but does not commit.
    Raises ValueError if version_num is not stored for this document.
    """
    target = get_version(session, doc.id, version_num)
    save_version(session, doc, max_versions=max_versions)

    doc.markdown = target.markdown
    doc.hash = target.hash
    doc.updated_at = datetime.now()
    fm = snapshot_frontmatter(target)
    if fm is None:
        doc.frontmatter = None
        session.add(doc)
        session.flush()
    else:
        apply_frontmatter(session, doc, fm)
    logger.debug("Reverted %s to v%d", doc.path, version_num)
    return doc
