"""Pipeline step functions: check, commit, and export orchestration"""

import logging
from datetime import datetime
from pathlib import Path

from sqlmodel import Session

from mdcontent.config import Settings
from mdcontent.core.export import export_docs
from mdcontent.core.models import ParsedDoc, Report
from mdcontent.core.parse import collection_root
from mdcontent.core.validate import validate_collection
from mdcontent.crud.documents import commit_doc
from mdcontent.crud.models import Document


logger = logging.getLogger(__name__)


def run_check(path: str, settings: Settings) -> tuple[list[ParsedDoc], Report]:
    """Parse and validate every document under path.

    Paths inside content_dir keep their place in the collection, so a single
    file under posts_dir is still checked as a post.
    """
    target = Path(path)
    if not target.exists():
        raise RuntimeError(f"Path not found: {target}")
    root = collection_root(target, Path(settings.content_dir))
    return validate_collection(
        target, settings.parser_config, settings.posts_dir, settings.strict, root=root,
    )


def committable(docs: list[ParsedDoc], report: Report) -> list[ParsedDoc]:
    """Docs with no error-level issues."""
    bad = {i.path for i in report.errors}
    return [d for d in docs if d.path.as_posix() not in bad]


def run_commit(
    engine,
    docs: list[ParsedDoc],
    max_versions: int,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Upsert parsed documents in one transaction.

    Returns (counts, changes) where changes is a list of (status, slug) for
    created/updated docs.
    """
    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for parsed in docs:
            try:
                doc, status = commit_doc(session, parsed, max_versions, committed_at)
            except Exception as e:
                raise RuntimeError(f"Failed to commit {parsed.path}: {e}") from e
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, doc.slug))
        session.commit()
    logger.info("Committed %d document(s)", len(docs))
    return counts, changes


def run_export(
    session: Session,
    docs: list[Document],
    output_dir: Path,
    settings: Settings,
    ) -> tuple[list[tuple[str, Path]], Path]:
    """Write docs and index.json to output_dir using an open session."""
    results, index_path = export_docs(
        session, docs, output_dir, settings.parser_config, settings.words_per_minute,
    )
    logger.info("Exported %d document(s) to %s", len(results), output_dir)
    return results, index_path
