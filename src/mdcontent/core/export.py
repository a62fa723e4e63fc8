"""Export pipeline: normalized markdown, sidecar JSON, and the collection index"""

import json
from pathlib import Path

import yaml
from sqlmodel import Session

from mdcontent.core.index import IndexEntry, build_index
from mdcontent.core.models import DocStats, canonical_order, native_date
from mdcontent.core.parse import tokenize
from mdcontent.core.stats import body_stats
from mdcontent.crud.documents import get_tags
from mdcontent.crud.models import Document


def build_markdown(doc: Document) -> str:
    """Return the body with a canonical-order YAML frontmatter block prepended (slug always set)."""
    fm = dict(doc.frontmatter or {})
    fm['slug'] = doc.slug
    if 'date' in fm:
        fm['date'] = native_date(fm['date'])
    fm = canonical_order(fm)
    header = yaml.safe_dump(fm, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n\n{doc.markdown.strip()}\n"


def stats_for(doc: Document, parser_config: str = 'commonmark', words_per_minute: int = 200) -> DocStats:
    """Recompute DocStats from the stored body."""
    return body_stats(doc.markdown, tokenize(doc.markdown, parser_config), words_per_minute)


def index_entry(doc: Document, tags: list[str], stats: DocStats | None = None) -> IndexEntry:
    """Listing entry for a stored document; stats default to empty."""
    fm = doc.frontmatter or {}
    return IndexEntry(
        slug=doc.slug,
        path=doc.path,
        kind=doc.kind,
        title=doc.title,
        published=doc.published,
        category=doc.category,
        tags=tags,
        keywords=fm.get('keywords', []),
        stats=stats if stats is not None else DocStats(),
    )


def build_sidecar(doc: Document, stats: DocStats) -> dict:
    """Build the sidecar JSON dict: slug, path, kind, committed_at, frontmatter, stats."""
    return {
        "slug": doc.slug,
        "path": doc.path,
        "kind": doc.kind.value,
        "committed_at": doc.committed_at.isoformat() if doc.committed_at else None,
        "frontmatter": doc.frontmatter or {},
        "stats": stats.model_dump(mode='json'),
    }


def write_doc(
    doc: Document,
    output_dir: Path,
    stats: DocStats,
    ) -> tuple[Path, Path]:
    """Write normalized markdown + sidecar JSON for a single document.

    Output path mirrors the source directory structure:
      output_dir / Path(doc.path).parent / doc.slug.{md|json}

    Returns (md_path, json_path). Raises ValueError when the destination
    would fall outside output_dir.
    """
    dest_dir = output_dir / Path(doc.path).parent
    md_path = dest_dir / f"{doc.slug}.md"
    json_path = dest_dir / f"{doc.slug}.json"
    if not md_path.resolve().is_relative_to(output_dir.resolve()):
        raise ValueError(f"Refusing to write '{doc.slug}' outside {output_dir}: {md_path}")

    dest_dir.mkdir(parents=True, exist_ok=True)
    md_path.write_text(build_markdown(doc), encoding='utf-8')
    json_path.write_text(json.dumps(build_sidecar(doc, stats), indent=2, ensure_ascii=False), encoding='utf-8')
    return md_path, json_path


def write_index(entries: list[IndexEntry], output_dir: Path) -> Path:
    """Write index.json for the given entries at the output root."""
    output_dir.mkdir(parents=True, exist_ok=True)
    index_path = output_dir / "index.json"
    index_path.write_text(json.dumps(build_index(entries), indent=2, ensure_ascii=False), encoding='utf-8')
    return index_path


def export_docs(
    session: Session,
    docs: list[Document],
    output_dir: Path,
    parser_config: str = 'commonmark',
    words_per_minute: int = 200,
    ) -> tuple[list[tuple[str, Path]], Path]:
    """Write every document and the index. Returns ((slug, md_path) pairs, index_path)."""
    results, entries = [], []
    for doc in docs:
        stats = stats_for(doc, parser_config, words_per_minute)
        md_path, _ = write_doc(doc, output_dir, stats)
        entries.append(index_entry(doc, get_tags(session, doc), stats))
        results.append((doc.slug, md_path))
    return results, write_index(entries, output_dir)
