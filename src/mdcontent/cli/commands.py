"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdcontent.config import Settings, load_config
from mdcontent.core.export import index_entry
from mdcontent.core.index import filter_entries, order_entries
from mdcontent.core.models import Report
from mdcontent.core.pipeline import committable, run_check, run_commit, run_export
from mdcontent.crud.database import init_db, make_engine, reset_db
from mdcontent.crud.documents import (
    get_all_documents,
    get_by_category,
    get_by_slug,
    get_by_tag,
    get_last_committed,
    get_tags,
    list_tags,
)
from mdcontent.crud.models import DocKind
from mdcontent.crud.versioning import diff_versions, list_versions


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _echo_report(report: Report) -> None:
    """Print one line per issue and a summary line."""
    for issue in report.issues:
        typer.echo(f"  {issue.severity}: {issue.path}: [{issue.code}] {issue.message}")
    typer.echo(
        f"Checked {report.checked} document(s) - "
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    )


def _echo_commit(counts: dict, changes: list) -> None:
    """Print per-doc commit status and a summary line."""
    for status, slug in changes:
        typer.echo(f"  {status}: {slug}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def _check(path: str, settings: Settings):
    try:
        docs, report = run_check(path, settings)
    except RuntimeError as e:
        _fail(str(e))
    _echo_report(report)
    return docs, report


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def check_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to check (default: content_dir)")] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as errors")] = False,
    ):
    """Check frontmatter and body well-formedness without touching the database."""
    settings = _settings(overrides={"strict": strict or None})
    _, report = _check(path or settings.content_dir, settings)
    if not report.ok:
        raise typer.Exit(1)


def commit_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to commit (default: content_dir)")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per doc")] = None,
    ):
    """Validate and upsert documents into the database; invalid documents are skipped."""
    settings = _settings(overrides={"max_versions": versions})
    docs, report = _check(path or settings.content_dir, settings)
    valid = committable(docs, report)
    if not valid:
        typer.echo("No valid documents to commit.")
        raise typer.Exit(1)
    try:
        counts, changes = run_commit(_engine(settings), valid, settings.max_versions)
    except RuntimeError as e:
        _fail("Commit failed", e)
    _echo_commit(counts, changes)


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    all_docs: Annotated[bool, typer.Option("--all", help="Export all documents in the database")] = False,
    ):
    """Write normalized markdown, sidecar JSON, and index.json to the output dir."""
    settings = _settings(overrides={"output_dir": out})
    engine = _engine(settings)
    output_dir = Path(settings.output_dir)

    try:
        with Session(engine) as session:
            docs = get_all_documents(session) if all_docs else get_last_committed(session)
            if not docs:
                typer.echo(f"No documents found for scope: {'all' if all_docs else 'last commit'}.")
                raise typer.Exit(1)
            results, index_path = run_export(session, docs, output_dir, settings)
    except typer.Exit:
        raise
    except Exception as e:
        _fail("Export failed", e)

    for slug, md_path in results:
        typer.echo(f"  {slug} -> {md_path}")
    typer.echo(f"Exported {len(results)} document(s) and {index_path.name} to {output_dir}/")


def build_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to process (default: content_dir)")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    force: Annotated[bool, typer.Option("--force", help="Continue past validation errors, skipping bad docs")] = False,
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as errors")] = False,
    ):
    """Run the full pipeline: check -> commit -> export."""
    settings = _settings(overrides={"output_dir": out, "strict": strict or None})

    # --- check ---
    docs, report = _check(path or settings.content_dir, settings)
    if not report.ok and not force:
        _fail("Validation failed; fix the errors above or pass --force")
    valid = committable(docs, report)
    if not valid:
        _fail("No valid documents to build")

    # --- commit ---
    engine = _engine(settings)
    try:
        counts, changes = run_commit(engine, valid, settings.max_versions)
    except RuntimeError as e:
        _fail("Commit failed", e)
    _echo_commit(counts, changes)

    # --- export ---
    output_dir = Path(settings.output_dir)
    try:
        with Session(engine) as session:
            results, index_path = run_export(session, get_all_documents(session), output_dir, settings)
    except Exception as e:
        _fail("Export failed", e)
    for slug, md_path in results:
        typer.echo(f"  {slug} -> {md_path}")
    typer.echo(f"Exported {len(results)} document(s) and {index_path.name} to {output_dir}/")


def list_cmd(
    kind: Annotated[Optional[DocKind], typer.Option("--kind", help="Only pages or only posts")] = None,
    category: Annotated[Optional[str], typer.Option("--category", help="Only documents in this category")] = None,
    tag: Annotated[Optional[str], typer.Option("--tag", help="Only documents with this tag")] = None,
    ):
    """List committed documents: dated posts newest first, then the rest by title."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        if tag:
            docs = get_by_tag(session, tag)
        elif category:
            docs = get_by_category(session, category)
        else:
            docs = get_all_documents(session, kind)
        entries = [index_entry(d, get_tags(session, d)) for d in docs]
    entries = order_entries(filter_entries(entries, kind, category, tag))

    if not entries:
        typer.echo("No documents found in database.")
        raise typer.Exit(1)
    for e in entries:
        date = e.published.date().isoformat() if e.published else "-" * 10
        typer.echo(f"{date}  {e.kind.value:<4}  {e.slug}  {e.title}")


def tags_cmd():
    """List tags with the number of documents carrying each."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        rows = list_tags(session)
    if not rows:
        typer.echo("No tags found in database.")
        raise typer.Exit(1)
    for name, count in rows:
        typer.echo(f"{name} ({count})")


def history_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    diff: Annotated[tuple[int, int], typer.Option("--diff", help="Diff two version numbers")] = (None, None),
    ):
    """Show stored versions of a document, or a diff between two of them."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        try:
            doc = get_by_slug(session, slug)
        except ValueError as e:
            _fail(str(e))
        if doc is None:
            _fail(f"No document with slug '{slug}'")
        if diff[0] is not None:
            try:
                lines = diff_versions(session, doc.id, diff[0], diff[1])
            except ValueError as e:
                _fail(str(e))
            typer.echo("".join(lines) or "No differences.")
            return
        versions = list_versions(session, doc.id)

    if not versions:
        typer.echo(f"No prior versions of '{slug}'.")
        return
    for v in versions:
        typer.echo(f"  v{v.version_num}  {v.created_at.isoformat(timespec='seconds')}  {v.hash[:12]}")
