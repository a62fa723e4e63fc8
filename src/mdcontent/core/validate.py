"""Well-formedness checks for frontmatter documents and collections"""

import logging
from collections import defaultdict
from pathlib import Path

from pydantic import ValidationError

from mdcontent.core.models import Issue, ParsedDoc, Report, split_terms
from mdcontent.core.parse import FrontMatterError, discover_files, parse_file, relative_to_root
from mdcontent.crud.models import DocKind


logger = logging.getLogger(__name__)

REQUIRED_FIELDS: dict[DocKind, tuple[str, ...]] = {
    DocKind.page: ('title',),
    DocKind.post: ('title', 'date'),
}


def _issue(doc_path, code: str, message: str, severity: str = 'error') -> Issue:
    return Issue(path=Path(doc_path).as_posix(), code=code, severity=severity, message=message)


def _field_issues(doc: ParsedDoc) -> list[Issue]:
    """Missing required keys first, then schema errors on the keys that are present."""
    missing = [name for name in REQUIRED_FIELDS[doc.kind] if doc.frontmatter.get(name) in (None, '')]
    issues = [
        _issue(doc.path, 'missing-field', f"missing required field '{name}' for a {doc.kind.value}")
        for name in missing
    ]
    try:
        doc.meta()
    except ValidationError as e:
        for err in e.errors():
            if err['loc'] and err['loc'][0] in missing:
                continue
            loc = '.'.join(str(part) for part in err['loc'])
            issues.append(_issue(doc.path, 'invalid-field', f"{loc}: {err['msg']}"))
    return issues


def _tags(doc: ParsedDoc) -> list[str]:
    """The normalized tag list, read from the tags value alone."""
    tags = split_terms(doc.frontmatter.get('tags'))
    return tags if isinstance(tags, list) else []


def _post_warnings(doc: ParsedDoc) -> list[Issue]:
    if doc.kind != DocKind.post:
        return []
    issues = []
    if not str(doc.frontmatter.get('category') or '').strip():
        issues.append(_issue(doc.path, 'missing-category', "post has no category", 'warning'))
    if not _tags(doc):
        issues.append(_issue(doc.path, 'missing-tags', "post has no tags", 'warning'))
    return issues


def _duplicate_tags(doc: ParsedDoc) -> list[Issue]:
    seen, issues = set(), []
    for tag in _tags(doc):
        key = tag.casefold()
        if key in seen:
            issues.append(_issue(doc.path, 'duplicate-tag', f"tag '{tag}' is listed more than once", 'warning'))
        seen.add(key)
    return issues


def validate_doc(doc: ParsedDoc) -> list[Issue]:
    """Return all issues for a single parsed document."""
    if not doc.has_frontmatter:
        issues = [_issue(doc.path, 'missing-frontmatter', "document has no frontmatter block")]
    else:
        issues = _field_issues(doc) + _post_warnings(doc) + _duplicate_tags(doc)
    if not doc.markdown.strip():
        issues.append(_issue(doc.path, 'empty-body', "frontmatter is not followed by any body text"))
    return issues


def validate_file(
    path: Path,
    root: Path = None,
    parser_config: str = 'commonmark',
    posts_dir: str = 'posts',
    ) -> tuple[ParsedDoc | None, list[Issue]]:
    """Parse and validate one file. Unreadable frontmatter becomes an issue, not an exception."""
    try:
        doc = parse_file(path, root, parser_config, posts_dir)
    except FrontMatterError as e:
        rel = relative_to_root(path, root) if root is not None else Path(path.name)
        return None, [_issue(rel, 'invalid-frontmatter', str(e))]
    return doc, validate_doc(doc)


def duplicate_slugs(docs: list[ParsedDoc]) -> list[Issue]:
    """One issue per document whose slug is shared with another document."""
    by_slug: dict[str, list[ParsedDoc]] = defaultdict(list)
    for doc in docs:
        by_slug[doc.slug].append(doc)
    issues = []
    for slug, group in sorted(by_slug.items()):
        if len(group) < 2:
            continue
        others = ', '.join(d.path.as_posix() for d in group)
        for doc in group:
            issues.append(_issue(doc.path, 'duplicate-slug', f"slug '{slug}' is shared by: {others}"))
    return issues


def validate_collection(
    path: Path,
    parser_config: str = 'commonmark',
    posts_dir: str = 'posts',
    strict: bool = False,
    root: Path = None,
    ) -> tuple[list[ParsedDoc], Report]:
    """Validate every document under path. Returns the parsed docs and the report.

    Document paths are taken relative to root, which defaults to path itself.
    """
    docs: list[ParsedDoc] = []
    report = Report()
    root = path if root is None else root
    for p in discover_files(path):
        doc, issues = validate_file(p, root, parser_config, posts_dir)
        report.checked += 1
        report.issues.extend(issues)
        if doc is not None:
            docs.append(doc)
    report.issues.extend(duplicate_slugs(docs))

    if strict:
        for issue in report.issues:
            issue.severity = 'error'
    logger.info("Checked %d document(s): %d error(s), %d warning(s)",
                report.checked, len(report.errors), len(report.warnings))
    return docs, report
