"""File discovery, frontmatter extraction, and markdown-it tokenization"""

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Any

import yaml
from markdown_it import MarkdownIt

from mdcontent.core.models import ParsedDoc
from mdcontent.core.utils.hashing import sha256
from mdcontent.core.utils.slug import doc_slug
from mdcontent.crud.models import DocKind


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n(.*?)\r?\n?^---[ \t]*(?:\r?\n|$)', re.DOTALL | re.MULTILINE)
MD_EXTENSIONS = {'.md', '.mdx'}


class FrontMatterError(ValueError):
    """Raised when a frontmatter block exists but is not a YAML mapping."""


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset)


def tokenize(body: str, parser_config: str = 'commonmark') -> list:
    """Tokenize a markdown body (no frontmatter handling)."""
    return _make_parser(parser_config).parse(body)


def split_frontmatter(text: str) -> tuple[dict[str, Any], str, bool]:
    """Return (frontmatter_dict, body, present) with the YAML header removed."""
    text = text.removeprefix('\ufeff')
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text, False
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise FrontMatterError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise FrontMatterError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():], True


def doc_kind(rel_path: Path, posts_dir: str = 'posts') -> DocKind:
    """post if the path sits under posts_dir, else page."""
    parts = PurePosixPath(rel_path.as_posix()).parts
    return DocKind.post if len(parts) > 1 and parts[0] == posts_dir else DocKind.page


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)


def parse_text(
    text: str,
    path: Path,
    parser_config: str = 'commonmark',
    posts_dir: str = 'posts',
    ) -> ParsedDoc:
    """Parse raw markdown text into a ParsedDoc; path is relative to the content root."""
    frontmatter, body, present = split_frontmatter(text)
    tokens = tokenize(body, parser_config)
    return ParsedDoc(
        path=path,
        slug=doc_slug(path, frontmatter.get('slug')),
        kind=doc_kind(path, posts_dir),
        raw_markdown=text,
        markdown=body,
        hash=sha256(text),
        frontmatter=frontmatter,
        has_frontmatter=present,
        tokens=tokens,
    )


def collection_root(path: Path, content_dir: Path) -> Path:
    """Root that document paths under path are taken relative to.

    Anything inside content_dir resolves against content_dir, so a single post
    keeps its posts/ prefix. Other directories are their own root; other files
    sit under their parent.
    """
    if path.resolve().is_relative_to(content_dir.resolve()):
        return content_dir
    return path if path.is_dir() else path.parent


def relative_to_root(path: Path, root: Path) -> Path:
    """Path of a discovered file relative to the collection root (name only for a single file)."""
    if root.is_file():
        return Path(path.name)
    return path.resolve().relative_to(root.resolve())


def parse_file(
    path: Path,
    root: Path = None,
    parser_config: str = 'commonmark',
    posts_dir: str = 'posts',
    ) -> ParsedDoc:
    """Parse a single markdown file into a ParsedDoc with token stream."""
    raw = path.read_text(encoding='utf-8')
    rel = relative_to_root(path, root) if root is not None else Path(path.name)
    logger.debug("Parsing %s", rel)
    return parse_text(raw, rel, parser_config, posts_dir)


def parse_dir(path: Path, parser_config: str = 'commonmark', posts_dir: str = 'posts') -> list[ParsedDoc]:
    """Parse all .md/.mdx files under path (file or directory)."""
    return [parse_file(p, path, parser_config, posts_dir) for p in discover_files(path)]
