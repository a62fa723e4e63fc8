"""Reading statistics: word count, reading time, heading outline, and excerpt"""

import math
import re

from mdcontent.core.models import DocStats, Heading, ParsedDoc
from mdcontent.core.parse import tokenize
from mdcontent.core.utils.tokens import heading_level, inline_text


MORE_RE = re.compile(r'^\s*<!--\s*more\s*-->\s*$', re.MULTILINE | re.IGNORECASE)
WORD_RE = re.compile(r"[\w][\w'’.-]*")


def count_words(tokens: list) -> int:
    """Count words in inline text; fenced and indented code blocks are skipped."""
    return sum(len(WORD_RE.findall(inline_text(t))) for t in tokens if t.type == 'inline')


def outline(tokens: list) -> list[Heading]:
    """Return the heading outline as (level, text) pairs in document order."""
    headings = []
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is not None and i + 1 < len(tokens):
            headings.append(Heading(level=level, text=inline_text(tokens[i + 1]).strip()))
    return headings


def _paragraph_text(tokens: list) -> list[str]:
    """Plain text of each paragraph-level inline token; heading text is left out."""
    return [
        inline_text(tok) for i, tok in enumerate(tokens)
        if tok.type == 'inline' and not (i and tokens[i - 1].type == 'heading_open')
    ]


def excerpt(markdown: str, tokens: list, parser_config: str = 'commonmark') -> str:
    """Body text before a <!-- more --> marker, else the first paragraph, as plain text."""
    m = MORE_RE.search(markdown)
    if m:
        lead = _paragraph_text(tokenize(markdown[:m.start()], parser_config))
        return ' '.join(' '.join(lead).split())
    for i, tok in enumerate(tokens):
        if tok.type == 'paragraph_open' and i + 1 < len(tokens):
            return ' '.join(inline_text(tokens[i + 1]).split())
    return ''


def reading_minutes(markdown: str, words: int, words_per_minute: int = 200) -> int:
    """Minutes at words_per_minute, rounded up; any non-blank body takes at least one."""
    if not markdown.strip():
        return 0
    return max(1, math.ceil(words / words_per_minute))


def body_stats(markdown: str, tokens: list, words_per_minute: int = 200) -> DocStats:
    """Compute DocStats from a body and its token stream."""
    words = count_words(tokens)
    return DocStats(
        words=words,
        reading_minutes=reading_minutes(markdown, words, words_per_minute),
        headings=outline(tokens),
        excerpt=excerpt(markdown, tokens),
    )


def doc_stats(doc: ParsedDoc, words_per_minute: int = 200) -> DocStats:
    """Compute DocStats for a parsed document."""
    return body_stats(doc.markdown, doc.tokens, words_per_minute)
