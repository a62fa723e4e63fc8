"""Intermediate data models for the parse, validate and index pipeline"""

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mdcontent.crud.models import DocKind


CANONICAL_KEYS = ('title', 'slug', 'date', 'category', 'tags', 'keywords')


def split_terms(value: Any) -> Any:
    """Accept a YAML list or a comma-separated string; drop blanks.

    Values of any other type are returned unchanged for the schema to reject.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return value


class FrontMatter(BaseModel):
    """Document metadata; keys outside the canonical set are kept as extras."""
    model_config = ConfigDict(extra="allow")

    title:    str = Field(..., min_length=1)
    slug:     Optional[str] = None
    date:     Optional[dt.datetime | dt.date] = None
    category: Optional[str] = None
    tags:     list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)

    @field_validator('tags', 'keywords', mode='before')
    @classmethod
    def _split_terms(cls, value: Any) -> Any:
        return split_terms(value)

    @property
    def published(self) -> dt.datetime | None:
        """The date as a datetime; a bare date is taken at midnight."""
        if self.date is None:
            return None
        if isinstance(self.date, dt.datetime):
            return self.date
        return dt.datetime.combine(self.date, dt.time())

    def ordered(self, mode: str = "python") -> dict[str, Any]:
        """Canonical keys first (empty ones dropped), then extras in source order."""
        return canonical_order(self.model_dump(mode=mode))


def canonical_order(data: dict[str, Any]) -> dict[str, Any]:
    """Reorder a frontmatter dict: canonical keys first (empty ones dropped), then the rest."""
    out = {k: data[k] for k in CANONICAL_KEYS if data.get(k) not in (None, '', [])}
    out.update((k, v) for k, v in data.items() if k not in CANONICAL_KEYS)
    return out


def native_date(value: Any) -> Any:
    """Turn an ISO date or datetime string back into a date/datetime; other values pass through."""
    if not isinstance(value, str):
        return value
    parse = dt.date.fromisoformat if len(value) == 10 else dt.datetime.fromisoformat
    try:
        return parse(value)
    except ValueError:
        return value


class Issue(BaseModel):
    """A single well-formedness finding for one document."""
    path:     str
    code:     str
    severity: Literal['error', 'warning']
    message:  str


class Report(BaseModel):
    """All issues found in one collection check."""
    issues: list[Issue] = []
    checked: int = 0

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == 'error']

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == 'warning']

    @property
    def ok(self) -> bool:
        return not self.errors


class Heading(BaseModel):
    level: int
    text:  str


class DocStats(BaseModel):
    """Reading statistics derived from the body token stream."""
    words:           int = 0
    reading_minutes: int = 0
    headings:        list[Heading] = []
    excerpt:         str = ''


@dataclass
class ParsedDoc:
    """Internal parse result carrying markdown-it tokens; not persisted."""
    path:            Path          # relative to the content root
    slug:            str
    kind:            DocKind
    raw_markdown:    str           # full file content (includes frontmatter)
    markdown:        str           # body only (frontmatter stripped)
    hash:            str
    frontmatter:     dict[str, Any]
    has_frontmatter: bool
    tokens:          list = field(default_factory=list)   # markdown-it Token objects

    def meta(self) -> FrontMatter:
        """Validated FrontMatter; raises pydantic.ValidationError when malformed."""
        return FrontMatter.model_validate(self.frontmatter)
