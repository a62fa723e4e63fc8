"""Slug generation for document identifiers"""

import re
from pathlib import Path


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def doc_slug(path, explicit=None) -> str:
    """Slug for a document: its front-matter slug normalized, else its file stem."""
    return slugify(str(explicit or '')) or slugify(Path(path).stem)
