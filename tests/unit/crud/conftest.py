"""Shared fixtures for crud unit tests"""

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

import mdcontent.crud.models  # noqa: F401
from mdcontent.core.parse import parse_text
from mdcontent.crud.documents import commit_doc


POST_MD = """\
---
title: Asynchronous Tasks in Django with Celery
date: 2018-03-12 21:40:00
category: Python
tags: [Django, Celery]
keywords: django, celery
---

Celery hands slow work to background workers.

## Running a worker

Start one with the celery command.
"""


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="parse")
def parse_fixture():
    """Factory: parse text as a file at the given content-relative path."""
    def _parse(text: str = POST_MD, path: str = "posts/celery.md"):
        return parse_text(text, Path(path))
    return _parse


@pytest.fixture(name="doc")
def doc_fixture(session, parse):
    """A committed post Document."""
    d, _ = commit_doc(session, parse())
    return d
