"""Database table definitions for documents, versions, and tags"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON, Text, String, UniqueConstraint


class DocKind(str, Enum):
    """Dated tutorial posts versus standalone pages (e.g. About)"""
    page = "page"
    post = "post"


class DocumentTag(SQLModel, table=True):
    """Ordered many-to-many relationship between documents and tags"""
    __tablename__ = "document_tags"
    document_id: UUID = Field(foreign_key="documents.id", primary_key=True)
    tag_name: str = Field(foreign_key="tags.name", primary_key=True)
    position: int = Field(default=0, nullable=False)


class Document(SQLModel, table=True):
    """A content document; the source file is the origin of truth"""
    __tablename__ = "documents"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(..., index=True, nullable=False)
    path: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    kind: DocKind = Field(default=DocKind.page, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    category: Optional[str] = Field(default=None, index=True)
    published: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    frontmatter: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    committed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))


class DocumentVersion(SQLModel, table=True):
    """Immutable snapshot of a Document at a prior state."""
    __tablename__ = "document_versions"
    __table_args__ = (UniqueConstraint("document_id", "version_num", name="uq_docver_doc_num"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    document_id: UUID = Field(..., foreign_key="documents.id", index=True, nullable=False)
    version_num: int = Field(..., nullable=False, description="Monotonically increasing per-document version number")
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    frontmatter: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class Tag(SQLModel, table=True):
    """A tag shared across documents for categorization and filtering"""
    __tablename__ = "tags"
    name: str = Field(primary_key=True)
