"""
Data models for the time-travelling file store.
"""
from __future__ import annotations
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


INITIAL_MESSAGE = "Initial snapshot"


class WriteMode(str, Enum):
    """How a write combines with the active content."""
    APPEND  = "APPEND"
    REPLACE = "REPLACE"


class VersionNode(BaseModel):
    """A single revision of a file's content."""
    id: int
    content: str = ""
    message: Optional[str] = None               # set only when snapshotted
    created_at: datetime
    snapshot_at: Optional[datetime] = None      # None → still mutable
    parent_id: Optional[int] = None
    children: list[int] = Field(default_factory=list)

    @property
    def is_snapshot(self) -> bool:
        return self.snapshot_at is not None


class HistoryEntry(BaseModel):
    """One frozen revision on the path from the root to the active node."""
    id: int
    snapshot_at: datetime
    message: str


class RecentFile(BaseModel):
    filename: str
    last_modified: datetime


class TreeSize(BaseModel):
    filename: str
    revision_count: int


class FileView(BaseModel):
    """Current read/write state of a file."""
    filename: str
    content: str
    active_id: int
    is_snapshot: bool
    revision_count: int
    last_modified: datetime


class LinearizedNode(BaseModel):
    """A version node enriched with tree-display metadata."""
    node: VersionNode
    depth: int
    connectors: list[str]               # visual connector tokens per level
    ancestors: list[int]                # ordered ancestor ids (root → parent)
    is_last_child: bool
    is_active: bool = False


class VersionDetail(BaseModel):
    """A single version plus its ancestry chain."""
    filename: str
    node: VersionNode
    ancestors: list[int]                # root → parent
    is_active: bool


class PageResponse(BaseModel):
    """Paginated tree view."""
    filename: str
    page: int
    page_size: int
    total_nodes: int
    total_pages: int
    active_id: int
    nodes: list[LinearizedNode]


# ── Request bodies ──────────────────────────────────────────────────

class CreateFileRequest(BaseModel):
    filename: str

    @field_validator("filename")
    @classmethod
    def must_be_plain_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be empty")
        if "/" in v:
            raise ValueError("Filename must not contain '/'")
        return v.strip()


class WriteRequest(BaseModel):
    text: str


class SnapshotRequest(BaseModel):
    message: str = ""


class RollbackRequest(BaseModel):
    version_id: Optional[int] = None    # None → roll back to the parent
