"""
File store: filename → version tree, plus the two analytics aggregators.

Every mutating operation delegates to the file's VersionTree and then reports
the tree's new last_modified and revision_count to the recency and size
aggregators. Read-only operations touch neither.
"""
from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .analytics import TopKAggregator
from .exceptions import FileAlreadyExistsError, NoSuchFileError
from .models import FileView, HistoryEntry, RecentFile, TreeSize, WriteMode
from .tree import VersionTree

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FileStore:
    """
    In-memory, single-threaded versioned file store.

    Timestamps come from ``clock`` but are forced to be strictly increasing,
    so "most recently modified" always follows operation order even when the
    wall clock has not advanced between two calls.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock if clock is not None else utc_now
        self._last_tick: Optional[datetime] = None
        self._files: dict[str, VersionTree] = {}
        self.recent: TopKAggregator[str, datetime] = TopKAggregator("recency")
        self.biggest: TopKAggregator[str, int] = TopKAggregator("size")

    # ── Internals ───────────────────────────────────────────────────

    def _now(self) -> datetime:
        """Candidate timestamp; only committed by _report once an operation succeeds."""
        now = self._clock()
        if self._last_tick is not None and now <= self._last_tick:
            now = self._last_tick + _TICK
        return now

    def _report(self, filename: str, tree: VersionTree) -> None:
        self._last_tick = tree.last_modified
        self.recent.observe(filename, tree.last_modified)
        self.biggest.observe(filename, tree.revision_count)

    def get_tree(self, filename: str) -> VersionTree:
        tree = self._files.get(filename)
        if tree is None:
            raise NoSuchFileError(filename)
        return tree

    # ── File operations ─────────────────────────────────────────────

    def create_file(self, filename: str) -> VersionTree:
        if filename in self._files:
            raise FileAlreadyExistsError(filename)
        tree = VersionTree(filename, created_at=self._now())
        self._files[filename] = tree
        self._report(filename, tree)
        logger.info("Created file %r", filename)
        return tree

    def read_file(self, filename: str) -> str:
        return self.get_tree(filename).active.content

    def write(self, filename: str, mode: WriteMode, text: str) -> VersionTree:
        tree = self.get_tree(filename)
        before = tree.revision_count
        node = tree.write(mode, text, self._now())
        self._report(filename, tree)
        logger.debug(
            "%s %r: active=%d forked=%s",
            WriteMode(mode).value, filename, node.id, tree.revision_count != before,
        )
        return tree

    def insert(self, filename: str, text: str) -> VersionTree:
        return self.write(filename, WriteMode.APPEND, text)

    def update(self, filename: str, text: str) -> VersionTree:
        return self.write(filename, WriteMode.REPLACE, text)

    def snapshot(self, filename: str, message: str) -> VersionTree:
        tree = self.get_tree(filename)
        node = tree.snapshot(message, self._now())
        self._report(filename, tree)
        logger.debug("Snapshot %r: version=%d message=%r", filename, node.id, message)
        return tree

    def rollback(self, filename: str, version_id: Optional[int] = None) -> VersionTree:
        tree = self.get_tree(filename)
        node = tree.rollback(version_id, self._now())
        self._report(filename, tree)
        logger.debug("Rollback %r: active=%d", filename, node.id)
        return tree

    def history(self, filename: str) -> list[HistoryEntry]:
        return [
            HistoryEntry(id=node.id, snapshot_at=node.snapshot_at, message=node.message or "")
            for node in self.get_tree(filename).history()
        ]

    # ── Queries ─────────────────────────────────────────────────────

    def view(self, filename: str) -> FileView:
        tree = self.get_tree(filename)
        active = tree.active
        return FileView(
            filename=filename,
            content=active.content,
            active_id=active.id,
            is_snapshot=active.is_snapshot,
            revision_count=tree.revision_count,
            last_modified=tree.last_modified,
        )

    def list_files(self) -> list[str]:
        return sorted(self._files)

    def __contains__(self, filename: object) -> bool:
        return filename in self._files

    def __len__(self) -> int:
        return len(self._files)

    # ── Analytics ───────────────────────────────────────────────────

    def top_recent(self, count: int) -> list[RecentFile]:
        return [
            RecentFile(filename=name, last_modified=ts)
            for name, ts in self.recent.top_k(count)
        ]

    def top_by_size(self, count: int) -> list[TreeSize]:
        return [
            TreeSize(filename=name, revision_count=size)
            for name, size in self.biggest.top_k(count)
        ]
