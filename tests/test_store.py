"""
Tests for the file store: orchestration, failure kinds and analytics feeds.
"""
from datetime import datetime, timedelta, timezone

import pytest

from timefs.exceptions import (
    AlreadySnapshotError,
    ErrorCode,
    FileAlreadyExistsError,
    NoParentVersionError,
    NoSuchFileError,
    VersionNotFoundError,
)
from timefs.models import INITIAL_MESSAGE
from timefs.store import FileStore


def assert_active_reachable(store, filename):
    tree = store.get_tree(filename)
    node = tree.active
    while node.parent_id is not None:
        node = tree.get(node.parent_id)
    assert node.id == 0


# ── Test: Creation and reads ─────────────────────────────────────────

def test_create_and_read_empty(store):
    store.create_file("a")
    assert store.read_file("a") == ""
    assert "a" in store
    assert store.list_files() == ["a"]


def test_duplicate_create_fails(store):
    store.create_file("a")
    with pytest.raises(FileAlreadyExistsError) as exc_info:
        store.create_file("a")
    assert exc_info.value.error_code is ErrorCode.FILE_ALREADY_EXISTS
    assert exc_info.value.status_code == 409
    assert len(store) == 1


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.read_file("ghost"),
        lambda s: s.insert("ghost", "x"),
        lambda s: s.update("ghost", "x"),
        lambda s: s.snapshot("ghost", "m"),
        lambda s: s.rollback("ghost"),
        lambda s: s.rollback("ghost", 0),
        lambda s: s.history("ghost"),
    ],
)
def test_unknown_file_fails(store, call):
    with pytest.raises(NoSuchFileError) as exc_info:
        call(store)
    assert exc_info.value.message == "File 'ghost' does not exist."
    assert exc_info.value.to_dict()["error"] == "FILE_NOT_FOUND"


# ── Test: Scenarios ──────────────────────────────────────────────────

def test_history_of_new_file(store):
    store.create_file("a")
    history = store.history("a")
    assert [(h.id, h.message) for h in history] == [(0, INITIAL_MESSAGE)]


def test_insert_forks_then_edits_in_place(store):
    store.create_file("a")
    store.insert("a", "hello")
    view = store.view("a")
    assert view.active_id == 1
    assert view.content == "hello"

    store.insert("a", " world")
    view = store.view("a")
    assert view.active_id == 1
    assert view.content == "hello world"
    assert view.revision_count == 2


def test_rollback_to_root_restores_empty_content(store):
    store.create_file("a")
    store.update("a", "x")
    store.snapshot("a", "v1")
    store.update("a", "y")
    store.rollback("a", 0)
    assert store.read_file("a") == ""
    assert_active_reachable(store, "a")


def test_rollback_to_parent(store):
    store.create_file("a")
    store.update("a", "x")
    store.snapshot("a", "v1")
    store.update("a", "y")
    store.rollback("a")
    assert store.view("a").active_id == 1
    assert store.read_file("a") == "x"


def test_rollback_failures(store):
    store.create_file("a")
    with pytest.raises(NoParentVersionError):
        store.rollback("a")
    with pytest.raises(VersionNotFoundError) as exc_info:
        store.rollback("a", 5)
    assert exc_info.value.message == "Version 5 does not exist."


def test_double_snapshot_rejected(store):
    store.create_file("a")
    store.update("a", "x")
    store.snapshot("a", "v1")
    with pytest.raises(AlreadySnapshotError):
        store.snapshot("a", "v2")
    assert [h.message for h in store.history("a")] == [INITIAL_MESSAGE, "v1"]


def test_history_entries_carry_snapshot_time(store, clock):
    store.create_file("a")
    store.update("a", "x")
    store.snapshot("a", "v1")
    entries = store.history("a")
    assert entries[-1].snapshot_at == clock.current


# ── Test: Analytics ──────────────────────────────────────────────────

def test_top_recent_follows_last_mutation(store):
    store.create_file("a")
    store.create_file("b")
    store.insert("a", "x")
    store.insert("b", "y")
    assert [r.filename for r in store.top_recent(1)] == ["b"]
    assert [r.filename for r in store.top_recent(5)] == ["b", "a"]


def test_top_recent_reports_latest_timestamp(store, clock):
    store.create_file("a")
    store.insert("a", "x")
    recent = store.top_recent(1)
    assert recent[0].last_modified == clock.current


def test_failed_operation_does_not_touch_analytics(store):
    store.create_file("a")
    store.create_file("b")
    with pytest.raises(NoParentVersionError):
        store.rollback("a")
    assert [r.filename for r in store.top_recent(1)] == ["b"]
    assert len(store.recent) == 2


def test_reads_do_not_touch_analytics(store):
    store.create_file("a")
    store.create_file("b")
    store.read_file("a")
    store.history("a")
    assert [r.filename for r in store.top_recent(1)] == ["b"]


def test_top_by_size(store):
    store.create_file("small")
    store.create_file("big")
    for i in range(3):
        store.update("big", str(i))
        store.snapshot("big", f"v{i}")
    store.update("small", "x")

    sizes = [(t.filename, t.revision_count) for t in store.top_by_size(10)]
    assert sizes == [("big", 4), ("small", 2)]


def test_top_by_size_ties_by_name(store):
    for name in ("c", "a", "b"):
        store.create_file(name)
    assert [t.filename for t in store.top_by_size(3)] == ["a", "b", "c"]


def test_rollback_keeps_revision_count(store):
    store.create_file("a")
    store.update("a", "x")
    store.snapshot("a", "v1")
    store.rollback("a", 0)
    assert store.view("a").revision_count == 2
    assert store.top_by_size(1)[0].revision_count == 2


# ── Test: Clock ──────────────────────────────────────────────────────

def test_frozen_clock_still_orders_operations():
    fixed = datetime(2024, 1, 1, tzinfo=timezone.utc)
    store = FileStore(clock=lambda: fixed)
    store.create_file("b")
    store.create_file("a")
    assert [r.filename for r in store.top_recent(2)] == ["a", "b"]
    assert store.view("a").last_modified > store.view("b").last_modified


def test_default_clock_is_utc():
    store = FileStore()
    store.create_file("a")
    assert store.view("a").last_modified.utcoffset() == timedelta(0)


def test_rejected_operations_do_not_advance_clock():
    fixed = datetime(2024, 1, 1, tzinfo=timezone.utc)
    store = FileStore(clock=lambda: fixed)
    store.create_file("a")
    with pytest.raises(NoParentVersionError):
        store.rollback("a")
    with pytest.raises(AlreadySnapshotError):
        store.snapshot("a", "again")
    store.create_file("b")
    assert store.view("b").last_modified == fixed + timedelta(microseconds=1)
