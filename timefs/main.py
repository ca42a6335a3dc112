"""
FastAPI surface for the versioned file store.

Endpoints:
  POST /files                          → create a file
  GET  /files                          → list filenames
  GET  /files/{name}                   → active content + state
  POST /files/{name}/insert|update     → append / replace content
  POST /files/{name}/snapshot          → freeze the active version
  POST /files/{name}/rollback          → to parent or to a version id
  GET  /files/{name}/history           → frozen path root → active
  GET  /files/{name}/versions/{id}     → one version + its ancestry
  GET  /files/{name}/tree              → paginated linearized version tree
  GET  /files/{name}/tree/ascii        → whole tree as ASCII art
  GET  /analytics/recent|biggest       → top-K files by recency / size
"""
from __future__ import annotations
import logging
from typing import Optional
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .exceptions import StoreError
from .models import (
    CreateFileRequest,
    FileView,
    HistoryEntry,
    PageResponse,
    RecentFile,
    RollbackRequest,
    SnapshotRequest,
    TreeSize,
    VersionDetail,
    WriteRequest,
)
from .store import FileStore
from .tree import VersionTree

logger = logging.getLogger(__name__)

# ── App setup ───────────────────────────────────────────────────────
app = FastAPI(
    title="Time-Travelling File Store",
    description="In-memory versioned files with snapshots, rollback and analytics.",
    version=__version__,
)

# ── In-memory store (one per process) ───────────────────────────────
_store = FileStore()


def get_store() -> FileStore:
    return _store


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.warning(
        "%s on %s %s",
        exc.error_code.value,
        request.method,
        request.url.path,
        extra={"details": exc.details, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ── Files ────────────────────────────────────────────────────────────

@app.post("/files", response_model=FileView, status_code=201, summary="Create a file")
async def create_file(body: CreateFileRequest, store: FileStore = Depends(get_store)):
    store.create_file(body.filename)
    return store.view(body.filename)


@app.get("/files", response_model=list[str], summary="List filenames")
async def list_files(store: FileStore = Depends(get_store)):
    return store.list_files()


@app.get("/files/{filename}", response_model=FileView, summary="Read the active version")
async def read_file(filename: str, store: FileStore = Depends(get_store)):
    return store.view(filename)


@app.post("/files/{filename}/insert", response_model=FileView, summary="Append content")
async def insert(filename: str, body: WriteRequest, store: FileStore = Depends(get_store)):
    store.insert(filename, body.text)
    return store.view(filename)


@app.post("/files/{filename}/update", response_model=FileView, summary="Replace content")
async def update(filename: str, body: WriteRequest, store: FileStore = Depends(get_store)):
    store.update(filename, body.text)
    return store.view(filename)


@app.post("/files/{filename}/snapshot", response_model=FileView, summary="Freeze the active version")
async def snapshot(filename: str, body: SnapshotRequest, store: FileStore = Depends(get_store)):
    store.snapshot(filename, body.message)
    return store.view(filename)


@app.post("/files/{filename}/rollback", response_model=FileView, summary="Check out another version")
async def rollback(
    filename: str,
    body: Optional[RollbackRequest] = None,
    store: FileStore = Depends(get_store),
):
    """Without a version_id, moves to the parent of the active version."""
    store.rollback(filename, body.version_id if body else None)
    return store.view(filename)


@app.get("/files/{filename}/history", response_model=list[HistoryEntry], summary="Snapshot history")
async def history(filename: str, store: FileStore = Depends(get_store)):
    return store.history(filename)


@app.get(
    "/files/{filename}/versions/{version_id}",
    response_model=VersionDetail,
    summary="Get a single version with ancestry",
)
async def get_version(filename: str, version_id: int, store: FileStore = Depends(get_store)):
    """A version plus its ancestor ids, for highlighting the path from the root."""
    tree = store.get_tree(filename)
    node = tree.get(version_id)
    return VersionDetail(
        filename=filename,
        node=node,
        ancestors=tree.ancestors(version_id),
        is_active=node.id == tree.active.id,
    )


# ── Tree view ────────────────────────────────────────────────────────

@app.get("/files/{filename}/tree", response_model=PageResponse, summary="Get paginated version tree")
async def get_tree(
    filename: str,
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    store: FileStore = Depends(get_store),
):
    """
    Returns a slice of the DFS-linearized version tree. Each node carries
    its connector tokens and ancestor ids for client-side highlighting.
    """
    tree = store.get_tree(filename)
    page_size = get_settings().page_size
    linearized = tree.linearize()
    page_nodes, total_pages = VersionTree.get_page(linearized, page, page_size)

    return PageResponse(
        filename=filename,
        page=min(page, total_pages),
        page_size=page_size,
        total_nodes=len(linearized),
        total_pages=total_pages,
        active_id=tree.active.id,
        nodes=page_nodes,
    )


@app.get("/files/{filename}/tree/ascii", summary="Version tree as ASCII art")
async def ascii_tree(filename: str, store: FileStore = Depends(get_store)):
    return {"tree": store.get_tree(filename).render_ascii()}


# ── Analytics ────────────────────────────────────────────────────────

@app.get("/analytics/recent", response_model=list[RecentFile], summary="Most recently modified files")
async def recent_files(
    count: Optional[int] = Query(default=None, ge=0),
    store: FileStore = Depends(get_store),
):
    return store.top_recent(get_settings().default_top_k if count is None else count)


@app.get("/analytics/biggest", response_model=list[TreeSize], summary="Files with the most versions")
async def biggest_trees(
    count: Optional[int] = Query(default=None, ge=0),
    store: FileStore = Depends(get_store),
):
    return store.top_by_size(get_settings().default_top_k if count is None else count)
