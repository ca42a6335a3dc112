"""
Per-file version tree and its DFS linearization.

Key ideas:
- Nodes live in an arena keyed by integer id; each node stores its parent id
  and an ordered list of child ids, so rollback-by-id is a dict lookup.
- A node is mutable until snapshotted. Writes to a mutable active node edit
  it in place; writes to a frozen one fork a new child and move there.
- Linearization walks the whole tree in DFS pre-order, tracking a
  "branch_open" stack of booleans so vertical │ lines persist across levels
  and page boundaries.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional, Union

from .exceptions import AlreadySnapshotError, NoParentVersionError, VersionNotFoundError
from .models import INITIAL_MESSAGE, LinearizedNode, VersionNode, WriteMode

# ── Connector tokens ────────────────────────────────────────────────
VERTICAL   = "│"   # level has more siblings below
TEE        = "├──" # standard child connector
CORNER     = "└──" # final child connector
SPACE      = "   " # level is closed; just padding
NODE_DOT   = "•"   # node indicator appended after connector

ROOT_ID = 0


class VersionTree:
    """
    All revisions of one file plus the pointer to its active revision.

    Usage:
        tree = VersionTree("notes.txt", created_at=now)
        tree.write(WriteMode.APPEND, "hello", now)    # forks node 1
        tree.snapshot("first draft", now)
        tree.rollback(None, now)                       # back to node 0
    """

    def __init__(self, filename: str, created_at: datetime) -> None:
        self.filename = filename
        root = VersionNode(
            id=ROOT_ID,
            created_at=created_at,
            snapshot_at=created_at,
            message=INITIAL_MESSAGE,
        )
        self._nodes: dict[int, VersionNode] = {ROOT_ID: root}
        self._active_id = ROOT_ID
        self.last_modified = created_at

    # ── Accessors ───────────────────────────────────────────────────

    @property
    def root(self) -> VersionNode:
        return self._nodes[ROOT_ID]

    @property
    def active(self) -> VersionNode:
        return self._nodes[self._active_id]

    @property
    def revision_count(self) -> int:
        """Total nodes ever created; ids are dense so this is also the next id."""
        return len(self._nodes)

    def get(self, version_id: int) -> VersionNode:
        node = self._nodes.get(version_id)
        if node is None:
            raise VersionNotFoundError(self.filename, version_id)
        return node

    def __contains__(self, version_id: object) -> bool:
        return version_id in self._nodes

    def ancestors(self, version_id: int) -> list[int]:
        """Ids from the root down to (excluding) the given node."""
        chain: list[int] = []
        parent_id = self.get(version_id).parent_id
        while parent_id is not None:
            chain.append(parent_id)
            parent_id = self._nodes[parent_id].parent_id
        chain.reverse()
        return chain

    # ── Mutations ───────────────────────────────────────────────────

    def write(self, mode: Union[WriteMode, str], payload: str, now: datetime) -> VersionNode:
        """Append or replace content; returns the (possibly new) active node."""
        mode = WriteMode(mode)
        active = self.active

        if active.is_snapshot:
            content = active.content + payload if mode is WriteMode.APPEND else payload
            child = VersionNode(
                id=self.revision_count,
                content=content,
                created_at=now,
                parent_id=active.id,
            )
            active.children.append(child.id)
            self._nodes[child.id] = child
            self._active_id = child.id
        elif mode is WriteMode.APPEND:
            active.content += payload
        else:
            active.content = payload

        self.last_modified = now
        return self.active

    def snapshot(self, message: str, now: datetime) -> VersionNode:
        """Freeze the active node."""
        active = self.active
        if active.is_snapshot:
            raise AlreadySnapshotError(self.filename, active.id)
        active.snapshot_at = now
        active.message = message
        self.last_modified = now
        return active

    def rollback(self, version_id: Optional[int], now: datetime) -> VersionNode:
        """
        Move the active pointer.

        ``None`` selects the active node's parent; an explicit id checks out
        any node in the tree, not only ancestors of the active one.
        """
        if version_id is None:
            parent_id = self.active.parent_id
            if parent_id is None:
                raise NoParentVersionError(self.filename)
            target = parent_id
        else:
            target = self.get(version_id).id

        self._active_id = target
        self.last_modified = now
        return self.active

    # ── Queries ─────────────────────────────────────────────────────

    def history(self) -> list[VersionNode]:
        """Frozen nodes on the path root → active, oldest first."""
        path: list[VersionNode] = []
        node: Optional[VersionNode] = self.active
        while node is not None:
            if node.is_snapshot:
                path.append(node)
            node = self._nodes[node.parent_id] if node.parent_id is not None else None
        path.reverse()
        return path

    def linearize(self) -> list[LinearizedNode]:
        """Return every node in DFS pre-order with display metadata."""
        result: list[LinearizedNode] = []
        # (node_id, ancestors, branch_open, is_last_child)
        stack: list[tuple[int, list[int], list[bool], bool]] = [(ROOT_ID, [], [], True)]

        while stack:
            node_id, ancestors, branch_open, is_last = stack.pop()
            node = self._nodes[node_id]
            depth = len(ancestors)

            result.append(
                LinearizedNode(
                    node=node,
                    depth=depth,
                    connectors=self._build_connectors(branch_open, depth, is_last),
                    ancestors=ancestors,
                    is_last_child=is_last,
                    is_active=node_id == self._active_id,
                )
            )

            # Push in reverse so the first child is visited first
            children = node.children
            for idx in range(len(children) - 1, -1, -1):
                child_is_last = idx == len(children) - 1
                stack.append((
                    children[idx],
                    ancestors + [node_id],
                    branch_open + [not child_is_last],
                    child_is_last,
                ))
        return result

    def render_ascii(self) -> str:
        """The whole tree as ASCII art, active node marked with '*'."""
        lines = []
        for item in self.linearize():
            prefix = "".join(item.connectors[:-1])   # all except the final •
            label = item.node.message if item.node.is_snapshot else "(working copy)"
            marker = " *" if item.is_active else ""
            lines.append(f"{prefix} {label}  [{item.node.id}]{marker}")
        return "\n".join(lines)

    @staticmethod
    def get_page(
        linearized: list[LinearizedNode],
        page: int,
        page_size: int = 10,
    ) -> tuple[list[LinearizedNode], int]:
        """
        Slice the linearized list for pagination.
        Returns (page_nodes, total_pages).
        """
        total = len(linearized)
        total_pages = max(1, -(-total // page_size))  # ceiling division
        page = max(1, min(page, total_pages))
        start = (page - 1) * page_size
        return linearized[start : start + page_size], total_pages

    # ── Connector generation ─────────────────────────────────────────

    @staticmethod
    def _build_connectors(
        branch_open: list[bool],
        depth: int,
        is_last_child: bool,
    ) -> list[str]:
        """
        Build the list of connector tokens for a node.

        Example for depth=2, branch_open=[True, False]:
            ["│", "└──", "•"]
        """
        if depth == 0:
            return [NODE_DOT]

        tokens: list[str] = []

        # All ancestor levels: vertical line if that level's branch is still open
        for open_flag in branch_open[:-1]:
            tokens.append(VERTICAL if open_flag else SPACE)

        tokens.append(CORNER if is_last_child else TEE)
        tokens.append(NODE_DOT)
        return tokens
