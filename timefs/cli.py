"""
Line-oriented console front end for the file store.

Reads one command per line:

  CREATE <file>              READ <file>
  INSERT <file> <text>       UPDATE <file> <text>
  SNAPSHOT <file> <message>  ROLLBACK <file> [version_id]
  HISTORY <file>             RECENT_FILES [n]
  BIGGEST_TREES [n]          EXIT

`timefs serve` runs the HTTP app instead.
"""
from __future__ import annotations
import argparse
import logging
import re
import sys
from datetime import datetime
from typing import Callable, Iterable, Optional, TextIO

import uvicorn

from .config import get_settings
from .exceptions import StoreError
from .logging_config import setup_logging
from .store import FileStore

logger = logging.getLogger(__name__)

BANNER = "Time-Travelling File System"
COMMANDS = (
    "CREATE", "READ", "INSERT", "UPDATE", "SNAPSHOT", "ROLLBACK",
    "HISTORY", "RECENT_FILES", "BIGGEST_TREES", "EXIT",
)

_TOKEN = re.compile(r"\s*(\S+)")


class UsageError(Exception):
    """Malformed command line; the message is shown to the user."""


def format_time(ts: datetime) -> str:
    """Local time in ctime layout, e.g. 'Sun Oct 18 14:03:09 2026'."""
    return ts.astimezone().ctime()


def _next_token(line: str, pos: int = 0) -> tuple[Optional[str], int]:
    match = _TOKEN.match(line, pos)
    if match is None:
        return None, pos
    return match.group(1), match.end()


def _rest(line: str, pos: int) -> str:
    """Remainder of the line with a single separating space removed."""
    rest = line[pos:]
    return rest[1:] if rest.startswith(" ") else rest


def _parse_int(token: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise UsageError(f"Invalid {what} '{token}'.") from None


class Shell:
    """Dispatches command lines to a FileStore and prints the results."""

    def __init__(
        self,
        store: Optional[FileStore] = None,
        out: Optional[TextIO] = None,
        default_top_k: int = 10,
    ) -> None:
        self.store = store if store is not None else FileStore()
        self.out = out if out is not None else sys.stdout
        self.default_top_k = default_top_k
        self._handlers: dict[str, Callable[[str, int], None]] = {
            "CREATE": self._create,
            "READ": self._read,
            "INSERT": self._insert,
            "UPDATE": self._update,
            "SNAPSHOT": self._snapshot,
            "ROLLBACK": self._rollback,
            "HISTORY": self._history,
            "RECENT_FILES": self._recent_files,
            "BIGGEST_TREES": self._biggest_trees,
        }

    def _print(self, text: str = "") -> None:
        print(text, file=self.out)

    # ── Dispatch ────────────────────────────────────────────────────

    def execute(self, line: str) -> bool:
        """Run one command line. Returns False once EXIT is read."""
        line = line.rstrip("\r\n")
        command, pos = _next_token(line)
        if command is None:
            return True
        if command == "EXIT":
            return False

        handler = self._handlers.get(command)
        if handler is None:
            self._print(f"Unknown command: {command}")
            self._print(f"Available commands: {', '.join(COMMANDS)}")
            return True

        try:
            handler(line, pos)
        except StoreError as exc:
            logger.debug("%s failed: %s", command, exc.error_code.value)
            self._print(f"Error: {exc.message}")
        except UsageError as exc:
            self._print(f"Error: {exc}")
        return True

    def run(self, lines: Iterable[str]) -> None:
        for line in lines:
            if not self.execute(line):
                break

    @staticmethod
    def _filename(line: str, pos: int, usage: str) -> tuple[str, int]:
        filename, pos = _next_token(line, pos)
        if filename is None:
            raise UsageError(f"Missing filename. Usage: {usage}")
        return filename, pos

    def _count(self, line: str, pos: int) -> int:
        token, _ = _next_token(line, pos)
        return self.default_top_k if token is None else _parse_int(token, "count")

    # ── Handlers ────────────────────────────────────────────────────

    def _create(self, line: str, pos: int) -> None:
        filename, _ = self._filename(line, pos, "CREATE <filename>")
        self.store.create_file(filename)
        self._print(f"File '{filename}' created successfully.")

    def _read(self, line: str, pos: int) -> None:
        filename, _ = self._filename(line, pos, "READ <filename>")
        self._print(self.store.read_file(filename))

    def _insert(self, line: str, pos: int) -> None:
        filename, pos = self._filename(line, pos, "INSERT <filename> <content>")
        self.store.insert(filename, _rest(line, pos))

    def _update(self, line: str, pos: int) -> None:
        filename, pos = self._filename(line, pos, "UPDATE <filename> <content>")
        self.store.update(filename, _rest(line, pos))

    def _snapshot(self, line: str, pos: int) -> None:
        filename, pos = self._filename(line, pos, "SNAPSHOT <filename> <message>")
        self.store.snapshot(filename, _rest(line, pos))

    def _rollback(self, line: str, pos: int) -> None:
        filename, pos = self._filename(line, pos, "ROLLBACK <filename> [version_id]")
        token, _ = _next_token(line, pos)
        version_id = None if token is None else _parse_int(token, "version id")
        self.store.rollback(filename, version_id)

    def _history(self, line: str, pos: int) -> None:
        filename, _ = self._filename(line, pos, "HISTORY <filename>")
        entries = self.store.history(filename)
        self._print(f"History for file '{filename}':")
        for entry in entries:
            self._print(f"Version {entry.id} - {format_time(entry.snapshot_at)} - {entry.message}")

    def _recent_files(self, line: str, pos: int) -> None:
        count = self._count(line, pos)
        self._print("Recent files:")
        for item in self.store.top_recent(count):
            self._print(f"{item.filename} - {format_time(item.last_modified)}")

    def _biggest_trees(self, line: str, pos: int) -> None:
        count = self._count(line, pos)
        self._print("Biggest trees:")
        for item in self.store.top_by_size(count):
            self._print(f"{item.filename} - {item.revision_count} versions")


# ── Entry point ─────────────────────────────────────────────────────

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="timefs",
        description="In-memory versioned file store with snapshots and rollback",
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    serve.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")
    serve.add_argument("--reload", action="store_true", help="Enable hot reload (development mode)")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    if args.command == "serve":
        uvicorn.run(
            "timefs.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=settings.log_level.lower(),
        )
        return

    print(BANNER)
    Shell(default_top_k=settings.default_top_k).run(sys.stdin)


if __name__ == "__main__":
    main()
