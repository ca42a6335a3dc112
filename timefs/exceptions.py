"""Exception hierarchy for the file store.

Every failure is local and recoverable: the operation that raised left the
store exactly as it was before the call.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_ALREADY_EXISTS = "FILE_ALREADY_EXISTS"
    ALREADY_SNAPSHOT = "ALREADY_SNAPSHOT"
    NO_PARENT_VERSION = "NO_PARENT_VERSION"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"


class StoreError(Exception):
    """
    Base exception for all store errors.

    Carries a human-readable message, an error code, the HTTP status the
    web surface answers with, and optional details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class NoSuchFileError(StoreError):
    """Filename is not registered."""

    def __init__(self, filename: str):
        super().__init__(
            f"File '{filename}' does not exist.",
            ErrorCode.FILE_NOT_FOUND,
            status_code=404,
            details={"filename": filename},
        )


class FileAlreadyExistsError(StoreError):
    """Filename is already registered."""

    def __init__(self, filename: str):
        super().__init__(
            f"File '{filename}' already exists.",
            ErrorCode.FILE_ALREADY_EXISTS,
            status_code=409,
            details={"filename": filename},
        )


class AlreadySnapshotError(StoreError):
    """Snapshot requested while the active version is already frozen."""

    def __init__(self, filename: str, version_id: int):
        super().__init__(
            "Current version is already a snapshot.",
            ErrorCode.ALREADY_SNAPSHOT,
            status_code=409,
            details={"filename": filename, "version_id": version_id},
        )


class NoParentVersionError(StoreError):
    """Rollback to the parent requested at the root."""

    def __init__(self, filename: str):
        super().__init__(
            "Cannot rollback - no parent version exists.",
            ErrorCode.NO_PARENT_VERSION,
            status_code=409,
            details={"filename": filename},
        )


class VersionNotFoundError(StoreError):
    """Version id was never created for this file."""

    def __init__(self, filename: str, version_id: int):
        super().__init__(
            f"Version {version_id} does not exist.",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"filename": filename, "version_id": version_id},
        )
