# ABOUTME: Error taxonomy for mcpmgr engine operations
# ABOUTME: Each error carries a stable code used by the command facade
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpmgr.models import BatchResult


class ManagerError(Exception):
    """Base class for every error the engine raises on purpose."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ToolNotFound(ManagerError):
    code = "tool_not_found"

    def __init__(self, tool: str) -> None:
        super().__init__(f"Unknown tool: {tool}")
        self.tool = tool


class ServerNotFound(ManagerError):
    code = "server_not_found"

    def __init__(self, tool: str, name: str) -> None:
        super().__init__(f"Server not found: {name} (in {tool})")
        self.tool = tool
        self.name = name


class DuplicateName(ManagerError):
    code = "duplicate_name"

    def __init__(self, tool: str, name: str) -> None:
        super().__init__(f"Server '{name}' already exists in {tool}")
        self.tool = tool
        self.name = name


class PathInvalid(ManagerError):
    code = "path_invalid"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid path '{path}': {reason}")
        self.path = path
        self.reason = reason


class IOFailure(ManagerError):
    code = "io_failure"

    def __init__(self, path: Path, operation: str, cause: OSError) -> None:
        super().__init__(f"Failed to {operation} {path}: {cause.strerror or cause}")
        self.path = path
        self.operation = operation


class ParseFailure(ManagerError):
    code = "parse_failure"


class UnsupportedDialect(ParseFailure):
    code = "unsupported_dialect"


class BackupNotFound(ManagerError):
    code = "backup_not_found"

    def __init__(self, backup_id: str) -> None:
        super().__init__(f"Backup not found: {backup_id}")
        self.backup_id = backup_id


class InvalidEntry(ManagerError):
    code = "invalid_entry"


class SyncAborted(ManagerError):
    """A sync stopped on a write failure after copying some entries."""

    code = "sync_aborted"

    def __init__(self, synced: int, cause: Exception) -> None:
        super().__init__(f"Sync aborted after {synced} server(s): {cause}")
        self.synced = synced


class PartialFailure(ManagerError):
    """A batch operation where at least one target failed."""

    code = "partial_failure"

    def __init__(self, result: BatchResult) -> None:
        failed = ", ".join(f"{target}: {msg}" for target, msg in result.failed.items())
        super().__init__(f"{result.completed} succeeded, {len(result.failed)} failed ({failed})")
        self.result = result
