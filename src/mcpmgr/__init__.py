# mcpmgr - MCP server config manager for AI coding tools
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and errors
from mcpmgr.errors import (
    BackupNotFound,
    DuplicateName,
    InvalidEntry,
    IOFailure,
    ManagerError,
    ParseFailure,
    PartialFailure,
    PathInvalid,
    ServerNotFound,
    SyncAborted,
    ToolNotFound,
    UnsupportedDialect,
)
from mcpmgr.models import (
    Backup,
    BatchResult,
    GroupedEntry,
    ServerEntry,
    SseTransport,
    StdioTransport,
    Tool,
)

# ABOUTME: Export engine components
from mcpmgr.backup import BackupManager
from mcpmgr.commands import Commands
from mcpmgr.registry import ToolRegistry
from mcpmgr.store import ConfigStore
from mcpmgr.sync import SyncEngine
from mcpmgr.transfer import ImportExportEngine

__all__ = [
    "__version__",
    "Backup",
    "BatchResult",
    "GroupedEntry",
    "ServerEntry",
    "SseTransport",
    "StdioTransport",
    "Tool",
    "ToolRegistry",
    "ConfigStore",
    "SyncEngine",
    "BackupManager",
    "ImportExportEngine",
    "Commands",
    "ManagerError",
    "ToolNotFound",
    "ServerNotFound",
    "DuplicateName",
    "PathInvalid",
    "IOFailure",
    "ParseFailure",
    "UnsupportedDialect",
    "BackupNotFound",
    "InvalidEntry",
    "SyncAborted",
    "PartialFailure",
]
