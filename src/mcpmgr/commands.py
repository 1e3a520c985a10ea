# ABOUTME: Command facade - the operation names the UI process calls
# ABOUTME: Results are JSON-compatible; errors are recovered here into an envelope
import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from mcpmgr.backup import BackupManager
from mcpmgr.config import get_app_dir, get_backup_dir, get_settings_path
from mcpmgr.errors import InvalidEntry, ManagerError, PartialFailure, SyncAborted
from mcpmgr.models import BatchResult, ServerEntry
from mcpmgr.registry import ToolRegistry
from mcpmgr.store import ConfigStore
from mcpmgr.sync import SyncEngine, stats
from mcpmgr.transfer import ImportExportEngine

logger = logging.getLogger(__name__)


def _raise_on_failure(result: BatchResult) -> BatchResult:
    if not result.ok:
        raise PartialFailure(result)
    return result


class Commands:
    """Engine operations under their stable command names.

    ABOUTME: Holds no config state - every call goes to disk through the engines
    ABOUTME: Argument names follow the UI contract (serverName, toolsToRestore, ...)
    """

    def __init__(self, app_dir: Path | None = None, home: Path | None = None) -> None:
        """Wire up the engines.

        ABOUTME: app_dir holds settings.json and backups/ (default ~/.mcp-manager)
        ABOUTME: home is where default tool paths are resolved (default ~)
        """
        app_dir = app_dir if app_dir else get_app_dir()
        self.registry = ToolRegistry(settings_path=get_settings_path(app_dir), home=home)
        self.store = ConfigStore(self.registry)
        self.syncer = SyncEngine(self.store)
        self.backups = BackupManager(self.registry, backup_dir=get_backup_dir(app_dir))
        self.transfer = ImportExportEngine(self.store)

    # ===== Tools =====

    def get_tools(self) -> list[dict[str, Any]]:
        return [tool.to_dict() for tool in self.registry.list_tools()]

    def update_tool_path(self, tool: str, path: str) -> None:
        self.registry.set_custom_path(tool, path)

    # ===== Configs =====

    def get_all_configs(self) -> dict[str, list[dict[str, Any]]]:
        configs, _errors = self.store.list_all()
        return {
            tool: [entry.to_dict() for entry in entries]
            for tool, entries in configs.items()
        }

    def get_configs(self, tool: str) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.store.list(tool)]

    def add_or_update_server(self, tool: str, server: dict[str, Any]) -> None:
        try:
            entry = ServerEntry.from_dict(server)
        except (TypeError, ValueError) as e:
            raise InvalidEntry(str(e)) from e
        self.store.upsert(tool, entry)

    def delete_server(self, tool: str, serverName: str) -> None:
        self.store.delete(tool, serverName)

    def toggle_server(self, tool: str, serverName: str) -> None:
        self.store.toggle_enabled(tool, serverName)

    def get_grouped_configs(self) -> dict[str, Any]:
        configs, _errors = self.store.list_all()
        return {
            "servers": [group.to_dict() for group in self.syncer.grouped(configs)],
            "stats": stats(configs),
        }

    def toggle_server_group(self, serverName: str) -> dict[str, Any]:
        return _raise_on_failure(self.syncer.toggle_group(serverName)).to_dict()

    def delete_server_group(self, serverName: str) -> dict[str, Any]:
        return _raise_on_failure(self.syncer.delete_group(serverName)).to_dict()

    # ===== Sync =====

    def sync_configs(
        self, to: str, serverNames: list[str] | None = None, **kwargs: Any
    ) -> dict[str, int]:
        # 'from' is a Python keyword, so it can only arrive through kwargs
        if "from" not in kwargs:
            raise ManagerError("sync_configs requires a 'from' tool")
        synced = self.syncer.sync(kwargs["from"], to, serverNames)
        return {"synced": synced}

    # ===== Backup =====

    def get_backups(self) -> list[dict[str, str]]:
        return [backup.to_dict() for backup in self.backups.list()]

    def create_backup(self) -> dict[str, str]:
        return self.backups.create().to_dict()

    def restore_backup(self, filename: str, toolsToRestore: list[str] | None = None) -> list[str]:
        return self.backups.restore(filename, toolsToRestore)

    def delete_backup(self, filename: str) -> None:
        self.backups.delete(filename)

    # ===== Import/Export =====

    def export_configs(self) -> dict[str, Any]:
        return self.transfer.export()

    def import_configs(self, tools: dict[str, Any], merge: bool = False) -> list[str]:
        result = _raise_on_failure(self.transfer.import_(tools, merge))
        return list(result.succeeded)

    # ===== Dispatch =====

    OPERATIONS = (
        "get_tools",
        "get_all_configs",
        "get_configs",
        "add_or_update_server",
        "delete_server",
        "toggle_server",
        "sync_configs",
        "get_backups",
        "create_backup",
        "restore_backup",
        "delete_backup",
        "export_configs",
        "import_configs",
        "update_tool_path",
        "get_grouped_configs",
        "toggle_server_group",
        "delete_server_group",
    )

    def invoke(self, operation: str, **args: Any) -> dict[str, Any]:
        """Run one operation and wrap the outcome.

        ABOUTME: Success -> {"ok": True, "result": ...}
        ABOUTME: ManagerError -> {"ok": False, "error": code, "message": ...}
        ABOUTME: Partial batch failures also carry "completed"

        Args:
            operation: One of OPERATIONS
            **args: Operation arguments by contract name

        Returns:
            Result envelope (never raises for engine errors)
        """
        if operation not in self.OPERATIONS:
            return {"ok": False, "error": "unknown_operation", "message": f"Unknown operation: {operation}"}

        handler: Callable[..., Any] = getattr(self, operation)
        try:
            inspect.signature(handler).bind(**args)
        except TypeError as e:
            return {"ok": False, "error": "bad_arguments", "message": f"{operation}: {e}"}

        try:
            result = handler(**args)
        except SyncAborted as e:
            return {"ok": False, "error": e.code, "message": e.message, "completed": e.synced}
        except PartialFailure as e:
            return {
                "ok": False,
                "error": e.code,
                "message": e.message,
                "completed": e.result.completed,
                "failed": dict(e.result.failed),
            }
        except ManagerError as e:
            logger.debug(f"{operation} failed: {e}")
            return {"ok": False, "error": e.code, "message": e.message}

        return {"ok": True, "result": result}
