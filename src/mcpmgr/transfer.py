# Import/export of the whole multi-tool config set
import logging
from datetime import datetime
from typing import Any

from mcpmgr.errors import ManagerError, ParseFailure
from mcpmgr.models import BatchResult, ServerEntry
from mcpmgr.store import ConfigStore
from mcpmgr.utils.timestamp import encode_id

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = 1


class ImportExportEngine:
    """Portable, dialect-independent bundle of every tool's entries.

    ABOUTME: Export holds decoded entries, not raw bytes (that's what backups are for)
    ABOUTME: Import works through ConfigStore, so every write is atomic per tool
    """

    def __init__(self, store: ConfigStore) -> None:
        self.store = store

    def export(self) -> dict[str, Any]:
        """Build the export document.

        ABOUTME: Tools whose file can't be parsed are left out (logged)
        """
        configs, _errors = self.store.list_all()
        return {
            "version": EXPORT_FORMAT_VERSION,
            "timestamp": encode_id(datetime.now()),
            "tools": {
                tool: [entry.to_dict() for entry in entries]
                for tool, entries in configs.items()
            },
        }

    def _parse(self, document: dict[str, Any]) -> dict[str, list[ServerEntry]]:
        """Turn an export document (or a bare tool -> entries map) into entries.

        Raises:
            ParseFailure: If any entry is malformed - nothing is written then
        """
        if not isinstance(document, dict):
            raise ParseFailure("Import document must be an object")

        if isinstance(document.get("tools"), dict):
            tools = document["tools"]
        else:
            tools = {k: v for k, v in document.items() if k not in ("version", "timestamp")}

        parsed: dict[str, list[ServerEntry]] = {}
        for tool, entries in tools.items():
            if not isinstance(entries, list):
                raise ParseFailure(f"Entries for '{tool}' must be a list")
            try:
                parsed[tool] = [ServerEntry.from_dict(item) for item in entries]
            except (TypeError, ValueError) as e:
                raise ParseFailure(f"Invalid entry for '{tool}': {e}") from e
        return parsed

    def import_(self, document: dict[str, Any], merge: bool = False) -> BatchResult:
        """Apply an import document.

        ABOUTME: merge=False replaces each listed tool's entry set
        ABOUTME: merge=True upserts entries one by one, keeping the rest
        ABOUTME: Unknown tools are ignored (tool sets differ between installs)
        ABOUTME: All known tools are attempted, failures are collected

        Returns:
            BatchResult with imported tool names
        """
        parsed = self._parse(document)
        known = set(self.store.registry.names)
        result = BatchResult()

        for tool, entries in parsed.items():
            if tool not in known:
                logger.warning(f"Ignoring unknown tool in import: {tool}")
                continue
            try:
                if merge:
                    for entry in entries:
                        self.store.upsert(tool, entry, validate=False)
                else:
                    self.store.replace_all(tool, entries, validate=False)
            except ManagerError as e:
                logger.warning(f"Import into {tool} failed: {e}")
                result.add_failure(tool, e)
            else:
                result.add_success(tool)

        mode = "merged" if merge else "replaced"
        logger.info(f"Import {mode} {result.completed} tool(s), {len(result.failed)} failed")
        return result
