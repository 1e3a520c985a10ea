# Sync orchestration and cross-tool grouping for mcpmgr
import logging

from mcpmgr.errors import ManagerError, ServerNotFound, SyncAborted
from mcpmgr.models import BatchResult, GroupedEntry, ServerEntry
from mcpmgr.store import ConfigStore

logger = logging.getLogger(__name__)


class SyncEngine:
    """Copy entries between tools and act on same-named entries across tools.

    ABOUTME: Built only on ConfigStore's CRUD contract
    ABOUTME: Stores stay independent - a synced copy is not linked to its source
    """

    def __init__(self, store: ConfigStore) -> None:
        self.store = store

    def sync(self, from_tool: str, to_tool: str, names: list[str] | None = None) -> int:
        """Copy named entries from one tool to another, upserting by name.

        ABOUTME: names=None copies every entry of from_tool in file order
        ABOUTME: Names missing from from_tool are skipped, not errors
        ABOUTME: One atomic write per copied entry

        Args:
            from_tool: Source tool name
            to_tool: Destination tool name
            names: Server names to copy, in order; None for all

        Returns:
            Number of entries copied

        Raises:
            ToolNotFound: If either tool is unknown
            SyncAborted: If a write fails; carries the count copied before it
        """
        self.store.registry.get(to_tool)
        source = {entry.name: entry for entry in self.store.list(from_tool)}

        if names is None:
            names = list(source)

        synced = 0
        for name in names:
            entry = source.get(name)
            if entry is None:
                logger.debug(f"Skipping '{name}': not in {from_tool}")
                continue
            try:
                self.store.upsert(to_tool, entry, validate=False)
            except ManagerError as e:
                logger.error(f"Sync {from_tool} -> {to_tool} stopped at '{name}': {e}")
                raise SyncAborted(synced, e) from e
            synced += 1

        logger.info(f"Synced {synced} server(s) from {from_tool} to {to_tool}")
        return synced

    def grouped(
        self, configs: dict[str, list[ServerEntry]] | None = None
    ) -> list[GroupedEntry]:
        """Project all tools' entries into one row per server name.

        ABOUTME: Read-side only; nothing is written
        ABOUTME: Names appear in first-seen order, tools in registry order
        """
        if configs is None:
            configs, _ = self.store.list_all()

        tools_by_name: dict[str, list[str]] = {}
        enabled_by_name: dict[str, bool] = {}
        for tool, entries in configs.items():
            for entry in entries:
                tools_by_name.setdefault(entry.name, []).append(tool)
                enabled_by_name[entry.name] = enabled_by_name.get(entry.name, False) or entry.enabled

        return [
            GroupedEntry(name=name, tools=tools, enabled=enabled_by_name[name])
            for name, tools in tools_by_name.items()
        ]

    def _group_for(self, name: str, tools: list[str] | None) -> GroupedEntry | None:
        for group in self.grouped():
            if group.name == name:
                if tools is not None:
                    return GroupedEntry(
                        name=name,
                        tools=[t for t in group.tools if t in tools],
                        enabled=group.enabled,
                    )
                return group
        return None

    def toggle_group(self, name: str, tools: list[str] | None = None) -> BatchResult:
        """Toggle a server in every tool that defines it.

        ABOUTME: Every instance is set to (not aggregate enabled), so a mixed
        ABOUTME: group ends up uniformly disabled and an all-off group enabled
        ABOUTME: All targets are attempted; failures are collected
        """
        result = BatchResult()
        group = self._group_for(name, tools)
        if group is None or not group.tools:
            raise ServerNotFound("any tool", name)

        target = not group.enabled
        for tool in group.tools:
            try:
                self.store.set_enabled(tool, name, target)
            except ManagerError as e:
                logger.warning(f"Toggle of '{name}' failed in {tool}: {e}")
                result.add_failure(tool, e)
            else:
                result.add_success(tool)
        return result

    def delete_group(self, name: str, tools: list[str] | None = None) -> BatchResult:
        """Delete a server from every tool that defines it.

        ABOUTME: All targets are attempted; failures are collected
        """
        result = BatchResult()
        group = self._group_for(name, tools)
        if group is None or not group.tools:
            raise ServerNotFound("any tool", name)

        for tool in group.tools:
            try:
                self.store.delete(tool, name)
            except ManagerError as e:
                logger.warning(f"Delete of '{name}' failed in {tool}: {e}")
                result.add_failure(tool, e)
            else:
                result.add_success(tool)
        return result


def stats(configs: dict[str, list[ServerEntry]]) -> dict[str, int]:
    """Summary counts: total entries, enabled entries, tools."""
    total = sum(len(entries) for entries in configs.values())
    active = sum(1 for entries in configs.values() for e in entries if e.enabled)
    return {"total": total, "active": active, "tools": len(configs)}
