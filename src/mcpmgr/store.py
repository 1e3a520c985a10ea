# ABOUTME: ConfigStore - CRUD on server entries inside each tool's config file
# ABOUTME: Stateless: every call re-reads the file; every write is an atomic rename
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from pathlib import Path

from mcpmgr.adapters import ConfigAdapter
from mcpmgr.adapters.base import Document
from mcpmgr.errors import (
    DuplicateName,
    InvalidEntry,
    ManagerError,
    ParseFailure,
    ServerNotFound,
)
from mcpmgr.models import ServerEntry
from mcpmgr.registry import ToolRegistry
from mcpmgr.utils.fileio import atomic_write_text, path_lock, read_bytes
from mcpmgr.utils.validation import has_errors, validate_entry

logger = logging.getLogger(__name__)

# Receives the current entries, returns the entries to write
Mutation = Callable[[list[ServerEntry]], list[ServerEntry]]


def _index_of(entries: list[ServerEntry], name: str) -> int | None:
    for i, entry in enumerate(entries):
        if entry.name == name:
            return i
    return None


class ConfigStore:
    """Read and edit the server entries of any registered tool.

    ABOUTME: Mutations hold a per-path lock across read-modify-write
    ABOUTME: External writers are not locked out; the last rename wins
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    def _load(self, path: Path, adapter: ConfigAdapter) -> Document:
        raw = read_bytes(path)
        if raw is None:
            return adapter.empty_document()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseFailure(f"{path} is not valid UTF-8: {e}") from e
        try:
            return adapter.parse(text)
        except ParseFailure as e:
            # Re-raise with the file name, keep the original class
            raise type(e)(f"{path}: {e.message}") from e

    def _decode(self, path: Path, adapter: ConfigAdapter) -> tuple[list[ServerEntry], Document]:
        document = self._load(path, adapter)
        try:
            return adapter.decode(document)
        except ParseFailure as e:
            raise type(e)(f"{path}: {e.message}") from e

    def list(self, tool: str) -> list[ServerEntry]:
        """Entries of a tool in file order; an absent file means no entries.

        Raises:
            ToolNotFound, ParseFailure, UnsupportedDialect, IOFailure
        """
        path = self.registry.resolve_path(tool)
        entries, _ = self._decode(path, self.registry.adapter_for(tool))
        return entries

    def list_all(self) -> tuple[dict[str, list[ServerEntry]], dict[str, ManagerError]]:
        """Entries of every tool.

        ABOUTME: A tool whose file can't be read goes to the errors dict
        ABOUTME: instead of hiding every other tool's entries

        Returns:
            (tool -> entries, tool -> error)
        """
        configs: dict[str, list[ServerEntry]] = {}
        errors: dict[str, ManagerError] = {}
        for tool in self.registry.names:
            try:
                configs[tool] = self.list(tool)
            except ManagerError as e:
                logger.warning(f"Skipping {tool}: {e}")
                errors[tool] = e
        return configs, errors

    def get(self, tool: str, name: str) -> ServerEntry:
        for entry in self.list(tool):
            if entry.name == name:
                return entry
        raise ServerNotFound(tool, name)

    def _mutate(self, tool: str, mutation: Mutation) -> list[ServerEntry]:
        """Re-read, apply mutation, write back atomically.

        ABOUTME: Only the config_key subtree changes, the rest of the document is kept
        """
        path = self.registry.resolve_path(tool)
        adapter = self.registry.adapter_for(tool)

        with path_lock(path):
            entries, skeleton = self._decode(path, adapter)
            updated = mutation(list(entries))
            if not updated and not path.exists():
                # Nothing to write for a tool that has no config file yet
                return updated
            document = adapter.encode(skeleton, updated)
            atomic_write_text(path, adapter.serialize(document))

        logger.debug(f"Wrote {len(updated)} server(s) to {path}")
        return updated

    def _check(self, tool: str, entry: ServerEntry) -> None:
        errors = validate_entry(entry)
        if has_errors(errors):
            details = "; ".join(e.message for e in errors if e.severity == "error")
            raise InvalidEntry(f"Invalid server '{entry.name}' for {tool}: {details}")

    def upsert(self, tool: str, entry: ServerEntry, validate: bool = True) -> None:
        """Replace the entry with the same name, or append it.

        ABOUTME: validate=False for entries that were read back from a tool file
        ABOUTME: (sync, import) - those are written exactly as they decoded

        Raises:
            InvalidEntry: If validate is set and the entry fails validation
        """
        if validate:
            self._check(tool, entry)

        def apply(entries: list[ServerEntry]) -> list[ServerEntry]:
            index = _index_of(entries, entry.name)
            if index is None:
                entries.append(entry)
            else:
                entries[index] = entry
            return entries

        self._mutate(tool, apply)
        logger.info(f"Saved server '{entry.name}' in {tool}")

    def add(self, tool: str, entry: ServerEntry) -> None:
        """Append a new entry; unlike upsert an existing name is an error.

        Raises:
            DuplicateName: If the name already exists in the tool
        """
        self._check(tool, entry)

        def apply(entries: list[ServerEntry]) -> list[ServerEntry]:
            if _index_of(entries, entry.name) is not None:
                raise DuplicateName(tool, entry.name)
            entries.append(entry)
            return entries

        self._mutate(tool, apply)
        logger.info(f"Added server '{entry.name}' to {tool}")

    def rename(self, tool: str, old_name: str, new_name: str) -> None:
        """Rename an entry in place, keeping its position.

        Raises:
            ServerNotFound: If old_name is absent
            DuplicateName: If new_name is already taken
            InvalidEntry: If new_name is blank
        """
        if not new_name.strip():
            raise InvalidEntry(f"Invalid server name for {tool}: name must not be empty")
        if old_name == new_name:
            self.get(tool, old_name)
            return

        def apply(entries: list[ServerEntry]) -> list[ServerEntry]:
            index = _index_of(entries, old_name)
            if index is None:
                raise ServerNotFound(tool, old_name)
            if _index_of(entries, new_name) is not None:
                raise DuplicateName(tool, new_name)
            entries[index] = dataclasses.replace(entries[index], name=new_name)
            return entries

        self._mutate(tool, apply)
        logger.info(f"Renamed server '{old_name}' to '{new_name}' in {tool}")

    def delete(self, tool: str, name: str) -> None:
        """Remove an entry.

        Raises:
            ServerNotFound: If name is absent
        """
        def apply(entries: list[ServerEntry]) -> list[ServerEntry]:
            index = _index_of(entries, name)
            if index is None:
                raise ServerNotFound(tool, name)
            del entries[index]
            return entries

        self._mutate(tool, apply)
        logger.info(f"Deleted server '{name}' from {tool}")

    def toggle_enabled(self, tool: str, name: str) -> ServerEntry:
        """Flip an entry's enabled flag and return the updated entry.

        Raises:
            ServerNotFound: If name is absent
        """
        return self.set_enabled(tool, name, None)

    def set_enabled(self, tool: str, name: str, enabled: bool | None) -> ServerEntry:
        """Set an entry's enabled flag (None flips it)."""
        result: list[ServerEntry] = []

        def apply(entries: list[ServerEntry]) -> list[ServerEntry]:
            index = _index_of(entries, name)
            if index is None:
                raise ServerNotFound(tool, name)
            current = entries[index]
            value = (not current.enabled) if enabled is None else enabled
            entries[index] = dataclasses.replace(current, enabled=value)
            result.append(entries[index])
            return entries

        self._mutate(tool, apply)
        logger.info(
            f"{'Enabled' if result[0].enabled else 'Disabled'} server '{name}' in {tool}"
        )
        return result[0]

    def replace_all(self, tool: str, entries: list[ServerEntry], validate: bool = True) -> None:
        """Write exactly this entry set, dropping everything else under the key."""
        seen: set[str] = set()
        for entry in entries:
            if validate:
                self._check(tool, entry)
            if entry.name in seen:
                raise DuplicateName(tool, entry.name)
            seen.add(entry.name)

        self._mutate(tool, lambda _current: list(entries))
        logger.info(f"Replaced servers in {tool} ({len(entries)} total)")
