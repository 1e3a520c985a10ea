# ABOUTME: Snapshot, list, restore and delete backups of every tool's config file.
# ABOUTME: Works on raw file bytes - adapters are never involved.
from __future__ import annotations

import base64
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from mcpmgr.config import get_backup_dir
from mcpmgr.errors import BackupNotFound, IOFailure, ParseFailure
from mcpmgr.models import Backup
from mcpmgr.registry import ToolRegistry
from mcpmgr.utils.fileio import atomic_write_bytes, atomic_write_text, path_lock, read_bytes, remove_file
from mcpmgr.utils.timestamp import MAX_SEQUENCE, decode_id, encode_id, is_valid_id

logger = logging.getLogger(__name__)

BACKUP_FORMAT_VERSION = 1

# ABOUTME: Pattern matches backup-{id}.json, e.g. backup-2026-10-18T14-03-05.json
BACKUP_FILE_PATTERN = re.compile(r"^backup-(.+)\.json$")


def backup_filename(backup_id: str) -> str:
    return f"backup-{backup_id}.json"


def _encode_content(raw: bytes | None) -> dict[str, Any]:
    if raw is None:
        return {"encoding": None, "content": None}
    try:
        return {"encoding": "utf-8", "content": raw.decode("utf-8")}
    except UnicodeDecodeError:
        return {"encoding": "base64", "content": base64.b64encode(raw).decode("ascii")}


def _decode_content(record: dict[str, Any]) -> bytes | None:
    content = record.get("content")
    if content is None:
        return None
    if record.get("encoding") == "base64":
        return base64.b64decode(content)
    return str(content).encode("utf-8")


class BackupManager:
    """Timestamped snapshots of all tool config files.

    ABOUTME: One JSON artifact per snapshot in the backup directory
    ABOUTME: Restore is per-file atomic but not atomic across files: a crash
    ABOUTME: mid-restore can leave some tools restored and others not
    """

    def __init__(self, registry: ToolRegistry, backup_dir: Path | None = None) -> None:
        self.registry = registry
        self.backup_dir = backup_dir if backup_dir else get_backup_dir()

    def _path_for(self, backup_id: str) -> Path:
        return self.backup_dir / backup_filename(backup_id)

    def _resolve_id(self, id_or_filename: str) -> str:
        """Accept either an id or a backup-<id>.json filename.

        Raises:
            BackupNotFound: If the value isn't a well-formed id or the artifact is missing
        """
        match = BACKUP_FILE_PATTERN.match(id_or_filename)
        backup_id = match.group(1) if match else id_or_filename
        if not is_valid_id(backup_id) or not self._path_for(backup_id).is_file():
            raise BackupNotFound(id_or_filename)
        return backup_id

    def _next_id(self, now: datetime) -> str:
        for sequence in range(MAX_SEQUENCE + 1):
            backup_id = encode_id(now, sequence)
            if not self._path_for(backup_id).exists():
                return backup_id
        raise IOFailure(self.backup_dir, "allocate backup id in", OSError("too many backups in one second"))

    def create(self, now: datetime | None = None) -> Backup:
        """Capture every registered tool's config file.

        ABOUTME: Tools are captured regardless of whether their file exists;
        ABOUTME: a missing file is recorded as absent

        Returns:
            Metadata of the new backup

        Raises:
            IOFailure: If a config file can't be read or the artifact can't be written
        """
        moment = (now or datetime.now()).replace(microsecond=0)
        files: dict[str, dict[str, Any]] = {}
        for tool in self.registry.list_tools():
            raw = read_bytes(tool.path)
            files[tool.name] = {"path": str(tool.path), **_encode_content(raw)}

        with path_lock(self.backup_dir):
            backup_id = self._next_id(moment)
            artifact = {
                "version": BACKUP_FORMAT_VERSION,
                "id": backup_id,
                "created_at": moment.isoformat(),
                "files": files,
            }
            path = self._path_for(backup_id)
            atomic_write_text(path, json.dumps(artifact, indent=2, ensure_ascii=False) + "\n")

        logger.info(f"Created backup {backup_id} ({len(files)} tool(s))")
        return Backup(id=backup_id, filename=path.name, created_at=moment, path=path)

    def list(self) -> list[Backup]:
        """All backups, newest first.

        ABOUTME: Files that don't look like backup artifacts are ignored
        """
        if not self.backup_dir.exists():
            return []

        backups: list[Backup] = []
        for file_path in self.backup_dir.iterdir():
            if not file_path.is_file():
                continue
            match = BACKUP_FILE_PATTERN.match(file_path.name)
            if not match:
                continue
            try:
                created_at, _ = decode_id(match.group(1))
            except ValueError:
                logger.debug(f"Ignoring non-backup file {file_path}")
                continue
            backups.append(Backup(
                id=match.group(1),
                filename=file_path.name,
                created_at=created_at,
                path=file_path,
            ))

        backups.sort(key=lambda b: b.id, reverse=True)
        return backups

    def _read_artifact(self, backup_id: str) -> dict[str, Any]:
        path = self._path_for(backup_id)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseFailure(f"Corrupt backup {path.name}: {e}") from e
        except OSError as e:
            raise IOFailure(path, "read", e) from e

        if not isinstance(data, dict) or not isinstance(data.get("files"), dict):
            raise ParseFailure(f"Corrupt backup {path.name}: missing 'files'")
        return data

    def restore(self, id_or_filename: str, tools: list[str] | None = None) -> list[str]:
        """Write captured file contents back to where they were captured from.

        ABOUTME: Files absent at capture time are deleted, not created empty
        ABOUTME: tools limits the restore to those tool names

        Returns:
            Names of restored tools, in artifact order

        Raises:
            BackupNotFound: If the backup doesn't exist
            ParseFailure: If the artifact is corrupt
            IOFailure: On the first file that can't be written (earlier ones stay restored)
        """
        backup_id = self._resolve_id(id_or_filename)
        artifact = self._read_artifact(backup_id)

        restored: list[str] = []
        for tool, record in artifact["files"].items():
            if tools is not None and tool not in tools:
                continue
            if not isinstance(record, dict) or not record.get("path"):
                raise ParseFailure(f"Corrupt backup {backup_id}: bad record for {tool}")

            path = Path(record["path"])
            content = _decode_content(record)
            with path_lock(path):
                if content is None:
                    if remove_file(path):
                        logger.info(f"Removed {path} (absent in backup {backup_id})")
                else:
                    atomic_write_bytes(path, content)
            restored.append(tool)

        logger.info(f"Restored backup {backup_id} ({len(restored)} tool(s))")
        return restored

    def delete(self, id_or_filename: str) -> None:
        """Remove a backup artifact.

        Raises:
            BackupNotFound: If the backup doesn't exist
        """
        backup_id = self._resolve_id(id_or_filename)
        remove_file(self._path_for(backup_id))
        logger.info(f"Deleted backup {backup_id}")

    def prune(self, keep: int) -> list[str]:
        """Delete all but the newest `keep` backups.

        ABOUTME: Logs warnings on errors but keeps going

        Returns:
            Ids that were deleted
        """
        if keep < 0:
            raise ValueError("keep must be >= 0")

        deleted: list[str] = []
        for backup in self.list()[keep:]:
            try:
                remove_file(backup.path)
                deleted.append(backup.id)
                logger.debug(f"Deleted old backup: {backup.path}")
            except IOFailure as e:
                logger.warning(f"Failed to delete old backup {backup.path}: {e}")
        return deleted
