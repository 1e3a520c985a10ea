# ABOUTME: Atomic file writes and per-path in-process locks
# ABOUTME: Writes go to a sibling temp file, then os.replace() over the target
import logging
import os
import shutil
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from mcpmgr.errors import IOFailure

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_path_locks: dict[Path, threading.Lock] = {}


def _lock_for(path: Path) -> threading.Lock:
    # Same lock for a symlink and the file it points to
    key = Path(os.path.realpath(path))
    with _registry_lock:
        lock = _path_locks.get(key)
        if lock is None:
            lock = _path_locks[key] = threading.Lock()
        return lock


@contextmanager
def path_lock(path: Path) -> Iterator[None]:
    """Serialize in-process writers of one file.

    ABOUTME: Not reentrant - don't nest for the same path
    ABOUTME: Other processes are not excluded; last rename wins
    """
    lock = _lock_for(path)
    with lock:
        yield


def read_bytes(path: Path) -> bytes | None:
    """Read a file, returning None if it doesn't exist.

    Raises:
        IOFailure: On any other OS error
    """
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise IOFailure(path, "read", e) from e


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace path's content in a single rename.

    ABOUTME: Temp file lives in the same directory so the rename stays on one filesystem
    ABOUTME: Keeps the destination's permission bits when it already exists
    ABOUTME: A failure at any step leaves the original file untouched
    ABOUTME: A symlinked destination stays a link; its target gets the new content

    Args:
        path: Destination file (parent directories are created)
        data: Full new content

    Raises:
        IOFailure: If any step fails
    """
    path = path.resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailure(path.parent, "create directory", e) from e

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise IOFailure(path, "create temp file for", e) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise IOFailure(path, "write", e) from e

    logger.debug(f"Wrote {len(data)} bytes to {path}")


def atomic_write_text(path: Path, text: str) -> None:
    atomic_write_bytes(path, text.encode("utf-8"))


def remove_file(path: Path) -> bool:
    """Delete a file if present. Returns True if something was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise IOFailure(path, "delete", e) from e
    return True
