# Application settings and directory layout for mcpmgr
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from mcpmgr.utils.fileio import atomic_write_text

logger = logging.getLogger(__name__)

# ABOUTME: Environment variable that relocates the app directory (tests, portable installs)
APP_DIR_ENV = "MCP_MANAGER_HOME"

# ABOUTME: Default app directory in user's home
DEFAULT_APP_DIR = Path.home() / ".mcp-manager"

SETTINGS_FILENAME = "settings.json"
BACKUP_DIRNAME = "backups"


@dataclass
class Settings:
    """Persisted user settings.

    ABOUTME: custom_paths maps tool name -> override path as typed by the user
    """
    custom_paths: dict[str, str] = field(default_factory=dict)


def get_app_dir() -> Path:
    """Return the mcpmgr app directory.

    ABOUTME: Honors $MCP_MANAGER_HOME, defaults to ~/.mcp-manager
    ABOUTME: Directory may not exist yet; writers create it on first save
    """
    override = os.environ.get(APP_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_APP_DIR


def get_settings_path(app_dir: Path | None = None) -> Path:
    return (app_dir or get_app_dir()) / SETTINGS_FILENAME


def get_backup_dir(app_dir: Path | None = None) -> Path:
    """Return the backup directory path (not created)."""
    return (app_dir or get_app_dir()) / BACKUP_DIRNAME


def load_settings(path: Path) -> Settings:
    """Load settings from JSON.

    ABOUTME: Missing file -> defaults
    ABOUTME: Unreadable or malformed file -> defaults with a warning

    Args:
        path: Path to settings.json

    Returns:
        Settings object
    """
    if not path.exists():
        return Settings()

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable settings file {path}: {e}")
        return Settings()

    custom_paths = data.get("custom_paths", {}) if isinstance(data, dict) else {}
    if not isinstance(custom_paths, dict):
        logger.warning(f"Ignoring malformed 'custom_paths' in {path}")
        return Settings()

    return Settings(
        custom_paths={str(k): str(v) for k, v in custom_paths.items() if v}
    )


def save_settings(path: Path, settings: Settings) -> None:
    """Write settings atomically, creating the parent directory if needed.

    Raises:
        IOFailure: If the file cannot be written
    """
    content = json.dumps({"custom_paths": settings.custom_paths}, indent=2) + "\n"
    atomic_write_text(path, content)
    logger.debug(f"Saved settings to {path}")
