# Tests for settings loading and the app directory layout
import json
from pathlib import Path

from mcpmgr.config import (
    Settings,
    get_app_dir,
    get_backup_dir,
    get_settings_path,
    load_settings,
    save_settings,
)


def test_app_dir_honors_env(isolated_app_dir: Path):
    """Test that $MCP_MANAGER_HOME relocates the app directory."""
    assert get_app_dir() == isolated_app_dir
    assert get_settings_path() == isolated_app_dir / "settings.json"
    assert get_backup_dir() == isolated_app_dir / "backups"


def test_explicit_app_dir(tmp_path: Path):
    assert get_settings_path(tmp_path) == tmp_path / "settings.json"
    assert get_backup_dir(tmp_path) == tmp_path / "backups"


def test_missing_settings_are_defaults(tmp_path: Path):
    assert load_settings(tmp_path / "settings.json") == Settings()


def test_save_and_load(tmp_path: Path):
    """Test that settings survive a save/load cycle and the parent dir is created."""
    path = tmp_path / "nested" / "settings.json"
    save_settings(path, Settings(custom_paths={"claude": "~/work/.claude.json"}))

    assert json.loads(path.read_text()) == {"custom_paths": {"claude": "~/work/.claude.json"}}
    assert load_settings(path).custom_paths == {"claude": "~/work/.claude.json"}


def test_corrupt_settings_fall_back_to_defaults(tmp_path: Path, caplog):
    """Test that a malformed settings file is logged and ignored."""
    path = tmp_path / "settings.json"
    path.write_text("{ not json")

    assert load_settings(path) == Settings()
    assert "Ignoring unreadable settings file" in caplog.text


def test_malformed_custom_paths(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"custom_paths": ["claude"]}))
    assert load_settings(path) == Settings()


def test_empty_overrides_dropped(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"custom_paths": {"claude": "", "codex": "/x/config.toml"}}))
    assert load_settings(path).custom_paths == {"codex": "/x/config.toml"}
