# ABOUTME: Shared fixtures - a small tool table rooted in tmp_path
# ABOUTME: Nothing here touches the real home directory
from pathlib import Path

import pytest

from mcpmgr.backup import BackupManager
from mcpmgr.models import ServerEntry, SseTransport, StdioTransport
from mcpmgr.registry import ToolDefinition, ToolRegistry
from mcpmgr.store import ConfigStore
from mcpmgr.sync import SyncEngine
from mcpmgr.transfer import ImportExportEngine

TEST_DEFINITIONS = [
    ToolDefinition("alpha", "Alpha", "mcp-servers", lambda home: home / "alpha.json"),
    ToolDefinition("beta", "Beta", "mcp-servers", lambda home: home / ".beta" / "settings.json"),
    ToolDefinition("gamma", "Gamma", "codex", lambda home: home / ".gamma" / "config.toml"),
    ToolDefinition("delta", "Delta", "vscode", lambda home: home / "delta" / "mcp.json"),
]


@pytest.fixture(autouse=True)
def isolated_app_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point $MCP_MANAGER_HOME at tmp so default paths never hit ~/.mcp-manager."""
    app_dir = tmp_path / "app"
    monkeypatch.setenv("MCP_MANAGER_HOME", str(app_dir))
    return app_dir


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def registry(home: Path, isolated_app_dir: Path) -> ToolRegistry:
    return ToolRegistry(
        settings_path=isolated_app_dir / "settings.json",
        home=home,
        definitions=TEST_DEFINITIONS,
    )


@pytest.fixture
def store(registry: ToolRegistry) -> ConfigStore:
    return ConfigStore(registry)


@pytest.fixture
def sync_engine(store: ConfigStore) -> SyncEngine:
    return SyncEngine(store)


@pytest.fixture
def backups(registry: ToolRegistry, isolated_app_dir: Path) -> BackupManager:
    return BackupManager(registry, backup_dir=isolated_app_dir / "backups")


@pytest.fixture
def transfer(store: ConfigStore) -> ImportExportEngine:
    return ImportExportEngine(store)


def stdio(name: str, command: str = "npx", args: list[str] | None = None, **kwargs) -> ServerEntry:
    return ServerEntry(
        name=name,
        transport=StdioTransport(command=command, args=args or []),
        **kwargs,
    )


def sse(name: str, url: str = "https://example.com/mcp", **kwargs) -> ServerEntry:
    return ServerEntry(name=name, transport=SseTransport(url=url), **kwargs)
