# Tool registry: static tool table + persisted path overrides
import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mcpmgr.adapters import ConfigAdapter, get_adapter
from mcpmgr.config import Settings, get_settings_path, load_settings, save_settings
from mcpmgr.errors import PathInvalid, ToolNotFound
from mcpmgr.models import Tool
from mcpmgr.utils.env import expand_user_path

logger = logging.getLogger(__name__)


def app_support_dir(home: Path) -> Path:
    """Per-OS base directory for editor user data.

    ABOUTME: macOS -> ~/Library/Application Support, Windows -> %APPDATA%, else ~/.config
    """
    if sys.platform == "darwin":
        return home / "Library/Application Support"
    elif sys.platform == "win32":
        return Path(os.environ.get("APPDATA", home / "AppData/Roaming"))
    else:  # Linux and others
        return home / ".config"


@dataclass(frozen=True)
class ToolDefinition:
    """Static description of a supported tool.

    ABOUTME: dialect names an entry of adapters.ALL_DIALECTS
    ABOUTME: default_path is computed from the home directory
    """
    name: str
    display_name: str
    dialect: str
    default_path: Callable[[Path], Path]


TOOL_DEFINITIONS: list[ToolDefinition] = [
    ToolDefinition(
        "claude", "Claude Code", "mcp-servers",
        lambda home: home / ".claude.json",
    ),
    ToolDefinition(
        "gemini", "Gemini CLI", "mcp-servers",
        lambda home: home / ".gemini" / "settings.json",
    ),
    ToolDefinition(
        "codex", "Codex CLI", "codex",
        lambda home: home / ".codex" / "config.toml",
    ),
    ToolDefinition(
        "copilot", "Copilot CLI", "mcp-servers",
        lambda home: home / ".copilot" / "mcp-config.json",
    ),
    ToolDefinition(
        "vscode", "VS Code", "vscode",
        lambda home: app_support_dir(home) / "Code" / "User" / "mcp.json",
    ),
    ToolDefinition(
        "cursor", "Cursor", "mcp-servers",
        lambda home: app_support_dir(home) / "Cursor" / "User" / "mcp.json",
    ),
    ToolDefinition(
        "vscode-insiders", "VS Code Insiders", "vscode",
        lambda home: app_support_dir(home) / "Code - Insiders" / "User" / "mcp.json",
    ),
    ToolDefinition(
        "windsurf", "Windsurf", "mcp-servers",
        lambda home: home / ".codeium" / "windsurf" / "mcp_config.json",
    ),
]


class ToolRegistry:
    """Supported tools and where their config files live.

    ABOUTME: Settings are re-read on every call, nothing is cached
    ABOUTME: Custom path overrides win over default paths when non-empty
    """

    def __init__(
        self,
        settings_path: Path | None = None,
        home: Path | None = None,
        definitions: list[ToolDefinition] | None = None,
    ) -> None:
        """Initialize registry.

        ABOUTME: Defaults to the user's home and ~/.mcp-manager/settings.json
        ABOUTME: Tests pass tmp paths and/or their own definitions
        """
        self.settings_path = settings_path if settings_path else get_settings_path()
        self.home = home if home else Path.home()
        self._definitions = {d.name: d for d in (definitions or TOOL_DEFINITIONS)}
        self._adapters = {
            name: get_adapter(d.dialect) for name, d in self._definitions.items()
        }

    @property
    def names(self) -> list[str]:
        return list(self._definitions)

    def _definition(self, name: str) -> ToolDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise ToolNotFound(name) from None

    def _build(self, definition: ToolDefinition, settings: Settings) -> Tool:
        override = settings.custom_paths.get(definition.name, "")
        custom_path = expand_user_path(override) if override else None
        return Tool(
            name=definition.name,
            display_name=definition.display_name,
            config_key=self._adapters[definition.name].config_key,
            default_path=definition.default_path(self.home),
            custom_path=custom_path,
        )

    def list_tools(self) -> list[Tool]:
        """All tools in table order."""
        settings = load_settings(self.settings_path)
        return [self._build(d, settings) for d in self._definitions.values()]

    def get(self, name: str) -> Tool:
        definition = self._definition(name)
        return self._build(definition, load_settings(self.settings_path))

    def resolve_path(self, name: str) -> Path:
        """Config path for a tool: custom override if set, default otherwise.

        Raises:
            ToolNotFound: If name is not a known tool
        """
        return self.get(name).path

    def adapter_for(self, name: str) -> ConfigAdapter:
        self._definition(name)
        return self._adapters[name]

    def set_custom_path(self, name: str, path: str) -> None:
        """Store (or clear, with "") a path override for a tool.

        ABOUTME: Only the settings file is written, never the tool's config
        ABOUTME: Rejects paths that can't name a config file

        Raises:
            ToolNotFound: If name is not a known tool
            PathInvalid: If path contains NUL or points at a directory
            IOFailure: If settings cannot be saved
        """
        self._definition(name)
        path = path.strip()

        settings = load_settings(self.settings_path)
        if not path:
            if settings.custom_paths.pop(name, None) is None:
                return
            logger.info(f"Reset config path for {name} to default")
        else:
            if "\0" in path:
                raise PathInvalid(path, "contains a NUL byte")
            if expand_user_path(path).is_dir():
                raise PathInvalid(path, "is a directory, expected a config file path")
            settings.custom_paths[name] = path
            logger.info(f"Set config path for {name} to {path}")

        save_settings(self.settings_path, settings)
