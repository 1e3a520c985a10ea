# Core data models for mcpmgr
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Literal, Union


@dataclass(frozen=True)
class StdioTransport:
    """Command-based server launched as a subprocess.

    ABOUTME: args keep their on-disk order
    """
    command: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SseTransport:
    """URL-based server reached over SSE/HTTP."""
    url: str


Transport = Union[StdioTransport, SseTransport]


@dataclass(frozen=True)
class ServerEntry:
    """One MCP server definition inside a tool's config.

    ABOUTME: Frozen dataclass, edits go through dataclasses.replace()
    ABOUTME: extras holds per-entry dialect fields the model doesn't cover
    ABOUTME: extras are carried verbatim but ignored by equality
    """
    name: str
    transport: Transport
    env: dict[str, str] = field(default_factory=dict)
    enabled: bool = True
    extras: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def kind(self) -> Literal["stdio", "sse"]:
        return "stdio" if isinstance(self.transport, StdioTransport) else "sse"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the portable, dialect-independent form.

        ABOUTME: Same field names the UI and export bundle use
        """
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.kind,
            "command": "",
            "args": [],
            "env": dict(self.env),
            "url": "",
            "enabled": self.enabled,
        }
        if isinstance(self.transport, StdioTransport):
            result["command"] = self.transport.command
            result["args"] = list(self.transport.args)
        else:
            result["url"] = self.transport.url
        if self.extras:
            result["extras"] = dict(self.extras)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerEntry":
        """Build an entry from the portable form.

        ABOUTME: type decides the transport; a missing type falls back to
        ABOUTME: stdio when a command is given, sse otherwise
        ABOUTME: Raises ValueError/TypeError on malformed input

        Args:
            data: Portable entry dict (see to_dict)

        Returns:
            ServerEntry instance
        """
        if not isinstance(data, dict):
            raise TypeError(f"Server entry must be an object, got {type(data).__name__}")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("Server entry missing required 'name' field")

        command = data.get("command") or ""
        server_type = data.get("type") or ("stdio" if command else "sse")

        transport: Transport
        if server_type == "stdio":
            args = data.get("args") or []
            if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
                raise ValueError(f"Server '{name}' has invalid 'args' (expected list of strings)")
            transport = StdioTransport(command=str(command), args=list(args))
        elif server_type in ("sse", "http"):
            transport = SseTransport(url=str(data.get("url") or ""))
        else:
            raise ValueError(
                f"Server '{name}' has invalid type '{server_type}'. Must be 'stdio' or 'sse'."
            )

        env = data.get("env") or {}
        if not isinstance(env, dict):
            raise ValueError(f"Server '{name}' has invalid 'env' (expected object)")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError(f"Server '{name}' has invalid 'enabled' (expected true or false)")

        extras = data.get("extras") or {}
        if not isinstance(extras, dict):
            raise ValueError(f"Server '{name}' has invalid 'extras' (expected object)")

        return cls(
            name=name,
            transport=transport,
            env={str(k): str(v) for k, v in env.items()},
            enabled=enabled,
            extras=dict(extras),
        )


@dataclass(frozen=True)
class Tool:
    """A client application whose config file mcpmgr manages.

    ABOUTME: exists is probed on every access, never cached
    """
    name: str
    display_name: str
    config_key: str
    default_path: Path
    custom_path: Path | None = None

    @property
    def path(self) -> Path:
        return self.custom_path if self.custom_path is not None else self.default_path

    @property
    def is_custom_path(self) -> bool:
        return self.custom_path is not None

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "configPath": str(self.path),
            "configKey": self.config_key,
            "exists": self.exists,
            "isCustomPath": self.is_custom_path,
        }


@dataclass(frozen=True)
class Backup:
    """Metadata for one stored snapshot."""
    id: str
    filename: str
    created_at: datetime
    path: Path

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.filename,
            "id": self.id,
            "timestamp": self.created_at.isoformat(),
        }


@dataclass
class BatchResult:
    """Per-target outcome of a grouped or batch operation.

    ABOUTME: Every target is attempted, failures are collected not raised
    ABOUTME: Targets are tool names
    """
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    def add_success(self, target: str) -> None:
        self.succeeded.append(target)

    def add_failure(self, target: str, error: Exception) -> None:
        self.failed[target] = str(error)

    @property
    def completed(self) -> int:
        return len(self.succeeded)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def first_error(self) -> str | None:
        return next(iter(self.failed.values()), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "succeeded": list(self.succeeded),
            "failed": dict(self.failed),
        }


@dataclass(frozen=True)
class GroupedEntry:
    """One server name as seen across every tool that defines it.

    ABOUTME: enabled is True if any instance is enabled
    """
    name: str
    tools: list[str]
    enabled: bool

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "tools": list(self.tools), "enabled": self.enabled}
