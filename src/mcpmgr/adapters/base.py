# Dialect adapter base: ServerEntry <-> on-disk document
from abc import ABC, abstractmethod
from typing import Any

from mcpmgr.errors import UnsupportedDialect
from mcpmgr.models import ServerEntry, SseTransport, StdioTransport, Transport

Document = dict[str, Any]


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_str_map(value: Any) -> bool:
    return isinstance(value, dict) and all(isinstance(v, str) for v in value.values())


def dict_to_entry(name: str, data: Any, disabled_marker: str = "disabled") -> ServerEntry:
    """Convert one member of a tool's server map to a ServerEntry.

    ABOUTME: A 'command' field makes it stdio, otherwise it's sse
    ABOUTME: Fields are only consumed when they carry information the model keeps;
    ABOUTME: everything else (type, alwaysAllow, "args": [], "disabled": false...)
    ABOUTME: lands in extras so encoding gives back the same member

    Raises:
        UnsupportedDialect: If the member or a modeled field has the wrong shape
    """
    if not isinstance(data, dict):
        raise UnsupportedDialect(f"Server '{name}' must be an object, got {type(data).__name__}")

    consumed: set[str] = set()
    transport: Transport

    if "command" in data:
        command = data["command"]
        if not isinstance(command, str):
            raise UnsupportedDialect(f"Server '{name}' has a non-string 'command'")
        consumed.add("command")

        args = data.get("args", [])
        if not _is_str_list(args):
            raise UnsupportedDialect(f"Server '{name}' has invalid 'args' (expected list of strings)")
        if args:
            consumed.add("args")
        transport = StdioTransport(command=command, args=list(args))
    else:
        url = data.get("url", "")
        if not isinstance(url, str):
            raise UnsupportedDialect(f"Server '{name}' has a non-string 'url'")
        if url:
            consumed.add("url")
        transport = SseTransport(url=url)

    env = data.get("env", {})
    if not _is_str_map(env):
        raise UnsupportedDialect(f"Server '{name}' has invalid 'env' (expected string values)")
    if env:
        consumed.add("env")

    disabled = data.get(disabled_marker, False)
    if not isinstance(disabled, bool):
        raise UnsupportedDialect(f"Server '{name}' has a non-boolean '{disabled_marker}'")
    if disabled:
        consumed.add(disabled_marker)

    return ServerEntry(
        name=name,
        transport=transport,
        env=dict(env),
        enabled=not disabled,
        extras={key: value for key, value in data.items() if key not in consumed},
    )


_STDIO_FIELDS = ("command", "args")
_SSE_TYPES = ("sse", "http", "streamable-http")


def _conflicting_type(value: Any, is_stdio: bool) -> bool:
    """True if a dialect type tag names the other transport."""
    if is_stdio:
        return value in _SSE_TYPES
    return value == "stdio"


def entry_to_dict(entry: ServerEntry, disabled_marker: str = "disabled") -> dict[str, Any]:
    """Convert a ServerEntry to one member of a tool's server map.

    ABOUTME: command + args (if any) for stdio, url for sse
    ABOUTME: env only if non-empty, disabled marker only if disabled
    ABOUTME: Extras fill in whatever the modeled fields didn't set, except fields
    ABOUTME: of the other transport (command/args, url, a conflicting type tag)
    """
    result: dict[str, Any] = {}

    if isinstance(entry.transport, StdioTransport):
        result["command"] = entry.transport.command
        if entry.transport.args:
            result["args"] = list(entry.transport.args)
    elif entry.transport.url:
        result["url"] = entry.transport.url

    if entry.env:
        result["env"] = dict(entry.env)

    if not entry.enabled:
        result[disabled_marker] = True

    is_stdio = isinstance(entry.transport, StdioTransport)
    for key, value in entry.extras.items():
        if key in result:
            continue
        # A stdio entry turned sse (or back) must not keep the other transport's fields
        if key in _STDIO_FIELDS and not is_stdio:
            continue
        if key == "url" and is_stdio:
            continue
        if key == "type" and _conflicting_type(value, is_stdio):
            continue
        result[key] = value

    return result


class ConfigAdapter(ABC):
    """Translate between ServerEntry and one tool's on-disk dialect.

    ABOUTME: parse/serialize handle the file format (JSON, TOML)
    ABOUTME: decode/encode handle the server map under config_key
    ABOUTME: Every document field other than config_key passes through untouched
    """

    #: JSON/TOML key holding the server map
    config_key: str = "mcpServers"
    #: Per-entry boolean that marks a server as disabled
    disabled_marker: str = "disabled"
    #: File format label ("json" or "toml")
    format: str = "json"

    @abstractmethod
    def parse(self, text: str) -> Document:
        """Parse file text into a raw document."""

    @abstractmethod
    def serialize(self, document: Document) -> str:
        """Render a raw document back to file text."""

    def empty_document(self) -> Document:
        return {}

    def decode(self, document: Document) -> tuple[list[ServerEntry], Document]:
        """Split a raw document into entries and the untouched skeleton.

        Returns:
            (entries in document order, skeleton) - the skeleton is the
            document itself; encode() only ever replaces config_key

        Raises:
            UnsupportedDialect: If config_key holds something other than a mapping
        """
        if not isinstance(document, dict):
            raise UnsupportedDialect(
                f"Expected a top-level object, got {type(document).__name__}"
            )

        servers = document.get(self.config_key, {})
        if not isinstance(servers, dict):
            raise UnsupportedDialect(
                f"'{self.config_key}' must be an object, got {type(servers).__name__}"
            )

        entries = [
            dict_to_entry(name, data, self.disabled_marker)
            for name, data in servers.items()
        ]
        return entries, document

    def encode(self, skeleton: Document, entries: list[ServerEntry]) -> Document:
        """Merge entries back into the skeleton under config_key.

        ABOUTME: Returns a new dict; key position is kept if config_key existed
        ABOUTME: A document that never had config_key doesn't grow an empty one
        """
        document = dict(skeleton)
        if not entries and self.config_key not in document:
            return document
        document[self.config_key] = {
            entry.name: self.entry_to_member(entry) for entry in entries
        }
        return document

    def entry_to_member(self, entry: ServerEntry) -> dict[str, Any]:
        return entry_to_dict(entry, self.disabled_marker)
