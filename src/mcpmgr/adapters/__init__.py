# Dialect adapter registry
from mcpmgr.adapters.base import ConfigAdapter, dict_to_entry, entry_to_dict
from mcpmgr.adapters.codex import CodexAdapter
from mcpmgr.adapters.json_adapter import JsonAdapter, McpServersAdapter
from mcpmgr.adapters.vscode import VSCodeAdapter

# Closed set of dialects, keyed by the name used in the tool table
ALL_DIALECTS: dict[str, type[ConfigAdapter]] = {
    "mcp-servers": McpServersAdapter,
    "vscode": VSCodeAdapter,
    "codex": CodexAdapter,
}

__all__ = [
    "ConfigAdapter",
    "JsonAdapter",
    "McpServersAdapter",
    "VSCodeAdapter",
    "CodexAdapter",
    "ALL_DIALECTS",
    "dict_to_entry",
    "entry_to_dict",
    "get_adapter",
]


def get_adapter(dialect: str) -> ConfigAdapter:
    """Instantiate the adapter for a dialect name.

    Raises:
        KeyError: If the dialect is unknown
    """
    return ALL_DIALECTS[dialect]()
