# Codex CLI platform adapter
from typing import Any

import tomli
import tomli_w

from mcpmgr.adapters.base import ConfigAdapter, Document
from mcpmgr.errors import ParseFailure
from mcpmgr.models import ServerEntry


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value if v is not None]
    return value


class CodexAdapter(ConfigAdapter):
    """Adapter for Codex CLI (~/.codex/config.toml).

    ABOUTME: Uses snake_case mcp_servers table (not mcpServers)
    ABOUTME: Reads with tomli, writes with tomli_w; comments are not preserved
    """

    config_key = "mcp_servers"
    format = "toml"

    def parse(self, text: str) -> Document:
        try:
            return tomli.loads(text)
        except tomli.TOMLDecodeError as e:
            raise ParseFailure(f"Invalid TOML: {e}") from e

    def serialize(self, document: Document) -> str:
        return tomli_w.dumps(document)

    def entry_to_member(self, entry: ServerEntry) -> dict[str, Any]:
        # TOML has no null; extras copied from a JSON tool may carry one
        return _drop_none(super().entry_to_member(entry))
