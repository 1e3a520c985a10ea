# JSON dialect adapters
import json
from typing import Any

from mcpmgr.adapters.base import ConfigAdapter, Document
from mcpmgr.errors import ParseFailure, UnsupportedDialect


class JsonAdapter(ConfigAdapter):
    """Shared parse/serialize for JSON config files.

    ABOUTME: Key order is kept (no sort_keys) so untouched settings stay where they were
    ABOUTME: Blank files count as an empty document
    """

    format = "json"

    def parse(self, text: str) -> Document:
        if not text.strip():
            return self.empty_document()

        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseFailure(f"Invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise UnsupportedDialect(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def serialize(self, document: Document) -> str:
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


class McpServersAdapter(JsonAdapter):
    """Adapter for the common 'mcpServers' JSON shape.

    ABOUTME: Used by Claude Code, Gemini CLI, Copilot CLI, Cursor and Windsurf
    ABOUTME: Gemini/Claude keep lots of unrelated settings in the same file
    """

    config_key = "mcpServers"
