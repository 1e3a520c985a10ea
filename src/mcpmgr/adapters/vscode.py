# VS Code platform adapter
from mcpmgr.adapters.json_adapter import JsonAdapter


class VSCodeAdapter(JsonAdapter):
    """Adapter for VS Code / VS Code Insiders user mcp.json.

    ABOUTME: Server map lives under 'servers' (not mcpServers)
    ABOUTME: Top-level 'inputs' and per-server 'type' survive through skeleton/extras
    """

    config_key = "servers"
