"""Read-only Ethereum wallet tools served over MCP JSON-RPC."""

__version__ = "0.1.0"
