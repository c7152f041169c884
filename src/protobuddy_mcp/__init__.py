"""ProtoBuddy MCP - board/component compatibility engine."""

__version__ = "0.3.0"
