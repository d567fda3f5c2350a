"""MCP server package initialization"""

from feed_ranker.server.app import create_mcp_server, run_server

__all__ = ["create_mcp_server", "run_server"]
