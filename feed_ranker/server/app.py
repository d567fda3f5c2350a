"""feed_ranker - MCP Server with Decorators

This module implements the MCP server using FastMCP with multi-transport support
(STDIO, SSE, and Streamable HTTP) and automatic application of decorators
(exception handling, logging).
"""

import asyncio
import os
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from feed_ranker.config import ServerConfig, get_config
from feed_ranker.logging_config import logger, setup_logging
from feed_ranker.server.decorators import exception_handler, tool_logger
from feed_ranker.tools.feed_tools import feed_tools


TRANSPORTS = ("stdio", "sse", "streamable-http")


def create_mcp_server(config: Optional[ServerConfig] = None) -> FastMCP:
    """Create and configure the MCP server with decorators.

    Args:
        config: Optional server configuration

    Returns:
        Configured FastMCP server instance
    """
    if config is None:
        config = get_config()

    setup_logging(config)
    logger.info(f"Server config: {config.name} at log level {config.log_level}")

    # Configure DNS rebinding protection (disabled by default for development)
    dns_protection = os.getenv("MCP_DNS_REBINDING_PROTECTION", "false").lower() == "true"
    allowed_hosts_env = os.getenv("MCP_ALLOWED_HOSTS", "")
    allowed_hosts = [h.strip() for h in allowed_hosts_env.split(",") if h.strip()]

    logger.info(f"DNS rebinding protection: {'enabled' if dns_protection else 'disabled'}")
    if dns_protection and allowed_hosts:
        logger.info(f"Allowed hosts: {allowed_hosts}")

    mcp_server = FastMCP(
        config.name or "feed_ranker",
        transport_security=TransportSecuritySettings(
            enable_dns_rebinding_protection=dns_protection,
            allowed_hosts=allowed_hosts,
        ),
    )

    register_tools(mcp_server, config)

    logger.info("Server initialization complete")
    return mcp_server


def register_tools(mcp_server: FastMCP, config: ServerConfig) -> None:
    """Register all MCP tools with the server using decorators.

    Registers decorated functions directly with MCP to preserve function signatures
    for proper parameter introspection.
    """
    for tool_func in feed_tools:
        # Apply decorator chain: exception_handler -> tool_logger
        decorated_func = exception_handler(tool_logger(tool_func, config.__dict__))

        tool_name = tool_func.__name__
        mcp_server.tool(name=tool_name)(decorated_func)

        logger.info(f"Registered feed tool: {tool_name}")

    logger.info(f"Server '{mcp_server.name}' initialized with {len(feed_tools)} tools")


def run_server(
    transport: str = "stdio",
    host: str = "127.0.0.1",
    port: int = 3001,
    config: Optional[ServerConfig] = None,
) -> int:
    """Run the MCP server with the given transport.

    Returns:
        Process exit code
    """
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown transport: {transport}")

    server = create_mcp_server(config)

    async def serve():
        if transport == "stdio":
            logger.info("Starting server with STDIO transport")
            await server.run_stdio_async()
        elif transport == "sse":
            logger.info(f"Starting server with SSE transport on {host}:{port}")
            server.settings.host = host
            server.settings.port = port
            await server.run_sse_async()
        else:
            logger.info(f"Starting server with Streamable HTTP transport on {host}:{port}")
            server.settings.host = host
            server.settings.port = port
            server.settings.streamable_http_path = "/mcp"
            await server.run_streamable_http_async()

    try:
        asyncio.run(serve())
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Failed to start server: {e}", exc_info=True)
        return 1
