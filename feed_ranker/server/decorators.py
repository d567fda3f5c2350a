"""Decorators applied to every MCP tool before registration.

Both decorators keep the wrapped function's signature (via functools.wraps)
so FastMCP can still introspect tool parameters.
"""

import functools
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from feed_ranker.logging_config import get_logger

ToolFunc = Callable[..., Awaitable[Dict[str, Any]]]


def exception_handler(func: ToolFunc) -> ToolFunc:
    """Turn an unexpected exception into an error response."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Dict[str, Any]:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            logger = get_logger(func.__module__)
            logger.error(f"Tool {func.__name__} failed: {e}", exc_info=True)
            return {
                "success": False,
                "error": f"{type(e).__name__}: {e}",
            }

    return wrapper


def tool_logger(func: ToolFunc, config: Optional[Dict[str, Any]] = None) -> ToolFunc:
    """Log tool invocation and duration."""
    server_name = (config or {}).get("name", "feed_ranker")

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Dict[str, Any]:
        logger = get_logger(func.__module__)
        arguments = {k: v for k, v in kwargs.items() if k != "ctx"}
        logger.info(f"[{server_name}] {func.__name__} started with {arguments}")

        started = time.perf_counter()
        result = await func(*args, **kwargs)
        elapsed_ms = (time.perf_counter() - started) * 1000

        status = "ok" if isinstance(result, dict) and result.get("success") else "error"
        logger.info(f"[{server_name}] {func.__name__} finished ({status}) in {elapsed_ms:.1f}ms")
        return result

    return wrapper
