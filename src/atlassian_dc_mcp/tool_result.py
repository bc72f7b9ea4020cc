"""Conversion of API payloads into pruned MCP tool results."""

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.types import CallToolResult, TextContent

from .logging_config import log_operation
from .pruning import Pruner, get_pruner

logger = logging.getLogger("atlassian-dc-mcp.tool_result")


def _text_result(text: str, structured: dict[str, Any] | None = None) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=text)],
        structuredContent=structured,
    )


def create_tool_result(data: Any, pruner: Pruner | None = None) -> CallToolResult:
    """Wrap `data` in a CallToolResult.

    Strings are passed through as text. Dicts and lists are pruned in place
    and JSON-encoded; dicts are also exposed as structured content. Anything
    else is JSON-encoded, falling back to `str` for unknown types.

    Args:
        data: Decoded API payload or preformatted text
        pruner: Pruner to apply, defaults to the process-wide one

    Returns:
        The tool result
    """
    if isinstance(data, str):
        return _text_result(data)

    if isinstance(data, dict | list):
        (pruner or get_pruner()).prune(data)
        try:
            text = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"Could not encode tool result as JSON: {e}")
            return _text_result(f"Result: {data!r}")
        return _text_result(text, data if isinstance(data, dict) else None)

    try:
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not encode tool result as JSON: {e}")
        text = f"Result: {data!r}"
    return _text_result(text)


def handle_tool_error(error: BaseException | str, operation: str) -> CallToolResult:
    """Build an error result the calling agent can read."""
    error_message = f"{operation} failed: {error}"
    logger.error(error_message)
    return CallToolResult(
        content=[TextContent(type="text", text=error_message)],
        isError=True,
    )


async def handle_tool_operation(
    operation_name: str,
    operation: Callable[[], Any | Awaitable[Any]],
    pruner: Pruner | None = None,
) -> CallToolResult:
    """Run `operation` and turn its outcome into a tool result.

    Args:
        operation_name: Short verb phrase used in logs and errors, e.g. "get issue"
        operation: Zero-argument callable; may return a value or an awaitable
        pruner: Pruner to apply, defaults to the process-wide one

    Returns:
        A pruned result, or an error result if the operation raised
    """
    with log_operation(logger, operation_name) as op:
        try:
            data = operation()
            if inspect.isawaitable(data):
                data = await data
        except Exception as e:  # noqa: BLE001 - reported to the agent as an error result
            return handle_tool_error(
                f"failed to {operation_name} after {op.elapsed:.3f}s: {e}",
                operation_name,
            )
        return create_tool_result(data, pruner)
