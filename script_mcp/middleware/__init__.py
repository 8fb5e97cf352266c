"""Script MCP middleware components."""

from script_mcp.middleware.base import ScriptMiddleware
from script_mcp.middleware.errors import ErrorHandlingMiddleware, describe_error

__all__ = [
    "ErrorHandlingMiddleware",
    "ScriptMiddleware",
    "describe_error",
]
