"""Utility modules for Script MCP."""

from script_mcp.utils.console import ColorfulFormatter
from script_mcp.utils.shell import (
    build_cleanup_command,
    build_script_command,
    quote_path,
)
from script_mcp.utils.validation import is_valid_host, validate_host, validate_port

__all__ = [
    "ColorfulFormatter",
    "build_cleanup_command",
    "build_script_command",
    "is_valid_host",
    "quote_path",
    "validate_host",
    "validate_port",
]
