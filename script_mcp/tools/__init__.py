"""MCP tools for Script MCP."""

from script_mcp.tools.scripts import (
    script_apply,
    script_delete,
    script_list,
    script_reconcile,
    script_status,
)

__all__ = [
    "script_apply",
    "script_delete",
    "script_list",
    "script_reconcile",
    "script_status",
]
