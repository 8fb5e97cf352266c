"""Services for Script MCP."""

from script_mcp.services.connection import (
    build_auth_options,
    build_known_hosts,
    connect,
)
from script_mcp.services.controller import (
    EXIT_ABSENT,
    EXIT_FATAL,
    EXIT_READY,
    ScriptController,
    classify_exit_status,
    next_action,
)
from script_mcp.services.reconciler import Reconciler, ReconcileResult
from script_mcp.services.runner import (
    execute_script,
    staging_path,
    substitute_variables,
)
from script_mcp.services.session import SSHSession
from script_mcp.services.state import (
    get_reconciler,
    get_settings,
    get_store,
    reset_state,
    set_reconciler,
    set_settings,
)
from script_mcp.services.store import ResourceStore

__all__ = [
    "EXIT_ABSENT",
    "EXIT_FATAL",
    "EXIT_READY",
    "ReconcileResult",
    "Reconciler",
    "ResourceStore",
    "SSHSession",
    "ScriptController",
    "build_auth_options",
    "build_known_hosts",
    "classify_exit_status",
    "connect",
    "execute_script",
    "get_reconciler",
    "get_settings",
    "get_store",
    "next_action",
    "reset_state",
    "set_reconciler",
    "set_settings",
    "staging_path",
    "substitute_variables",
]
