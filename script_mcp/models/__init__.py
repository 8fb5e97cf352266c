"""Data models for Script MCP."""

from script_mcp.models.command import ExecutionResult
from script_mcp.models.credentials import ConnectionCredentials
from script_mcp.models.observation import (
    Action,
    ExternalObservation,
    Readiness,
    ResourceObservation,
)
from script_mcp.models.resource import ScriptResource
from script_mcp.models.script import ScriptBundle, Variable

__all__ = [
    "Action",
    "ConnectionCredentials",
    "ExecutionResult",
    "ExternalObservation",
    "Readiness",
    "ResourceObservation",
    "ScriptBundle",
    "ScriptResource",
    "Variable",
]
