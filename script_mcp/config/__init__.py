"""Configuration module for Script MCP.

- Settings: Environment variable configuration
"""

from script_mcp.config.settings import Settings

__all__ = ["Settings"]
