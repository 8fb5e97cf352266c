"""Script MCP: reconcile remote resources driven by shell scripts over SSH."""

__version__ = "0.1.0"
