"""Global state management for Script MCP."""

from script_mcp.config import Settings
from script_mcp.services.reconciler import Reconciler
from script_mcp.services.store import ResourceStore

# Global state (initialized on first access)
_settings: Settings | None = None
_store: ResourceStore | None = None
_reconciler: Reconciler | None = None


def get_settings() -> Settings:
    """Get or create settings."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def get_store() -> ResourceStore:
    """Get or create the resource store."""
    global _store
    if _store is None:
        _store = ResourceStore()
    return _store


def get_reconciler() -> Reconciler:
    """Get or create the reconciler bound to the global store."""
    global _reconciler
    if _reconciler is None:
        _reconciler = Reconciler(get_store(), get_settings())
    return _reconciler


def reset_state() -> None:
    """Reset global state for testing.

    This function clears the singleton instances, allowing tests
    to start with fresh state. Should only be used in test fixtures.
    """
    global _settings, _store, _reconciler
    _settings = None
    _store = None
    _reconciler = None


def set_settings(settings: Settings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def set_reconciler(reconciler: Reconciler) -> None:
    """Set the global reconciler and its store.

    Allows tests to inject a reconciler with a fake connector.

    Args:
        reconciler: Reconciler instance to use globally.
    """
    global _reconciler, _store
    _reconciler = reconciler
    _store = reconciler.store
