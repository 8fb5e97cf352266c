"""Protocol interfaces for dependency inversion.

The script runner and the controller depend on RemoteSession only, never on
asyncssh types, so tests can hand them any object with ``upload`` and
``run``.

Usage Example:

    from script_mcp.protocols import RemoteSession

    async def stage(session: RemoteSession, text: str) -> None:
        await session.upload(text, "/tmp/example")

    # Concrete implementation
    from script_mcp.services.connection import connect
    async with await connect(credentials) as session:
        await stage(session, "echo hi")

    # Or a fake for testing
    class FakeSession:
        async def upload(self, content, remote_path):
            pass

        async def run(self, command, timeout=None):
            return ExecutionResult(exit_status=0)
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from script_mcp.models import ExecutionResult


@runtime_checkable
class RemoteSession(Protocol):
    """Capability interface over one authenticated remote connection.

    Each call opens its own short-lived sub-session over the shared
    connection and releases it before returning.
    """

    async def upload(self, content: str, remote_path: str) -> None:
        """Write content as the full contents of remote_path.

        Raises:
            TransferFailure: If the file cannot be written
        """
        ...

    async def run(self, command: str, timeout: float | None = None) -> ExecutionResult:
        """Run a command, capturing stdout and stderr separately.

        Never raises for execution-level failures; they are carried in
        ``ExecutionResult.error``.
        """
        ...


@runtime_checkable
class ClosableSession(RemoteSession, Protocol):
    """RemoteSession that owns its parent connection."""

    async def close(self) -> None:
        """Close the parent connection."""
        ...


# Signature of the connect step injected into the reconciler
Connector = Callable[..., Awaitable[ClosableSession]]


__all__ = [
    "ClosableSession",
    "Connector",
    "RemoteSession",
]
