"""SSH session client: file upload and command execution over one connection."""

import asyncio
import logging
from types import TracebackType
from typing import TYPE_CHECKING

import asyncssh

from script_mcp.errors import ExecutionFailure, TransferFailure
from script_mcp.models import ExecutionResult

if TYPE_CHECKING:
    from script_mcp.models import ConnectionCredentials

logger = logging.getLogger(__name__)


def _as_text(data: str | bytes | None) -> str:
    """Normalize captured stream data to str."""
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class SSHSession:
    """One authenticated SSH connection offering upload and run.

    Every upload and run opens a fresh channel on the connection and closes
    it before returning. Channels are never pooled or reused.
    """

    def __init__(
        self,
        connection: "asyncssh.SSHClientConnection",
        credentials: "ConnectionCredentials | None" = None,
    ) -> None:
        self._conn = connection
        self.credentials = credentials

    async def upload(self, content: str, remote_path: str) -> None:
        """Write content to remote_path over a fresh SFTP sub-session.

        Existing files are truncated and overwritten.

        Raises:
            TransferFailure: If the SFTP session or the write fails
        """
        try:
            async with self._conn.start_sftp_client() as sftp:
                async with sftp.open(remote_path, "w") as remote_file:
                    await remote_file.write(content)
        except (asyncssh.Error, OSError) as e:
            logger.error("Failed to send script to %s: %s", remote_path, e)
            raise TransferFailure(remote_path, e) from e

        logger.debug("Uploaded %d byte(s) to %s", len(content.encode()), remote_path)

    async def run(self, command: str, timeout: float | None = None) -> ExecutionResult:
        """Run command on a fresh channel.

        Args:
            command: Shell command line
            timeout: Seconds to wait for completion, or None to wait forever

        Returns:
            ExecutionResult carrying the exit status, or an ExecutionFailure
            if the channel could not be opened, the connection dropped, or
            the timeout expired
        """
        try:
            async with self._conn.create_process(command, errors="replace") as process:
                completed = await process.wait(check=False, timeout=timeout)
        except asyncio.TimeoutError as e:
            # asyncssh.TimeoutError is both a ProcessError and asyncio.TimeoutError
            stdout = _as_text(getattr(e, "stdout", None))
            stderr = _as_text(getattr(e, "stderr", None))
            logger.error("Command timed out after %ss", timeout)
            return ExecutionResult(
                stdout=stdout,
                stderr=stderr,
                error=ExecutionFailure(f"Command timed out after {timeout}s", e),
            )
        except asyncssh.ChannelOpenError as e:
            logger.error("Failed to create session: %s", e)
            return ExecutionResult(error=ExecutionFailure("Failed to create session", e))
        except (asyncssh.Error, OSError) as e:
            logger.error("Command execution failed: %s", e)
            return ExecutionResult(error=ExecutionFailure("Command execution failed", e))

        stdout = _as_text(completed.stdout)
        stderr = _as_text(completed.stderr)

        if completed.returncode is None:
            # Channel closed without exit status or signal
            logger.error("Connection lost before command exited")
            return ExecutionResult(
                stdout=stdout,
                stderr=stderr,
                error=ExecutionFailure("Connection lost before command exited"),
            )

        return ExecutionResult(
            stdout=stdout,
            stderr=stderr,
            exit_status=completed.returncode,
        )

    async def close(self) -> None:
        """Close the parent connection."""
        self._conn.close()
        await self._conn.wait_closed()

    async def __aenter__(self) -> "SSHSession":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
