"""Error taxonomy for remote script execution and reconciliation.

Every error raised by the session client, the script runner and the
controller derives from ScriptMCPError. Each class carries:

- ``category``: short name used in logs and tool error messages
- ``transient``: whether the condition is expected to clear on the next
  reconciliation pass (True) or needs operator attention (False)
"""


class ScriptMCPError(Exception):
    """Base class for script-mcp errors."""

    category = "error"
    transient = False


class InvalidConfigurationError(ScriptMCPError):
    """Credential payload or script bundle is malformed or incomplete."""

    category = "invalid_configuration"


class InvalidHostError(InvalidConfigurationError):
    """Remote host is neither a dotted-quad IPv4 address nor a hostname."""

    def __init__(self, host: str):
        self.host = host
        super().__init__(f"Remote host address is not valid: {host!r}")


class ConnectionFailure(ScriptMCPError):
    """SSH handshake failed on every attempt."""

    category = "connection_failure"
    transient = True

    def __init__(self, host: str, original_error: Exception, attempts: int = 1):
        """Initialize connection failure.

        Args:
            host: Remote address as host:port
            original_error: Error from the last attempt
            attempts: Number of attempts made
        """
        self.host = host
        self.original_error = original_error
        self.attempts = attempts
        super().__init__(
            f"Cannot connect to {host} after {attempts} attempt(s): {original_error}"
        )


class TransferFailure(ScriptMCPError):
    """Staging a file on the remote host failed."""

    category = "transfer_failure"
    transient = True

    def __init__(self, remote_path: str, original_error: Exception):
        self.remote_path = remote_path
        self.original_error = original_error
        super().__init__(f"Failed to write {remote_path}: {original_error}")


class ExecutionFailure(ScriptMCPError):
    """Remote command never ran to completion (no exit status)."""

    category = "execution_failure"
    transient = True

    def __init__(self, reason: str, original_error: Exception | None = None):
        self.reason = reason
        self.original_error = original_error
        message = reason if original_error is None else f"{reason}: {original_error}"
        super().__init__(message)


class ScriptExitError(ScriptMCPError):
    """Script ran and exited with a status the caller treats as failure."""

    category = "script_exit"

    def __init__(
        self,
        exit_status: int,
        stdout: str = "",
        stderr: str = "",
        phase: str = "script",
        fatal: bool = True,
    ):
        """Initialize script exit error.

        Args:
            exit_status: Remote process exit status
            stdout: Captured standard output
            stderr: Captured standard error
            phase: Script phase that produced the status (init, update, ...)
            fatal: Whether the status requires operator attention
        """
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr
        self.phase = phase
        self.fatal = fatal
        self.transient = not fatal
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        message = f"{phase} script exited with status {exit_status}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
