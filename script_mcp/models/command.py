"""Command execution data models."""

from dataclasses import dataclass

from script_mcp.errors import ScriptExitError, ScriptMCPError


@dataclass
class ExecutionResult:
    """Result of one remote command.

    Either the process ran and terminated (``exit_status`` set, negative
    for termination by signal) or it never ran to completion (``error``
    set). Output captured before a failure is kept.
    """

    stdout: str = ""
    stderr: str = ""
    exit_status: int | None = None
    error: ScriptMCPError | None = None

    def __post_init__(self) -> None:
        if (self.exit_status is None) == (self.error is None):
            raise ValueError("ExecutionResult needs exactly one of exit_status and error")

    @property
    def ran(self) -> bool:
        """Whether the remote process ran and terminated."""
        return self.exit_status is not None

    @property
    def succeeded(self) -> bool:
        """Whether the process ran and exited with status 0."""
        return self.exit_status == 0

    def check(self, phase: str = "script", fatal: bool = True) -> "ExecutionResult":
        """Raise unless the process exited with status 0.

        Args:
            phase: Script phase named in the error message
            fatal: Whether a nonzero exit needs operator attention

        Raises:
            ScriptMCPError: The execution-level failure, if any
            ScriptExitError: If the process exited nonzero
        """
        if self.error is not None:
            raise self.error
        if self.exit_status != 0:
            assert self.exit_status is not None
            raise ScriptExitError(
                self.exit_status,
                stdout=self.stdout,
                stderr=self.stderr,
                phase=phase,
                fatal=fatal,
            )
        return self
