"""Reconciliation state models."""

from dataclasses import dataclass
from enum import Enum

from script_mcp.models.command import ExecutionResult


class Readiness(Enum):
    """Classification of a remote resource derived from its status check."""

    UNKNOWN = "unknown"
    ABSENT = "absent"
    READY = "ready"
    NEEDS_REMEDIATION = "needs_remediation"
    FATAL = "fatal"


class Action(Enum):
    """Next lifecycle step for a resource."""

    NONE = "none"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    FAIL = "fail"


@dataclass
class ResourceObservation:
    """Observed status of a resource, as published to the resource layer."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    readiness: Readiness = Readiness.UNKNOWN
    created: bool = False
    message: str = ""

    def record(self, result: ExecutionResult, readiness: Readiness | None = None) -> None:
        """Copy a script result into the observation.

        Args:
            result: Result of the script run
            readiness: New classification, or None to keep the current one
        """
        self.stdout = result.stdout
        self.stderr = result.stderr
        self.exit_code = result.exit_status
        self.message = str(result.error) if result.error is not None else ""
        if readiness is not None:
            self.readiness = readiness

    def to_dict(self) -> dict[str, object]:
        """Serialize for status output."""
        return {
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exitCode": self.exit_code,
            "readiness": self.readiness.value,
            "created": self.created,
            "message": self.message,
        }


@dataclass
class ExternalObservation:
    """Outcome of observing a resource."""

    resource_exists: bool
    resource_up_to_date: bool
    readiness: Readiness
    exit_code: int | None = None
