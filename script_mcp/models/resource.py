"""Managed script resource model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from script_mcp.models.observation import Action, ResourceObservation
from script_mcp.models.script import ScriptBundle


@dataclass
class ScriptResource:
    """A script resource tracked by the store."""

    name: str
    credentials: dict[str, Any] = field(repr=False)
    bundle: ScriptBundle = field(default_factory=ScriptBundle)
    observation: ResourceObservation = field(default_factory=ResourceObservation)
    deleting: bool = False
    cleanup_attempted: bool = False
    last_action: Action = Action.NONE
    last_error: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    last_reconciled: datetime | None = None

    def touch(self) -> None:
        """Update last-reconciled timestamp."""
        self.last_reconciled = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        """Serialize for tool output, without credentials."""
        return {
            "name": self.name,
            "deleting": self.deleting,
            "lastAction": self.last_action.value,
            "lastError": self.last_error,
            "lastReconciled": (
                self.last_reconciled.isoformat() if self.last_reconciled else None
            ),
            "status": self.observation.to_dict(),
        }
