"""Script bundle models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from script_mcp.errors import InvalidConfigurationError

# Accepted spellings for each script body
_SCRIPT_KEYS: dict[str, tuple[str, ...]] = {
    "init": ("init", "initScript", "init_script"),
    "status_check": (
        "status_check",
        "statusCheck",
        "statusCheckScript",
        "status_check_script",
    ),
    "update": ("update", "updateScript", "update_script"),
    "cleanup": ("cleanup", "cleanupScript", "cleanup_script"),
}


@dataclass
class Variable:
    """A named value substituted into ``{{NAME}}`` placeholders."""

    name: str
    value: str


@dataclass
class ScriptBundle:
    """The four lifecycle scripts of a resource plus their inputs.

    An empty script body means the phase is skipped.
    """

    init: str = ""
    status_check: str = ""
    update: str = ""
    cleanup: str = ""
    variables: list[Variable] = field(default_factory=list)
    sudo_enabled: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScriptBundle":
        """Build a bundle from camelCase or snake_case keys.

        Raises:
            InvalidConfigurationError: If a variable entry has no name
        """
        scripts = {}
        for attr, keys in _SCRIPT_KEYS.items():
            scripts[attr] = next((data[k] or "" for k in keys if k in data), "")

        variables = []
        for entry in data.get("variables") or []:
            if isinstance(entry, Variable):
                variables.append(entry)
                continue
            name = entry.get("name") if isinstance(entry, Mapping) else None
            if not name:
                raise InvalidConfigurationError(f"Variable without a name: {entry!r}")
            variables.append(Variable(name=str(name), value=str(entry.get("value", ""))))

        sudo = data.get("sudoEnabled", data.get("sudo_enabled", False))
        return cls(variables=variables, sudo_enabled=bool(sudo), **scripts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys of the resource definition."""
        return {
            "initScript": self.init,
            "statusCheckScript": self.status_check,
            "updateScript": self.update,
            "cleanupScript": self.cleanup,
            "variables": [{"name": v.name, "value": v.value} for v in self.variables],
            "sudoEnabled": self.sudo_enabled,
        }
