"""Tests for script bundle parsing."""

import pytest

from script_mcp.errors import InvalidConfigurationError
from script_mcp.models import ScriptBundle, Variable


def test_from_dict_camel_case() -> None:
    """Resource-definition keys are accepted."""
    bundle = ScriptBundle.from_dict(
        {
            "initScript": "touch /tmp/f",
            "statusCheckScript": "test -f /tmp/f",
            "cleanupScript": "rm /tmp/f",
            "variables": [{"name": "VPN_SERVER_URL", "value": "199.199.199.10"}],
            "sudoEnabled": True,
        }
    )

    assert bundle.init == "touch /tmp/f"
    assert bundle.status_check == "test -f /tmp/f"
    assert bundle.update == ""
    assert bundle.cleanup == "rm /tmp/f"
    assert bundle.variables == [Variable("VPN_SERVER_URL", "199.199.199.10")]
    assert bundle.sudo_enabled is True


def test_from_dict_snake_case_and_short_keys() -> None:
    """snake_case and short phase names are accepted."""
    bundle = ScriptBundle.from_dict({"statusCheck": "exit 0", "update_script": "echo up"})

    assert bundle.status_check == "exit 0"
    assert bundle.update == "echo up"
    assert bundle.sudo_enabled is False


def test_none_scripts_become_empty() -> None:
    """Null script bodies mean skip the phase."""
    bundle = ScriptBundle.from_dict({"init": None, "variables": None})
    assert bundle.init == ""
    assert bundle.variables == []


def test_variable_without_name_rejected() -> None:
    """Variables must have a name."""
    with pytest.raises(InvalidConfigurationError):
        ScriptBundle.from_dict({"variables": [{"value": "x"}]})


def test_to_dict_round_trips_keys() -> None:
    """to_dict uses camelCase keys that from_dict accepts."""
    bundle = ScriptBundle(init="a", status_check="b", variables=[Variable("X", "1")])
    assert ScriptBundle.from_dict(bundle.to_dict()) == bundle
