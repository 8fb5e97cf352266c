"""MCP tools for managing script resources."""

import json
import logging
from typing import Any

from script_mcp.models import ConnectionCredentials, ScriptBundle, ScriptResource
from script_mcp.services import get_reconciler, get_store
from script_mcp.services.reconciler import ReconcileResult

logger = logging.getLogger(__name__)


def _format_result(result: ReconcileResult, resource: ScriptResource | None) -> str:
    """Format a reconcile result with the resource status."""
    lines = [
        f"═══ {result.name} ═══",
        f"action:    {result.action.value}",
        f"readiness: {result.readiness.value}",
    ]
    if result.deleted:
        lines.append("deleted:   yes")
    if result.error is not None:
        kind = "transient" if result.error.transient else "terminal"
        lines.append(f"error:     [{result.error.category}/{kind}] {result.error}")
    if result.requeue:
        lines.append("pending:   next pass will retry")
    if resource is not None and not result.deleted:
        lines.append(_format_output(resource))
    return "\n".join(lines)


def _format_output(resource: ScriptResource) -> str:
    observation = resource.observation
    exit_code = "-" if observation.exit_code is None else str(observation.exit_code)
    return "\n".join(
        [
            f"exit code: {exit_code}",
            "─── stdout ───",
            observation.stdout.rstrip(),
            "─── stderr ───",
            observation.stderr.rstrip(),
        ]
    )


async def script_apply(
    name: str,
    credentials: dict[str, Any],
    init_script: str = "",
    status_check_script: str = "",
    update_script: str = "",
    cleanup_script: str = "",
    variables: list[dict[str, str]] | None = None,
    sudo_enabled: bool = False,
    reconcile: bool = True,
) -> str:
    """Create or update a script resource and reconcile it.

    Args:
        name: Resource name.
        credentials: SSH credentials with keys username, hostIP, hostPort,
            and password or privateKey (base64), optionally knownHosts.
        init_script: Runs when the status check reports the resource absent
            (exit 100).
        status_check_script: Must not change remote state. Exit 0 = ready,
            1 = fatal, 100 = absent, anything else = run update.
        update_script: Runs when the status check reports drift.
        cleanup_script: Runs once when the resource is deleted.
        variables: List of {"name", "value"} pairs replacing {{name}}
            placeholders in every script.
        sudo_enabled: Run scripts through sudo.
        reconcile: Reconcile immediately (default: True).

    Returns:
        Reconcile outcome with captured output.
    """
    # Fail early on bad credentials
    ConnectionCredentials.from_payload(credentials)
    bundle = ScriptBundle.from_dict(
        {
            "init": init_script,
            "status_check": status_check_script,
            "update": update_script,
            "cleanup": cleanup_script,
            "variables": variables or [],
            "sudo_enabled": sudo_enabled,
        }
    )

    store = get_store()
    existing = store.get(name)
    if existing is not None and existing.deleting:
        return f"Error: Script resource '{name}' is being deleted"

    await store.put(name, dict(credentials), bundle)
    if not reconcile:
        return f"Script resource '{name}' saved"

    result = await get_reconciler().reconcile(name)
    return _format_result(result, store.get(name))


async def script_reconcile(name: str) -> str:
    """Run one reconciliation pass for a script resource.

    Args:
        name: Resource name.

    Returns:
        Reconcile outcome with captured output.
    """
    store = get_store()
    if store.get(name) is None:
        return f"Error: Unknown script resource '{name}'"

    try:
        result = await get_reconciler().reconcile(name)
    except KeyError:
        return f"Error: Unknown script resource '{name}'"
    return _format_result(result, store.get(name))


async def script_status(name: str) -> str:
    """Show the last observed status of a script resource.

    Does not contact the remote host.

    Args:
        name: Resource name.

    Returns:
        JSON document with the resource status.
    """
    resource = get_store().get(name)
    if resource is None:
        return f"Error: Unknown script resource '{name}'"
    return json.dumps(resource.to_dict(), indent=2)


async def script_delete(name: str) -> str:
    """Delete a script resource, running its cleanup script once.

    If cleanup fails the error is reported; calling again completes the
    deletion without re-running cleanup.

    Args:
        name: Resource name.

    Returns:
        Reconcile outcome.
    """
    store = get_store()
    if store.mark_deleting(name) is None:
        return f"Error: Unknown script resource '{name}'"

    try:
        result = await get_reconciler().reconcile(name)
    except KeyError:
        return f"Script resource '{name}' already deleted"
    return _format_result(result, store.get(name))


async def script_list() -> str:
    """List script resources with their readiness.

    Returns:
        One line per resource.
    """
    store = get_store()
    names = store.names()
    if not names:
        return "No script resources."

    lines = ["Script resources:"]
    for name in names:
        resource = store.get(name)
        if resource is None:
            continue
        readiness = resource.observation.readiness.value
        suffix = " (deleting)" if resource.deleting else ""
        error = f" - {resource.last_error}" if resource.last_error else ""
        lines.append(f"  {name}: {readiness}{suffix}{error}")
    return "\n".join(lines)
