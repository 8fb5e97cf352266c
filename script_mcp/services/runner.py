"""Stage and run lifecycle scripts on a remote host."""

import logging
import re
import secrets
from collections.abc import Iterable

from script_mcp.errors import TransferFailure
from script_mcp.models import ExecutionResult, Variable
from script_mcp.protocols import RemoteSession
from script_mcp.utils.shell import build_cleanup_command, build_script_command

logger = logging.getLogger(__name__)

STAGING_PREFIX = "script-mcp."
STAGING_TOKEN_BYTES = 16


def substitute_variables(script: str, variables: Iterable[Variable]) -> str:
    """Replace ``{{NAME}}`` placeholders with variable values.

    A single left-to-right pass: substituted values are never rescanned,
    and placeholders without a matching variable are left as they are.
    When names repeat, the last variable wins.

    Args:
        script: Script text
        variables: Name/value pairs

    Returns:
        Script text with placeholders replaced
    """
    values = {"{{" + v.name + "}}": v.value for v in variables}
    if not values:
        return script

    pattern = re.compile("|".join(re.escape(p) for p in sorted(values, key=len, reverse=True)))
    return pattern.sub(lambda m: values[m.group(0)], script)


def staging_path(tmp_dir: str = "/tmp") -> str:
    """Generate a fresh remote path for a staged script.

    Names come from a cryptographic random source so concurrent stagings
    from different resources on a shared temp directory do not collide.
    """
    token = secrets.token_hex(STAGING_TOKEN_BYTES)
    return f"{tmp_dir.rstrip('/')}/{STAGING_PREFIX}{token}"


async def execute_script(
    session: RemoteSession,
    script: str,
    variables: Iterable[Variable] = (),
    sudo_enabled: bool = False,
    *,
    tmp_dir: str = "/tmp",
    timeout: float | None = None,
) -> ExecutionResult:
    """Execute a script on the remote host.

    Substitutes variables, uploads the text to a fresh temporary path,
    makes it executable and runs it in one command, then removes the file.
    Removal only happens when the script actually ran, and its failure is
    logged without changing the result.

    Args:
        session: Remote session to use
        script: Script body
        variables: Placeholder values
        sudo_enabled: Run the script through sudo
        tmp_dir: Remote directory for the staged file
        timeout: Seconds to wait for the script to finish

    Returns:
        ExecutionResult of the script run. Upload and execution-level
        failures are carried in ``error``.
    """
    text = substitute_variables(script, variables)
    remote_path = staging_path(tmp_dir)

    try:
        await session.upload(text, remote_path)
    except TransferFailure as e:
        return ExecutionResult(error=e)

    result = await session.run(build_script_command(remote_path, sudo_enabled), timeout=timeout)
    if not result.ran:
        return result

    await _remove_staged_file(session, remote_path)

    logger.info(
        "Script executed, exit=%d, len(stdout)=%d, len(stderr)=%d",
        result.exit_status,
        len(result.stdout),
        len(result.stderr),
    )
    logger.debug("Script stdout: %s", result.stdout)
    logger.debug("Script stderr: %s", result.stderr)
    return result


async def _remove_staged_file(session: RemoteSession, remote_path: str) -> None:
    """Remove a staged script, logging failures."""
    cleanup = await session.run(build_cleanup_command(remote_path))
    if cleanup.error is not None:
        logger.warning("Failed to clean up temporary file %s: %s", remote_path, cleanup.error)
    elif cleanup.exit_status != 0:
        logger.warning(
            "Failed to clean up temporary file %s (exit=%d): %s",
            remote_path,
            cleanup.exit_status,
            cleanup.stderr.strip(),
        )
