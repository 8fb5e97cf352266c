"""SSH connection setup with bounded retry."""

import asyncio
import logging
from typing import Any

import asyncssh

from script_mcp.errors import ConnectionFailure, InvalidConfigurationError
from script_mcp.models import ConnectionCredentials
from script_mcp.services.session import SSHSession

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 2.0


def build_known_hosts(known_hosts: str | None) -> "asyncssh.SSHKnownHosts | None":
    """Build host key verification from known_hosts entries.

    Args:
        known_hosts: OpenSSH known_hosts formatted text, or None

    Returns:
        Parsed known hosts for strict checking, or None to accept any
        host key

    Raises:
        InvalidConfigurationError: If the entries cannot be parsed
    """
    if not known_hosts:
        logger.warning(
            "SSH host key verification DISABLED - vulnerable to MITM attacks. "
            "Add knownHosts to the credentials to enable it."
        )
        return None

    try:
        return asyncssh.import_known_hosts(known_hosts)
    except (ValueError, asyncssh.Error) as e:
        raise InvalidConfigurationError(
            f"Failed to create known hosts verification: {e}"
        ) from e


def build_auth_options(credentials: ConnectionCredentials) -> dict[str, Any]:
    """Build asyncssh authentication keyword arguments.

    Public-key auth uses only the supplied key; password auth disables
    client keys. The local SSH agent is never consulted.

    Raises:
        InvalidConfigurationError: If the private key cannot be parsed
    """
    if credentials.private_key:
        try:
            key = asyncssh.import_private_key(credentials.private_key)
        except (asyncssh.KeyImportError, ValueError) as e:
            raise InvalidConfigurationError(f"Failed to parse private key: {e}") from e
        return {"client_keys": [key], "password": None, "agent_path": None}

    return {"client_keys": None, "password": credentials.password, "agent_path": None}


async def connect(
    credentials: ConnectionCredentials,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    connect_timeout: float | None = None,
) -> SSHSession:
    """Open an authenticated SSH connection, retrying the handshake.

    The handshake is tried up to max_attempts times with a fixed delay
    between attempts. Configuration problems are raised immediately and
    never retried.

    Args:
        credentials: Decoded connection credentials
        max_attempts: Number of handshake attempts (at least 1)
        retry_delay: Seconds to wait between attempts
        connect_timeout: Per-attempt handshake timeout in seconds

    Returns:
        Session over the established connection

    Raises:
        InvalidConfigurationError: If the key or known hosts are invalid
        ConnectionFailure: If every attempt failed
    """
    max_attempts = max(1, max_attempts)
    known_hosts = build_known_hosts(credentials.known_hosts)
    auth = build_auth_options(credentials)

    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            conn = await asyncssh.connect(
                credentials.host,
                port=credentials.port,
                username=credentials.username,
                known_hosts=known_hosts,
                connect_timeout=connect_timeout,
                **auth,
            )
        except (OSError, asyncssh.Error, asyncio.TimeoutError) as e:
            last_error = e
            logger.warning(
                "Failed to dial %s with username %s, attempt %d/%d: %s",
                credentials.address,
                credentials.username,
                attempt,
                max_attempts,
                e,
            )
            if attempt < max_attempts:
                await asyncio.sleep(retry_delay)
            continue

        logger.info(
            "SSH connection established to %s@%s (auth=%s, attempt %d/%d)",
            credentials.username,
            credentials.address,
            credentials.auth_method,
            attempt,
            max_attempts,
        )
        return SSHSession(conn, credentials)

    assert last_error is not None
    logger.error(
        "All %d attempts to connect to %s failed",
        max_attempts,
        credentials.address,
    )
    raise ConnectionFailure(credentials.address, last_error, max_attempts) from last_error
