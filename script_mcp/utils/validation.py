"""Host and port validation for credential payloads."""

import ipaddress
import re
from typing import Final

from script_mcp.errors import InvalidConfigurationError, InvalidHostError

# Dotted quad, checked for octet range separately
IPV4_PATTERN: Final = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$")

# One DNS label: alphanumerics and inner hyphens, at most 63 chars
LABEL_PATTERN: Final = re.compile(r"^[A-Za-z0-9_](?:[A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?$")

DEFAULT_SSH_PORT: Final = 22


def is_valid_host(host: str) -> bool:
    """Check whether host is a dotted-quad IPv4 address or multi-label name.

    Single-label names such as ``localhost`` are rejected, as are IPv6
    literals and anything carrying shell metacharacters.
    """
    if not host or len(host) > 253:
        return False

    if IPV4_PATTERN.match(host):
        try:
            ipaddress.IPv4Address(host)
        except ValueError:
            return False
        return True

    labels = host.rstrip(".").split(".")
    if len(labels) < 2:
        return False
    # All-numeric names that failed the IPv4 check are malformed addresses
    if all(label.isdigit() for label in labels):
        return False
    return all(LABEL_PATTERN.match(label) for label in labels)


def validate_host(host: str) -> str:
    """Validate a remote host address.

    Args:
        host: IPv4 address or hostname

    Returns:
        Validated host

    Raises:
        InvalidConfigurationError: If host is empty
        InvalidHostError: If host is not an IPv4 address or hostname
    """
    if not host:
        raise InvalidConfigurationError("Remote host not found in the credentials")
    if not is_valid_host(host):
        raise InvalidHostError(host)
    return host


def validate_port(port: str | int | None) -> int:
    """Parse and range-check an SSH port.

    Empty values mean the default port 22.

    Raises:
        InvalidConfigurationError: If port is not an integer in 1..65535
    """
    if port is None or port == "":
        return DEFAULT_SSH_PORT
    try:
        value = int(port)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"Remote host port is not a number: {port!r}") from e
    if not 0 < value < 65536:
        raise InvalidConfigurationError(f"Remote host port out of range: {value}")
    return value
