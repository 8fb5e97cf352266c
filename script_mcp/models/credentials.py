"""SSH credential models."""

import base64
import binascii
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from script_mcp.errors import InvalidConfigurationError
from script_mcp.utils.validation import validate_host, validate_port

logger = logging.getLogger(__name__)


@dataclass
class ConnectionCredentials:
    """Decoded credentials for one remote host.

    Exactly one of ``password`` and ``private_key`` is set.
    """

    host: str
    username: str
    port: int = 22
    password: str | None = field(default=None, repr=False)
    private_key: bytes | None = field(default=None, repr=False)
    known_hosts: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.username:
            raise InvalidConfigurationError("Username not found in the credentials")
        validate_host(self.host)
        self.port = validate_port(self.port)
        if self.password and self.private_key:
            raise InvalidConfigurationError(
                "Credentials carry both a password and a private key; set only one"
            )
        if not self.password and not self.private_key:
            raise InvalidConfigurationError(
                "Private key or password not found in the credentials"
            )

    @property
    def address(self) -> str:
        """Remote address as host:port."""
        return f"{self.host}:{self.port}"

    @property
    def auth_method(self) -> str:
        """Name of the authentication method in use."""
        return "publickey" if self.private_key else "password"

    @classmethod
    def from_payload(cls, data: bytes | str | Mapping[str, Any]) -> "ConnectionCredentials":
        """Decode a credential payload.

        Accepts the JSON document stored by the resource layer (bytes or
        str) or an already-parsed mapping with the keys ``username``,
        ``password``, ``privateKey`` (base64), ``hostIP``, ``hostPort`` and
        ``knownHosts``.

        Raises:
            InvalidConfigurationError: If the payload cannot be parsed or
                violates a credential invariant
        """
        if isinstance(data, (bytes, str)):
            try:
                payload = json.loads(data)
            except (TypeError, ValueError) as e:
                raise InvalidConfigurationError(f"Cannot parse credentials: {e}") from e
        else:
            payload = dict(data)

        if not isinstance(payload, dict):
            raise InvalidConfigurationError("Credentials must be a JSON object")

        port = payload.get("hostPort")
        if port in (None, ""):
            logger.info("Remote host port not found in the credentials, using default port 22")

        encoded_key = payload.get("privateKey") or None
        private_key = _decode_private_key(encoded_key) if encoded_key else None

        return cls(
            host=str(payload.get("hostIP") or ""),
            username=str(payload.get("username") or ""),
            port=port,
            password=payload.get("password") or None,
            private_key=private_key,
            known_hosts=payload.get("knownHosts") or None,
        )


def _decode_private_key(encoded: str) -> bytes:
    """Decode base64 private key material, ignoring line wrapping."""
    try:
        return base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidConfigurationError("Error decoding base64 private key") from e
