"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

PREFIX = "SCRIPT_MCP_"


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Connection
    connect_attempts: int = field(default=3)
    connect_retry_delay: float = field(default=2.0)
    connect_timeout: float = field(default=30.0)

    # Script execution
    command_timeout: float = field(default=0.0)  # 0 = no timeout
    tmp_dir: str = field(default="/tmp")

    # Reconciliation
    poll_interval: float = field(default=60.0)  # 0 = disabled

    # Transport
    transport: str = field(default="http")
    http_host: str = field(default="0.0.0.0")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    include_traceback: bool = field(default=False)

    @property
    def script_timeout(self) -> float | None:
        """Per-script timeout, or None when disabled."""
        return self.command_timeout if self.command_timeout > 0 else None

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from SCRIPT_MCP_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            connect_attempts=max(1, cls._get_int("CONNECT_ATTEMPTS", 3)),
            connect_retry_delay=cls._get_float("CONNECT_RETRY_DELAY", 2.0),
            connect_timeout=cls._get_float("CONNECT_TIMEOUT", 30.0),
            command_timeout=cls._get_float("COMMAND_TIMEOUT", 0.0),
            tmp_dir=os.getenv(PREFIX + "TMP_DIR", "/tmp") or "/tmp",
            poll_interval=cls._get_float("POLL_INTERVAL", 60.0),
            transport=cls._get_transport(),
            http_host=os.getenv(PREFIX + "HTTP_HOST", "0.0.0.0"),
            http_port=cls._get_int("HTTP_PORT", 8000),
            log_level=os.getenv(PREFIX + "LOG_LEVEL", "INFO").upper(),
            include_traceback=cls._get_bool("INCLUDE_TRACEBACK", False),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Variable name without the SCRIPT_MCP_ prefix
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(PREFIX + key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s%s: %s, using default %d", PREFIX, key, value, default)
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Get non-negative float from environment."""
        value = os.getenv(PREFIX + key)
        if value is None:
            return default

        try:
            parsed = float(value)
        except ValueError:
            logger.warning("Invalid number for %s%s: %s, using default %s", PREFIX, key, value, default)
            return default
        if parsed < 0:
            logger.warning("%s%s must be >= 0, got %s, using default %s", PREFIX, key, value, default)
            return default
        return parsed

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Variable name without the SCRIPT_MCP_ prefix
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(PREFIX + key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("http" or "stdio")
        """
        transport = os.getenv(PREFIX + "TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        if transport:
            logger.warning("Invalid %sTRANSPORT: %s, using http", PREFIX, transport)
        return "http"
