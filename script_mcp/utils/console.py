"""Colorful console logging formatter."""

import logging
import re
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "white": "\033[37m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

# Log level colors
LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names
COMPONENT_COLORS = {
    "script_mcp.server": COLORS["bright_cyan"],
    "script_mcp.services.connection": COLORS["bright_magenta"],
    "script_mcp.services.session": COLORS["bright_magenta"],
    "script_mcp.services.runner": COLORS["bright_blue"],
    "script_mcp.services.controller": COLORS["cyan"],
    "script_mcp.services.reconciler": COLORS["cyan"],
    "script_mcp.middleware": COLORS["yellow"],
    "script_mcp.config": COLORS["green"],
    "default": COLORS["white"],
}

# Readiness values highlighted in messages
READINESS_COLORS = {
    "ready": COLORS["bright_green"],
    "absent": COLORS["bright_blue"],
    "needs_remediation": COLORS["bright_yellow"],
    "fatal": COLORS["bright_red"],
    "unknown": COLORS["bright_black"],
}

_SSH_PATTERN = re.compile(r"(\w+@[\w\.\-]+:\d+)")
_READINESS_PATTERN = re.compile(r"readiness=(\w+)")
_EXIT_PATTERN = re.compile(r"(exit(?:=| with )-?\d+)")


class ColorfulFormatter(logging.Formatter):
    """Log formatter with component and readiness highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        """Get color for a logger name/component."""
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        """Format local timestamp with milliseconds."""
        dt = datetime.fromtimestamp(record.created)
        return f"{dt:%H:%M:%S}.{int(record.msecs):03d} {dt:%m/%d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        """Format log level with color and fixed width."""
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        """Format component/logger name with color."""
        name = record.name
        if name.startswith("script_mcp."):
            name = name[len("script_mcp.") :]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

    def _highlight_message(self, message: str) -> str:
        """Highlight connection targets, exit statuses and readiness."""
        if not self.use_colors:
            return message

        message = _SSH_PATTERN.sub(
            lambda m: self._colorize(m.group(1), COLORS["bright_magenta"]), message
        )
        message = _EXIT_PATTERN.sub(
            lambda m: self._colorize(m.group(1), COLORS["bright_yellow"]), message
        )
        message = _READINESS_PATTERN.sub(
            lambda m: "readiness="
            + self._colorize(m.group(1), READINESS_COLORS.get(m.group(1), COLORS["white"])),
            message,
        )
        return message
