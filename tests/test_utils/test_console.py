"""Tests for the console log formatter."""

import logging

from script_mcp.utils.console import ColorfulFormatter


def make_record(name: str, msg: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


def test_plain_output_has_component_and_message() -> None:
    """Without colors the line carries no escape codes."""
    formatter = ColorfulFormatter(use_colors=False)
    line = formatter.format(
        make_record("script_mcp.services.reconciler", "Reconcile complete (readiness=ready)")
    )

    assert "\033[" not in line
    assert "INFO" in line
    assert "services.reconciler" in line
    assert line.endswith("Reconcile complete (readiness=ready)")


def test_colored_output_highlights_readiness() -> None:
    formatter = ColorfulFormatter(use_colors=True)
    line = formatter.format(
        make_record("script_mcp.services.controller", "Status check exited with 1, readiness=fatal")
    )

    assert "\033[91mfatal\033[0m" in line
    assert "\033[93mexit" not in line


def test_colored_output_highlights_ssh_target() -> None:
    formatter = ColorfulFormatter(use_colors=True)
    line = formatter.format(
        make_record("script_mcp.services.connection", "SSH connection established to deploy@10.0.0.5:22")
    )

    assert "\033[95mdeploy@10.0.0.5:22\033[0m" in line
