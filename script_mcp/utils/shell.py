"""Shell command builders for staged scripts."""

import shlex

SUDO = "sudo"


def quote_path(path: str) -> str:
    """Safely quote a path for shell commands.

    Args:
        path: File system path to quote

    Returns:
        Shell-safe quoted path
    """
    return shlex.quote(path)


def build_script_command(path: str, sudo_enabled: bool = False) -> str:
    """Build the command that marks a staged script executable and runs it.

    Both steps go into one command line so a failed chmod stops the run.

    Args:
        path: Remote path of the staged script
        sudo_enabled: Run the script through sudo

    Returns:
        Shell command string
    """
    quoted = quote_path(path)
    runner = f"{SUDO} {quoted}" if sudo_enabled else quoted
    return f"chmod +x {quoted} && {runner}"


def build_cleanup_command(path: str) -> str:
    """Build the command that removes a staged script."""
    return f"rm -f {quote_path(path)}"
