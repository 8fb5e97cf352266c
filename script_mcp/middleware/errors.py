"""Error handling middleware translating script errors for MCP clients."""

import logging
import traceback
from collections import defaultdict
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import MiddlewareContext

from script_mcp.errors import ScriptMCPError
from script_mcp.middleware.base import ScriptMiddleware


def describe_error(error: ScriptMCPError) -> str:
    """Render a script error for a tool response.

    The category prefix lets clients tell terminal failures from ones
    that a later reconciliation is expected to clear.
    """
    kind = "transient" if error.transient else "terminal"
    return f"[{error.category}/{kind}] {error}"


class ErrorHandlingMiddleware(ScriptMiddleware):
    """Logs request errors, counts them by category, and turns script
    errors into ToolError responses.

    Example:
        >>> middleware = ErrorHandlingMiddleware(include_traceback=True)
        >>> mcp.add_middleware(middleware)
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Whether to include full traceback in logs.
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self._error_counts: dict[str, int] = defaultdict(int)

    def get_error_stats(self) -> dict[str, int]:
        """Get error counts keyed by category (or exception type name)."""
        return dict(self._error_counts)

    def reset_stats(self) -> None:
        """Reset error statistics."""
        self._error_counts.clear()

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Handle errors during request processing.

        Raises:
            ToolError: For script errors, with a category-tagged message
            Exception: Any other error, re-raised after logging
        """
        try:
            return await call_next(context)

        except ScriptMCPError as e:
            self._error_counts[e.category] += 1
            self._log(context.method, e.category, e)
            raise ToolError(describe_error(e)) from e

        except Exception as e:
            error_type = type(e).__name__
            self._error_counts[error_type] += 1
            self._log(context.method, error_type, e)
            raise

    def _log(self, method: str | None, kind: str, error: Exception) -> None:
        if self.include_traceback:
            self.logger.error(
                "Error in %s: %s: %s\n%s",
                method,
                kind,
                error,
                traceback.format_exc(),
            )
        else:
            self.logger.error("Error in %s: %s: %s", method, kind, error)
