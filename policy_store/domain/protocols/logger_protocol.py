"""LoggerProtocol definition for structured logging.

The policy adapter depends on this protocol, not on structlog, so tests can
pass a Mock and applications can pass their own structured logger.

Security:
    - NEVER log connection strings; they may carry credentials.

Usage:
    from policy_store.core.container import get_logger

    logger = get_logger()
    logger.info("policy_loaded", rule_count=12)

    adapter_logger = logger.bind(collection="casbin_rule")
    adapter_logger.debug("policy_added", ptype="p")  # collection auto-included
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    All logging calls MUST be structured: event name + key-value context.
    """

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Event name.
            error: Exception to extract type and message from.
            **context: Structured key-value context fields.
        """
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return a logger that includes ``context`` in every entry."""
        ...
