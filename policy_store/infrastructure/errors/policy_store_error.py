"""Policy store exception types.

Casbin calls adapter methods directly and expects failures to be raised, so
unlike Result-based infrastructure code these errors ARE exceptions. Driver
exceptions are caught at the adapter boundary, logged, and re-raised as one of
these types chained with ``from``.

Error Types:
- PolicyStoreConnectionError: Connect, ping or index setup failed (construction)
- PolicyQueryError: Find, insert, delete, drop or replace failed
- PolicyDecodeError: A stored document is not a valid rule
"""

from typing import Any

from policy_store.infrastructure.enums import InfrastructureErrorCode


class PolicyStoreError(Exception):
    """Base exception for policy store operations.

    Attributes:
        code: Infrastructure error code.
        message: Human-readable message.
        details: Additional context (operation, ptype, original error).
    """

    def __init__(
        self,
        message: str,
        *,
        code: InfrastructureErrorCode,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize policy store error.

        Args:
            message: Human-readable message.
            code: Infrastructure error code.
            details: Additional context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"


class PolicyStoreConnectionError(PolicyStoreError):
    """Connecting, pinging or preparing the collection failed."""

    pass


class PolicyQueryError(PolicyStoreError):
    """A read or write against the policy collection failed."""

    pass


class PolicyDecodeError(PolicyStoreError):
    """A stored document could not be decoded into a CasbinRule."""

    pass
