"""Infrastructure enums package.

Usage:
    from policy_store.infrastructure.enums import InfrastructureErrorCode
"""

from policy_store.infrastructure.enums.infrastructure_error_code import (
    InfrastructureErrorCode,
)

__all__ = ["InfrastructureErrorCode"]
