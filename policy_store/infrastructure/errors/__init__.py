"""Infrastructure errors package.

Usage:
    from policy_store.infrastructure.errors import PolicyQueryError
"""

from policy_store.infrastructure.errors.policy_store_error import (
    PolicyDecodeError,
    PolicyQueryError,
    PolicyStoreConnectionError,
    PolicyStoreError,
)

__all__ = [
    "PolicyStoreError",
    "PolicyStoreConnectionError",
    "PolicyQueryError",
    "PolicyDecodeError",
]
