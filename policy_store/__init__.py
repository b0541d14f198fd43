"""Casbin policy storage on MongoDB.

Persists Casbin policy rules in a ``casbin_rule`` collection and exposes the
asyncio adapter interface ``casbin.AsyncEnforcer`` calls.

Example:
    Basic usage::

        import casbin
        from policy_store import MongoAdapter

        adapter = await MongoAdapter.from_url("mongodb://localhost:27017/authz")
        try:
            enforcer = casbin.AsyncEnforcer("model.conf", adapter)
            await enforcer.load_policy()
            await enforcer.add_policy("alice", "data1", "read")
        finally:
            await adapter.close()
"""

from policy_store.domain.casbin_rule import CasbinRule
from policy_store.infrastructure.errors import (
    PolicyDecodeError,
    PolicyQueryError,
    PolicyStoreConnectionError,
    PolicyStoreError,
)
from policy_store.infrastructure.persistence import ConnectionOwnership, MongoAdapter

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Adapter
    "MongoAdapter",
    "ConnectionOwnership",
    "CasbinRule",
    # Exceptions
    "PolicyStoreError",
    "PolicyStoreConnectionError",
    "PolicyQueryError",
    "PolicyDecodeError",
]
