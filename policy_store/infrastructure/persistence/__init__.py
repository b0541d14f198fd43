"""Persistence adapters.

Usage:
    from policy_store.infrastructure.persistence import MongoAdapter
"""

from policy_store.infrastructure.persistence.mongo_adapter import (
    ConnectionOwnership,
    MongoAdapter,
)

__all__ = ["ConnectionOwnership", "MongoAdapter"]
