"""Core enums package.

Usage:
    from policy_store.core.enums import Environment
"""

from policy_store.core.enums.environment import Environment

__all__ = ["Environment"]
