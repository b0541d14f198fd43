"""Logging adapters.

Usage:
    from policy_store.infrastructure.logging import ConsoleAdapter
"""

from policy_store.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
