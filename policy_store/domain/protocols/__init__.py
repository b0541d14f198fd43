"""Domain protocols package.

Usage:
    from policy_store.domain.protocols import LoggerProtocol
"""

from policy_store.domain.protocols.logger_protocol import LoggerProtocol

__all__ = ["LoggerProtocol"]
