"""Core shared kernel: settings, constants, enums and the composition root.

The core module has NO dependencies on pymongo or casbin at import time.
"""

from policy_store.core.config import Settings, get_settings
from policy_store.core.enums import Environment

__all__ = ["Environment", "Settings", "get_settings"]
