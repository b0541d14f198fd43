"""Policy domain: the stored rule record and selector construction.

The domain layer has no dependency on pymongo.
"""

from policy_store.domain.casbin_rule import (
    CasbinRule,
    load_policy_line,
    save_policy_line,
)
from policy_store.domain.filters import build_field_filter, build_rule_filter

__all__ = [
    "CasbinRule",
    "build_field_filter",
    "build_rule_filter",
    "load_policy_line",
    "save_policy_line",
]
