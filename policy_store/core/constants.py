"""Centralized constants for the MongoDB policy schema.

These are fixed parts of the stored document layout, NOT environment-specific
configuration. For environment-specific settings, use
`policy_store/core/config.py` instead.

Example:
    >>> from policy_store.core.constants import COLLECTION_NAME, RULE_FIELDS
    >>> collection = database[COLLECTION_NAME]
"""

# =============================================================================
# Document Schema
# =============================================================================

COLLECTION_NAME: str = "casbin_rule"
"""Name of the collection holding one document per policy rule."""

DEFAULT_DATABASE_NAME: str = "casbin_rule"
"""Database used when the connection URI does not name one."""

PTYPE_FIELD: str = "ptype"
"""Rule-type discriminator field ("p", "g", "g2", ...)."""

VALUE_FIELDS: tuple[str, ...] = ("v0", "v1", "v2", "v3", "v4", "v5")
"""Positional value fields, filled left to right."""

RULE_FIELDS: tuple[str, ...] = (PTYPE_FIELD, *VALUE_FIELDS)
"""All indexed fields of a rule document."""

MAX_RULE_VALUES: int = len(VALUE_FIELDS)
"""Maximum number of positional values stored per rule (longer rules truncate)."""


# =============================================================================
# Policy Sections
# =============================================================================

SAVED_SECTIONS: tuple[str, ...] = ("p", "g")
"""Model sections written by save_policy, in write order."""


# =============================================================================
# MongoDB Error Codes
# =============================================================================

NAMESPACE_NOT_FOUND_CODE: int = 26
"""Server code for dropping a collection that does not exist."""

INDEX_KEY_SPECS_CONFLICT_CODE: int = 86
"""Server code for an index that exists with different options."""


# =============================================================================
# Timeouts (seconds)
# =============================================================================

DEFAULT_CONNECT_TIMEOUT_SECONDS: float = 8.0
"""Bound for connecting and for the ping health check."""

DEFAULT_LOAD_TIMEOUT_SECONDS: float = 10.0
"""Bound for iterating the full policy cursor."""
