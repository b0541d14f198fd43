"""Selector construction for policy deletes.

Filtered deletes use casbin's field-index offset scheme: ``field_index`` is
the slot of the first supplied value, and the supplied values constrain a
contiguous run of slots from there.

Example:
    >>> build_field_filter("p", 1, ["data1", "read"])
    {'ptype': 'p', 'v1': 'data1', 'v2': 'read'}
"""

from typing import Sequence

from policy_store.core.constants import PTYPE_FIELD, VALUE_FIELDS
from policy_store.domain.casbin_rule import save_policy_line


def build_rule_filter(ptype: str, rule: Sequence[str]) -> dict[str, str]:
    """Build an exact-match selector for one encoded rule.

    Every slot is constrained, empty ones included, so ["alice"] never
    matches a stored ["alice", "data1"].

    Args:
        ptype: Rule type.
        rule: Rule values.

    Returns:
        dict[str, str]: Selector over all seven fields.
    """
    return save_policy_line(ptype, rule).to_document()


def build_field_filter(
    ptype: str, field_index: int, field_values: Sequence[str]
) -> dict[str, str]:
    """Build a partial-match selector for remove_filtered_policy.

    Slot ``k`` is constrained when it falls in the half-open window
    ``[field_index, field_index + len(field_values))``. Slots outside the
    window are left unconstrained. With no values only ptype is matched.

    Args:
        ptype: Rule type.
        field_index: Slot index of the first value.
        field_values: Values for consecutive slots.

    Returns:
        dict[str, str]: Selector for delete_many.
    """
    selector = {PTYPE_FIELD: ptype}
    end = field_index + len(field_values)
    for slot, field in enumerate(VALUE_FIELDS):
        if field_index <= slot < end:
            selector[field] = field_values[slot - field_index]
    return selector
