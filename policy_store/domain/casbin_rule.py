"""Casbin rule record and the policy-line encode/decode contract.

A CasbinRule is the persisted unit: one document per policy rule in the
``casbin_rule`` collection. Records are transient; they only shuttle data
between MongoDB documents and the Casbin model.

Policy Types (ptype):
    - 'p', 'p2', ...: Permission rules (role, resource, action)
    - 'g', 'g2', ...: Role grouping rules (user/role, parent_role)

Policy Examples:
    Permission rule:
        ptype='p', v0='admin', v1='users', v2='write', v3..v5=''
    Role grouping:
        ptype='g', v0='alice', v1='admin', v2..v5=''

Capacity:
    At most six positional values are stored. Longer rules are truncated
    by save_policy_line without error.
"""

from typing import TYPE_CHECKING, Any, Sequence

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from policy_store.core.constants import MAX_RULE_VALUES, VALUE_FIELDS

if TYPE_CHECKING:
    from casbin.model import Model


class CasbinRule(BaseModel):
    """One stored policy rule.

    Unused trailing slots hold the empty string, never None or a missing key,
    so exact-match deletes compare all seven fields.

    Attributes:
        ptype: Rule-type discriminator ("p", "g", "g2", ...).
        v0-v5: Positional values, filled left to right.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    ptype: StrictStr = Field(min_length=1)
    v0: StrictStr = ""
    v1: StrictStr = ""
    v2: StrictStr = ""
    v3: StrictStr = ""
    v4: StrictStr = ""
    v5: StrictStr = ""

    @field_validator(*VALUE_FIELDS, mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        """Treat a stored null value slot as the empty sentinel."""
        return "" if v is None else v

    @property
    def section(self) -> str:
        """Model section key: the first character of ptype."""
        return self.ptype[:1]

    @property
    def values(self) -> tuple[str, ...]:
        """All six positional slots, empty ones included."""
        return (self.v0, self.v1, self.v2, self.v3, self.v4, self.v5)

    def tokens(self) -> list[str]:
        """Return the rule's values, stopping at the first empty slot.

        A gap ends the scan: v0="" with v1="x" yields [], it does not skip
        ahead to v1.
        """
        tokens: list[str] = []
        for value in self.values:
            if not value:
                break
            tokens.append(value)
        return tokens

    def to_document(self) -> dict[str, str]:
        """Return the MongoDB document (and exact-match filter) for this rule."""
        return self.model_dump()

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "CasbinRule":
        """Build a rule from a stored document, ignoring ``_id``.

        Raises:
            pydantic.ValidationError: If ptype is missing or empty, or a
                field is not a string.
        """
        return cls.model_validate(document)


def save_policy_line(ptype: str, rule: Sequence[str]) -> CasbinRule:
    """Encode a Casbin rule into a record.

    Args:
        ptype: Rule type ("p", "g", ...).
        rule: Ordered rule values. Only the first six are kept.

    Returns:
        CasbinRule: Record with remaining slots set to "".
    """
    values = dict(zip(VALUE_FIELDS, list(rule)[:MAX_RULE_VALUES]))
    return CasbinRule(ptype=ptype, **values)


def load_policy_line(rule: CasbinRule, model: "Model") -> bool:
    """Decode a record and append it to the Casbin model.

    The section and rule type must already be declared by the model
    definition; rules for undeclared types are skipped.

    Args:
        rule: Stored record.
        model: Casbin model to append into.

    Returns:
        bool: True if the rule was appended, False if its type is undeclared.
    """
    assertions = model.model.get(rule.section)
    if assertions is None or rule.ptype not in assertions:
        return False
    assertions[rule.ptype].policy.append(rule.tokens())
    return True
