"""Unit tests for CasbinRule and the policy-line encode/decode contract.

Tests cover:
- save_policy_line() slot filling and truncation
- tokens() early stop at the first empty slot
- from_document() validation (missing ptype, non-string values, nulls)
- load_policy_line() placement into the Casbin model

Architecture:
- Pure unit tests, NO database
- Uses a real casbin Model built from text
"""

import pytest
from pydantic import ValidationError

from policy_store.domain.casbin_rule import (
    CasbinRule,
    load_policy_line,
    save_policy_line,
)


@pytest.mark.unit
class TestSavePolicyLine:
    """Test encoding a rule into a record."""

    def test_fills_slots_left_to_right(self):
        """Test values land in v0..v2 and remaining slots are empty."""
        rule = save_policy_line("p", ["alice", "data1", "read"])

        assert rule.ptype == "p"
        assert rule.values == ("alice", "data1", "read", "", "", "")

    def test_six_values_fill_every_slot(self):
        """Test a full-width rule uses all six slots."""
        rule = save_policy_line("p", ["a", "b", "c", "d", "e", "f"])

        assert rule.values == ("a", "b", "c", "d", "e", "f")

    def test_truncates_beyond_six_values(self):
        """Test values past the sixth are dropped without error."""
        rule = save_policy_line("p", ["a", "b", "c", "d", "e", "f", "g", "h"])

        assert rule.values == ("a", "b", "c", "d", "e", "f")

    def test_empty_rule_keeps_only_ptype(self):
        """Test an empty rule encodes to all-empty slots."""
        rule = save_policy_line("g", [])

        assert rule.to_document() == {
            "ptype": "g",
            "v0": "",
            "v1": "",
            "v2": "",
            "v3": "",
            "v4": "",
            "v5": "",
        }

    def test_document_field_order(self):
        """Test documents list ptype first, then v0..v5."""
        document = save_policy_line("p", ["alice"]).to_document()

        assert list(document) == ["ptype", "v0", "v1", "v2", "v3", "v4", "v5"]


@pytest.mark.unit
class TestCasbinRuleTokens:
    """Test decoding slot values into tokens."""

    def test_tokens_stop_at_trailing_empty(self):
        """Test trailing empty slots are not returned."""
        rule = CasbinRule(ptype="g", v0="alice", v1="admin")

        assert rule.tokens() == ["alice", "admin"]

    def test_gap_at_v0_yields_no_tokens(self):
        """Test v0="" with v1 set yields nothing (scan stops at the gap)."""
        rule = CasbinRule(ptype="p", v0="", v1="x")

        assert rule.tokens() == []

    def test_gap_in_middle_truncates(self):
        """Test values after an inner gap are not returned."""
        rule = CasbinRule(ptype="p", v0="alice", v1="", v2="read")

        assert rule.tokens() == ["alice"]

    def test_section_is_first_character(self):
        """Test g2 rules belong to section g."""
        assert CasbinRule(ptype="g2", v0="a").section == "g"

    @pytest.mark.parametrize(
        "values",
        [
            ["alice"],
            ["alice", "data1", "read"],
            ["a", "b", "c", "d", "e", "f"],
        ],
    )
    def test_encode_decode_round_trip(self, values):
        """Test tokens() reproduces any 1-6 value rule of non-empty strings."""
        assert save_policy_line("p", values).tokens() == values


@pytest.mark.unit
class TestCasbinRuleFromDocument:
    """Test building records from stored documents."""

    def test_ignores_object_id(self):
        """Test the _id field is dropped."""
        rule = CasbinRule.from_document({"_id": 42, "ptype": "p", "v0": "alice"})

        assert rule.to_document()["v0"] == "alice"
        assert "_id" not in rule.to_document()

    def test_missing_values_default_to_empty(self):
        """Test absent value fields decode as empty strings."""
        rule = CasbinRule.from_document({"ptype": "p", "v0": "alice"})

        assert rule.values == ("alice", "", "", "", "", "")

    def test_null_values_decode_as_empty(self):
        """Test stored nulls are treated as the empty sentinel."""
        rule = CasbinRule.from_document({"ptype": "p", "v0": "alice", "v1": None})

        assert rule.v1 == ""

    def test_missing_ptype_is_rejected(self):
        """Test a document without ptype is not a rule."""
        with pytest.raises(ValidationError):
            CasbinRule.from_document({"v0": "alice"})

    def test_empty_ptype_is_rejected(self):
        """Test an empty ptype is not a rule."""
        with pytest.raises(ValidationError):
            CasbinRule.from_document({"ptype": "", "v0": "alice"})

    def test_non_string_value_is_rejected(self):
        """Test numbers are not coerced into strings."""
        with pytest.raises(ValidationError):
            CasbinRule.from_document({"ptype": "p", "v0": 7})

    def test_records_are_immutable(self):
        """Test records cannot be mutated after decode."""
        rule = CasbinRule(ptype="p", v0="alice")

        with pytest.raises(ValidationError):
            rule.v0 = "bob"


@pytest.mark.unit
class TestLoadPolicyLine:
    """Test appending decoded records into the Casbin model."""

    def test_appends_permission_rule(self, rbac_model):
        """Test a p rule lands in model['p']['p']."""
        appended = load_policy_line(
            CasbinRule(ptype="p", v0="alice", v1="data1", v2="read"), rbac_model
        )

        assert appended is True
        assert rbac_model.model["p"]["p"].policy == [["alice", "data1", "read"]]

    def test_appends_grouping_rule_by_type(self, rbac_model):
        """Test a g2 rule lands under section g, type g2."""
        load_policy_line(CasbinRule(ptype="g2", v0="data1", v1="group"), rbac_model)

        assert rbac_model.model["g"]["g2"].policy == [["data1", "group"]]
        assert rbac_model.model["g"]["g"].policy == []

    def test_preserves_duplicates_and_order(self, rbac_model):
        """Test rules are appended in call order without de-duplication."""
        rule = CasbinRule(ptype="g", v0="alice", v1="admin")
        load_policy_line(rule, rbac_model)
        load_policy_line(CasbinRule(ptype="g", v0="bob", v1="user"), rbac_model)
        load_policy_line(rule, rbac_model)

        assert rbac_model.model["g"]["g"].policy == [
            ["alice", "admin"],
            ["bob", "user"],
            ["alice", "admin"],
        ]

    def test_undeclared_type_is_skipped(self, rbac_model):
        """Test a rule type missing from the model is not added."""
        appended = load_policy_line(CasbinRule(ptype="p9", v0="x"), rbac_model)

        assert appended is False
        assert "p9" not in rbac_model.model["p"]

    def test_undeclared_section_is_skipped(self, rbac_model):
        """Test a section missing from the model is not created."""
        appended = load_policy_line(CasbinRule(ptype="z", v0="x"), rbac_model)

        assert appended is False
        assert "z" not in rbac_model.model
