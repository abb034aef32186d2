"""Tests for policy rules and the policy engine."""

import pytest

from formguard.errors import RuleEvaluationError
from formguard.governance.classification import DataClassification
from formguard.governance.fields import FieldMetadata
from formguard.policy.engine import DEFAULT_RULES, PolicyEngine, blocking_violations, is_compliant
from formguard.policy.rules import (
    DataMinimizationPolicy,
    DependentFieldPolicy,
    PolicyRule,
    PolicyViolation,
    Severity,
    mask_highly_sensitive,
    no_plaintext_pii,
    policy_rule,
    require_encryption,
)


def meta(name, classification, **kwargs):
    return FieldMetadata(name=name, label=name.title(), classification=classification, **kwargs)


class TestBuiltinRules:
    """Test the built-in per-field rules."""

    def test_plaintext_pii_blocks(self):
        """PII value without encryption is a BLOCK."""
        violation = no_plaintext_pii.evaluate(
            "test@example.com",
            meta("email", DataClassification.PERSONAL, encryption_required=False),
            {},
            {},
        )
        assert violation is not None
        assert violation.severity == Severity.BLOCK
        assert violation.rule_id == "no-plaintext-pii"
        assert violation.field == "email"

    def test_plaintext_pii_encrypted_passes(self):
        """Encrypted PII field does not violate."""
        violation = no_plaintext_pii.evaluate(
            "test@example.com",
            meta("email", DataClassification.PERSONAL, encryption_required=True),
            {},
            {},
        )
        assert violation is None

    def test_plaintext_pii_empty_value_passes(self):
        """Empty value is not plaintext PII."""
        assert no_plaintext_pii.evaluate("", meta("email", DataClassification.PERSONAL)) is None

    def test_plaintext_pii_internal_passes(self):
        """INTERNAL data is not PII."""
        assert no_plaintext_pii.evaluate("x", meta("notes", DataClassification.INTERNAL)) is None

    def test_require_encryption(self):
        """FINANCIAL and HIGHLY_SENSITIVE require encryption regardless of value."""
        v = require_encryption.evaluate("", meta("card", DataClassification.FINANCIAL))
        assert v is not None and v.severity == Severity.BLOCK
        assert "FINANCIAL" in v.message

        assert require_encryption.evaluate(
            "", meta("card", DataClassification.FINANCIAL, encryption_required=True)
        ) is None
        assert require_encryption.evaluate("x", meta("email", DataClassification.PERSONAL)) is None

    def test_mask_highly_sensitive(self):
        """Unmasked HIGHLY_SENSITIVE field is a WARN."""
        v = mask_highly_sensitive.evaluate("123", meta("ssn", DataClassification.HIGHLY_SENSITIVE))
        assert v is not None
        assert v.severity == Severity.WARN
        assert not v.is_blocking

        masked = meta("ssn", DataClassification.HIGHLY_SENSITIVE, masked=True)
        assert mask_highly_sensitive.evaluate("123", masked) is None


class TestDependentFieldPolicy:
    """Test cross-field dependency rule."""

    def setup_method(self):
        self.rule = DependentFieldPolicy(
            target_field="country",
            condition=lambda v: v == "US",
            dependent_field="state",
            message="State is required for US addresses.",
        )

    def test_missing_dependent_blocks(self):
        """Condition met and dependent empty is a BLOCK attributed to the dependent field."""
        v = self.rule.evaluate(
            "US",
            meta("country", DataClassification.PUBLIC),
            {"country": "US", "state": ""},
            {},
        )
        assert v is not None
        assert v.severity == Severity.BLOCK
        assert v.field == "state"
        assert v.message == "State is required for US addresses."

    def test_dependent_present_passes(self):
        v = self.rule.evaluate(
            "US",
            meta("country", DataClassification.PUBLIC),
            {"country": "US", "state": "CA"},
            {},
        )
        assert v is None

    def test_condition_not_met_passes(self):
        v = self.rule.evaluate("FR", meta("country", DataClassification.PUBLIC), {"country": "FR"}, {})
        assert v is None

    def test_other_field_ignored(self):
        v = self.rule.evaluate("US", meta("city", DataClassification.PUBLIC), {"city": "US"}, {})
        assert v is None


class TestDataMinimization:
    """Test the aggregate data minimization rule."""

    def setup_method(self):
        self.metadata = {
            "email": meta("email", DataClassification.PERSONAL),
            "phone": meta("phone", DataClassification.PERSONAL),
        }
        self.values = {"email": "a@b.c", "phone": "555"}

    def test_per_field_reports_on_first_name_only(self):
        """Per-field evaluation reports once, on the lexicographically first field."""
        rule = DataMinimizationPolicy(1)

        assert rule.evaluate("555", self.metadata["phone"], self.values, self.metadata) is None

        v = rule.evaluate("a@b.c", self.metadata["email"], self.values, self.metadata)
        assert v is not None
        assert v.severity == Severity.WARN
        assert "Collecting 2 PII fields" in v.message

    def test_within_limit(self):
        rule = DataMinimizationPolicy(2)
        assert rule.evaluate_all(self.values, self.metadata) is None

    def test_engine_skips_aggregates_without_values(self):
        """Aggregate rules need at least one value with metadata."""
        engine = PolicyEngine([DataMinimizationPolicy(0)])

        assert engine.evaluate({}, self.metadata) == []
        assert engine.evaluate({"unregistered": "x"}, self.metadata) == []
        assert len(engine.evaluate({"email": ""}, self.metadata)) == 1

    def test_engine_fires_once_per_pass(self):
        """The engine evaluates aggregate rules once, regardless of field count."""
        engine = PolicyEngine([DataMinimizationPolicy(1)])
        violations = engine.evaluate(self.values, self.metadata)

        assert len(violations) == 1
        assert violations[0].rule_id == "data-minimization"
        assert violations[0].field is None


class TestPolicyEngine:
    """Test policy engine evaluation."""

    def test_field_then_rule_order(self):
        """Violations are emitted per field in value order, then per rule."""
        metadata = {
            "card": meta("card", DataClassification.FINANCIAL),
            "ssn": meta("ssn", DataClassification.HIGHLY_SENSITIVE),
        }
        engine = PolicyEngine(DEFAULT_RULES)
        violations = engine.evaluate({"ssn": "123", "card": "4111"}, metadata)

        assert [(v.field, v.rule_id) for v in violations] == [
            ("ssn", "no-plaintext-pii"),
            ("ssn", "require-encryption"),
            ("ssn", "mask-highly-sensitive"),
            ("card", "no-plaintext-pii"),
            ("card", "require-encryption"),
        ]

    def test_fields_without_metadata_skipped(self):
        engine = PolicyEngine(DEFAULT_RULES)
        assert engine.evaluate({"anything": "value"}, {}) == []

    def test_aggregate_rules_after_field_rules(self):
        metadata = {
            "a": meta("a", DataClassification.PERSONAL),
            "b": meta("b", DataClassification.PERSONAL),
        }
        engine = PolicyEngine([DataMinimizationPolicy(1), no_plaintext_pii])
        violations = engine.evaluate({"a": "x", "b": "y"}, metadata)

        assert [v.rule_id for v in violations] == ["no-plaintext-pii", "no-plaintext-pii", "data-minimization"]

    def test_add_rule(self):
        engine = PolicyEngine()
        engine.add_rule(no_plaintext_pii)
        assert engine.rules == [no_plaintext_pii]

    def test_rule_failure_raises(self):
        """A rule that raises surfaces as RuleEvaluationError."""

        class BrokenRule(PolicyRule):
            id = "broken"
            name = "Broken"

            def evaluate(self, value, meta, all_values=None, all_metadata=None):
                raise ValueError("boom")

        engine = PolicyEngine([BrokenRule()])
        with pytest.raises(RuleEvaluationError) as exc_info:
            engine.evaluate({"email": "x"}, {"email": meta("email", DataClassification.PERSONAL)})

        assert exc_info.value.rule_id == "broken"
        assert exc_info.value.field == "email"
        assert isinstance(exc_info.value.cause, ValueError)

    def test_policy_rule_decorator(self):
        """Decorated functions act as rules."""

        @policy_rule("no-test-values")
        def no_test_values(value, meta, all_values, all_metadata):
            if value == "test":
                return PolicyViolation("no-test-values", "No test data", Severity.WARN, field=meta.name)
            return None

        engine = PolicyEngine([no_test_values])
        violations = engine.evaluate({"name": "test"}, {"name": meta("name", DataClassification.PUBLIC)})

        assert no_test_values.name == "no_test_values"
        assert len(violations) == 1
        assert violations[0].rule_id == "no-test-values"


class TestCompliance:
    """Test compliance helpers."""

    def test_is_compliant(self):
        warn = PolicyViolation("r", "m", Severity.WARN)
        block = PolicyViolation("r", "m", Severity.BLOCK)

        assert is_compliant([]) is True
        assert is_compliant([warn]) is True
        assert is_compliant([warn, block]) is False
        assert blocking_violations([warn, block]) == [block]
