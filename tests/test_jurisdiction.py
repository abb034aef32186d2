"""Tests for jurisdiction-aware governance violations."""

from formguard.governance.classification import DataClassification
from formguard.governance.fields import MaskingMode, create_default_governance
from formguard.policy.jurisdiction import (
    Jurisdiction,
    active_frameworks,
    compliance_badges,
    compute_field_violations,
)
from formguard.policy.rules import Severity


def rule_ids(field, jurisdiction):
    return [v.rule_id for v in compute_field_violations(field, jurisdiction)]


class TestFieldViolations:
    """Test the governance rule table."""

    def test_ssn_blocked_in_canada(self):
        field = create_default_governance("ssn", DataClassification.PUBLIC, "SSN")

        violations = compute_field_violations(field, Jurisdiction.CA)
        blocked = [v for v in violations if v.rule_id == "pipeda-ssn-blocked"]
        assert len(blocked) == 1
        assert blocked[0].severity == Severity.BLOCK
        assert blocked[0].fixable is False

        assert "pipeda-ssn-blocked" not in rule_ids(field, Jurisdiction.US)

    def test_sin_blocked_in_us(self):
        field = create_default_governance("applicant_sin", DataClassification.PUBLIC, "SIN")
        assert "hipaa-sin-blocked" in rule_ids(field, Jurisdiction.US)
        assert "hipaa-sin-blocked" not in rule_ids(field, Jurisdiction.CA)

    def test_sin_substring_match(self):
        """The SIN check matches the substring anywhere in the id."""
        field = create_default_governance("business_name", DataClassification.PUBLIC, "Business")
        assert "hipaa-sin-blocked" in rule_ids(field, Jurisdiction.US)

    def test_require_encryption(self):
        field = create_default_governance("card", DataClassification.FINANCIAL, "Card")
        violations = compute_field_violations(field, Jurisdiction.GLOBAL)

        assert [v.rule_id for v in violations] == ["require-encryption"]
        assert violations[0].severity == Severity.BLOCK
        assert violations[0].fixable is True

    def test_encryption_requires_both_flags(self):
        field = create_default_governance("card", DataClassification.FINANCIAL, "Card")
        at_rest_only = field.apply({"encryption_at_rest": True})
        both = field.apply({"encryption_at_rest": True, "encryption_in_transit": True})

        assert "require-encryption" in rule_ids(at_rest_only, Jurisdiction.GLOBAL)
        assert "require-encryption" not in rule_ids(both, Jurisdiction.GLOBAL)

    def test_highly_sensitive_checks(self):
        field = create_default_governance("diagnosis", DataClassification.HIGHLY_SENSITIVE, "Diagnosis")
        assert rule_ids(field, Jurisdiction.GLOBAL) == ["require-encryption", "require-masking"]

        exposed = field.apply({"allow_model_training": True, "masking_mode": MaskingMode.PARTIAL})
        violations = compute_field_violations(exposed, Jurisdiction.GLOBAL)
        assert [v.rule_id for v in violations] == ["require-encryption", "ai-exposure"]
        assert violations[1].fixable is False

    def test_gdpr_financial_consent(self):
        field = create_default_governance("iban", DataClassification.FINANCIAL, "IBAN")
        assert "gdpr-financial-consent" in rule_ids(field, Jurisdiction.EU)
        assert "gdpr-financial-consent" not in rule_ids(field, Jurisdiction.US)

        justified = field.apply({"business_justification": "Needed for refunds"})
        assert "gdpr-financial-consent" not in rule_ids(justified, Jurisdiction.EU)

    def test_public_field_clean(self):
        field = create_default_governance("name", DataClassification.PUBLIC, "Name")
        assert compute_field_violations(field, Jurisdiction.EU) == []


class TestFrameworks:
    """Test compliance framework badges."""

    def test_us_frameworks(self):
        assert active_frameworks(Jurisdiction.US) == ["HIPAA", "CCPA", "SOC 2"]

    def test_other_jurisdictions(self):
        assert active_frameworks(Jurisdiction.CA) == ["PIPEDA"]
        assert active_frameworks(Jurisdiction.EU) == ["GDPR"]
        assert active_frameworks(Jurisdiction.GLOBAL) == ["SOC 2"]

    def test_badges_list_all_frameworks(self):
        badges = compliance_badges(Jurisdiction.EU)
        assert len(badges) == 5
        assert [b.id for b in badges if b.active] == ["gdpr"]
