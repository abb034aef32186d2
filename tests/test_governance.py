"""Tests for classification, field governance state and remediation."""

import pytest
from pydantic import ValidationError

from formguard.errors import ImmutableFieldError
from formguard.governance.classification import DataClassification, is_pii
from formguard.governance.fields import (
    AccessRole,
    ApprovalStatus,
    KmsKey,
    MaskingMode,
    create_default_governance,
)
from formguard.governance.remediation import (
    apply_full_masking,
    apply_remediation,
    encrypt_all_sensitive,
    remediate,
    remediate_all,
)
from formguard.policy.jurisdiction import Jurisdiction, compute_field_violations


class TestClassification:
    """Test classification ordering."""

    def test_ordering(self):
        assert DataClassification.PUBLIC < DataClassification.INTERNAL
        assert DataClassification.FINANCIAL < DataClassification.HIGHLY_SENSITIVE
        assert max(DataClassification) == DataClassification.HIGHLY_SENSITIVE
        assert sorted([DataClassification.FINANCIAL, DataClassification.PUBLIC]) == [
            DataClassification.PUBLIC,
            DataClassification.FINANCIAL,
        ]

    def test_is_pii(self):
        assert not is_pii(DataClassification.PUBLIC)
        assert not is_pii(DataClassification.INTERNAL)
        assert is_pii(DataClassification.PERSONAL)
        assert is_pii(DataClassification.HIGHLY_SENSITIVE)


class TestFieldGovernanceState:
    """Test field governance defaults and patching."""

    def test_defaults(self):
        state = create_default_governance("email", DataClassification.PERSONAL, "Email")

        assert state.encryption_at_rest is False
        assert state.encryption_in_transit is False
        assert state.kms_key == KmsKey.DEFAULT
        assert state.masking_mode == MaskingMode.NONE
        assert state.access_role == AccessRole.EDITOR
        assert state.audit_logging.access is False
        assert state.retention_days == 0
        assert state.allow_ai_processing is False
        assert state.approval_status == ApprovalStatus.PENDING
        assert state.is_remediated is False

    def test_apply_returns_new_state(self):
        state = create_default_governance("email", DataClassification.PERSONAL, "Email")
        updated = state.apply({"retention_days": 30})

        assert updated.retention_days == 30
        assert state.retention_days == 0

    def test_immutable_attributes(self):
        state = create_default_governance("email", DataClassification.PERSONAL, "Email")

        with pytest.raises(ImmutableFieldError) as exc_info:
            state.apply({"classification": DataClassification.PUBLIC})
        assert exc_info.value.attributes == ["classification"]

        # Same value is not a change
        assert state.apply({"classification": DataClassification.PERSONAL}) == state

    def test_invalid_patch(self):
        state = create_default_governance("email", DataClassification.PERSONAL, "Email")
        with pytest.raises(ValidationError):
            state.apply({"retention_days": -1})
        with pytest.raises(ValidationError):
            state.apply({"unknown_attribute": True})

    def test_to_dict(self):
        data = create_default_governance("ssn", DataClassification.HIGHLY_SENSITIVE, "SSN").to_dict()
        assert data["classification"] == "HIGHLY_SENSITIVE"
        assert data["masking_mode"] == "none"


class TestRemediation:
    """Test auto-remediation."""

    def test_patch_for_highly_sensitive(self):
        state = create_default_governance("ssn", DataClassification.HIGHLY_SENSITIVE, "SSN")
        patch = apply_remediation(state)

        assert patch == {
            "is_remediated": True,
            "encryption_at_rest": True,
            "encryption_in_transit": True,
            "kms_key": KmsKey.PII,
            "masking_mode": MaskingMode.FULL,
        }

    def test_financial_key(self):
        state = create_default_governance("card", DataClassification.FINANCIAL, "Card")
        assert apply_remediation(state)["kms_key"] == KmsKey.FINANCIAL
        assert "masking_mode" not in apply_remediation(state)

    def test_already_encrypted(self):
        state = create_default_governance("card", DataClassification.FINANCIAL, "Card").apply(
            {"encryption_at_rest": True, "encryption_in_transit": True}
        )
        assert apply_remediation(state) == {"is_remediated": True}

    def test_partial_masking_kept(self):
        state = create_default_governance("ssn", DataClassification.HIGHLY_SENSITIVE, "SSN").apply(
            {"masking_mode": MaskingMode.PARTIAL}
        )
        assert remediate(state).masking_mode == MaskingMode.PARTIAL

    def test_clears_fixable_violations(self):
        state = create_default_governance("ssn", DataClassification.HIGHLY_SENSITIVE, "SSN")
        remediated = remediate(state)

        assert all(not v.fixable for v in compute_field_violations(remediated, Jurisdiction.GLOBAL))
        assert remediated.is_remediated is True

    def test_idempotent(self):
        state = create_default_governance("ssn", DataClassification.HIGHLY_SENSITIVE, "SSN")
        once = remediate(state)
        assert remediate(once) == once

    def test_bulk_operations(self):
        fields = {
            "name": create_default_governance("name", DataClassification.PUBLIC, "Name"),
            "card": create_default_governance("card", DataClassification.FINANCIAL, "Card"),
            "ssn": create_default_governance("ssn", DataClassification.HIGHLY_SENSITIVE, "SSN"),
        }

        encrypted = encrypt_all_sensitive(fields)
        assert encrypted["name"].is_encrypted is False
        assert encrypted["card"].is_encrypted is True
        assert encrypted["ssn"].is_encrypted is True

        masked = apply_full_masking(fields)
        assert masked["ssn"].masking_mode == MaskingMode.FULL
        assert masked["card"].masking_mode == MaskingMode.NONE

        remediated = remediate_all(fields)
        assert all(state.is_remediated for state in remediated.values())
        assert fields["card"].is_remediated is False
