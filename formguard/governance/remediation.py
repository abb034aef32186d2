"""Auto-remediation of fixable governance violations."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from formguard.governance.classification import ENCRYPT_REQUIRED_CLASSES, DataClassification
from formguard.governance.fields import FieldGovernanceState, KmsKey, MaskingMode


@dataclass(frozen=True)
class RemediationResult:
    """Outcome of remediating one field."""

    field_id: str
    applied: List[str] = field(default_factory=list)
    violations_cleared: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field_id": self.field_id,
            "applied": list(self.applied),
            "violations_cleared": self.violations_cleared,
        }


def apply_remediation(state: FieldGovernanceState) -> Dict[str, Any]:
    """
    Build the patch resolving a field's fixable violations.

    Deterministic and idempotent. The patch always marks the field as
    remediated, even when nothing else needs to change.

    Args:
        state: Field governance state

    Returns:
        Patch dictionary for FieldGovernanceState.apply
    """
    patch: Dict[str, Any] = {"is_remediated": True}

    if not state.is_encrypted:
        patch["encryption_at_rest"] = True
        patch["encryption_in_transit"] = True
        patch["kms_key"] = (
            KmsKey.FINANCIAL if state.classification == DataClassification.FINANCIAL else KmsKey.PII
        )

    if state.classification == DataClassification.HIGHLY_SENSITIVE and state.masking_mode == MaskingMode.NONE:
        patch["masking_mode"] = MaskingMode.FULL

    return patch


def remediate(state: FieldGovernanceState) -> FieldGovernanceState:
    """Return the field with its remediation patch applied."""
    return state.apply(apply_remediation(state))


def remediate_all(fields: Mapping[str, FieldGovernanceState]) -> Dict[str, FieldGovernanceState]:
    """Remediate every field in the form."""
    return {field_id: remediate(state) for field_id, state in fields.items()}


def encrypt_all_sensitive(fields: Mapping[str, FieldGovernanceState]) -> Dict[str, FieldGovernanceState]:
    """Enable encryption at rest and in transit on FINANCIAL and HIGHLY_SENSITIVE fields."""
    result = {}
    for field_id, state in fields.items():
        if state.classification in ENCRYPT_REQUIRED_CLASSES:
            state = state.apply({"encryption_at_rest": True, "encryption_in_transit": True})
        result[field_id] = state
    return result


def apply_full_masking(fields: Mapping[str, FieldGovernanceState]) -> Dict[str, FieldGovernanceState]:
    """Apply full masking to HIGHLY_SENSITIVE fields."""
    result = {}
    for field_id, state in fields.items():
        if state.classification == DataClassification.HIGHLY_SENSITIVE:
            state = state.apply({"masking_mode": MaskingMode.FULL})
        result[field_id] = state
    return result
