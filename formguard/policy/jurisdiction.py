"""Governance violation rules for the extended field model.

The jurisdiction entries are an illustrative rule table, not a legal
compliance guarantee.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from formguard.governance.classification import ENCRYPT_REQUIRED_CLASSES, DataClassification
from formguard.governance.fields import FieldGovernanceState, MaskingMode
from formguard.policy.rules import FieldViolation, Severity


class Jurisdiction(str, Enum):
    """Regulatory rule table in effect for a session."""

    US = "US"
    CA = "CA"
    EU = "EU"
    GLOBAL = "GLOBAL"


@dataclass(frozen=True)
class ComplianceBadge:
    """A compliance framework shown as active for a jurisdiction."""

    id: str
    label: str
    active: bool


_FRAMEWORKS: Dict[str, List[str]] = {
    "hipaa": ["US"],
    "ccpa": ["US"],
    "soc2": ["US", "GLOBAL"],
    "pipeda": ["CA"],
    "gdpr": ["EU"],
}

_FRAMEWORK_LABELS = {
    "hipaa": "HIPAA",
    "ccpa": "CCPA",
    "soc2": "SOC 2",
    "pipeda": "PIPEDA",
    "gdpr": "GDPR",
}


def compliance_badges(jurisdiction: Jurisdiction) -> List[ComplianceBadge]:
    """All known frameworks, flagged active for the given jurisdiction."""
    jurisdiction = Jurisdiction(jurisdiction)
    return [
        ComplianceBadge(id=fid, label=_FRAMEWORK_LABELS[fid], active=jurisdiction.value in regions)
        for fid, regions in _FRAMEWORKS.items()
    ]


def active_frameworks(jurisdiction: Jurisdiction) -> List[str]:
    """Labels of the frameworks active under a jurisdiction."""
    return [b.label for b in compliance_badges(jurisdiction) if b.active]


GovernanceCheck = Callable[[FieldGovernanceState, Jurisdiction], Optional[FieldViolation]]


def _require_encryption(field, jurisdiction):
    if field.classification in ENCRYPT_REQUIRED_CLASSES and not field.is_encrypted:
        return FieldViolation(
            rule_id="require-encryption",
            message=f"{field.label} requires encryption at rest and in transit.",
            severity=Severity.BLOCK,
            fixable=True,
        )
    return None


def _require_masking(field, jurisdiction):
    if field.classification == DataClassification.HIGHLY_SENSITIVE and field.masking_mode == MaskingMode.NONE:
        return FieldViolation(
            rule_id="require-masking",
            message=f'{field.label} is HIGHLY_SENSITIVE and must use at least "partial" masking.',
            severity=Severity.WARN,
            fixable=True,
        )
    return None


def _ai_exposure(field, jurisdiction):
    if field.classification == DataClassification.HIGHLY_SENSITIVE and (
        field.allow_ai_processing or field.allow_model_training
    ):
        return FieldViolation(
            rule_id="ai-exposure",
            message=f"{field.label} is HIGHLY_SENSITIVE; AI processing is prohibited without explicit approval.",
            severity=Severity.WARN,
            fixable=False,
        )
    return None


def _gdpr_financial_consent(field, jurisdiction):
    if (
        jurisdiction == Jurisdiction.EU
        and field.classification == DataClassification.FINANCIAL
        and not field.business_justification
    ):
        return FieldViolation(
            rule_id="gdpr-financial-consent",
            message="EU jurisdiction: financial fields require a documented GDPR business justification.",
            severity=Severity.WARN,
            fixable=False,
        )
    return None


def _pipeda_ssn_blocked(field, jurisdiction):
    if jurisdiction == Jurisdiction.CA and "ssn" in field.field_id.lower():
        return FieldViolation(
            rule_id="pipeda-ssn-blocked",
            message="CA jurisdiction: SSN collection is blocked. Use SIN instead.",
            severity=Severity.BLOCK,
            fixable=False,
        )
    return None


def _hipaa_sin_blocked(field, jurisdiction):
    # Substring match on the id, so ids like "business_name" also match.
    if jurisdiction == Jurisdiction.US and "sin" in field.field_id.lower():
        return FieldViolation(
            rule_id="hipaa-sin-blocked",
            message="US jurisdiction: SIN collection is blocked. Use SSN instead.",
            severity=Severity.BLOCK,
            fixable=False,
        )
    return None


GOVERNANCE_CHECKS: List[GovernanceCheck] = [
    _require_encryption,
    _require_masking,
    _ai_exposure,
    _gdpr_financial_consent,
    _pipeda_ssn_blocked,
    _hipaa_sin_blocked,
]


def compute_field_violations(
    field: FieldGovernanceState,
    jurisdiction: Jurisdiction,
) -> List[FieldViolation]:
    """
    Derive the violations of a field under a jurisdiction.

    Pure function of its inputs; violations are never stored on the field.

    Args:
        field: Field governance state
        jurisdiction: Jurisdiction in effect

    Returns:
        Violations in rule-table order
    """
    jurisdiction = Jurisdiction(jurisdiction)
    violations = []
    for check in GOVERNANCE_CHECKS:
        violation = check(field, jurisdiction)
        if violation is not None:
            violations.append(violation)
    return violations
