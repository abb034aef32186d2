"""Policy rules, the policy engine, and the jurisdiction rule table."""

from formguard.policy.engine import DEFAULT_RULES, PolicyEngine, blocking_violations, is_compliant
from formguard.policy.jurisdiction import (
    ComplianceBadge,
    Jurisdiction,
    active_frameworks,
    compliance_badges,
    compute_field_violations,
)
from formguard.policy.rules import (
    AggregatePolicyRule,
    DataMinimizationPolicy,
    DependentFieldPolicy,
    FieldViolation,
    FunctionRule,
    MaskHighlySensitivePolicy,
    NoPlaintextPiiPolicy,
    PolicyRule,
    PolicyViolation,
    RequireEncryptionPolicy,
    Severity,
    mask_highly_sensitive,
    no_plaintext_pii,
    policy_rule,
    require_encryption,
)

__all__ = [
    # Engine
    "PolicyEngine",
    "DEFAULT_RULES",
    "is_compliant",
    "blocking_violations",
    # Rules
    "PolicyRule",
    "AggregatePolicyRule",
    "FunctionRule",
    "policy_rule",
    "PolicyViolation",
    "FieldViolation",
    "Severity",
    "NoPlaintextPiiPolicy",
    "RequireEncryptionPolicy",
    "MaskHighlySensitivePolicy",
    "DependentFieldPolicy",
    "DataMinimizationPolicy",
    "no_plaintext_pii",
    "require_encryption",
    "mask_highly_sensitive",
    # Jurisdiction
    "Jurisdiction",
    "ComplianceBadge",
    "compliance_badges",
    "active_frameworks",
    "compute_field_violations",
]
