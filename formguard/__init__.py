"""formguard: field-level data governance for forms - policy evaluation, risk scoring, audit and remediation."""

from formguard.audit import AuditTrail, EventLog, GovernanceAction, GovernanceEvent, UserContext
from formguard.config import GovernanceConfig, PolicyMode, load_config
from formguard.form import GovernanceSession, GuardianForm, SubmitGate, SubmitResult
from formguard.governance import (
    DataClassification,
    FieldGovernanceState,
    FieldMetadata,
    apply_remediation,
    create_default_governance,
)
from formguard.policy import (
    DataMinimizationPolicy,
    DependentFieldPolicy,
    Jurisdiction,
    PolicyEngine,
    PolicyRule,
    PolicyViolation,
    Severity,
    compute_field_violations,
    policy_rule,
)
from formguard.risk import RiskRole, calculate_risk_score, compute_risk

__version__ = "0.1.0"

__all__ = [
    "DataClassification",
    "FieldMetadata",
    "FieldGovernanceState",
    "create_default_governance",
    "apply_remediation",
    "PolicyEngine",
    "PolicyRule",
    "PolicyViolation",
    "Severity",
    "policy_rule",
    "DependentFieldPolicy",
    "DataMinimizationPolicy",
    "Jurisdiction",
    "compute_field_violations",
    "calculate_risk_score",
    "compute_risk",
    "RiskRole",
    "AuditTrail",
    "UserContext",
    "EventLog",
    "GovernanceEvent",
    "GovernanceAction",
    "GovernanceConfig",
    "PolicyMode",
    "load_config",
    "GuardianForm",
    "GovernanceSession",
    "SubmitGate",
    "SubmitResult",
]
