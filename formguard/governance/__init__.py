"""Field governance model: classification, per-field state, and remediation."""

from formguard.governance.classification import (
    ENCRYPT_REQUIRED_CLASSES,
    SENSITIVE_CLASSES,
    DataClassification,
    is_pii,
)
from formguard.governance.fields import (
    AccessRole,
    ApprovalStatus,
    ApproverRole,
    AuditLoggingFlags,
    FieldGovernanceState,
    FieldMetadata,
    KmsKey,
    MaskingMode,
    create_default_governance,
)
from formguard.governance.remediation import (
    RemediationResult,
    apply_full_masking,
    apply_remediation,
    encrypt_all_sensitive,
    remediate,
    remediate_all,
)

__all__ = [
    # Classification
    "DataClassification",
    "SENSITIVE_CLASSES",
    "ENCRYPT_REQUIRED_CLASSES",
    "is_pii",
    # Fields
    "FieldMetadata",
    "FieldGovernanceState",
    "AuditLoggingFlags",
    "KmsKey",
    "MaskingMode",
    "AccessRole",
    "ApprovalStatus",
    "ApproverRole",
    "create_default_governance",
    # Remediation
    "RemediationResult",
    "apply_remediation",
    "remediate",
    "remediate_all",
    "encrypt_all_sensitive",
    "apply_full_masking",
]
