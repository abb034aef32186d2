"""Governed field metadata and per-field governance state."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from formguard.errors import ImmutableFieldError
from formguard.governance.classification import DataClassification


class KmsKey(str, Enum):
    """Key classes available for encryption at rest."""

    DEFAULT = "kms-default"
    FINANCIAL = "kms-financial"
    HEALTHCARE = "kms-healthcare"
    PII = "kms-pii"


class MaskingMode(str, Enum):
    """How a field's value is masked when displayed."""

    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"
    ROLE_BASED = "role-based"


class AccessRole(str, Enum):
    """Who may read a field."""

    VIEWER = "viewer"
    EDITOR = "editor"
    RESTRICTED = "restricted"
    AUDIT_ONLY = "audit-only"


class ApprovalStatus(str, Enum):
    """Sign-off state for collecting a field."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApproverRole(str, Enum):
    """Role that signs off on a field."""

    LEGAL = "legal"
    CISO = "ciso"
    DPO = "dpo"
    CCO = "cco"


@dataclass(frozen=True)
class FieldMetadata:
    """Governance metadata a form field registers with."""

    name: str
    label: str
    classification: DataClassification
    masked: bool = False
    retention: Optional[str] = None  # e.g. "90 days"
    encryption_required: bool = False


class AuditLoggingFlags(BaseModel):
    """Which interactions with a field are audit-logged."""

    model_config = ConfigDict(frozen=True)

    access: bool = False
    value_change: bool = False
    validation_failure: bool = False


# Attributes fixed once a field is registered
IMMUTABLE_ATTRIBUTES = frozenset({"field_id", "classification"})


class FieldGovernanceState(BaseModel):
    """Extended governance state of a single field.

    Violations are intentionally not part of this model: they are derived
    from the state and the session's jurisdiction on every read.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field_id: str = Field(..., description="Field identifier")
    classification: DataClassification = Field(..., description="Sensitivity tier")
    label: str = Field(..., description="Human-readable label")

    # Encryption
    encryption_at_rest: bool = False
    encryption_in_transit: bool = False
    kms_key: KmsKey = KmsKey.DEFAULT

    # Masking and access
    masking_mode: MaskingMode = MaskingMode.NONE
    access_role: AccessRole = AccessRole.EDITOR
    audit_logging: AuditLoggingFlags = Field(default_factory=AuditLoggingFlags)

    # Lifecycle
    retention_days: int = Field(default=0, ge=0)
    auto_delete: bool = False

    # AI
    allow_ai_processing: bool = False
    allow_model_training: bool = False

    # Justification and approval
    business_justification: str = ""
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    approver_role: ApproverRole = ApproverRole.LEGAL

    is_remediated: bool = False

    @property
    def is_encrypted(self) -> bool:
        """Encrypted both at rest and in transit."""
        return self.encryption_at_rest and self.encryption_in_transit

    def apply(self, patch: Mapping[str, Any]) -> "FieldGovernanceState":
        """
        Return a copy with the patch applied.

        Args:
            patch: Attribute name -> new value

        Returns:
            New validated FieldGovernanceState

        Raises:
            ImmutableFieldError: If the patch changes field_id or classification
        """
        changed = [
            key for key in IMMUTABLE_ATTRIBUTES
            if key in patch and patch[key] != getattr(self, key)
        ]
        if changed:
            raise ImmutableFieldError(self.field_id, changed)

        data = self.model_dump()
        data.update(patch)
        return FieldGovernanceState.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


def create_default_governance(
    field_id: str,
    classification: DataClassification,
    label: str,
) -> FieldGovernanceState:
    """
    Create the default governance state for a newly registered field.

    Defaults are conservative but unencumbered: no encryption, no masking,
    editor access, no audit logging, zero retention, AI disabled and
    approval pending.
    """
    return FieldGovernanceState(
        field_id=field_id,
        classification=DataClassification(classification),
        label=label,
    )
