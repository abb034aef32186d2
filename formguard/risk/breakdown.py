"""Multi-factor risk breakdown for the extended governance model."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterable

from formguard.governance.classification import (
    ENCRYPT_REQUIRED_CLASSES,
    SENSITIVE_CLASSES,
    DataClassification,
)
from formguard.governance.fields import FieldGovernanceState, MaskingMode
from formguard.policy.jurisdiction import Jurisdiction
from formguard.risk.scoring import RiskLevel


class RiskRole(str, Enum):
    """Simulated role of the user viewing the form."""

    VIEWER = "viewer"
    USER = "user"
    ADMIN = "admin"
    AUDITOR = "auditor"


# Factor caps
PII_DENSITY_MAX = 25
HIGHLY_SENSITIVE_MAX = 20
ENCRYPTION_MAX = 20
MASKING_MAX = 15
RETENTION_MAX = 10
AI_EXPOSURE_MAX = 5
AI_EXPOSURE_PER_FIELD = 2

ROLE_MODIFIERS: Dict[RiskRole, int] = {
    RiskRole.AUDITOR: -10,
    RiskRole.ADMIN: -5,
}


@dataclass(frozen=True)
class RiskBreakdownFull:
    """Independently bounded risk factors and their clamped total."""

    pii_density: int = 0  # 0-25
    highly_sensitive_ratio: int = 0  # 0-20
    encryption_coverage: int = 0  # 0-20, inverse of coverage
    masking_coverage: int = 0  # 0-15, inverse of coverage
    retention_compliance: int = 0  # 0-10, inverse of coverage
    ai_exposure_penalty: int = 0  # 0-5
    role_modifier: int = 0  # -10 to 0
    total: int = 0  # 0-100
    level: RiskLevel = RiskLevel.LOW

    @property
    def score(self) -> int:
        return self.total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["level"] = self.level.value
        return data


def _round(x: float) -> int:
    # Half-up rounding; the builtin round() rounds halves to even.
    return int(x + 0.5)


def breakdown_level(total: int) -> RiskLevel:
    """Bucket an extended score: >=75 CRITICAL, >=50 HIGH, >=25 MEDIUM."""
    if total >= 75:
        return RiskLevel.CRITICAL
    if total >= 50:
        return RiskLevel.HIGH
    if total >= 25:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def role_modifier(user_role: RiskRole) -> int:
    """Risk reduction granted to privileged roles."""
    try:
        return ROLE_MODIFIERS.get(RiskRole(user_role), 0)
    except ValueError:
        return 0


def compute_risk(
    fields: Iterable[FieldGovernanceState],
    jurisdiction: Jurisdiction,
    user_role: RiskRole,
) -> RiskBreakdownFull:
    """
    Compute the multi-factor risk breakdown over a set of fields.

    Pure function of its inputs. The jurisdiction currently does not change
    any factor; it is part of the signature so callers recompute on change.

    Args:
        fields: Field governance states
        jurisdiction: Jurisdiction in effect
        user_role: Simulated user role

    Returns:
        RiskBreakdownFull with total clamped to 0-100
    """
    fields = list(fields)
    n = len(fields)
    if n == 0:
        return RiskBreakdownFull()

    sensitive = [f for f in fields if f.classification in SENSITIVE_CLASSES]
    highly_sensitive = [f for f in fields if f.classification == DataClassification.HIGHLY_SENSITIVE]
    needs_encryption = [f for f in fields if f.classification in ENCRYPT_REQUIRED_CLASSES]
    encrypted = [f for f in needs_encryption if f.is_encrypted]
    masked_full = [f for f in sensitive if f.masking_mode == MaskingMode.FULL]
    with_retention = [f for f in fields if f.retention_days > 0]
    ai_exposed = [f for f in highly_sensitive if f.allow_ai_processing or f.allow_model_training]

    pii_density = _round(len(sensitive) / n * PII_DENSITY_MAX)
    highly_sensitive_ratio = _round(len(highly_sensitive) / n * HIGHLY_SENSITIVE_MAX)

    enc_coverage = len(encrypted) / len(needs_encryption) if needs_encryption else 1.0
    encryption_coverage = _round((1 - enc_coverage) * ENCRYPTION_MAX)

    mask_coverage = len(masked_full) / len(sensitive) if sensitive else 1.0
    masking_coverage = _round((1 - mask_coverage) * MASKING_MAX)

    retention_compliance = _round((1 - len(with_retention) / n) * RETENTION_MAX)

    ai_exposure_penalty = min(len(ai_exposed) * AI_EXPOSURE_PER_FIELD, AI_EXPOSURE_MAX)
    modifier = role_modifier(user_role)

    raw = (
        pii_density
        + highly_sensitive_ratio
        + encryption_coverage
        + masking_coverage
        + retention_compliance
        + ai_exposure_penalty
        + modifier
    )
    total = max(0, min(100, raw))

    return RiskBreakdownFull(
        pii_density=pii_density,
        highly_sensitive_ratio=highly_sensitive_ratio,
        encryption_coverage=encryption_coverage,
        masking_coverage=masking_coverage,
        retention_compliance=retention_compliance,
        ai_exposure_penalty=ai_exposure_penalty,
        role_modifier=modifier,
        total=total,
        level=breakdown_level(total),
    )
