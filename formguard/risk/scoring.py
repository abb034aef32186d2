"""Real-time risk scoring over registered form fields."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping

from formguard.governance.classification import DataClassification, is_pii
from formguard.governance.fields import FieldMetadata
from formguard.utils.logging import get_logger

logger = get_logger("risk")


class RiskLevel(str, Enum):
    """Risk level buckets."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"  # extended model only


CLASSIFICATION_WEIGHTS: Dict[DataClassification, int] = {
    DataClassification.HIGHLY_SENSITIVE: 40,
    DataClassification.FINANCIAL: 30,
    DataClassification.PERSONAL: 20,
    DataClassification.INTERNAL: 5,
    DataClassification.PUBLIC: 0,
}

VALIDATION_PENALTY = 10
FREE_TEXT_PENALTY = 15
FREE_TEXT_THRESHOLD = 50  # characters

MEDIUM_THRESHOLD = 30
HIGH_THRESHOLD = 70


@dataclass(frozen=True)
class RiskBreakdown:
    """Contribution of each heuristic to the basic score."""

    pii_weight: int = 0
    validation_penalty: int = 0
    free_text_penalty: int = 0


@dataclass(frozen=True)
class RiskScore:
    """Basic risk score result."""

    score: int = 0  # 0-100
    level: RiskLevel = RiskLevel.LOW
    blocking: bool = False
    breakdown: RiskBreakdown = field(default_factory=RiskBreakdown)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "level": self.level.value,
            "blocking": self.blocking,
            "breakdown": asdict(self.breakdown),
        }


def _has_value(value: Any) -> bool:
    return value is not None and len(str(value).strip()) > 0


def score_level(score: int) -> RiskLevel:
    """Bucket a basic score: <30 LOW, 30-69 MEDIUM, >=70 HIGH."""
    if score >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def calculate_risk_score(
    values: Mapping[str, Any],
    metadata: Mapping[str, FieldMetadata],
    errors: Mapping[str, str],
) -> RiskScore:
    """
    Calculate the real-time risk score of a form.

    For each registered field with a value, adds its classification weight;
    adds a penalty per field with a validation error; adds a free-text
    penalty for long string values in non-PUBLIC fields.

    Args:
        values: Field name -> current value
        metadata: Field name -> registered metadata
        errors: Field name -> validation error message

    Returns:
        RiskScore clamped to 0-100
    """
    if not metadata:
        return RiskScore()

    classification_weight = 0
    pii_weight = 0
    validation_penalty = 0
    free_text_penalty = 0

    for name, meta in metadata.items():
        value = values.get(name)
        has_value = _has_value(value)

        if has_value:
            weight = CLASSIFICATION_WEIGHTS[meta.classification]
            classification_weight += weight
            if is_pii(meta.classification):
                pii_weight += weight

        if errors.get(name):
            validation_penalty += VALIDATION_PENALTY

        if (
            has_value
            and isinstance(value, str)
            and len(value) > FREE_TEXT_THRESHOLD
            and meta.classification != DataClassification.PUBLIC
        ):
            free_text_penalty += FREE_TEXT_PENALTY

    raw_score = classification_weight + validation_penalty + free_text_penalty
    score = min(100, max(0, raw_score))
    level = score_level(score)

    logger.debug("Risk score %d (%s) over %d fields", score, level.value, len(metadata))

    return RiskScore(
        score=score,
        level=level,
        blocking=level == RiskLevel.HIGH,
        breakdown=RiskBreakdown(
            pii_weight=min(100, pii_weight),
            validation_penalty=min(100, validation_penalty),
            free_text_penalty=min(100, free_text_penalty),
        ),
    )
