"""Risk scoring: basic weighted score and extended multi-factor breakdown."""

from formguard.risk.breakdown import RiskBreakdownFull, RiskRole, breakdown_level, compute_risk
from formguard.risk.scoring import (
    CLASSIFICATION_WEIGHTS,
    RiskBreakdown,
    RiskLevel,
    RiskScore,
    calculate_risk_score,
    score_level,
)

__all__ = [
    "RiskLevel",
    "RiskScore",
    "RiskBreakdown",
    "CLASSIFICATION_WEIGHTS",
    "calculate_risk_score",
    "score_level",
    "RiskRole",
    "RiskBreakdownFull",
    "compute_risk",
    "breakdown_level",
]
