"""Session-scoped governance configuration."""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from formguard.errors import ConfigError
from formguard.policy.jurisdiction import Jurisdiction
from formguard.risk.breakdown import RiskRole


class PolicyMode(str, Enum):
    """How BLOCK violations affect submission."""

    WARN = "warn"  # BLOCK violations are informational
    ENFORCE = "enforce"  # BLOCK violations and pending approvals block submission
    SIMULATE = "simulate"  # Evaluate and report only


class GovernanceConfig(BaseModel):
    """Configuration fixed at session start; read-only thereafter."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    policy_mode: PolicyMode = Field(default=PolicyMode.ENFORCE, description="Policy enforcement mode")
    jurisdiction: Jurisdiction = Field(default=Jurisdiction.US, description="Jurisdiction rule table")
    user_sim_role: RiskRole = Field(default=RiskRole.VIEWER, description="Simulated user role")
    auto_remediation: bool = Field(default=True, description="Allow automated remediation")
    show_risk_breakdown: bool = Field(default=True, description="Expose the full risk breakdown")
    user_id: str = Field(default="anonymous", description="User events are attributed to")
    region: str = Field(default="us-east-1", description="Region recorded on audit events")
    ip: str = Field(default="", description="Client address recorded on audit events")

    # Callbacks, invoked synchronously after the mutation they describe
    on_policy_violation: Optional[Callable[[str, str], None]] = None
    on_auto_remediation: Optional[Callable[[str], None]] = None
    on_risk_score_change: Optional[Callable[[int, Any], None]] = None
    on_approval_requested: Optional[Callable[[str], None]] = None
    on_audit_event: Optional[Callable[[Any], None]] = None

    @property
    def enforcing(self) -> bool:
        return self.policy_mode == PolicyMode.ENFORCE


def load_config(path: Union[str, Path], **callbacks: Any) -> GovernanceConfig:
    """
    Load a governance configuration from a JSON or YAML file.

    Args:
        path: Path to .json, .yaml or .yml file
        **callbacks: Callback fields to set on the config (not serializable)

    Returns:
        GovernanceConfig

    Raises:
        ConfigError: If the file cannot be read or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "r") as f:
            if path.suffix in (".yaml", ".yml"):
                data: Dict[str, Any] = yaml.safe_load(f) or {}
            elif path.suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigError(
                    f"Unsupported config format: {path.suffix}",
                    suggestions=["Use a .json, .yaml or .yml file"],
                )
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping, got {type(data).__name__}")

    try:
        return GovernanceConfig(**data, **callbacks)
    except ValidationError as e:
        raise ConfigError(f"Invalid governance config in {path}", context={"errors": e.errors()}) from e
