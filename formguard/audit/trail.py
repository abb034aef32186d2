"""Session audit trail of touched fields and classifications."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Tuple

from formguard.governance.classification import DataClassification


class AuditAction(str, Enum):
    """Actions recorded in audit metadata."""

    CHANGE = "CHANGE"
    SUBMIT = "SUBMIT"
    VIEW = "VIEW"


@dataclass(frozen=True)
class UserContext:
    """User the form session is attributed to."""

    user_id: str
    role: str | None = None


@dataclass(frozen=True)
class AuditMeta:
    """Immutable snapshot of audit tracking at a point in time."""

    user_id: str
    timestamp: str
    fields_touched: Tuple[str, ...]
    classification_levels: Tuple[DataClassification, ...]
    action: AuditAction

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "timestamp": self.timestamp,
            "fields_touched": list(self.fields_touched),
            "classification_levels": [c.value for c in self.classification_levels],
            "action": self.action.value,
        }


@dataclass(frozen=True)
class AuditTrail:
    """Tracks field interactions for a session.

    The trail is a value: `track` and `reset` return new trails and the
    caller keeps whichever one is current.
    """

    user: UserContext
    touched_fields: FrozenSet[str] = field(default_factory=frozenset)
    classifications: FrozenSet[DataClassification] = field(default_factory=frozenset)

    def track(self, field_name: str, classification: DataClassification) -> "AuditTrail":
        """Record a field interaction."""
        return replace(
            self,
            touched_fields=self.touched_fields | {field_name},
            classifications=self.classifications | {DataClassification(classification)},
        )

    def generate_meta(self, action: AuditAction) -> AuditMeta:
        """
        Snapshot tracking for an action.

        Does not clear tracking.

        Args:
            action: Audit action being recorded

        Returns:
            AuditMeta with sorted fields and classifications ordered by sensitivity
        """
        return AuditMeta(
            user_id=self.user.user_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            fields_touched=tuple(sorted(self.touched_fields)),
            classification_levels=tuple(sorted(self.classifications)),
            action=AuditAction(action),
        )

    def reset(self) -> "AuditTrail":
        """Clear tracked fields and classifications."""
        return AuditTrail(user=self.user)
