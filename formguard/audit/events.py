"""Governance event records and the bounded event log."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from formguard.utils.serialization import dumps, loads

DEFAULT_CAPACITY = 50


class GovernanceAction(str, Enum):
    """Kinds of governance-relevant state changes."""

    FIELD_CHANGED = "FIELD_CHANGED"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    REMEDIATION = "REMEDIATION"
    BULK_ACTION = "BULK_ACTION"
    SUBMIT_BLOCKED = "SUBMIT_BLOCKED"
    APPROVAL_REQUESTED = "APPROVAL_REQUESTED"
    AUDIT_EXPORT = "AUDIT_EXPORT"


class GovernanceEvent(BaseModel):
    """Immutable audit event."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Event identifier")
    timestamp: str = Field(..., description="ISO-8601 UTC timestamp")
    action: GovernanceAction
    field_id: Optional[str] = None
    user_id: str
    region: str = ""
    ip: str = ""
    retention_period: str = ""
    details: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


def generate_event_id() -> str:
    """Short uppercase event id."""
    return uuid.uuid4().hex[:8].upper()


def new_event(
    action: GovernanceAction,
    user_id: str,
    field_id: Optional[str] = None,
    details: str = "",
    region: str = "",
    ip: str = "",
    retention_period: str = "",
) -> GovernanceEvent:
    """Create an event with a fresh id and the current timestamp."""
    return GovernanceEvent(
        id=generate_event_id(),
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=GovernanceAction(action),
        field_id=field_id,
        user_id=user_id,
        region=region,
        ip=ip,
        retention_period=retention_period,
        details=details,
    )


class EventLog:
    """Bounded ring buffer of governance events, newest first.

    Instances are immutable; `append` returns a new log and evicts the
    oldest entry once capacity is reached.
    """

    __slots__ = ("_events", "_capacity")

    def __init__(self, events: Tuple[GovernanceEvent, ...] = (), capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("EventLog capacity must be at least 1")
        self._capacity = capacity
        self._events = tuple(events)[:capacity]

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def events(self) -> List[GovernanceEvent]:
        """Events, newest first."""
        return list(self._events)

    def append(self, event: GovernanceEvent) -> "EventLog":
        """Return a new log with the event prepended."""
        return EventLog((event,) + self._events[: self._capacity - 1], self._capacity)

    def filter(
        self,
        action: Optional[GovernanceAction] = None,
        field_id: Optional[str] = None,
    ) -> List[GovernanceEvent]:
        """
        Get events with optional filters.

        Args:
            action: Filter by action
            field_id: Filter by field id

        Returns:
            Matching events, newest first
        """
        events = list(self._events)
        if action:
            events = [e for e in events if e.action == action]
        if field_id:
            events = [e for e in events if e.field_id == field_id]
        return events

    def export(self) -> List[Dict[str, Any]]:
        """Export all held events as dictionaries."""
        return [event.to_dict() for event in self._events]

    def to_json(self, pretty: bool = True) -> str:
        """Serialize the full log to JSON."""
        return dumps(self.export(), pretty=pretty)

    @classmethod
    def from_json(cls, data: str, capacity: int = DEFAULT_CAPACITY) -> "EventLog":
        """Rebuild a log from `to_json` output."""
        return cls(tuple(GovernanceEvent.model_validate(item) for item in loads(data)), capacity)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[GovernanceEvent]:
        return iter(self._events)

    def __eq__(self, other) -> bool:
        if not isinstance(other, EventLog):
            return NotImplemented
        return self._events == other._events

    def __repr__(self) -> str:
        return f"EventLog(len={len(self._events)}, capacity={self._capacity})"
