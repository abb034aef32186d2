"""Audit trail tracking and the governance event log."""

from formguard.audit.events import (
    DEFAULT_CAPACITY,
    EventLog,
    GovernanceAction,
    GovernanceEvent,
    generate_event_id,
    new_event,
)
from formguard.audit.trail import AuditAction, AuditMeta, AuditTrail, UserContext

__all__ = [
    "AuditAction",
    "AuditMeta",
    "AuditTrail",
    "UserContext",
    "GovernanceAction",
    "GovernanceEvent",
    "EventLog",
    "DEFAULT_CAPACITY",
    "new_event",
    "generate_event_id",
]
