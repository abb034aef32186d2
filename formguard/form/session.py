"""Governance session: per-field governance state, derived violations and risk."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from formguard.audit.events import EventLog, GovernanceAction, GovernanceEvent, new_event
from formguard.config import GovernanceConfig, PolicyMode
from formguard.errors import ImmutableFieldError, RemediationDisabledError, UnknownFieldError
from formguard.governance.classification import DataClassification
from formguard.governance.fields import (
    ApprovalStatus,
    ApproverRole,
    FieldGovernanceState,
    create_default_governance,
)
from formguard.governance.remediation import (
    RemediationResult,
    apply_full_masking,
    apply_remediation,
    encrypt_all_sensitive,
    remediate_all,
)
from formguard.policy.jurisdiction import active_frameworks, compute_field_violations
from formguard.policy.rules import FieldViolation, Severity
from formguard.risk.breakdown import RiskBreakdownFull, compute_risk
from formguard.utils.logging import get_logger

logger = get_logger("governance")

FIELD_CHANGE_RETENTION = "90 days"
REMEDIATION_RETENTION = "365 days"
EXPORT_RETENTION = "7 years"


@dataclass(frozen=True)
class BlockingFinding:
    """A BLOCK violation attributed to a field."""

    field_id: str
    rule_id: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"field_id": self.field_id, "rule_id": self.rule_id, "message": self.message}


@dataclass(frozen=True)
class SubmitGate:
    """Why a governed form may or may not be submitted.

    Blocking violations ("fix the data") and pending approvals ("get
    sign-off") are reported separately.
    """

    policy_mode: PolicyMode
    blocking_violations: List[BlockingFinding] = field(default_factory=list)
    pending_approvals: List[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        if self.policy_mode != PolicyMode.ENFORCE:
            return True
        return not self.blocking_violations and not self.pending_approvals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "policy_mode": self.policy_mode.value,
            "blocking_violations": [b.to_dict() for b in self.blocking_violations],
            "pending_approvals": list(self.pending_approvals),
        }


class GovernanceSession:
    """Owns the governance state of one form session.

    Field states are immutable values replaced on every mutation. Violations,
    risk and submit eligibility are recomputed from the current states on
    every read, so they always reflect the latest field set, jurisdiction and
    role.
    """

    def __init__(
        self,
        config: Optional[GovernanceConfig] = None,
        initial_fields: Iterable[Tuple[str, DataClassification, str]] = (),
        event_log: Optional[EventLog] = None,
    ):
        """
        Initialize a governance session.

        Args:
            config: Session configuration (defaults to GovernanceConfig())
            initial_fields: (field_id, classification, label) tuples
            event_log: Existing event log to continue appending to
        """
        self.config = config or GovernanceConfig()
        self._fields: Dict[str, FieldGovernanceState] = {}
        self._event_log = event_log if event_log is not None else EventLog()
        self._last_score: Optional[int] = None

        for field_id, classification, label in initial_fields:
            self._fields[field_id] = create_default_governance(field_id, classification, label)

        self._notify_risk()

    @classmethod
    def from_fields(
        cls,
        states: Iterable[FieldGovernanceState],
        config: Optional[GovernanceConfig] = None,
    ) -> "GovernanceSession":
        """Create a session from existing field states, without recording events."""
        session = cls(config)
        for state in states:
            session._fields[state.field_id] = state
        session._notify_risk()
        return session

    # Field set

    @property
    def fields(self) -> Dict[str, FieldGovernanceState]:
        """Current field states (copy)."""
        return dict(self._fields)

    def get_field(self, field_id: str) -> FieldGovernanceState:
        """Get a field's state or raise UnknownFieldError."""
        try:
            return self._fields[field_id]
        except KeyError:
            raise UnknownFieldError(field_id, list(self._fields)) from None

    def register_field(
        self,
        field_id: str,
        classification: DataClassification,
        label: str,
    ) -> FieldGovernanceState:
        """
        Register a field with default governance.

        Re-registering an id replaces its state with defaults; the caller is
        responsible for re-applying any overrides.

        Raises:
            ImmutableFieldError: If the id is registered with another classification
        """
        classification = DataClassification(classification)
        existing = self._fields.get(field_id)
        if existing is not None and existing.classification != classification:
            raise ImmutableFieldError(field_id, ["classification"])

        state = create_default_governance(field_id, classification, label)
        self._fields[field_id] = state
        logger.debug("Registered field %s (%s)", field_id, classification.value)
        self._notify_risk()
        return state

    # Derived state

    def violations(self, field_id: Optional[str] = None) -> Dict[str, List[FieldViolation]]:
        """Violations per field, derived from current state and jurisdiction."""
        if field_id is not None:
            return {field_id: compute_field_violations(self.get_field(field_id), self.config.jurisdiction)}
        return {
            fid: compute_field_violations(state, self.config.jurisdiction)
            for fid, state in self._fields.items()
        }

    @property
    def risk(self) -> RiskBreakdownFull:
        return compute_risk(self._fields.values(), self.config.jurisdiction, self.config.user_sim_role)

    @property
    def risk_score(self) -> int:
        return self.risk.total

    @property
    def gate(self) -> SubmitGate:
        """Blocking violations and pending approvals for the current state."""
        blocking = [
            BlockingFinding(field_id=fid, rule_id=v.rule_id, message=v.message)
            for fid, violations in self.violations().items()
            for v in violations
            if v.severity == Severity.BLOCK
        ]
        pending = [
            fid
            for fid, state in self._fields.items()
            if state.classification == DataClassification.HIGHLY_SENSITIVE
            and state.approval_status != ApprovalStatus.APPROVED
        ]
        return SubmitGate(
            policy_mode=self.config.policy_mode,
            blocking_violations=blocking,
            pending_approvals=pending,
        )

    @property
    def can_submit(self) -> bool:
        return self.gate.allowed

    # Event log

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def audit_log(self) -> List[GovernanceEvent]:
        """Events, newest first."""
        return self._event_log.events

    def emit_event(
        self,
        action: GovernanceAction,
        field_id: Optional[str] = None,
        details: str = "",
        retention_period: str = "",
    ) -> GovernanceEvent:
        """Append an event to the log and notify the audit sink."""
        event = new_event(
            action,
            user_id=self.config.user_id,
            field_id=field_id,
            details=details,
            region=self.config.region,
            ip=self.config.ip,
            retention_period=retention_period,
        )
        self._event_log = self._event_log.append(event)
        if self.config.on_audit_event:
            self.config.on_audit_event(event)
        return event

    def export_audit_log(self) -> str:
        """Serialize the full event log to JSON."""
        return self._event_log.to_json()

    # Mutations

    def update_field(self, field_id: str, patch: Mapping[str, Any]) -> FieldGovernanceState:
        """
        Apply a governance patch to a field.

        Args:
            field_id: Field to update
            patch: Attribute name -> new value

        Returns:
            The new field state
        """
        state = self.get_field(field_id).apply(patch)
        self._fields[field_id] = state
        self.emit_event(
            GovernanceAction.FIELD_CHANGED,
            field_id=field_id,
            details=f'Governance setting updated for field "{field_id}"',
            retention_period=FIELD_CHANGE_RETENTION,
        )
        self._notify_risk()
        return state

    def auto_remediate(self, field_id: str) -> RemediationResult:
        """
        Apply auto-remediation to one field.

        Returns:
            RemediationResult listing the applied attributes and the number
            of fixable violations the field had before remediation
        """
        self._require_remediation()
        state = self.get_field(field_id)
        cleared = sum(1 for v in compute_field_violations(state, self.config.jurisdiction) if v.fixable)
        patch = apply_remediation(state)
        applied = [key for key in patch if key != "is_remediated"]

        self._fields[field_id] = state.apply(patch)
        if self.config.on_auto_remediation:
            self.config.on_auto_remediation(field_id)
        self.emit_event(
            GovernanceAction.REMEDIATION,
            field_id=field_id,
            details=f"Auto-remediation applied: {', '.join(applied)}",
            retention_period=REMEDIATION_RETENTION,
        )
        logger.info("Remediated field %s: %s", field_id, applied or "no changes")
        self._notify_risk()
        return RemediationResult(field_id=field_id, applied=applied, violations_cleared=cleared)

    def fix_violation(self, field_id: str, rule_id: str) -> RemediationResult:
        """Remediate a field on behalf of one of its fixable violations."""
        result = self.auto_remediate(field_id)
        if self.config.on_policy_violation:
            self.config.on_policy_violation(field_id, rule_id)
        return result

    def remediate_all(self) -> None:
        """Apply auto-remediation to every field."""
        self._require_remediation()
        self._fields = remediate_all(self._fields)
        self.emit_event(
            GovernanceAction.BULK_ACTION,
            details="Bulk remediation applied to all fields",
            retention_period=REMEDIATION_RETENTION,
        )
        if self.config.on_auto_remediation:
            for field_id in self._fields:
                self.config.on_auto_remediation(field_id)
        self._notify_risk()

    def encrypt_all_sensitive(self) -> None:
        """Enable encryption on all FINANCIAL and HIGHLY_SENSITIVE fields."""
        self._fields = encrypt_all_sensitive(self._fields)
        self.emit_event(
            GovernanceAction.BULK_ACTION,
            details="Enabled encryption for all sensitive fields",
            retention_period=REMEDIATION_RETENTION,
        )
        self._notify_risk()

    def apply_full_masking(self) -> None:
        """Apply full masking to all HIGHLY_SENSITIVE fields."""
        self._fields = apply_full_masking(self._fields)
        self.emit_event(
            GovernanceAction.BULK_ACTION,
            details="Applied full masking to all HIGHLY_SENSITIVE fields",
            retention_period=REMEDIATION_RETENTION,
        )
        self._notify_risk()

    def request_approval(self, field_id: str) -> GovernanceEvent:
        """Record an approval request for a field and notify the approver hook."""
        state = self.get_field(field_id)
        event = self.emit_event(
            GovernanceAction.APPROVAL_REQUESTED,
            field_id=field_id,
            details=f'Approval requested from {state.approver_role.value} for field "{field_id}"',
            retention_period=EXPORT_RETENTION,
        )
        if self.config.on_approval_requested:
            self.config.on_approval_requested(field_id)
        return event

    def set_approval(
        self,
        field_id: str,
        status: ApprovalStatus,
        approver_role: Optional[ApproverRole] = None,
    ) -> FieldGovernanceState:
        """Record an approval decision on a field."""
        patch: Dict[str, Any] = {"approval_status": ApprovalStatus(status)}
        if approver_role is not None:
            patch["approver_role"] = ApproverRole(approver_role)
        return self.update_field(field_id, patch)

    def attempt_submit(self) -> SubmitGate:
        """
        Check submit eligibility, recording a SUBMIT_BLOCKED event if blocked.

        Returns:
            SubmitGate for the current state
        """
        gate = self.gate
        if not gate.allowed:
            reasons = [f"{b.field_id}:{b.rule_id}" for b in gate.blocking_violations]
            reasons += [f"{fid}:approval-{self._fields[fid].approval_status.value}" for fid in gate.pending_approvals]
            self.emit_event(
                GovernanceAction.SUBMIT_BLOCKED,
                details=f"Submission blocked: {', '.join(reasons)}",
                retention_period=EXPORT_RETENTION,
            )
            if self.config.on_policy_violation:
                for finding in gate.blocking_violations:
                    self.config.on_policy_violation(finding.field_id, finding.rule_id)
            logger.warning("Submission blocked by %d violations and %d pending approvals",
                           len(gate.blocking_violations), len(gate.pending_approvals))
        return gate

    def compliance_report(self) -> Dict[str, Any]:
        """
        Build a compliance report of the current governance state.

        Records an AUDIT_EXPORT event.
        """
        violations = self.violations()
        risk = self.risk
        report = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "jurisdiction": self.config.jurisdiction.value,
            "frameworks": active_frameworks(self.config.jurisdiction),
            "policy_mode": self.config.policy_mode.value,
            "user_role": self.config.user_sim_role.value,
            "risk_score": risk.total,
            "risk": risk.to_dict() if self.config.show_risk_breakdown else {"total": risk.total, "level": risk.level.value},
            "can_submit": self.can_submit,
            "fields": [
                {
                    "field_id": state.field_id,
                    "classification": state.classification.value,
                    "encryption_at_rest": state.encryption_at_rest,
                    "encryption_in_transit": state.encryption_in_transit,
                    "masking_mode": state.masking_mode.value,
                    "retention_days": state.retention_days,
                    "approval_status": state.approval_status.value,
                    "violations": [v.to_dict() for v in violations[fid]],
                }
                for fid, state in self._fields.items()
            ],
        }
        self.emit_event(
            GovernanceAction.AUDIT_EXPORT,
            details="Compliance report exported",
            retention_period=EXPORT_RETENTION,
        )
        return report

    # Internals

    def _require_remediation(self) -> None:
        if not self.config.auto_remediation:
            raise RemediationDisabledError(
                "Auto-remediation is disabled for this session",
                suggestions=["Set auto_remediation=True in GovernanceConfig"],
            )

    def _notify_risk(self) -> None:
        risk = self.risk
        if risk.total != self._last_score:
            self._last_score = risk.total
            logger.debug("Risk score changed to %d (%s)", risk.total, risk.level.value)
            if self.config.on_risk_score_change:
                self.config.on_risk_score_change(risk.total, risk)
