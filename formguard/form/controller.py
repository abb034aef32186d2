"""Headless form controller with field-level governance.

`GuardianForm` is the form state machine: fields register their governance
metadata, value changes trigger validation, policy evaluation and risk
scoring, and submission is gated on validation errors, BLOCK violations and
(when a GovernanceSession is attached) approvals.

States move Idle -> Validating -> Compliant | Blocked -> Submitting ->
Idle | Blocked. Every transition produces a new immutable FormState and
notifies subscribers.
"""

import inspect
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from formguard.audit.trail import AuditAction, AuditMeta, AuditTrail, UserContext
from formguard.config import PolicyMode
from formguard.errors import ValidatorError
from formguard.form.session import GovernanceSession, SubmitGate
from formguard.governance.fields import FieldMetadata
from formguard.policy.engine import PolicyEngine, blocking_violations, is_compliant
from formguard.policy.rules import PolicyRule, PolicyViolation
from formguard.risk.scoring import RiskScore, calculate_risk_score
from formguard.utils.logging import get_logger, log_error, log_warning

logger = get_logger("form")

Errors = Dict[str, str]
Validator = Callable[[Mapping[str, Any]], Union[Mapping[str, str], Awaitable[Mapping[str, str]]]]
SubmitHandler = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]
Listener = Callable[["FormState"], None]


class FormPhase(str, Enum):
    """State machine phase."""

    IDLE = "idle"
    VALIDATING = "validating"
    COMPLIANT = "compliant"
    BLOCKED = "blocked"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class Compliance:
    """Policy evaluation result."""

    violations: List[PolicyViolation] = field(default_factory=list)
    is_compliant: bool = True


@dataclass(frozen=True)
class FormState:
    """Snapshot of everything an observer needs to render the form."""

    values: Dict[str, Any]
    errors: Errors = field(default_factory=dict)
    touched: Dict[str, bool] = field(default_factory=dict)
    is_submitting: bool = False
    is_validating: bool = False
    compliance: Compliance = field(default_factory=Compliance)
    risk: RiskScore = field(default_factory=RiskScore)
    metadata: Dict[str, FieldMetadata] = field(default_factory=dict)
    audit_trail: Optional[AuditTrail] = None
    phase: FormPhase = FormPhase.IDLE


class SubmitStatus(str, Enum):
    """Outcome of a submit attempt."""

    SUBMITTED = "submitted"
    BLOCKED = "blocked"
    REJECTED = "rejected"  # another submit was in progress


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of handle_submit, with the reasons when blocked."""

    status: SubmitStatus
    errors: Errors = field(default_factory=dict)
    blocking_violations: List[PolicyViolation] = field(default_factory=list)
    gate: Optional[SubmitGate] = None
    audit_meta: Optional[AuditMeta] = None

    @property
    def submitted(self) -> bool:
        return self.status == SubmitStatus.SUBMITTED

    @property
    def blocking_rule_ids(self) -> List[str]:
        """Rule ids responsible for a block, in emission order without duplicates."""
        ids = [v.rule_id for v in self.blocking_violations]
        if self.gate is not None:
            ids += [b.rule_id for b in self.gate.blocking_violations]
        return list(dict.fromkeys(ids))

    @property
    def blocking_fields(self) -> List[str]:
        """Fields responsible for a block: errors, violations, pending approvals."""
        names = list(self.errors)
        names += [v.field for v in self.blocking_violations if v.field]
        if self.gate is not None:
            names += [b.field_id for b in self.gate.blocking_violations]
            names += self.gate.pending_approvals
        return list(dict.fromkeys(names))


# Dispatchable events


@dataclass(frozen=True)
class RegisterField:
    name: str
    meta: FieldMetadata


@dataclass(frozen=True)
class SetFieldValue:
    name: str
    value: Any


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Reset:
    pass


FormEvent = Union[RegisterField, SetFieldValue, Submit, Reset]


@dataclass(frozen=True)
class _Evaluation:
    token: int
    errors: Errors
    violations: List[PolicyViolation]
    risk: RiskScore


class GuardianForm:
    """Form controller enforcing field-level governance.

    Single-writer: all mutations are expected to run on one event loop.
    Validation results that arrive after a newer validation was requested
    are discarded.
    """

    def __init__(
        self,
        initial_values: Mapping[str, Any],
        on_submit: SubmitHandler,
        policies: Optional[List[PolicyRule]] = None,
        user: Optional[UserContext] = None,
        validate: Optional[Validator] = None,
        on_audit: Optional[Callable[[AuditMeta], None]] = None,
        policy_mode: PolicyMode = PolicyMode.ENFORCE,
        governance: Optional[GovernanceSession] = None,
    ):
        """
        Initialize form controller.

        Args:
            initial_values: Values restored on reset
            on_submit: Called with the values on a successful submit (sync or async)
            policies: Policy rules to evaluate
            user: User audit metadata is attributed to
            validate: Optional validator returning field -> error message (sync or async)
            on_audit: Audit sink called after each tracked mutation
            policy_mode: Whether BLOCK violations block submission
            governance: Optional governance session whose approval gate also applies
        """
        self._initial_values = dict(initial_values)
        self._on_submit = on_submit
        self._validate = validate
        self._on_audit = on_audit
        self.policy_mode = PolicyMode(policy_mode)
        self.governance = governance
        self.engine = PolicyEngine(policies)

        self._listeners: List[Listener] = []
        self._validation_token = 0
        self._pending_validations = 0
        self._submit_in_flight = False
        self._state = FormState(
            values=dict(initial_values),
            audit_trail=AuditTrail(user=user or UserContext(user_id="anonymous")),
        )

    # Observation

    @property
    def state(self) -> FormState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the new state on every transition.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes: Any) -> FormState:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                log_error(logger, "Form state listener failed", e)
        return self._state

    # Transitions

    def register_field(self, name: str, meta: FieldMetadata) -> FormState:
        """Register (or replace) a field's governance metadata."""
        return self._set_state(metadata={**self._state.metadata, name: meta})

    async def set_field_value(self, name: str, value: Any) -> FormState:
        """
        Update a field value and re-evaluate governance.

        Args:
            name: Field name
            value: New value

        Returns:
            State after evaluation (or after the value update if the
            evaluation was superseded by a newer one)
        """
        values = {**self._state.values, name: value}
        trail = self._state.audit_trail
        meta = self._state.metadata.get(name)

        if meta is not None:
            trail = trail.track(name, meta.classification)

        self._set_state(
            values=values,
            touched={**self._state.touched, name: True},
            audit_trail=trail,
        )
        if meta is not None and self._on_audit:
            self._on_audit(trail.generate_meta(AuditAction.CHANGE))

        try:
            evaluation = await self._evaluate(values)
        except Exception:
            self._set_state(phase=self._settled_phase(self._state.errors, self._state.compliance.is_compliant))
            raise

        if not self._is_latest(evaluation):
            log_warning(logger, "Discarding stale validation result", {"field": name, "token": evaluation.token})
            if not self._state.is_validating and self._state.phase == FormPhase.VALIDATING:
                self._set_state(phase=self._settled_phase(self._state.errors, self._state.compliance.is_compliant))
            return self._state

        return self._commit(evaluation)

    async def handle_submit(self) -> SubmitResult:
        """
        Validate and submit the current values.

        Submission is rejected, not queued, while another submit is running,
        including one whose form was reset while on_submit was pending.

        Returns:
            SubmitResult; when blocked it lists the errors, BLOCK violations
            and governance gate responsible
        """
        if self._submit_in_flight:
            log_warning(logger, "Submit rejected: submission already in progress")
            return SubmitResult(status=SubmitStatus.REJECTED)

        values = dict(self._state.values)
        self._submit_in_flight = True
        self._set_state(is_submitting=True, phase=FormPhase.SUBMITTING)
        try:
            evaluation = await self._evaluate(values)
            blocking = blocking_violations(evaluation.violations) if self.policy_mode == PolicyMode.ENFORCE else []
            gate = self.governance.attempt_submit() if self.governance is not None else None

            if evaluation.errors or blocking or (gate is not None and not gate.allowed):
                if self._is_latest(evaluation):
                    self._commit(evaluation, phase=FormPhase.BLOCKED)
                else:
                    self._set_state(phase=FormPhase.BLOCKED)
                logger.warning(
                    "Submit blocked: %d errors, rules %s",
                    len(evaluation.errors),
                    [v.rule_id for v in blocking],
                )
                return SubmitResult(
                    status=SubmitStatus.BLOCKED,
                    errors=evaluation.errors,
                    blocking_violations=blocking,
                    gate=gate,
                )

            if self._is_latest(evaluation):
                self._commit(evaluation, phase=FormPhase.SUBMITTING)

            audit_meta = self._state.audit_trail.generate_meta(AuditAction.SUBMIT)
            if self._on_audit:
                self._on_audit(audit_meta)

            result = self._on_submit(values)
            if inspect.isawaitable(result):
                await result

            logger.info("Form submitted with %d fields", len(values))
            self._set_state(phase=FormPhase.IDLE)
            return SubmitResult(status=SubmitStatus.SUBMITTED, gate=gate, audit_meta=audit_meta)
        finally:
            self._submit_in_flight = False
            changes: Dict[str, Any] = {"is_submitting": False}
            if self._state.phase == FormPhase.SUBMITTING:
                changes["phase"] = FormPhase.IDLE
            self._set_state(**changes)

    def reset_form(self) -> FormState:
        """
        Restore initial values and clear errors, touched and submitting.

        Clears the audit trail's tracked fields; pending validations are
        invalidated. A submit whose on_submit is still running keeps
        rejecting new submits until it finishes.
        """
        self._validation_token += 1
        values = dict(self._initial_values)
        violations = self.engine.evaluate(values, self._state.metadata)
        return self._set_state(
            values=values,
            errors={},
            touched={},
            is_submitting=False,
            compliance=Compliance(violations=violations, is_compliant=is_compliant(violations)),
            risk=calculate_risk_score(values, self._state.metadata, {}),
            audit_trail=self._state.audit_trail.reset(),
            phase=FormPhase.IDLE,
        )

    async def dispatch(self, event: FormEvent) -> FormState:
        """Apply an event and return the resulting state."""
        if isinstance(event, RegisterField):
            return self.register_field(event.name, event.meta)
        if isinstance(event, SetFieldValue):
            return await self.set_field_value(event.name, event.value)
        if isinstance(event, Submit):
            await self.handle_submit()
            return self._state
        if isinstance(event, Reset):
            return self.reset_form()
        raise TypeError(f"Unknown form event: {event!r}")

    # Internals

    async def _evaluate(self, values: Dict[str, Any]) -> _Evaluation:
        self._validation_token += 1
        token = self._validation_token
        self._pending_validations += 1
        self._set_state(
            is_validating=True,
            phase=self._state.phase if self._state.is_submitting else FormPhase.VALIDATING,
        )

        try:
            errors = await self._run_validator(values)
        finally:
            self._pending_validations -= 1
            self._set_state(is_validating=self._pending_validations > 0)

        metadata = self._state.metadata
        violations = self.engine.evaluate(values, metadata)
        risk = calculate_risk_score(values, metadata, errors)
        return _Evaluation(token=token, errors=errors, violations=violations, risk=risk)

    async def _run_validator(self, values: Dict[str, Any]) -> Errors:
        if self._validate is None:
            return {}
        try:
            result = self._validate(values)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            log_error(logger, "Validator failed", e)
            raise ValidatorError(f"Validation failed: {type(e).__name__}: {e}") from e
        return {name: message for name, message in (result or {}).items() if message}

    def _is_latest(self, evaluation: _Evaluation) -> bool:
        return evaluation.token == self._validation_token

    def _settled_phase(self, errors: Errors, compliant: bool) -> FormPhase:
        blocks = not compliant and self.policy_mode == PolicyMode.ENFORCE
        return FormPhase.BLOCKED if errors or blocks else FormPhase.COMPLIANT

    def _commit(self, evaluation: _Evaluation, phase: Optional[FormPhase] = None) -> FormState:
        compliant = is_compliant(evaluation.violations)
        if phase is None:
            phase = self._settled_phase(evaluation.errors, compliant)
            if self._state.is_validating:
                phase = FormPhase.VALIDATING
            if self._state.is_submitting:
                phase = FormPhase.SUBMITTING
        return self._set_state(
            errors=evaluation.errors,
            compliance=Compliance(violations=evaluation.violations, is_compliant=compliant),
            risk=evaluation.risk,
            phase=phase,
        )
