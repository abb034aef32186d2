"""Form state machine and governance session."""

from formguard.form.controller import (
    Compliance,
    FormEvent,
    FormPhase,
    FormState,
    GuardianForm,
    RegisterField,
    Reset,
    SetFieldValue,
    Submit,
    SubmitResult,
    SubmitStatus,
)
from formguard.form.session import BlockingFinding, GovernanceSession, SubmitGate

__all__ = [
    "GuardianForm",
    "FormState",
    "FormPhase",
    "Compliance",
    "SubmitResult",
    "SubmitStatus",
    "FormEvent",
    "RegisterField",
    "SetFieldValue",
    "Submit",
    "Reset",
    "GovernanceSession",
    "SubmitGate",
    "BlockingFinding",
]
