"""Exception types raised by formguard.

Domain findings (validation errors, policy violations, a blocked submit) are
returned as values. The exceptions here cover programming errors and misuse.
"""

from typing import Any, Dict, List, Optional


class FormGuardError(Exception):
    """Base class for formguard errors."""

    error_type = "FormGuardError"

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "context": self.context,
            "suggestions": self.suggestions,
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.suggestions:
            parts.append("Suggestions:")
            for suggestion in self.suggestions:
                parts.append(f"  - {suggestion}")
        return "\n".join(parts)


class RuleEvaluationError(FormGuardError):
    """A policy rule raised while being evaluated."""

    error_type = "RuleEvaluationError"

    def __init__(self, rule_id: str, field: Optional[str], cause: Exception):
        location = f" on field '{field}'" if field else ""
        super().__init__(
            f"Policy rule '{rule_id}' failed{location}: {type(cause).__name__}: {cause}",
            context={"rule_id": rule_id, "field": field},
            suggestions=[f"Check rule '{rule_id}' implementation; rules must return None to skip"],
        )
        self.rule_id = rule_id
        self.field = field
        self.cause = cause


class ValidatorError(FormGuardError):
    """The caller-supplied validate function raised."""

    error_type = "ValidatorError"


class ImmutableFieldError(FormGuardError):
    """Attempt to change a field attribute fixed at registration."""

    error_type = "ImmutableFieldError"

    def __init__(self, field_id: str, attributes: List[str]):
        super().__init__(
            f"Cannot change {', '.join(sorted(attributes))} of field '{field_id}' after registration",
            context={"field_id": field_id, "attributes": sorted(attributes)},
        )
        self.field_id = field_id
        self.attributes = sorted(attributes)


class UnknownFieldError(FormGuardError, KeyError):
    """Operation refers to a field that was never registered."""

    error_type = "UnknownFieldError"

    def __init__(self, field_id: str, available: Optional[List[str]] = None):
        suggestions = []
        if available:
            suggestions.append(f"Available fields: {sorted(available)}")
        super().__init__(
            f"Field '{field_id}' is not registered",
            context={"field_id": field_id},
            suggestions=suggestions,
        )
        self.field_id = field_id

    def __str__(self) -> str:
        return FormGuardError.__str__(self)


class RemediationDisabledError(FormGuardError):
    """Auto-remediation requested while disabled in the session config."""

    error_type = "RemediationDisabledError"


class ConfigError(FormGuardError):
    """Governance configuration could not be loaded or validated."""

    error_type = "ConfigError"


class PersistenceError(FormGuardError):
    """Persisted session data could not be read back."""

    error_type = "PersistenceError"
