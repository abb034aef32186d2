"""Policy rule definitions and built-in compliance rules."""

import functools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from formguard.governance.classification import (
    ENCRYPT_REQUIRED_CLASSES,
    DataClassification,
    is_pii,
)
from formguard.governance.fields import FieldMetadata


class Severity(str, Enum):
    """Violation severity."""

    WARN = "WARN"  # Informational
    BLOCK = "BLOCK"  # Blocks submission in enforce mode


@dataclass(frozen=True)
class PolicyViolation:
    """A rule's finding against the basic field model."""

    rule_id: str
    message: str
    severity: Severity
    field: Optional[str] = None

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.BLOCK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rule_id": self.rule_id,
            "message": self.message,
            "severity": self.severity.value,
            "field": self.field,
        }


@dataclass(frozen=True)
class FieldViolation:
    """A rule's finding against the extended governance model."""

    rule_id: str
    message: str
    severity: Severity
    fixable: bool

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.BLOCK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rule_id": self.rule_id,
            "message": self.message,
            "severity": self.severity.value,
            "fixable": self.fixable,
        }


class PolicyRule:
    """Per-field policy rule.

    Subclasses implement `evaluate`, which must be a pure predicate returning
    a PolicyViolation or None. Rules receive the full value and metadata maps
    so they can look at other fields.
    """

    id: str = ""
    name: str = ""

    def evaluate(
        self,
        value: Any,
        meta: FieldMetadata,
        all_values: Optional[Mapping[str, Any]] = None,
        all_metadata: Optional[Mapping[str, FieldMetadata]] = None,
    ) -> Optional[PolicyViolation]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


class AggregatePolicyRule(PolicyRule):
    """Rule evaluated once per pass against the whole field set."""

    def evaluate_all(
        self,
        values: Mapping[str, Any],
        metadata: Mapping[str, FieldMetadata],
    ) -> Optional[PolicyViolation]:
        raise NotImplementedError


class NoPlaintextPiiPolicy(PolicyRule):
    """Blocks submission if PII is entered into a field without encryption."""

    id = "no-plaintext-pii"
    name = "No Plaintext PII"

    def evaluate(self, value, meta, all_values=None, all_metadata=None):
        if is_pii(meta.classification) and not meta.encryption_required and value:
            return PolicyViolation(
                rule_id=self.id,
                message=f'Field "{meta.label}" contains PII but encryption is not enabled.',
                severity=Severity.BLOCK,
                field=meta.name,
            )
        return None


class RequireEncryptionPolicy(PolicyRule):
    """Requires encryption for FINANCIAL and HIGHLY_SENSITIVE fields."""

    id = "require-encryption"
    name = "Require Encryption"

    def evaluate(self, value, meta, all_values=None, all_metadata=None):
        if meta.classification in ENCRYPT_REQUIRED_CLASSES and not meta.encryption_required:
            return PolicyViolation(
                rule_id=self.id,
                message=(
                    f'Field "{meta.label}" requires encryption due to its '
                    f"classification ({meta.classification.value})."
                ),
                severity=Severity.BLOCK,
                field=meta.name,
            )
        return None


class MaskHighlySensitivePolicy(PolicyRule):
    """Forces masking for HIGHLY_SENSITIVE data."""

    id = "mask-highly-sensitive"
    name = "Mask Highly Sensitive"

    def evaluate(self, value, meta, all_values=None, all_metadata=None):
        if meta.classification == DataClassification.HIGHLY_SENSITIVE and not meta.masked:
            return PolicyViolation(
                rule_id=self.id,
                message=f'Field "{meta.label}" must be masked for security.',
                severity=Severity.WARN,
                field=meta.name,
            )
        return None


class DependentFieldPolicy(PolicyRule):
    """Requires `dependent_field` to be filled when `condition(target value)` holds."""

    id = "dependent-field"
    name = "Dependent Field"

    def __init__(
        self,
        target_field: str,
        condition: Callable[[Any], bool],
        dependent_field: str,
        message: str,
    ):
        self.target_field = target_field
        self.condition = condition
        self.dependent_field = dependent_field
        self.message = message

    def evaluate(self, value, meta, all_values=None, all_metadata=None):
        if meta.name != self.target_field:
            return None
        if not self.condition(value):
            return None
        if (all_values or {}).get(self.dependent_field):
            return None
        return PolicyViolation(
            rule_id=self.id,
            message=self.message,
            severity=Severity.BLOCK,
            field=self.dependent_field,
        )


class DataMinimizationPolicy(AggregatePolicyRule):
    """Warns when a form collects more PII fields than `limit`."""

    id = "data-minimization"
    name = "Data Minimization"

    def __init__(self, limit: int):
        self.limit = limit

    def evaluate_all(self, values, metadata):
        pii_count = sum(1 for meta in metadata.values() if is_pii(meta.classification))
        if pii_count > self.limit:
            return PolicyViolation(
                rule_id=self.id,
                message=(
                    f"Collecting {pii_count} PII fields exceeds the minimization "
                    f"limit of {self.limit}."
                ),
                severity=Severity.WARN,
            )
        return None

    def evaluate(self, value, meta, all_values=None, all_metadata=None):
        # Per-field callers get one finding per pass: only the first field name reports.
        all_metadata = all_metadata or {meta.name: meta}
        if meta.name != min(all_metadata):
            return None
        return self.evaluate_all(all_values or {}, all_metadata)


class FunctionRule(PolicyRule):
    """Policy rule backed by a plain function."""

    def __init__(self, id: str, name: str, func: Callable[..., Optional[PolicyViolation]]):
        self.id = id
        self.name = name
        self.func = func
        functools.update_wrapper(self, func)

    def evaluate(self, value, meta, all_values=None, all_metadata=None):
        return self.func(value, meta, all_values or {}, all_metadata or {})


def policy_rule(id: str, name: Optional[str] = None):
    """
    Decorator turning a function into a PolicyRule plugin.

    The function receives (value, meta, all_values, all_metadata).

    Args:
        id: Rule id reported in violations
        name: Human-readable rule name (defaults to the function name)

    Returns:
        Decorator producing a FunctionRule
    """

    def decorator(func: Callable) -> FunctionRule:
        return FunctionRule(id, name or func.__name__, func)

    return decorator


# Built-in rule instances
no_plaintext_pii = NoPlaintextPiiPolicy()
require_encryption = RequireEncryptionPolicy()
mask_highly_sensitive = MaskHighlySensitivePolicy()
