"""Policy engine evaluating rules against form data."""

from typing import Any, Iterable, List, Mapping, Optional

from formguard.errors import RuleEvaluationError
from formguard.governance.fields import FieldMetadata
from formguard.policy.rules import (
    AggregatePolicyRule,
    PolicyRule,
    PolicyViolation,
    Severity,
    mask_highly_sensitive,
    no_plaintext_pii,
    require_encryption,
)
from formguard.utils.logging import get_logger, log_error

logger = get_logger("policy")

DEFAULT_RULES: List[PolicyRule] = [no_plaintext_pii, require_encryption, mask_highly_sensitive]


class PolicyEngine:
    """Evaluates an ordered list of policy rules.

    Per-field rules run for every (field, value) pair that has metadata, in
    value-map order and then rule order. Aggregate rules run once per pass
    after all per-field rules, and only when at least one value has
    metadata. List order only affects emission order; every
    matching rule fires.
    """

    def __init__(self, rules: Optional[Iterable[PolicyRule]] = None):
        self._rules: List[PolicyRule] = list(rules or [])

    @property
    def rules(self) -> List[PolicyRule]:
        """Configured rules (copy)."""
        return list(self._rules)

    def add_rule(self, rule: PolicyRule) -> None:
        """Append a rule to the evaluation order."""
        self._rules.append(rule)

    def evaluate(
        self,
        values: Mapping[str, Any],
        metadata: Mapping[str, FieldMetadata],
    ) -> List[PolicyViolation]:
        """
        Evaluate all rules against the provided form data.

        Args:
            values: Field name -> current value
            metadata: Field name -> registered metadata

        Returns:
            List of violations in emission order

        Raises:
            RuleEvaluationError: If a rule raises
        """
        violations: List[PolicyViolation] = []
        field_rules = [r for r in self._rules if not isinstance(r, AggregatePolicyRule)]
        aggregate_rules = [r for r in self._rules if isinstance(r, AggregatePolicyRule)]

        matched = False
        for name, value in values.items():
            meta = metadata.get(name)
            if meta is None:
                continue
            matched = True

            for rule in field_rules:
                try:
                    violation = rule.evaluate(value, meta, values, metadata)
                except Exception as e:
                    log_error(logger, "Policy rule failed", e, {"rule_id": rule.id, "field": name})
                    raise RuleEvaluationError(rule.id, name, e) from e
                if violation is not None:
                    violations.append(violation)

        if not matched:
            aggregate_rules = []

        for rule in aggregate_rules:
            try:
                violation = rule.evaluate_all(values, metadata)
            except Exception as e:
                log_error(logger, "Aggregate policy rule failed", e, {"rule_id": rule.id})
                raise RuleEvaluationError(rule.id, None, e) from e
            if violation is not None:
                violations.append(violation)

        logger.debug(
            "Evaluated %d rules over %d fields: %d violations",
            len(self._rules),
            len(values),
            len(violations),
        )
        return violations


def is_compliant(violations: Iterable[Any]) -> bool:
    """True when no violation has BLOCK severity."""
    return all(v.severity != Severity.BLOCK for v in violations)


def blocking_violations(violations: Iterable[Any]) -> List[Any]:
    """Violations with BLOCK severity."""
    return [v for v in violations if v.severity == Severity.BLOCK]
