"""Data classification levels for field-level governance."""

from enum import Enum
from typing import FrozenSet


class DataClassification(str, Enum):
    """Sensitivity tier of a field's data, ordered from least to most sensitive."""

    PUBLIC = "PUBLIC"  # No privacy concerns
    INTERNAL = "INTERNAL"  # Business data, not for public consumption
    PERSONAL = "PERSONAL"  # Identifies an individual
    FINANCIAL = "FINANCIAL"  # Card numbers, account data
    HIGHLY_SENSITIVE = "HIGHLY_SENSITIVE"  # SSN, health data

    @property
    def rank(self) -> int:
        """Position in the sensitivity ordering (PUBLIC = 0)."""
        return _ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


_ORDER = list(DataClassification)

SENSITIVE_CLASSES: FrozenSet[DataClassification] = frozenset({
    DataClassification.PERSONAL,
    DataClassification.FINANCIAL,
    DataClassification.HIGHLY_SENSITIVE,
})

ENCRYPT_REQUIRED_CLASSES: FrozenSet[DataClassification] = frozenset({
    DataClassification.FINANCIAL,
    DataClassification.HIGHLY_SENSITIVE,
})


def is_pii(classification: DataClassification) -> bool:
    """PII is anything classified above INTERNAL."""
    return classification > DataClassification.INTERNAL
