"""
Constraints over participant metadata (divisions, regions, skill levels...).
"""

import numbers
from typing import Any, Callable, List, Optional, Sequence

from ..context import SchedulingContext
from ..models import Event, Participant
from .base import Constraint

Validator = Callable[[List[Any], Sequence[Participant], Event, SchedulingContext], bool]


class MetadataConstraint(Constraint):
    """
    Pass the values of one metadata key, for every participant in the
    candidate, to a validator.

    The validator is called as ``validator(values, participants, event,
    context)``; missing values appear as None.
    """

    def __init__(self, metadata_key: str, validator: Validator, name: str = "Metadata Constraint"):
        if not callable(validator):
            raise ValueError("Validator must be callable")
        self.metadata_key = metadata_key
        self.validator = validator
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def is_satisfied(self, event, context):
        values = [p.get_metadata_value(self.metadata_key) for p in event.participants]
        return bool(self.validator(values, event.participants, event, context))

    def describe_violation(self, event, context):
        values = ", ".join(
            f"{p.label}={p.get_metadata_value(self.metadata_key)!r}" for p in event.participants
        )
        return f"Metadata '{self.metadata_key}' check failed ({values})"

    @classmethod
    def require_same_value(cls, metadata_key: str, name: Optional[str] = None) -> "MetadataConstraint":
        return cls(
            metadata_key,
            lambda values, *_: len(_distinct(values)) <= 1,
            name or f"Same {metadata_key}",
        )

    @classmethod
    def require_different_values(cls, metadata_key: str, name: Optional[str] = None) -> "MetadataConstraint":
        return cls(
            metadata_key,
            lambda values, *_: len(_distinct(values)) == len([v for v in values if v is not None]),
            name or f"Different {metadata_key}",
        )

    @classmethod
    def max_unique_values(cls, metadata_key: str, max_unique: int,
                          name: Optional[str] = None) -> "MetadataConstraint":
        return cls(
            metadata_key,
            lambda values, *_: len(_distinct(values)) <= max_unique,
            name or f"Max {max_unique} {metadata_key} types",
        )

    @classmethod
    def require_adjacent_values(cls, metadata_key: str, name: Optional[str] = None) -> "MetadataConstraint":
        return cls(metadata_key, _adjacent, name or f"Adjacent {metadata_key}")


def _distinct(values: List[Any]) -> List[Any]:
    """Non-None values with duplicates removed, in first-seen order."""
    distinct = []
    for value in values:
        if value is not None and value not in distinct:
            distinct.append(value)
    return distinct


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _adjacent(values: List[Any], *_) -> bool:
    numeric = [n for n in (_as_number(v) for v in values) if n is not None]
    if not numeric:
        return True
    return max(numeric) - min(numeric) <= 1
