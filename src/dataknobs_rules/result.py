"""Validation result types with consistent, predictable behavior.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .exceptions import RuleValidationError


@dataclass(frozen=True)
class ValidationState:
    """Outcome of validating a single field.

    A state is produced fresh by every check invocation and is never mutated
    afterwards. A failed state always carries a message; a passing state
    never does.
    """

    is_valid: bool
    error_message: str | None
    field_name: str
    field_type: str

    def __post_init__(self) -> None:
        if self.is_valid and self.error_message is not None:
            raise ValueError("A valid state cannot carry an error message")
        if not self.is_valid and not self.error_message:
            raise ValueError("An invalid state requires an error message")

    def __bool__(self) -> bool:
        """Allow 'if state:' usage to check validity."""
        return self.is_valid

    @classmethod
    def success(cls, field_name: str, field_type: str) -> ValidationState:
        """Create a passing state for a field.

        Args:
            field_name: Name of the validated field
            field_type: Type tag of the validated field

        Returns:
            Successful ValidationState
        """
        return cls(is_valid=True, error_message=None, field_name=field_name, field_type=field_type)

    @classmethod
    def failure(cls, error_message: str, field_name: str, field_type: str) -> ValidationState:
        """Create a failed state for a field.

        Args:
            error_message: Human-readable reason for the failure
            field_name: Name of the validated field
            field_type: Type tag of the validated field

        Returns:
            Failed ValidationState
        """
        return cls(
            is_valid=False,
            error_message=error_message,
            field_name=field_name,
            field_type=field_type,
        )

    def with_message(self, message: str) -> ValidationState:
        """Return a copy of a failed state carrying a different message."""
        if self.is_valid:
            return self
        return ValidationState.failure(message, self.field_name, self.field_type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "error_message": self.error_message,
            "field_name": self.field_name,
            "field_type": self.field_type,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Aggregate outcome of one validation run across all declared fields.

    The result is a snapshot: it is built once from the per-field states and
    never changes. ``field_count`` always equals the number of declared rule
    chains, one state per chain.
    """

    is_valid: bool
    field_count: int
    field_states: tuple[ValidationState, ...]

    def __post_init__(self) -> None:
        if self.field_count != len(self.field_states):
            raise ValueError(
                f"field_count ({self.field_count}) does not match "
                f"the number of field states ({len(self.field_states)})"
            )
        if self.is_valid != all(state.is_valid for state in self.field_states):
            raise ValueError("is_valid must be true exactly when every field state is valid")

    @classmethod
    def from_states(cls, states: Iterable[ValidationState]) -> ValidationResult:
        """Build a result from per-field states, in declaration order.

        Args:
            states: One state per declared rule chain

        Returns:
            ValidationResult with the aggregate validity computed
        """
        field_states = tuple(states)
        return cls(
            is_valid=all(state.is_valid for state in field_states),
            field_count=len(field_states),
            field_states=field_states,
        )

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.is_valid

    def __iter__(self) -> Iterator[ValidationState]:
        return iter(self.field_states)

    @property
    def failures(self) -> tuple[ValidationState, ...]:
        """The failed field states, in declaration order."""
        return tuple(state for state in self.field_states if not state.is_valid)

    @property
    def errors(self) -> dict[str, str]:
        """Failure messages keyed by field name."""
        return {state.field_name: state.error_message for state in self.failures}  # type: ignore[misc]

    def raise_if_invalid(self) -> ValidationResult:
        """Raise RuleValidationError when any field failed.

        Returns:
            Self, so the call can be chained when the result is valid

        Raises:
            RuleValidationError: If the result is not valid
        """
        if not self.is_valid:
            raise RuleValidationError(self.errors)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "field_count": self.field_count,
            "field_states": [state.to_dict() for state in self.field_states],
        }
