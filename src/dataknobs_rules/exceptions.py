"""Custom exceptions for the dataknobs_rules package.

This module defines exception types for the rules package,
built on the common exception framework from dataknobs_common.

Two channels are kept apart:

- A field that fails a business rule is *not* an exception. It is reported as
  a failed ``ValidationState`` inside the ``ValidationResult``.
- A rule that is wired to the wrong kind of value, or declared with a bad
  argument, is a programming error and raises ``RuleConfigurationError``.
"""

from __future__ import annotations

from typing import Any

from dataknobs_common import (
    ConfigurationError,
    NotFoundError,
    ValidationError,
)


class RuleConfigurationError(ConfigurationError):
    """Raised when a rule is declared or wired incorrectly."""

    pass


class UnsupportedValueTypeError(RuleConfigurationError):
    """Raised when a check cannot normalize the shape of a field value.

    This is the dispatch error: the value's type is not one the check family
    knows how to compare, which means the check was attached to a field of an
    incompatible type.
    """

    def __init__(self, check: str, value: Any, field_name: str | None = None):
        self.check = check
        self.value_type = type(value).__name__
        context: dict[str, Any] = {"check": check, "value_type": self.value_type}
        if field_name is not None:
            context["field_name"] = field_name
        super().__init__(
            f"Unsupported type '{self.value_type}' for check '{check}'",
            context=context,
        )

    @property
    def field_name(self) -> str | None:
        return self.context.get("field_name")


class RuleSetSealedError(RuleConfigurationError):
    """Raised when rules are added after validation has started."""

    def __init__(self, target: str):
        super().__init__(
            f"Cannot modify {target}: rules are sealed after the first validation",
            context={"target": target},
        )


class MessageNotFoundError(NotFoundError):
    """Raised when a message template id is not known to the catalog."""

    def __init__(self, format_id: str):
        self.format_id = format_id
        super().__init__(f"No message template for '{format_id}'", context={"format_id": format_id})


class RuleValidationError(ValidationError):
    """Raised on request when a validation run produced failures."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        summary = "; ".join(f"{name}: {message}" for name, message in errors.items())
        super().__init__(f"Validation failed: {summary}", context={"errors": errors})


__all__ = [
    "RuleConfigurationError",
    "UnsupportedValueTypeError",
    "RuleSetSealedError",
    "MessageNotFoundError",
    "RuleValidationError",
]
