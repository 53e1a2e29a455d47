"""DataKnobs Rules - fluent, fail-fast field validation for in-memory records.

This package provides:
- Rule chains: ordered checks per field, stopping at the first failure
- A rule set that validates every declared field and aggregates the outcome
- Built-in checks for presence, length, magnitude, sign, dates, collections,
  membership, text patterns, email addresses and card numbers
- Immutable result types (ValidationState, ValidationResult)
- A separate error channel for miswired rules (RuleConfigurationError)
"""

from .chain import ChainBuilder, RuleChain
from .checks import Check, luhn_valid
from .descriptor import FieldDescriptor
from .exceptions import (
    MessageNotFoundError,
    RuleConfigurationError,
    RuleSetSealedError,
    RuleValidationError,
    UnsupportedValueTypeError,
)
from .messages import DEFAULT_MESSAGES, MessageCatalog, MessageFormatter
from .normalize import ValueKind, classify
from .result import ValidationResult, ValidationState
from .settings import ValidatorSettings, load_settings
from .validator import ModelValidator, RuleSet

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Result types
    "ValidationState",
    "ValidationResult",
    # Rules
    "RuleSet",
    "ModelValidator",
    "RuleChain",
    "ChainBuilder",
    "FieldDescriptor",
    "Check",
    "luhn_valid",
    # Dispatch
    "ValueKind",
    "classify",
    # Messages and settings
    "DEFAULT_MESSAGES",
    "MessageCatalog",
    "MessageFormatter",
    "ValidatorSettings",
    "load_settings",
    # Exceptions
    "RuleConfigurationError",
    "UnsupportedValueTypeError",
    "RuleSetSealedError",
    "MessageNotFoundError",
    "RuleValidationError",
]
