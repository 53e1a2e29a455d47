"""Rule chains: ordered, fail-fast sequences of checks for one field.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator
from typing import Any, TYPE_CHECKING

from .checks import (
    AffixCheck,
    AllMatch,
    AnyMatch,
    BetweenCheck,
    ContainsCheck,
    CreditCardCheck,
    DateCheck,
    DateRangeCheck,
    EmailCheck,
    EqualityCheck,
    LengthCheck,
    MagnitudeCheck,
    MembershipCheck,
    MessageOverride,
    NotEmpty,
    NotNull,
    PatternCheck,
    PredicateCheck,
    SignCheck,
    UniqueItems,
)
from .exceptions import RuleConfigurationError, RuleSetSealedError
from .messages import MessageCatalog
from .result import ValidationState
from .settings import ValidatorSettings

if TYPE_CHECKING:
    import re
    from collections.abc import Callable, Iterable
    from datetime import date

    from .descriptor import FieldDescriptor
    from .messages import MessageFormatter

logger = logging.getLogger(__name__)


class RuleChain:
    """An ordered sequence of checks bound to one field.

    Checks run in declaration order against a single snapshot of the field
    value, and evaluation stops at the first failure. Once sealed, the chain
    no longer accepts checks.
    """

    def __init__(self, field: FieldDescriptor):
        """Initialize an empty chain.

        Args:
            field: Descriptor of the field this chain validates
        """
        self.field = field
        self._checks: list[Callable[[Any], ValidationState]] = []
        self._sealed = False

    def __len__(self) -> int:
        return len(self._checks)

    def __repr__(self) -> str:
        return f"RuleChain(field={self.field.name!r}, checks={len(self._checks)})"

    @property
    def checks(self) -> tuple[Callable[[Any], ValidationState], ...]:
        return tuple(self._checks)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Freeze the chain; further modifications raise RuleSetSealedError."""
        self._sealed = True

    def add_check(self, check: Callable[[Any], ValidationState]) -> RuleChain:
        """Append a check.

        Args:
            check: Callable taking the field value and returning a ValidationState

        Returns:
            Self for chaining
        """
        self._ensure_open()
        if not callable(check):
            raise RuleConfigurationError(
                f"Check for '{self.field.name}' must be callable, got {type(check).__name__}",
                context={"field_name": self.field.name},
            )
        self._checks.append(check)
        return self

    def replace_last(self, check: Callable[[Any], ValidationState]) -> None:
        """Replace the most recently added check."""
        self._ensure_open()
        if not self._checks:
            raise RuleConfigurationError(
                f"No check declared for '{self.field.name}' yet", context={"field_name": self.field.name}
            )
        self._checks[-1] = check

    def evaluate(self) -> ValidationState:
        """Run the checks against the current field value.

        Returns:
            The first failing state, or a passing state if every check passes
        """
        value = snapshot(self.field.read())
        for check in self._checks:
            state = self._run(check, value)
            if not state.is_valid:
                logger.debug(f"Field '{self.field.name}' failed: {state.error_message}")
                return state
        return self.field.success()

    def override_message(self, message: str) -> ValidationState | None:
        """Re-run the first check and relabel its failure.

        Args:
            message: Custom message for the failure

        Returns:
            A new failed state carrying ``message`` if the first check fails
            on the current value, otherwise None
        """
        if not self._checks:
            return None
        state = self._run(self._checks[0], snapshot(self.field.read()))
        if state.is_valid:
            return None
        return state.with_message(message)

    def _run(self, check: Callable[[Any], ValidationState], value: Any) -> ValidationState:
        state = check(value)
        if not isinstance(state, ValidationState):
            raise RuleConfigurationError(
                f"Check {check!r} for '{self.field.name}' returned {type(state).__name__}, "
                "expected ValidationState",
                context={"field_name": self.field.name},
            )
        return state

    def _ensure_open(self) -> None:
        if self._sealed:
            raise RuleSetSealedError(f"rule chain for '{self.field.name}'")


class ChainBuilder:
    """Fluent API for attaching checks to a rule chain.

    Every check method appends one check and returns the builder, so checks
    read in the order they run:

    Example:
        ```python
        rules.rule_for("name", lambda: user.name) \\
            .not_empty() \\
            .min_length(4) \\
            .max_length(20)
        ```
    """

    def __init__(
        self,
        chain: RuleChain,
        messages: MessageFormatter | None = None,
        settings: ValidatorSettings | None = None,
    ):
        """Initialize the builder.

        Args:
            chain: Chain receiving the checks
            messages: Formatter for failure messages
            settings: Settings for the configurable checks
        """
        self.chain = chain
        self.settings = settings or ValidatorSettings()
        self.messages = messages or MessageCatalog(self.settings.messages)

    @property
    def field(self) -> FieldDescriptor:
        return self.chain.field

    def add_check(self, check: Callable[[Any], ValidationState]) -> ChainBuilder:
        """Append any callable returning a ValidationState."""
        self.chain.add_check(check)
        return self

    def with_message(self, message: str) -> ChainBuilder:
        """Use a custom message when the most recently added check fails."""
        checks = self.chain.checks
        if not checks:
            raise RuleConfigurationError(
                f"with_message() needs a preceding check for '{self.field.name}'",
                context={"field_name": self.field.name},
            )
        self.chain.replace_last(MessageOverride(checks[-1], message))
        return self

    # Presence

    def not_null(self) -> ChainBuilder:
        return self.add_check(NotNull(self.field, self.messages))

    def not_empty(self) -> ChainBuilder:
        return self.add_check(NotEmpty(self.field, self.messages))

    # Length

    def min_length(self, length: int) -> ChainBuilder:
        return self.add_check(LengthCheck(self.field, self.messages, "min_length", length))

    def max_length(self, length: int) -> ChainBuilder:
        return self.add_check(LengthCheck(self.field, self.messages, "max_length", length))

    def length(self, length: int) -> ChainBuilder:
        """Length must be exactly ``length``."""
        return self.add_check(LengthCheck(self.field, self.messages, "exact_length", length))

    # Magnitude

    def greater_than(self, bound: Any) -> ChainBuilder:
        return self.add_check(MagnitudeCheck(self.field, self.messages, "greater_than", bound))

    def less_than(self, bound: Any) -> ChainBuilder:
        return self.add_check(MagnitudeCheck(self.field, self.messages, "less_than", bound))

    def greater_or_equal(self, bound: Any) -> ChainBuilder:
        return self.add_check(MagnitudeCheck(self.field, self.messages, "greater_or_equal", bound))

    def less_or_equal(self, bound: Any) -> ChainBuilder:
        return self.add_check(MagnitudeCheck(self.field, self.messages, "less_or_equal", bound))

    def between(self, minimum: Any, maximum: Any, inclusive: bool = True) -> ChainBuilder:
        return self.add_check(BetweenCheck(self.field, self.messages, minimum, maximum, inclusive))

    def inclusive_between(self, minimum: Any, maximum: Any) -> ChainBuilder:
        return self.between(minimum, maximum, inclusive=True)

    def exclusive_between(self, minimum: Any, maximum: Any) -> ChainBuilder:
        return self.between(minimum, maximum, inclusive=False)

    # Sign

    def not_positive(self) -> ChainBuilder:
        return self.add_check(SignCheck(self.field, self.messages, "not_positive"))

    def not_negative(self) -> ChainBuilder:
        return self.add_check(SignCheck(self.field, self.messages, "not_negative"))

    # Temporal

    def before(self, limit: date) -> ChainBuilder:
        return self.add_check(DateCheck(self.field, self.messages, "before", limit))

    def after(self, limit: date) -> ChainBuilder:
        return self.add_check(DateCheck(self.field, self.messages, "after", limit))

    def date_in_range(self, start: date, end: date) -> ChainBuilder:
        return self.add_check(DateRangeCheck(self.field, self.messages, start, end))

    # Collections

    def all_match(self, predicate: Callable[[Any], bool]) -> ChainBuilder:
        return self.add_check(AllMatch(self.field, self.messages, predicate))

    def any_match(self, predicate: Callable[[Any], bool]) -> ChainBuilder:
        return self.add_check(AnyMatch(self.field, self.messages, predicate))

    def unique(self) -> ChainBuilder:
        return self.add_check(UniqueItems(self.field, self.messages))

    # Membership and equality

    def is_in(self, candidates: Iterable[Any], case_sensitive: bool | None = None) -> ChainBuilder:
        return self.add_check(
            MembershipCheck(self.field, self.messages, candidates, False, self._case(case_sensitive))
        )

    def not_in(self, candidates: Iterable[Any], case_sensitive: bool | None = None) -> ChainBuilder:
        return self.add_check(
            MembershipCheck(self.field, self.messages, candidates, True, self._case(case_sensitive))
        )

    def equal_to(self, expected: Any, case_sensitive: bool | None = None) -> ChainBuilder:
        return self.add_check(
            EqualityCheck(self.field, self.messages, expected, False, self._case(case_sensitive))
        )

    def not_equal_to(self, expected: Any, case_sensitive: bool | None = None) -> ChainBuilder:
        return self.add_check(
            EqualityCheck(self.field, self.messages, expected, True, self._case(case_sensitive))
        )

    # Text

    def starts_with(self, prefix: str) -> ChainBuilder:
        return self.add_check(AffixCheck(self.field, self.messages, "starts_with", prefix))

    def ends_with(self, suffix: str) -> ChainBuilder:
        return self.add_check(AffixCheck(self.field, self.messages, "ends_with", suffix))

    def contains(self, needle: Any) -> ChainBuilder:
        return self.add_check(ContainsCheck(self.field, self.messages, needle))

    def matches(self, pattern: str | re.Pattern[str]) -> ChainBuilder:
        return self.add_check(PatternCheck(self.field, self.messages, pattern))

    def email_address(self) -> ChainBuilder:
        return self.add_check(EmailCheck(self.field, self.messages, self.settings.email_pattern))

    def credit_card(self) -> ChainBuilder:
        return self.add_check(
            CreditCardCheck(
                self.field,
                self.messages,
                self.settings.card_min_length,
                self.settings.card_max_length,
            )
        )

    # Custom

    def must(self, predicate: Callable[[Any], bool], message: str | None = None) -> ChainBuilder:
        """Value must satisfy ``predicate``; None is passed through as-is."""
        return self.add_check(PredicateCheck(self.field, self.messages, predicate, message))

    def _case(self, case_sensitive: bool | None) -> bool:
        return self.settings.case_sensitive if case_sensitive is None else case_sensitive


def snapshot(value: Any) -> Any:
    """Materialize a one-shot iterator so every check in a chain sees the same items."""
    if isinstance(value, Iterator) and not isinstance(value, Collection):
        return list(value)
    return value
