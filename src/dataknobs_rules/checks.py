"""Built-in checks with a consistent, composable API.

A check is a callable ``value -> ValidationState`` closed over its
configuration. Every built-in check derives from ``Check``, which applies the
shared protocol:

1. A None value fails with the ``required`` message before anything else,
   unless the check handles None itself (``handles_null``).
2. The value is normalized for the check family (see ``normalize``); a value
   of an unsupported shape raises ``UnsupportedValueTypeError``.
3. The comparison produces a fresh passing or failing state.

Arguments are validated when a check is constructed, so a miswired rule fails
while rules are being declared rather than during validation.
"""

from __future__ import annotations

import operator
import re
from abc import ABC, abstractmethod
from datetime import date, datetime
from enum import Enum
from typing import Any, TYPE_CHECKING

from .exceptions import RuleConfigurationError, UnsupportedValueTypeError
from .normalize import (
    ValueKind,
    as_collection,
    classify,
    has_unique_items,
    to_datetime,
    to_length,
    to_magnitude,
    to_signed,
)
from .result import ValidationState

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .descriptor import FieldDescriptor
    from .messages import MessageFormatter

DIGITS = frozenset("0123456789")

_BOUND_KINDS = (
    ValueKind.NUMBER,
    ValueKind.DATE,
    ValueKind.DATETIME,
    ValueKind.DURATION,
    ValueKind.SYMBOLIC,
)


class Check(ABC):
    """Base class for all built-in checks."""

    kind = "check"
    handles_null = False

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter):
        """Bind the check to its field and message formatter.

        Args:
            field: Descriptor of the field being validated
            messages: Formatter used to render failure messages
        """
        self.field = field
        self.messages = messages

    def __call__(self, value: Any) -> ValidationState:
        if value is None and not self.handles_null:
            return self.fail("required")
        try:
            return self.evaluate(value)
        except UnsupportedValueTypeError as error:
            error.context.setdefault("field_name", self.field.name)
            raise

    def __repr__(self) -> str:
        return f"{type(self).__name__}(field={self.field.name!r})"

    @abstractmethod
    def evaluate(self, value: Any) -> ValidationState:
        """Validate a value; None has already been handled unless handles_null."""
        pass

    def passed(self) -> ValidationState:
        return self.field.success()

    def fail(self, format_id: str, *args: Any) -> ValidationState:
        """Failed state with the message for ``format_id``."""
        return self.field.failure(self.messages.format(format_id, self.field.name, *args))


class NotNull(Check):
    """Value must not be None."""

    kind = "required"
    handles_null = True

    def evaluate(self, value: Any) -> ValidationState:
        return self.fail("required") if value is None else self.passed()


class NotEmpty(Check):
    """Value must not be None, an empty string or an empty collection."""

    kind = "not_empty"

    def evaluate(self, value: Any) -> ValidationState:
        kind = classify(value)
        if kind == ValueKind.TEXT and value == "":
            return self.fail("empty_text")
        if kind == ValueKind.COLLECTION and len(value) == 0:
            return self.fail("empty_collection")
        return self.passed()


class LengthCheck(Check):
    """Length of text/collections (or a truncated number) against a bound."""

    _comparisons = {
        "min_length": operator.ge,
        "max_length": operator.le,
        "exact_length": operator.eq,
    }

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, kind: str, bound: int):
        super().__init__(field, messages)
        if kind not in self._comparisons:
            raise RuleConfigurationError(f"Unknown length check: {kind}")
        if not isinstance(bound, int) or isinstance(bound, bool):
            raise RuleConfigurationError(
                f"Length bound for '{field.name}' must be an integer, got {type(bound).__name__}",
                context={"field_name": field.name, "check": kind},
            )
        if bound < 0:
            raise RuleConfigurationError(
                f"Length bound for '{field.name}' cannot be negative: {bound}",
                context={"field_name": field.name, "check": kind, "bound": bound},
            )
        self.kind = kind
        self.bound = bound
        self._compare = self._comparisons[kind]

    def evaluate(self, value: Any) -> ValidationState:
        actual = to_length(value, self.kind)
        if self._compare(actual, self.bound):
            return self.passed()
        return self.fail(self.kind, self.bound)


class MagnitudeCheck(Check):
    """Ordering comparison of the value's magnitude against a bound."""

    _comparisons = {
        "greater_than": operator.gt,
        "less_than": operator.lt,
        "greater_or_equal": operator.ge,
        "less_or_equal": operator.le,
    }

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, kind: str, bound: Any):
        super().__init__(field, messages)
        if kind not in self._comparisons:
            raise RuleConfigurationError(f"Unknown magnitude check: {kind}")
        self.kind = kind
        self.bound = bound
        self._limit = bound_magnitude(bound, kind, field.name)
        self._compare = self._comparisons[kind]

    def evaluate(self, value: Any) -> ValidationState:
        if self._compare(to_magnitude(value, self.kind), self._limit):
            return self.passed()
        return self.fail(self.kind, describe(self.bound))


class BetweenCheck(Check):
    """Magnitude must lie between two bounds, inclusive or exclusive."""

    def __init__(
        self,
        field: FieldDescriptor,
        messages: MessageFormatter,
        minimum: Any,
        maximum: Any,
        inclusive: bool = True,
    ):
        super().__init__(field, messages)
        self.kind = "inclusive_between" if inclusive else "exclusive_between"
        self.minimum = minimum
        self.maximum = maximum
        self.inclusive = inclusive
        self._low = bound_magnitude(minimum, self.kind, field.name)
        self._high = bound_magnitude(maximum, self.kind, field.name)
        if self._low > self._high:
            raise RuleConfigurationError(
                f"Range for '{field.name}' is empty: {minimum} > {maximum}",
                context={"field_name": field.name, "min": minimum, "max": maximum},
            )

    def evaluate(self, value: Any) -> ValidationState:
        actual = to_magnitude(value, self.kind)
        if self.inclusive:
            in_range = self._low <= actual <= self._high
        else:
            in_range = self._low < actual < self._high
        if in_range:
            return self.passed()
        return self.fail(self.kind, describe(self.minimum), describe(self.maximum))


class SignCheck(Check):
    """Numbers and durations must not be positive (or not negative)."""

    _violations = {
        "not_positive": lambda quantity: quantity > 0,
        "not_negative": lambda quantity: quantity < 0,
    }

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, kind: str):
        super().__init__(field, messages)
        if kind not in self._violations:
            raise RuleConfigurationError(f"Unknown sign check: {kind}")
        self.kind = kind
        self._violates = self._violations[kind]

    def evaluate(self, value: Any) -> ValidationState:
        if self._violates(to_signed(value, self.kind)):
            return self.fail(self.kind)
        return self.passed()


class DateCheck(Check):
    """Date/datetime must be on or before (or on or after) a limit."""

    _comparisons = {
        "before": operator.le,
        "after": operator.ge,
    }

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, kind: str, limit: date):
        super().__init__(field, messages)
        if kind not in self._comparisons:
            raise RuleConfigurationError(f"Unknown date check: {kind}")
        self.kind = kind
        self.limit = limit
        self._limit = date_bound(limit, kind, field.name)
        self._compare = self._comparisons[kind]

    def evaluate(self, value: Any) -> ValidationState:
        actual = to_datetime(value, self.kind)
        check_comparable(actual, self._limit, self.kind, self.field.name)
        if self._compare(actual, self._limit):
            return self.passed()
        return self.fail(self.kind, describe(self.limit))


class DateRangeCheck(Check):
    """Date/datetime must fall within an inclusive period."""

    kind = "date_in_range"

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, start: date, end: date):
        super().__init__(field, messages)
        self.start = start
        self.end = end
        self._start = date_bound(start, self.kind, field.name)
        self._end = date_bound(end, self.kind, field.name)
        check_comparable(self._start, self._end, self.kind, field.name)
        if self._start > self._end:
            raise RuleConfigurationError(
                f"Period for '{field.name}' ends before it starts",
                context={"field_name": field.name, "start": describe(start), "end": describe(end)},
            )

    def evaluate(self, value: Any) -> ValidationState:
        actual = to_datetime(value, self.kind)
        check_comparable(actual, self._start, self.kind, self.field.name)
        if self._start <= actual <= self._end:
            return self.passed()
        return self.fail(self.kind, describe(self.start), describe(self.end))


class CollectionCheck(Check):
    """Base for checks over the items of a collection.

    A value that is not a collection (including text) fails with the
    ``not_collection`` message rather than raising.
    """

    def evaluate(self, value: Any) -> ValidationState:
        items = as_collection(value, self.field.item_type)
        if items is None:
            return self.fail("not_collection")
        if self.holds(items):
            return self.passed()
        return self.fail(self.kind)

    @abstractmethod
    def holds(self, items: list[Any]) -> bool:
        pass


class AllMatch(CollectionCheck):
    """Every item must satisfy a predicate."""

    kind = "all"

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, predicate: Callable[[Any], bool]):
        super().__init__(field, messages)
        self.predicate = require_callable(predicate, field.name)

    def holds(self, items: list[Any]) -> bool:
        return all(self.predicate(item) for item in items)


class AnyMatch(CollectionCheck):
    """At least one item must satisfy a predicate."""

    kind = "any"

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, predicate: Callable[[Any], bool]):
        super().__init__(field, messages)
        self.predicate = require_callable(predicate, field.name)

    def holds(self, items: list[Any]) -> bool:
        return any(self.predicate(item) for item in items)


class UniqueItems(CollectionCheck):
    """No two items may be equal."""

    kind = "unique"

    def holds(self, items: list[Any]) -> bool:
        return has_unique_items(items)


class MembershipCheck(Check):
    """Value must (or must not) equal one of the candidates.

    None is treated as an ordinary value: it is a member only when None is
    itself among the candidates.
    """

    handles_null = True

    def __init__(
        self,
        field: FieldDescriptor,
        messages: MessageFormatter,
        candidates: Iterable[Any],
        negate: bool = False,
        case_sensitive: bool = True,
    ):
        super().__init__(field, messages)
        if candidates is None:
            raise RuleConfigurationError(
                f"Candidates for '{field.name}' cannot be None", context={"field_name": field.name}
            )
        if isinstance(candidates, (str, bytes)):
            raise RuleConfigurationError(
                f"Candidates for '{field.name}' must be a collection of values, not text",
                context={"field_name": field.name},
            )
        self.kind = "not_in" if negate else "in"
        self.candidates = list(candidates)
        self.negate = negate
        self.case_sensitive = case_sensitive
        self._normalized = [fold(candidate, case_sensitive) for candidate in self.candidates]

    def evaluate(self, value: Any) -> ValidationState:
        member = fold(value, self.case_sensitive) in self._normalized
        if member != self.negate:
            return self.passed()
        return self.fail(self.kind, ", ".join(describe(c) for c in self.candidates))


class EqualityCheck(Check):
    """Value must (or must not) equal an expected value."""

    def __init__(
        self,
        field: FieldDescriptor,
        messages: MessageFormatter,
        expected: Any,
        negate: bool = False,
        case_sensitive: bool = True,
    ):
        super().__init__(field, messages)
        if expected is None:
            raise RuleConfigurationError(
                f"Comparison value for '{field.name}' cannot be None", context={"field_name": field.name}
            )
        self.kind = "not_equal_to" if negate else "equal_to"
        self.expected = expected
        self.negate = negate
        self.case_sensitive = case_sensitive

    def evaluate(self, value: Any) -> ValidationState:
        equal = fold(value, self.case_sensitive) == fold(self.expected, self.case_sensitive)
        if equal != self.negate:
            return self.passed()
        return self.fail(self.kind, describe(self.expected))


class AffixCheck(Check):
    """Text must start (or end) with a given string."""

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, kind: str, affix: str):
        super().__init__(field, messages)
        if kind not in ("starts_with", "ends_with"):
            raise RuleConfigurationError(f"Unknown affix check: {kind}")
        if not isinstance(affix, str):
            raise RuleConfigurationError(
                f"Affix for '{field.name}' must be text, got {type(affix).__name__}",
                context={"field_name": field.name, "check": kind},
            )
        self.kind = kind
        self.affix = affix

    def evaluate(self, value: Any) -> ValidationState:
        if not isinstance(value, str):
            return self.fail("not_text")
        matched = value.startswith(self.affix) if self.kind == "starts_with" else value.endswith(self.affix)
        return self.passed() if matched else self.fail(self.kind, self.affix)


class ContainsCheck(Check):
    """Text must contain a substring, or a collection must contain an item."""

    kind = "contains"

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, needle: Any):
        super().__init__(field, messages)
        if needle is None:
            raise RuleConfigurationError(
                f"Value to find in '{field.name}' cannot be None", context={"field_name": field.name}
            )
        self.needle = needle

    def evaluate(self, value: Any) -> ValidationState:
        if isinstance(value, str):
            found = str(self.needle) in value
        else:
            items = as_collection(value)
            found = items is not None and self.needle in items
        return self.passed() if found else self.fail(self.kind, describe(self.needle))


class PatternCheck(Check):
    """Non-empty text must contain a match for a regular expression."""

    kind = "matches"
    handles_null = True

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, pattern: str | re.Pattern[str]):
        super().__init__(field, messages)
        self.regex = compile_pattern(pattern, field.name)

    def evaluate(self, value: Any) -> ValidationState:
        if not isinstance(value, str):
            return self.fail("not_text")
        if value and self.regex.search(value):
            return self.passed()
        return self.fail(self.kind, self.regex.pattern)


class EmailCheck(Check):
    """Text must be a well-formed email address."""

    kind = "email_address"

    def __init__(self, field: FieldDescriptor, messages: MessageFormatter, pattern: str | re.Pattern[str]):
        super().__init__(field, messages)
        self.regex = compile_pattern(pattern, field.name)

    def evaluate(self, value: Any) -> ValidationState:
        if not isinstance(value, str):
            return self.fail("not_text")
        if self.regex.fullmatch(value):
            return self.passed()
        return self.fail(self.kind)


class CreditCardCheck(Check):
    """Text must be a plausible card number passing the Luhn checksum."""

    kind = "credit_card"

    def __init__(
        self,
        field: FieldDescriptor,
        messages: MessageFormatter,
        min_length: int = 13,
        max_length: int = 19,
    ):
        super().__init__(field, messages)
        if min_length < 1 or min_length > max_length:
            raise RuleConfigurationError(
                f"Invalid card length bounds: {min_length}..{max_length}",
                context={"field_name": field.name},
            )
        self.min_length = min_length
        self.max_length = max_length

    def evaluate(self, value: Any) -> ValidationState:
        if not isinstance(value, str):
            return self.fail("not_text")
        digits = value.replace(" ", "")
        if not DIGITS.issuperset(digits):
            return self.fail("card_digits")
        if not self.min_length <= len(digits) <= self.max_length:
            return self.fail("card_length", self.min_length, self.max_length)
        if not luhn_valid(digits):
            return self.fail("card_invalid")
        return self.passed()


class PredicateCheck(Check):
    """Value must satisfy a caller-supplied predicate.

    The predicate receives the raw value, None included. Exceptions raised by
    the predicate propagate to the caller.
    """

    kind = "condition"
    handles_null = True

    def __init__(
        self,
        field: FieldDescriptor,
        messages: MessageFormatter,
        predicate: Callable[[Any], bool],
        message: str | None = None,
    ):
        super().__init__(field, messages)
        if message is not None and not message:
            raise RuleConfigurationError(
                f"Custom message for '{field.name}' cannot be empty", context={"field_name": field.name}
            )
        self.predicate = require_callable(predicate, field.name)
        self.message = message

    def evaluate(self, value: Any) -> ValidationState:
        if self.predicate(value):
            return self.passed()
        if self.message is not None:
            return self.field.failure(self.message)
        return self.fail(self.kind)


class MessageOverride:
    """Wraps a check, replacing the message of its failures."""

    def __init__(self, check: Callable[[Any], ValidationState], message: str):
        if not message:
            raise RuleConfigurationError("Override message cannot be empty")
        self.check = check
        self.message = message

    def __call__(self, value: Any) -> ValidationState:
        return self.check(value).with_message(self.message)

    def __repr__(self) -> str:
        return f"MessageOverride({self.check!r}, {self.message!r})"


def luhn_valid(digits: str) -> bool:
    """Luhn checksum over a string of ASCII digits."""
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = ord(char) - ord("0")
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def bound_magnitude(bound: Any, check: str, field_name: str) -> Any:
    """Normalize a declared bound for an ordering check."""
    if bound is None or classify(bound) not in _BOUND_KINDS:
        raise RuleConfigurationError(
            f"Bound for '{field_name}' must be a number, date, datetime, duration or enum member, "
            f"got {type(bound).__name__}",
            context={"field_name": field_name, "check": check},
        )
    return to_magnitude(bound, check)


def date_bound(bound: Any, check: str, field_name: str) -> datetime:
    """Normalize a declared date/datetime limit."""
    if bound is None or classify(bound) not in (ValueKind.DATE, ValueKind.DATETIME):
        raise RuleConfigurationError(
            f"Limit for '{field_name}' must be a date or datetime, got {type(bound).__name__}",
            context={"field_name": field_name, "check": check},
        )
    return to_datetime(bound, check)


def check_comparable(left: datetime, right: datetime, check: str, field_name: str) -> None:
    """Naive and timezone-aware datetimes cannot be ordered."""
    if (left.tzinfo is None) != (right.tzinfo is None):
        raise RuleConfigurationError(
            f"Cannot compare naive and timezone-aware datetimes for '{field_name}'",
            context={"field_name": field_name, "check": check},
        )


def compile_pattern(pattern: str | re.Pattern[str], field_name: str) -> re.Pattern[str]:
    if pattern is None:
        raise RuleConfigurationError(
            f"Pattern for '{field_name}' cannot be None", context={"field_name": field_name}
        )
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise RuleConfigurationError(
            f"Invalid pattern for '{field_name}': {e}",
            context={"field_name": field_name, "pattern": pattern},
        ) from e


def require_callable(predicate: Any, field_name: str) -> Callable[[Any], bool]:
    if not callable(predicate):
        raise RuleConfigurationError(
            f"Predicate for '{field_name}' must be callable, got {type(predicate).__name__}",
            context={"field_name": field_name},
        )
    return predicate


def fold(value: Any, case_sensitive: bool) -> tuple[bool, Any]:
    """Comparison form of a value.

    Booleans are tagged so that True and 1 never compare equal; text is
    case-folded when insensitive.
    """
    if not case_sensitive and isinstance(value, str):
        value = value.casefold()
    return (isinstance(value, bool), value)


def describe(value: Any) -> str:
    """Render a bound or candidate for a message."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.name
    return str(value)
