"""Rule sets: one rule chain per declared field, validated together.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, TYPE_CHECKING

from .chain import ChainBuilder, RuleChain
from .descriptor import FieldDescriptor
from .exceptions import RuleConfigurationError, RuleSetSealedError
from .result import ValidationResult, ValidationState
from .settings import ValidatorSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from .messages import MessageFormatter

logger = logging.getLogger(__name__)


class RuleSet:
    """Declared rule chains for a record, with a validation entry point.

    Rules are declared once, then the set is sealed by the first call to
    ``validate()``. A sealed set can be validated any number of times; each
    run re-reads the field values and returns a new ``ValidationResult``.

    Example:
        ```python
        user = {"name": "Al", "email": "al@example.com"}
        rules = RuleSet()
        rules.rule_for("name", lambda: user["name"]).not_empty().min_length(4)
        rules.rule_for("email", lambda: user["email"]).email_address()

        result = rules.validate()
        result.is_valid     # False
        result.errors       # {"name": "'name' must be at least 4 long."}
        ```
    """

    def __init__(
        self,
        messages: MessageFormatter | None = None,
        settings: ValidatorSettings | None = None,
    ):
        """Initialize an empty rule set.

        Args:
            messages: Formatter for failure messages; defaults to the
                catalog built from ``settings``
            settings: Settings for the configurable checks
        """
        self.settings = settings or ValidatorSettings()
        self.messages = messages or self.settings.message_catalog()
        self._chains: list[RuleChain] = []
        self._sealed = False

    def __len__(self) -> int:
        return len(self._chains)

    @property
    def chains(self) -> tuple[RuleChain, ...]:
        return tuple(self._chains)

    @property
    def field_names(self) -> list[str]:
        return [chain.field.name for chain in self._chains]

    @property
    def sealed(self) -> bool:
        return self._sealed

    def declare_field(self, descriptor: FieldDescriptor) -> ChainBuilder:
        """Register a new rule chain for a field.

        Args:
            descriptor: The field to validate

        Returns:
            Builder for attaching checks to the new chain
        """
        if self._sealed:
            raise RuleSetSealedError("rule set")
        chain = RuleChain(descriptor)
        self._chains.append(chain)
        return ChainBuilder(chain, self.messages, self.settings)

    def rule_for(
        self,
        name: str,
        accessor: Callable[[], Any],
        field_type: str | None = None,
        item_type: type | None = None,
    ) -> ChainBuilder:
        """Declare a field from a name and accessor (fluent API)."""
        return self.declare_field(
            FieldDescriptor.create(name, accessor, field_type=field_type, item_type=item_type)
        )

    def seal(self) -> None:
        """Freeze the rule set and every chain in it."""
        if self._sealed:
            return
        for chain in self._chains:
            chain.seal()
        self._sealed = True
        logger.info(f"Sealed rule set with {len(self._chains)} field(s): {', '.join(self.field_names)}")

    def iter_states(self) -> Iterator[ValidationState]:
        """Evaluate the chains lazily, yielding one state per field in order."""
        self.seal()
        for chain in self._chains:
            yield chain.evaluate()

    def validate(self) -> ValidationResult:
        """Validate every declared field.

        Returns:
            ValidationResult with one state per declared chain
        """
        result = ValidationResult.from_states(self.iter_states())
        logger.debug(
            f"Validated {result.field_count} field(s): "
            f"{'valid' if result.is_valid else f'{len(result.failures)} failure(s)'}"
        )
        return result


class ModelValidator:
    """Base class for records that declare their own validation rules.

    Subclasses implement ``add_rules()`` and declare chains against their own
    attributes with ``rule_for()``. Rules are declared once per instance, on
    the first call to ``validate()`` (or ``rules``); every validation reads
    the attributes' current values.

    Example:
        ```python
        class User(ModelValidator):
            def __init__(self, name, email):
                self.name = name
                self.email = email

            def add_rules(self):
                self.rule_for("name").not_empty().min_length(4).max_length(20)
                self.rule_for("email").not_empty().email_address()

        User("Alice", "alice@example.com").validate().is_valid   # True
        ```
    """

    _rule_set: RuleSet | None = None
    _declaring: RuleSet | None = None
    validator_settings: ValidatorSettings | None = None

    def add_rules(self) -> None:
        """Declare the validation rules for this record."""
        raise NotImplementedError("Subclasses must implement add_rules method")

    @property
    def rules(self) -> RuleSet:
        """The declared rule set, built on first access.

        The set is cached only once ``add_rules()`` returns; if it raises,
        the next access declares the rules again from scratch.
        """
        if self._rule_set is None:
            self._declaring = RuleSet(settings=self.validator_settings)
            try:
                self.add_rules()
                self._rule_set = self._declaring
            finally:
                self._declaring = None
        return self._rule_set

    def rule_for(
        self,
        attribute: str,
        field_type: str | None = None,
        item_type: type | None = None,
    ) -> ChainBuilder:
        """Declare a rule chain for one of this record's attributes.

        Only valid while rules are being declared, i.e. from ``add_rules()``.
        """
        if self._declaring is None:
            raise RuleConfigurationError("rule_for() can only be called from add_rules()")
        return self._declaring.declare_field(
            FieldDescriptor.for_attribute(self, attribute, field_type=field_type, item_type=item_type)
        )

    def validate(self) -> ValidationResult:
        return self.rules.validate()
