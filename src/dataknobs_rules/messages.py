"""Message templates for validation failures.

Every failure message is produced from a template keyed by a format id. The
engine only depends on the ``MessageFormatter`` protocol, so a host can plug
in its own lookup (e.g., a translation layer). ``MessageCatalog`` is the
default English implementation.

Templates use ``str.format`` positional fields. Argument ``{0}`` is always the
field name; the remaining arguments depend on the check.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from dataknobs_config import ConfigurableBase

from .exceptions import MessageNotFoundError

logger = logging.getLogger(__name__)


DEFAULT_MESSAGES: dict[str, str] = {
    "required": "'{0}' is required.",
    "empty_text": "'{0}' cannot be an empty string.",
    "empty_collection": "'{0}' cannot be an empty collection.",
    "min_length": "'{0}' must be at least {1} long.",
    "max_length": "'{0}' must be at most {1} long.",
    "exact_length": "'{0}' must be exactly {1} long.",
    "greater_than": "'{0}' must be greater than {1}.",
    "less_than": "'{0}' must be less than {1}.",
    "greater_or_equal": "'{0}' must be greater than or equal to {1}.",
    "less_or_equal": "'{0}' must be less than or equal to {1}.",
    "inclusive_between": "'{0}' must be between {1} and {2} (inclusive).",
    "exclusive_between": "'{0}' must be between {1} and {2} (exclusive).",
    "not_positive": "'{0}' must not be positive.",
    "not_negative": "'{0}' must not be negative.",
    "before": "'{0}' must be on or before {1}.",
    "after": "'{0}' must be on or after {1}.",
    "date_in_range": "'{0}' must be between {1} and {2}.",
    "all": "Every item of '{0}' must satisfy the condition.",
    "any": "At least one item of '{0}' must satisfy the condition.",
    "unique": "'{0}' must contain only unique items.",
    "not_collection": "'{0}' is not a valid collection.",
    "in": "'{0}' must be one of: {1}.",
    "not_in": "'{0}' must not be one of: {1}.",
    "equal_to": "'{0}' must be equal to {1}.",
    "not_equal_to": "'{0}' must not be equal to {1}.",
    "starts_with": "'{0}' must start with '{1}'.",
    "ends_with": "'{0}' must end with '{1}'.",
    "contains": "'{0}' must contain '{1}'.",
    "matches": "'{0}' must match the pattern '{1}'.",
    "not_text": "'{0}' must be text.",
    "email_address": "'{0}' is not a valid email address.",
    "card_digits": "'{0}' must contain only digits.",
    "card_length": "'{0}' must have between {1} and {2} digits.",
    "card_invalid": "'{0}' is not a valid card number.",
    "condition": "'{0}' does not satisfy the condition.",
}


@runtime_checkable
class MessageFormatter(Protocol):
    """Anything that turns a format id and arguments into a message."""

    def format(self, format_id: str, *args: Any) -> str:
        ...


class MessageCatalog(ConfigurableBase):
    """Default message lookup with per-id overrides.

    Example:
        ```python
        catalog = MessageCatalog({"required": "Please fill in {0}."})
        catalog.format("required", "email")   # "Please fill in email."
        catalog.format("min_length", "name", 4)
        ```
    """

    def __init__(self, messages: Mapping[str, str] | None = None):
        """Initialize the catalog.

        Args:
            messages: Templates overriding (or extending) the defaults
        """
        self._templates = dict(DEFAULT_MESSAGES)
        if messages:
            self._templates.update(messages)

    def __contains__(self, format_id: object) -> bool:
        return format_id in self._templates

    def template(self, format_id: str) -> str:
        """Get the raw template for a format id.

        Raises:
            MessageNotFoundError: If the id is unknown
        """
        try:
            return self._templates[format_id]
        except KeyError:
            raise MessageNotFoundError(format_id) from None

    def format(self, format_id: str, *args: Any) -> str:
        """Render the template for a format id with positional arguments."""
        return self.template(format_id).format(*args)

    def with_overrides(self, messages: Mapping[str, str]) -> MessageCatalog:
        """Create a new catalog layering additional overrides on this one."""
        merged = dict(self._templates)
        merged.update(messages)
        logger.debug(f"Overriding message templates: {', '.join(sorted(messages))}")
        return MessageCatalog(merged)
