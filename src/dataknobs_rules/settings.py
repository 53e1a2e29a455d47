"""Engine settings and configuration loading."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from dataknobs_config import Config, ConfigurableBase

from .exceptions import RuleConfigurationError
from .messages import MessageCatalog

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_PATTERN = r"^(?!\.)[\w.-]{1,64}@[a-zA-Z\d-]{1,255}\.[a-zA-Z]{2,}$"

SETTINGS_TYPE = "validator"


@dataclass
class ValidatorSettings(ConfigurableBase):
    """Tunable behavior of the built-in checks.

    Attributes:
        messages: Message template overrides keyed by format id
        email_pattern: Regex an email address must fully match
        card_min_length: Minimum number of card digits
        card_max_length: Maximum number of card digits
        case_sensitive: Default text comparison mode for membership/equality

    Example Configuration:
        validator:
          - name: default
            card_min_length: 12
            messages:
              required: "{0} is mandatory"
    """

    messages: dict[str, str] = field(default_factory=dict)
    email_pattern: str = DEFAULT_EMAIL_PATTERN
    card_min_length: int = 13
    card_max_length: int = 19
    case_sensitive: bool = True

    def __post_init__(self) -> None:
        if self.card_min_length < 1 or self.card_min_length > self.card_max_length:
            raise RuleConfigurationError(
                f"Invalid card length bounds: {self.card_min_length}..{self.card_max_length}",
                context={"card_min_length": self.card_min_length, "card_max_length": self.card_max_length},
            )
        try:
            re.compile(self.email_pattern)
        except re.error as e:
            raise RuleConfigurationError(
                f"Invalid email pattern: {e}", context={"email_pattern": self.email_pattern}
            ) from e

    @classmethod
    def from_config(cls, config: dict) -> ValidatorSettings:
        """Create settings from a configuration dictionary.

        Keys that are not settings (such as the ``type`` and ``name``
        bookkeeping added by ``dataknobs_config.Config``) are ignored.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known - {"type", "name"}
        if unknown:
            raise RuleConfigurationError(
                f"Unknown validator settings: {', '.join(sorted(unknown))}",
                context={"unknown": sorted(unknown)},
            )
        return cls(**{key: value for key, value in config.items() if key in known})

    def message_catalog(self) -> MessageCatalog:
        """Build the message catalog for these settings."""
        return MessageCatalog(self.messages)


def load_settings(source: Union[str, Path, dict], name: Union[str, int] = 0) -> ValidatorSettings:
    """Load validator settings from a YAML/JSON file or a dictionary.

    The source is read through ``dataknobs_config.Config``, so it follows the
    usual layout of named entries under a type key::

        validator:
          - name: strict
            case_sensitive: true

    Args:
        source: Path to a configuration file, or a configuration dictionary
        name: Name or index of the ``validator`` entry to use

    Returns:
        ValidatorSettings; defaults when the source has no ``validator`` entry
    """
    config = Config(source)
    if SETTINGS_TYPE not in config.get_types():
        logger.debug("No validator settings found, using defaults")
        return ValidatorSettings()

    entry: dict[str, Any] = config.get(SETTINGS_TYPE, name)
    logger.debug(f"Loaded validator settings '{entry.get('name')}'")
    return ValidatorSettings.from_config(entry)
