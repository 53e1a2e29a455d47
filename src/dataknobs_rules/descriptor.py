"""Field descriptors binding a rule chain to a named, readable field.

A descriptor is the only link between the engine and the host record: a name
for messages, a type tag for reporting, and an accessor that returns the
field's current value every time it is called.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from .result import ValidationState

if TYPE_CHECKING:
    from collections.abc import Callable

_MISSING = object()


@dataclass(frozen=True)
class FieldDescriptor:
    """Identifies the field a rule chain validates.

    Attributes:
        name: Field name used in messages and results
        field_type: Type tag reported in every state for this field
        accessor: Zero-argument callable returning the current value
        item_type: Optional element type enforced by collection checks

    Example:
        ```python
        user = {"name": "Alice"}
        name = FieldDescriptor.create("name", lambda: user["name"])
        name.read()        # "Alice"
        name.field_type    # "str"
        ```
    """

    name: str
    field_type: str
    accessor: Callable[[], Any]
    item_type: type | None = None

    @classmethod
    def create(
        cls,
        name: str,
        accessor: Callable[[], Any],
        field_type: str | None = None,
        item_type: type | None = None,
    ) -> FieldDescriptor:
        """Create a descriptor, deriving the type tag from the current value.

        Args:
            name: Field name
            accessor: Zero-argument callable returning the field value
            field_type: Explicit type tag; read from the value if omitted
            item_type: Optional element type for collection checks

        Returns:
            FieldDescriptor instance
        """
        if not name:
            raise ValueError("Field name cannot be empty")
        if not callable(accessor):
            raise TypeError(f"Accessor for field '{name}' must be callable")
        if field_type is None:
            field_type = type_tag(accessor())
        return cls(name=name, field_type=field_type, accessor=accessor, item_type=item_type)

    @classmethod
    def for_attribute(
        cls,
        obj: Any,
        attribute: str,
        field_type: str | None = None,
        item_type: type | None = None,
    ) -> FieldDescriptor:
        """Create a descriptor reading an attribute of an object."""
        return cls.create(
            attribute,
            lambda: getattr(obj, attribute),
            field_type=field_type,
            item_type=item_type,
        )

    @classmethod
    def for_path(
        cls,
        record: Any,
        path: str,
        field_type: str | None = None,
        item_type: type | None = None,
    ) -> FieldDescriptor:
        """Create a descriptor reading a dot-notation path.

        Each path segment is looked up as a mapping key first and as an
        attribute otherwise. A missing segment reads as None.

        Args:
            record: Root object or mapping
            path: Dot-notation path (e.g., "address.city")
            field_type: Explicit type tag; read from the value if omitted
            item_type: Optional element type for collection checks

        Returns:
            FieldDescriptor named after the full path
        """
        return cls.create(
            path,
            lambda: resolve_path(record, path),
            field_type=field_type,
            item_type=item_type,
        )

    def read(self) -> Any:
        """Read the field's current value through the accessor."""
        return self.accessor()

    def success(self) -> ValidationState:
        return ValidationState.success(self.name, self.field_type)

    def failure(self, message: str) -> ValidationState:
        return ValidationState.failure(message, self.name, self.field_type)


def type_tag(value: Any) -> str:
    """Type tag for a value; ``"object"`` when the value is None."""
    if value is None:
        return "object"
    return type(value).__name__


def resolve_path(root: Any, path: str, default: Any = None) -> Any:
    """Traverse a dot-notation path through mappings and attributes."""
    current = root
    for part in path.split("."):
        if current is None:
            return default
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return default
    return current
