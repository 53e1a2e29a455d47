"""Pytest configuration for dataknobs_rules tests."""

import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dataknobs_rules import FieldDescriptor, MessageCatalog  # noqa: E402


class Holder:
    """Mutable single-value record used to drive accessors."""

    def __init__(self, value=None):
        self.value = value


@pytest.fixture
def holder():
    return Holder()


@pytest.fixture
def messages():
    return MessageCatalog()


@pytest.fixture
def make_field(holder):
    """Build a descriptor named 'value' reading from the holder."""

    def _make(value=None, field_type="object", item_type=None):
        holder.value = value
        return FieldDescriptor.create(
            "value", lambda: holder.value, field_type=field_type, item_type=item_type
        )

    return _make


@pytest.fixture
def user_record():
    return {
        "name": "Alice",
        "email": "alice@example.com",
        "age": 30,
        "tags": ["admin", "staff"],
        "address": {"city": "Springfield", "zip": "12345"},
    }
