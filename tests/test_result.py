"""Tests for the validation result model."""

import pytest

from dataknobs_rules import RuleValidationError, ValidationResult, ValidationState


class TestValidationState:
    """Test ValidationState construction and invariants."""

    def test_success_state(self):
        """Test creating a passing state."""
        state = ValidationState.success("name", "str")
        assert state.is_valid is True
        assert state.error_message is None
        assert state.field_name == "name"
        assert state.field_type == "str"
        assert bool(state) is True

    def test_failure_state(self):
        """Test creating a failed state."""
        state = ValidationState.failure("'name' is required.", "name", "str")
        assert state.is_valid is False
        assert state.error_message == "'name' is required."
        assert bool(state) is False

    def test_valid_state_rejects_message(self):
        with pytest.raises(ValueError):
            ValidationState(is_valid=True, error_message="oops", field_name="a", field_type="str")

    def test_invalid_state_requires_message(self):
        with pytest.raises(ValueError):
            ValidationState(is_valid=False, error_message=None, field_name="a", field_type="str")
        with pytest.raises(ValueError):
            ValidationState(is_valid=False, error_message="", field_name="a", field_type="str")

    def test_state_is_immutable(self):
        state = ValidationState.success("name", "str")
        with pytest.raises(AttributeError):
            state.is_valid = False

    def test_with_message(self):
        """Test relabeling a failure creates a new state."""
        state = ValidationState.failure("original", "name", "str")
        relabeled = state.with_message("custom")
        assert relabeled.error_message == "custom"
        assert relabeled.field_name == "name"
        assert state.error_message == "original"

        passing = ValidationState.success("name", "str")
        assert passing.with_message("custom") is passing


class TestValidationResult:
    """Test ValidationResult aggregation."""

    def test_all_valid(self):
        result = ValidationResult.from_states([
            ValidationState.success("a", "str"),
            ValidationState.success("b", "int"),
        ])
        assert result.is_valid is True
        assert result.field_count == 2
        assert len(result.field_states) == 2
        assert result.failures == ()
        assert result.errors == {}
        assert bool(result) is True

    def test_one_failure_invalidates(self):
        result = ValidationResult.from_states([
            ValidationState.success("a", "str"),
            ValidationState.failure("'b' is required.", "b", "int"),
        ])
        assert result.is_valid is False
        assert result.field_count == 2
        assert [s.field_name for s in result.failures] == ["b"]
        assert result.errors == {"b": "'b' is required."}

    def test_empty_result_is_valid(self):
        result = ValidationResult.from_states([])
        assert result.is_valid is True
        assert result.field_count == 0

    def test_iteration_preserves_order(self):
        states = [ValidationState.success(name, "str") for name in ("c", "a", "b")]
        result = ValidationResult.from_states(states)
        assert [s.field_name for s in result] == ["c", "a", "b"]

    def test_inconsistent_count_rejected(self):
        with pytest.raises(ValueError):
            ValidationResult(is_valid=True, field_count=3, field_states=(ValidationState.success("a", "str"),))

    def test_inconsistent_validity_rejected(self):
        with pytest.raises(ValueError):
            ValidationResult(
                is_valid=True,
                field_count=1,
                field_states=(ValidationState.failure("bad", "a", "str"),),
            )

    def test_structural_equality(self):
        first = ValidationResult.from_states([ValidationState.failure("bad", "a", "str")])
        second = ValidationResult.from_states([ValidationState.failure("bad", "a", "str")])
        assert first == second

    def test_raise_if_invalid(self):
        valid = ValidationResult.from_states([ValidationState.success("a", "str")])
        assert valid.raise_if_invalid() is valid

        invalid = ValidationResult.from_states([ValidationState.failure("'a' is required.", "a", "str")])
        with pytest.raises(RuleValidationError) as exc_info:
            invalid.raise_if_invalid()
        assert exc_info.value.errors == {"a": "'a' is required."}
        assert exc_info.value.context == {"errors": {"a": "'a' is required."}}
        assert "'a' is required." in str(exc_info.value)

    def test_to_dict(self):
        result = ValidationResult.from_states([ValidationState.failure("bad", "a", "str")])
        assert result.to_dict() == {
            "is_valid": False,
            "field_count": 1,
            "field_states": [
                {"is_valid": False, "error_message": "bad", "field_name": "a", "field_type": "str"}
            ],
        }
