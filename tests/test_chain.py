"""Tests for rule chains and the fluent chain builder."""

from datetime import date

import pytest

from dataknobs_rules import (
    ChainBuilder,
    FieldDescriptor,
    RuleChain,
    RuleConfigurationError,
    RuleSetSealedError,
    ValidationState,
    ValidatorSettings,
)


class Spy:
    """Check that records every value it sees."""

    def __init__(self, field, passes=True):
        self.field = field
        self.passes = passes
        self.calls = []

    def __call__(self, value):
        self.calls.append(value)
        if self.passes:
            return self.field.success()
        return self.field.failure("spy failed")


@pytest.fixture
def chain(make_field):
    return RuleChain(make_field())


@pytest.fixture
def builder(chain):
    return ChainBuilder(chain)


class TestRuleChain:
    """Test ordered, fail-fast evaluation."""

    def test_empty_chain_passes(self, chain):
        state = chain.evaluate()
        assert state == ValidationState.success("value", "object")

    def test_stops_at_first_failure(self, chain, holder):
        first = Spy(chain.field, passes=False)
        second = Spy(chain.field)
        chain.add_check(first).add_check(second)

        holder.value = "x"
        state = chain.evaluate()

        assert state.error_message == "spy failed"
        assert first.calls == ["x"]
        assert second.calls == []

    def test_runs_checks_in_order(self, chain, holder):
        order = []

        def make(label):
            def check(value):
                order.append(label)
                return chain.field.success()
            return check

        for label in ("a", "b", "c"):
            chain.add_check(make(label))
        chain.evaluate()
        assert order == ["a", "b", "c"]

    def test_reads_value_once_per_evaluation(self, holder):
        reads = []

        def accessor():
            reads.append(holder.value)
            return holder.value

        field = FieldDescriptor.create("value", accessor, field_type="str")
        chain = RuleChain(field)
        spies = [Spy(field), Spy(field), Spy(field)]
        for spy in spies:
            chain.add_check(spy)

        holder.value = "first"
        chain.evaluate()
        assert reads == ["first"]

        holder.value = "second"
        chain.evaluate()
        assert reads == ["first", "second"]
        assert all(spy.calls == ["first", "second"] for spy in spies)

    def test_generator_value_is_shared_by_every_check(self):
        field = FieldDescriptor.create("xs", lambda: (x for x in [1, 2, 3]), field_type="generator")
        chain = RuleChain(field)
        ChainBuilder(chain).all_match(lambda v: v > 0).any_match(lambda v: v == 2).contains(3)
        assert chain.evaluate().is_valid

    def test_generator_value_for_override_message(self):
        field = FieldDescriptor.create("xs", lambda: iter([]), field_type="iterator")
        chain = RuleChain(field)
        ChainBuilder(chain).any_match(lambda v: True)
        assert chain.override_message("Need one").error_message == "Need one"

    def test_non_state_return_is_a_configuration_error(self, chain):
        chain.add_check(lambda value: True)
        with pytest.raises(RuleConfigurationError):
            chain.evaluate()

    def test_non_callable_check_rejected(self, chain):
        with pytest.raises(RuleConfigurationError):
            chain.add_check("not a check")

    def test_sealed_chain_rejects_checks(self, chain):
        chain.seal()
        assert chain.sealed
        with pytest.raises(RuleSetSealedError):
            chain.add_check(lambda value: chain.field.success())

    def test_override_message_uses_first_check(self, chain, holder):
        builder = ChainBuilder(chain)
        builder.not_empty().min_length(4)

        holder.value = ""
        state = chain.override_message("Name please")
        assert state.error_message == "Name please"
        assert state.field_name == "value"

        # First check passes, so there is nothing to relabel
        holder.value = "ab"
        assert chain.override_message("Name please") is None
        assert not chain.evaluate().is_valid

    def test_override_message_on_empty_chain(self, chain):
        assert chain.override_message("anything") is None


class TestChainBuilder:
    """Test the fluent builder."""

    def test_methods_return_builder(self, builder):
        assert builder.not_null() is builder
        assert builder.min_length(1).max_length(5) is builder
        assert len(builder.chain) == 3

    def test_not_empty_then_length(self, builder, holder):
        builder.not_empty().min_length(4).max_length(20)

        holder.value = None
        assert builder.chain.evaluate().error_message == "'value' is required."
        holder.value = ""
        assert builder.chain.evaluate().error_message == "'value' cannot be an empty string."
        holder.value = "abc"
        assert builder.chain.evaluate().error_message == "'value' must be at least 4 long."
        holder.value = "Alice"
        assert builder.chain.evaluate().is_valid

    def test_with_message_replaces_last_check_message(self, builder, holder):
        builder.not_empty().min_length(4).with_message("Too short")

        holder.value = ""
        assert builder.chain.evaluate().error_message == "'value' cannot be an empty string."
        holder.value = "abc"
        assert builder.chain.evaluate().error_message == "Too short"
        holder.value = "abcd"
        assert builder.chain.evaluate().is_valid

    def test_with_message_requires_a_check(self, builder):
        with pytest.raises(RuleConfigurationError):
            builder.with_message("orphan")

    def test_between_variants(self, builder, holder):
        builder.exclusive_between(0, 10)
        holder.value = 10
        assert builder.chain.evaluate().error_message == "'value' must be between 0 and 10 (exclusive)."

    def test_date_rules(self, builder, holder):
        builder.after(date(2020, 1, 1)).before(date(2020, 12, 31))
        holder.value = date(2021, 3, 1)
        assert builder.chain.evaluate().error_message == "'value' must be on or before 2020-12-31."

    def test_case_sensitivity_defaults_to_settings(self, chain, holder):
        builder = ChainBuilder(chain, settings=ValidatorSettings(case_sensitive=False))
        builder.is_in(["Red", "Green"])
        holder.value = "red"
        assert chain.evaluate().is_valid

    def test_explicit_case_sensitivity_wins(self, chain, holder):
        builder = ChainBuilder(chain, settings=ValidatorSettings(case_sensitive=False))
        builder.equal_to("Yes", case_sensitive=True)
        holder.value = "yes"
        assert not chain.evaluate().is_valid

    def test_email_uses_settings_pattern(self, chain, holder):
        settings = ValidatorSettings(email_pattern=r"[^@]+@[^@]+")
        ChainBuilder(chain, settings=settings).email_address()
        holder.value = "a@b"
        assert chain.evaluate().is_valid

    def test_credit_card_uses_settings_bounds(self, chain, holder):
        settings = ValidatorSettings(card_min_length=16, card_max_length=16)
        ChainBuilder(chain, settings=settings).credit_card()
        holder.value = "79927398713"
        assert chain.evaluate().error_message == "'value' must have between 16 and 16 digits."

    def test_settings_messages_used(self, chain, holder):
        settings = ValidatorSettings(messages={"required": "{0} is mandatory"})
        ChainBuilder(chain, settings=settings).not_null()
        holder.value = None
        assert chain.evaluate().error_message == "value is mandatory"

    def test_must(self, builder, holder):
        builder.not_null().must(lambda v: v.isupper(), "Shout it")
        holder.value = "quiet"
        assert builder.chain.evaluate().error_message == "Shout it"
        holder.value = "LOUD"
        assert builder.chain.evaluate().is_valid

    def test_custom_check(self, builder, holder):
        builder.add_check(lambda v: builder.field.failure("custom") if v == 13 else builder.field.success())
        holder.value = 13
        assert builder.chain.evaluate().error_message == "custom"

    def test_bad_arguments_fail_at_declaration(self, builder):
        with pytest.raises(RuleConfigurationError):
            builder.min_length(-1)
        with pytest.raises(RuleConfigurationError):
            builder.between(10, 1)
        with pytest.raises(RuleConfigurationError):
            builder.matches("[")
        with pytest.raises(RuleConfigurationError):
            builder.must(lambda v: False, "")
        assert len(builder.chain) == 0
