"""
Tests for the data context.

Tests fact registration, retraction, path operations and change tracking.
"""

import pytest

from deferred_models import Invoice
from fact_models import Account, FrozenAccount, Point, User
from rulekit.core.errors import (
    ArgumentTypeMismatchError,
    AttributeNotFoundError,
    FactNotFoundError,
    FactRetractedError,
    InvalidFactKindError,
    TypeMismatchError,
)
from rulekit.facts import DataContext, Kind, new_data_context


class TestAddFacts:
    """Test registering facts."""

    def test_new_context_is_empty(self):
        """A new context has no facts and no state."""
        ctx = new_data_context()
        assert isinstance(ctx, DataContext)
        assert ctx.facts() == {}
        assert ctx.retracted() == []
        assert ctx.has_variable_change() is False
        assert ctx.is_complete() is False

    @pytest.mark.parametrize(
        "value",
        [None, 1, 2.5, True, "text", b"raw", (1, 2), [1], {"a": 1}, frozenset()],
    )
    def test_rejects_values(self, value):
        """Scalars and containers are not facts."""
        ctx = new_data_context()
        with pytest.raises(InvalidFactKindError):
            ctx.add("Fact", value)

    def test_rejects_frozen_objects(self):
        """Frozen dataclasses and models cannot be mutated in place."""
        ctx = new_data_context()
        with pytest.raises(InvalidFactKindError):
            ctx.add("Point", Point(1, 2))
        with pytest.raises(InvalidFactKindError):
            ctx.add("Account", FrozenAccount(owner="Ann"))

    def test_rejects_classes_and_functions(self):
        """Classes and functions are not facts."""
        ctx = new_data_context()
        with pytest.raises(InvalidFactKindError):
            ctx.add("User", User)
        with pytest.raises(InvalidFactKindError):
            ctx.add("len", len)

    def test_accepts_objects(self, user, counter):
        """Dataclasses, plain objects and models are facts."""
        ctx = new_data_context()
        ctx.add("User", user)
        ctx.add("Counter", counter)
        ctx.add("Account", Account(owner="Ann"))
        assert "User" in ctx
        assert set(ctx.facts()) == {"User", "Counter", "Account"}

    @pytest.mark.parametrize("name", ["", "User.name"])
    def test_rejects_invalid_names(self, user, name):
        """Names must be non-empty and dot-free."""
        with pytest.raises(ValueError):
            new_data_context().add(name, user)

    def test_add_overwrites(self, ctx):
        """Adding under an existing name replaces the binding."""
        other = User(name="Holmes")
        ctx.add("User", other)
        assert ctx.get_value("User") is other

    def test_reads_reflect_external_mutation(self, ctx, user):
        """The context holds a reference, not a copy."""
        user.name = "Changed Outside"
        assert ctx.get_value("User.name") == "Changed Outside"


class TestFactNotFound:
    """Test addressing facts that were never added."""

    @pytest.mark.parametrize("path", ["Missing", "Missing.name"])
    def test_all_operations(self, ctx, path):
        """Every path operation fails with FactNotFoundError."""
        with pytest.raises(FactNotFoundError):
            ctx.get_value(path)
        with pytest.raises(FactNotFoundError):
            ctx.get_type(path)
        with pytest.raises(FactNotFoundError):
            ctx.set_value(path, "x")
        with pytest.raises(FactNotFoundError):
            ctx.exec_method(path, [])

    def test_message_names_fact(self, ctx):
        """The error names the missing fact."""
        with pytest.raises(FactNotFoundError) as excinfo:
            ctx.get_value("Missing.name")
        assert "Missing" in str(excinfo.value)
        assert excinfo.value.name == "Missing"


class TestRetraction:
    """Test retracting and restoring facts."""

    def test_retracted_fact_is_inaccessible(self, ctx):
        """Every path operation on a retracted fact fails."""
        ctx.retract("User")
        assert ctx.is_retracted("User")
        with pytest.raises(FactRetractedError):
            ctx.get_value("User.name")
        with pytest.raises(FactRetractedError):
            ctx.get_type("User.name")
        with pytest.raises(FactRetractedError):
            ctx.set_value("User.name", "x")
        with pytest.raises(FactRetractedError):
            ctx.exec_method("User.get_name")

    def test_reset_restores(self, ctx):
        """reset() makes retracted facts available again."""
        ctx.retract("User")
        ctx.reset()
        assert not ctx.is_retracted("User")
        assert ctx.get_value("User.name") == "Watson"

    def test_retraction_keeps_binding(self, ctx, user):
        """Retraction does not remove the fact."""
        ctx.retract("User")
        assert "User" in ctx
        assert ctx.facts()["User"] is user

    def test_retracted_order_without_duplicates(self, ctx):
        """retracted() lists names once, in retraction order."""
        ctx.retract("User")
        ctx.retract("SomeRule")
        ctx.retract("User")
        assert ctx.retracted() == ["User", "SomeRule"]

    def test_other_facts_unaffected(self, ctx):
        """Only the retracted name is hidden."""
        ctx.retract("Audit")
        assert ctx.get_value("User.name") == "Watson"


class TestPathOperations:
    """Test path operations through the context."""

    def test_get_value_of_fact(self, ctx, user):
        """A one-segment path returns the fact itself."""
        assert ctx.get_value("User") is user

    def test_get_nested_value(self, ctx):
        """Nested fields resolve through the fact."""
        assert ctx.get_value("User.address.city") == "London"

    def test_get_type(self, ctx):
        """Types resolve for facts and fields."""
        assert ctx.get_type("User").kind is Kind.STRUCT
        assert ctx.get_type("User.name").kind is Kind.STRING
        assert ctx.get_type("User.score").kind is Kind.FLOAT

    def test_set_value(self, ctx, user):
        """Writes land on the caller's object."""
        ctx.set_value("User.address.city", "Paris")
        assert user.address.city == "Paris"

    def test_exec_method(self, ctx, user):
        """Methods are invoked with the given arguments."""
        assert ctx.exec_method("User.get_name") == "Watson"
        ctx.exec_method("User.set_name", ["FromRuleScope"])
        assert user.name == "FromRuleScope"

    def test_trailing_dot(self, ctx):
        """An empty segment is not a field."""
        with pytest.raises(AttributeNotFoundError):
            ctx.get_value("User.")


class TestChangeTracking:
    """Test the variable change counter."""

    def test_set_value_counts_once(self, ctx):
        """Each successful write increments the counter by one."""
        ctx.set_value("User.name", "A")
        assert ctx.variable_change_count == 1
        ctx.set_value("User.age", 31)
        assert ctx.variable_change_count == 2
        assert ctx.has_variable_change()

    def test_failed_set_value_does_not_count(self, ctx):
        """Failed writes leave the counter alone."""
        with pytest.raises(TypeMismatchError):
            ctx.set_value("User.age", "old")
        with pytest.raises(AttributeNotFoundError):
            ctx.set_value("User.unknown", 1)
        with pytest.raises(FactNotFoundError):
            ctx.set_value("Missing.name", "x")
        ctx.retract("User")
        with pytest.raises(FactRetractedError):
            ctx.set_value("User.name", "x")
        assert ctx.variable_change_count == 0

    def test_reads_and_calls_do_not_count(self, ctx):
        """Reads and method calls are not variable changes."""
        ctx.get_value("User.name")
        ctx.get_type("User.name")
        ctx.exec_method("User.set_name", ["B"])
        assert ctx.has_variable_change() is False

    def test_manual_increment_and_reset(self, ctx):
        """The counter can be bumped and cleared explicitly."""
        ctx.increment_variable_change_count()
        assert ctx.has_variable_change()
        ctx.reset_variable_change_count()
        assert ctx.variable_change_count == 0


class TestCompletion:
    """Test the completion flag and full reset."""

    def test_complete(self, ctx):
        """complete() sets the flag."""
        ctx.complete()
        assert ctx.is_complete()

    def test_reset_does_not_clear_completion(self, ctx):
        """reset() only touches the retraction set."""
        ctx.complete()
        ctx.reset()
        assert ctx.is_complete()

    def test_reset_all_fields_zero(self, ctx):
        """Full teardown clears facts and execution state."""
        ctx.retract("User")
        ctx.set_value("Audit.entries", ["x"])
        ctx.complete()

        ctx.reset_all_fields_zero()

        assert ctx.facts() == {}
        assert ctx.retracted() == []
        assert ctx.variable_change_count == 0
        assert ctx.is_complete() is False
        with pytest.raises(FactNotFoundError):
            ctx.get_value("User")

    def test_type_checks_with_deferred_annotations(self):
        """Writes and calls stay checked on facts using TYPE_CHECKING imports."""
        ctx = new_data_context()
        ctx.add("Inv", Invoice(number=1))

        with pytest.raises(TypeMismatchError):
            ctx.set_value("Inv.number", "not an int")
        with pytest.raises(ArgumentTypeMismatchError):
            ctx.exec_method("Inv.scale", ["x"])
        assert ctx.variable_change_count == 0
