"""Tests for taskline.core.errors."""

from taskline.core.errors import (
    AbandonedError,
    AttributeDefinitionError,
    CoercionError,
    ConfigError,
    DeprecationError,
    ErrorCategory,
    ExecutionError,
    FrozenError,
    InvalidTransitionError,
    ParameterError,
    TasklineError,
    UndefinedMethodError,
    UnknownCallbackError,
    ValidationError,
)


class TestErrorCategory:
    """ErrorCategory enum."""

    def test_values(self):
        assert {c.value for c in ErrorCategory} == {"CONFIG", "EXECUTION", "PARAMETER", "FAULT", "INTERNAL"}


class TestTasklineError:
    """Base error behaviour."""

    def test_defaults(self):
        error = TasklineError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.category is ErrorCategory.INTERNAL
        assert error.cause is None

    def test_cause_chained(self):
        original = KeyError("x")
        error = TasklineError("wrapped", cause=original)
        assert error.__cause__ is original
        assert error.to_dict()["cause"] == "'x'"

    def test_to_dict(self):
        assert TasklineError("oops", category=ErrorCategory.CONFIG).to_dict() == {
            "error_type": "TasklineError",
            "message": "oops",
            "category": "CONFIG",
        }

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestHierarchy:
    """Each concrete error sits under its category base."""

    def test_config_errors(self):
        for cls in (UnknownCallbackError, DeprecationError):
            assert issubclass(cls, ConfigError)
        assert UnknownCallbackError("on_x").category is ErrorCategory.CONFIG

    def test_execution_errors(self):
        for cls in (UndefinedMethodError, InvalidTransitionError, FrozenError, AbandonedError):
            assert issubclass(cls, ExecutionError)

    def test_parameter_errors(self):
        for cls in (CoercionError, ValidationError, AttributeDefinitionError):
            assert issubclass(cls, ParameterError)
        assert ValidationError("x").category is ErrorCategory.PARAMETER

    def test_unknown_callback_message(self):
        error = UnknownCallbackError("on_exploded")
        assert error.event == "on_exploded"
        assert str(error) == "unknown callback on_exploded"

    def test_frozen_message(self):
        error = FrozenError([])
        assert str(error) == "cannot modify frozen list"
