"""
Structured error types for taskline.

Provides the typed error hierarchy used by the execution engine. Business
outcomes (skip/fail) are never represented by these classes directly; they
live on the ``Result``. The classes here cover configuration mistakes,
programming-contract violations, illegal state transitions, mutation of
finalized objects, and the parameter subsystem.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different concerns
    - **Error Chaining:** Preserve original exceptions while adding context
    - **Serializable:** Every error renders to a dict for structured logging

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       TasklineError                              │
        │  (category, cause)                                               │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError            ExecutionError          ParameterError   │
        │  (CONFIG)               (EXECUTION)             (PARAMETER)      │
        │     │                       │                        │           │
        │  UnknownCallbackError   UndefinedMethodError    CoercionError    │
        │  DeprecationError       InvalidTransitionError  ValidationError  │
        │                         FrozenError             AttributeDefini- │
        │                                                 tionError        │
        │                                                                  │
        │  Fault (taskline.execution.fault) ── Skipped / Failed           │
        └─────────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Catch UndefinedMethodError as a business failure
    ✅ DO: Let it propagate; it means ``work()`` was never implemented

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, taskline

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    CONFIG = "CONFIG"  # Unknown callback, bad settings
    EXECUTION = "EXECUTION"  # Lifecycle contract violations
    PARAMETER = "PARAMETER"  # Coercion/validation of task inputs
    FAULT = "FAULT"  # Control-flow signals (Skipped/Failed)
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


class TasklineError(Exception):
    """
    Base exception for all taskline errors.

    Subclasses set ``default_category`` to classify themselves. The optional
    ``cause`` is chained onto ``__cause__`` so tracebacks keep the original
    exception.

    Examples:
        >>> error = TasklineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["error_type"]
        'TasklineError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TasklineError):
    """Invalid or inconsistent configuration."""

    default_category = ErrorCategory.CONFIG


class UnknownCallbackError(ConfigError):
    """Raised when registering or invoking a callback for an unknown event."""

    def __init__(self, event: str):
        self.event = event
        super().__init__(f"unknown callback {event}")


class DeprecationError(ConfigError):
    """Raised when a task marked as deprecated with ``raise`` is executed."""


# =============================================================================
# EXECUTION ERRORS
# =============================================================================


class ExecutionError(TasklineError):
    """Base for lifecycle contract violations."""

    default_category = ErrorCategory.EXECUTION


class UndefinedMethodError(ExecutionError):
    """
    Raised when a task's business logic method was never implemented.

    This is a programming error, never a business outcome: the executor
    always re-raises it, in both raising and non-raising modes.
    """


class InvalidTransitionError(ExecutionError):
    """Raised when a Result state or status transition is not allowed."""


class FrozenError(ExecutionError):
    """Raised when mutating a task, result, context or chain after finalization."""

    def __init__(self, target: object):
        self.target = target
        super().__init__(f"cannot modify frozen {type(target).__name__}")


class AbandonedError(ExecutionError):
    """Raised when a worker the caller stopped waiting for writes to shared state."""

    def __init__(self, target: object):
        self.target = target
        super().__init__(f"cannot modify {type(target).__name__} from an abandoned execution")


# =============================================================================
# PARAMETER ERRORS
# =============================================================================


class ParameterError(TasklineError):
    """Base for attribute definition, coercion and validation errors."""

    default_category = ErrorCategory.PARAMETER


class CoercionError(ParameterError):
    """Raised by a coercion when a value cannot be converted to the requested type."""


class ValidationError(ParameterError):
    """Raised by a validator when a value does not satisfy its rule."""


class AttributeDefinitionError(ParameterError):
    """Raised when an attribute cannot be bound onto a task instance."""


__all__ = [
    "ErrorCategory",
    "TasklineError",
    "ConfigError",
    "UnknownCallbackError",
    "DeprecationError",
    "ExecutionError",
    "UndefinedMethodError",
    "InvalidTransitionError",
    "FrozenError",
    "AbandonedError",
    "ParameterError",
    "CoercionError",
    "ValidationError",
    "AttributeDefinitionError",
]
