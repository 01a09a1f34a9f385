"""
Correlate middleware - tag every task in a call tree with one correlation id.

The id lives in a ``ContextVar`` so nested tasks (and workflows calling
them) inherit it without passing it around. It is also bound into the
structlog context for the duration of the execution, so every log line a
task writes carries ``correlation_id``.

Resolution order for the id:

1. ``id=`` given as a callable → ``id(task)``
2. ``id=`` given as a string → a task method of that name if one exists,
   otherwise the literal string
3. the correlation id already active in this context
4. the id of the task's chain

Examples:
    >>> ChargeCard.register("middleware", Correlate)
    >>> with use_correlation_id("req-42"):
    ...     ChargeCard.call(amount=1).metadata["correlation_id"]
    'req-42'

Tags:
    correlation, tracing, middleware, logging, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from taskline.core.logging import LogContext
from taskline.core.utils import evaluate_condition
from taskline.execution.middleware import Continuation, Middleware

if TYPE_CHECKING:
    from taskline.execution.result import Result
    from taskline.task import Task

_correlation: ContextVar[str | None] = ContextVar("taskline_correlation_id", default=None)


def current_correlation_id() -> str | None:
    return _correlation.get()


@contextmanager
def use_correlation_id(correlation_id: str | None) -> Iterator[str | None]:
    """Make ``correlation_id`` the active id inside the block."""
    token = _correlation.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation.reset(token)


class Correlate(Middleware):
    """Assign a correlation id and expose it in metadata and logs."""

    def __init__(self, id: Any = None, *, if_: Any = None, unless: Any = None):
        self.id = id
        self.if_ = if_
        self.unless = unless

    def resolve(self, task: Task) -> str:
        ref = self.id
        if isinstance(ref, str):
            method = getattr(task, ref, None)
            return str(method()) if callable(method) else ref
        if callable(ref):
            return str(ref(task))
        return current_correlation_id() or task.chain.id

    def call(self, task: Task, next_: Continuation) -> Result:
        if not evaluate_condition(task, self.if_, self.unless):
            return next_(task)

        correlation_id = self.resolve(task)
        with use_correlation_id(correlation_id), LogContext(correlation_id=correlation_id):
            task.result.metadata["correlation_id"] = correlation_id
            return next_(task)


__all__ = ["Correlate", "current_correlation_id", "use_correlation_id"]
