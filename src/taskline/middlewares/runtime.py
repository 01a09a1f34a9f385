"""Runtime middleware - record wall time of the wrapped execution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from taskline.core.utils import evaluate_condition, monotonic_ms
from taskline.execution.middleware import Continuation, Middleware

if TYPE_CHECKING:
    from taskline.execution.result import Result
    from taskline.task import Task


class Runtime(Middleware):
    """Store the elapsed milliseconds in ``result.metadata["runtime"]``."""

    def __init__(self, *, if_: Any = None, unless: Any = None):
        self.if_ = if_
        self.unless = unless

    def call(self, task: Task, next_: Continuation) -> Result:
        if not evaluate_condition(task, self.if_, self.unless):
            return next_(task)

        start = monotonic_ms()
        try:
            return next_(task)
        finally:
            task.result.metadata["runtime"] = round(monotonic_ms() - start, 3)


__all__ = ["Runtime"]
