"""Middleware chain around task execution.

Each middleware receives the task and a ``next_`` continuation. It calls
``next_(task)`` at most once to proceed, or returns without calling it to
short-circuit. The registry folds its entries right to left, so the first
registered middleware is the outermost wrapper.

Two middleware shapes are supported:

- **classes** are instantiated for every call with the stored arguments,
  then invoked as ``instance.call(task, next_)``;
- **instances and functions** are shared; the stored arguments are appended
  to the call: ``mw.call(task, next_, *args, **kwargs)`` when ``call`` is
  defined, else ``mw(task, next_, *args, **kwargs)``.

Example::

    def audit(task, next_):
        result = next_(task)
        AUDIT.append(result.status)
        return result

    class ChargeCard(Task):
        pass

    ChargeCard.register("middleware", Runtime)
    ChargeCard.register("middleware", audit)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from taskline.execution.result import Result
    from taskline.task import Task

Continuation = Callable[["Task"], "Result"]


class Middleware(ABC):
    """Base class for class-style middleware."""

    @abstractmethod
    def call(self, task: Task, next_: Continuation) -> Result:
        """Wrap ``next_``; return the task's result."""


@dataclass(frozen=True)
class MiddlewareEntry:
    middleware: Any
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def invoke(self, task: Task, next_: Continuation) -> Result:
        if isinstance(self.middleware, type):
            instance = self.middleware(*self.args, **self.kwargs)
            return instance.call(task, next_)

        call = getattr(self.middleware, "call", None)
        if callable(call):
            return call(task, next_, *self.args, **self.kwargs)
        return self.middleware(task, next_, *self.args, **self.kwargs)


class MiddlewareRegistry:
    """Ordered middleware entries for one task class (or the global default)."""

    def __init__(self, entries: list[MiddlewareEntry] | None = None):
        self.entries: list[MiddlewareEntry] = list(entries or [])

    def dup(self) -> MiddlewareRegistry:
        return self.__class__(
            [MiddlewareEntry(e.middleware, e.args, dict(e.kwargs)) for e in self.entries]
        )

    def register(self, middleware: Any, *args: Any, **kwargs: Any) -> MiddlewareRegistry:
        self.entries.append(MiddlewareEntry(middleware, args, kwargs))
        return self

    def deregister(self, middleware: Any) -> MiddlewareRegistry:
        self.entries = [e for e in self.entries if e.middleware is not middleware]
        return self

    def call(self, task: Task, fn: Continuation) -> Result:
        """Run ``fn(task)`` wrapped by every registered middleware."""
        if not self.entries:
            return fn(task)
        return self._build(fn)(task)

    def _build(self, fn: Continuation) -> Continuation:
        chain = fn
        for entry in reversed(self.entries):
            chain = _wrap(entry, chain)
        return chain

    def __len__(self) -> int:
        return len(self.entries)


def _wrap(entry: MiddlewareEntry, next_: Continuation) -> Continuation:
    def wrapped(task: Task) -> Result:
        return entry.invoke(task, next_)

    return wrapped


__all__ = ["Continuation", "Middleware", "MiddlewareEntry", "MiddlewareRegistry"]
