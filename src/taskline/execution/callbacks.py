"""Callback Registry - guarded hooks bound to lifecycle events.

Manifesto:
Hooks let cross-cutting behaviour (audit trails, notifications, metrics)
observe a task without the task knowing about it. Every hook is resolved
once, at registration, into one of three invokers; dispatch never has to
re-inspect what kind of callable it holds.

ARCHITECTURE
────────────
::

    CallbackRegistry
      ├── .register(event, *callables, if_=, unless=)  ─ append an entry
      ├── .deregister(event, *callables)               ─ drop callables
      ├── .invoke(event, task)                         ─ run matching entries
      └── .dup()                                       ─ copy for subclasses

    Invokers (resolved at registration):
      MethodRef       "send_receipt"           → task.send_receipt()
      Closure         lambda task: ...         → fn(task)
      CallableObject  obj with .call(t, e)     → obj.call(task, event)

    Events:
      before_validation  after_validation  before_execution  after_execution
      on_executed  on_good  on_bad  on_<state>  on_<status>

BEST PRACTICES
──────────────
- Keep callbacks side-effect only; outcome changes belong in ``work()``.
- Subclass ``Callback`` for reusable hooks that need configuration.

Tags:
    taskline, callbacks, hooks, lifecycle, registry

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from taskline.core.errors import UnknownCallbackError
from taskline.core.utils import evaluate_condition
from taskline.execution.result import STATES, STATUSES

if TYPE_CHECKING:
    from taskline.task import Task

EVENTS: tuple[str, ...] = (
    "before_validation",
    "after_validation",
    "before_execution",
    "after_execution",
    "on_executed",
    "on_good",
    "on_bad",
    *(f"on_{status}" for status in STATUSES),
    *(f"on_{state}" for state in STATES),
)


class Callback(ABC):
    """Base class for reusable callback objects."""

    @abstractmethod
    def call(self, task: Task, event: str) -> Any:
        """Run the hook for ``event``."""


@dataclass(frozen=True)
class MethodRef:
    ref: str

    def invoke(self, task: Task, event: str) -> None:
        getattr(task, self.ref)()


@dataclass(frozen=True)
class Closure:
    ref: Callable[[Task], Any]

    def invoke(self, task: Task, event: str) -> None:
        self.ref(task)


@dataclass(frozen=True)
class CallableObject:
    ref: Any

    def invoke(self, task: Task, event: str) -> None:
        self.ref.call(task, event)


Invoker = MethodRef | Closure | CallableObject


def resolve_callable(ref: Any) -> Invoker:
    """Wrap ``ref`` in the invoker matching its shape."""
    if isinstance(ref, type) and issubclass(ref, Callback):
        ref = ref()

    if isinstance(ref, str):
        return MethodRef(ref)
    if isinstance(ref, Callback) or callable(getattr(ref, "call", None)):
        return CallableObject(ref)
    if callable(ref):
        return Closure(ref)
    raise TypeError(f"cannot use {ref!r} as a callback")


@dataclass(frozen=True)
class CallbackEntry:
    callables: tuple[Invoker, ...]
    if_: Any = None
    unless: Any = None


def _matches_any(invoker: Invoker, refs: tuple[Any, ...]) -> bool:
    return any(invoker.ref is ref or (isinstance(ref, str) and invoker.ref == ref) for ref in refs)


def _check_event(event: str) -> str:
    if event not in EVENTS:
        raise UnknownCallbackError(event)
    return event


class CallbackRegistry:
    """Event name → ordered list of guarded callback entries."""

    def __init__(self, registry: dict[str, list[CallbackEntry]] | None = None):
        self.registry: dict[str, list[CallbackEntry]] = registry or {}

    def dup(self) -> CallbackRegistry:
        return self.__class__({event: list(entries) for event, entries in self.registry.items()})

    def register(
        self,
        event: str,
        *callables: Any,
        if_: Any = None,
        unless: Any = None,
    ) -> CallbackRegistry:
        _check_event(event)
        if not callables:
            raise ValueError(f"no callables given for {event}")

        entry = CallbackEntry(tuple(resolve_callable(c) for c in callables), if_, unless)
        self.registry.setdefault(event, []).append(entry)
        return self

    def deregister(self, event: str, *callables: Any) -> CallbackRegistry:
        """Remove ``callables`` from ``event``; with none given, clear the event."""
        _check_event(event)
        if not callables:
            self.registry.pop(event, None)
            return self

        entries = []
        for entry in self.registry.get(event, []):
            kept = tuple(c for c in entry.callables if not _matches_any(c, callables))
            if kept:
                entries.append(CallbackEntry(kept, entry.if_, entry.unless))
        self.registry[event] = entries
        return self

    def invoke(self, event: str, task: Task) -> None:
        _check_event(event)
        for entry in list(self.registry.get(event, ())):
            if not evaluate_condition(task, entry.if_, entry.unless):
                continue
            for invoker in entry.callables:
                invoker.invoke(task, event)

    def entries(self, event: str) -> list[CallbackEntry]:
        return list(self.registry.get(_check_event(event), ()))

    def __contains__(self, event: object) -> bool:
        return bool(self.registry.get(event))  # type: ignore[arg-type]


__all__ = [
    "EVENTS",
    "Callback",
    "CallableObject",
    "CallbackEntry",
    "CallbackRegistry",
    "Closure",
    "MethodRef",
    "resolve_callable",
]
