"""Small helpers shared by the registries and the executor."""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from typing import Any


def generate_id() -> str:
    """Return a new random identifier for tasks and chains."""
    return str(uuid.uuid4())


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def call_on(target: Any, ref: str | Callable[..., Any], *args: Any) -> Any:
    """Invoke ``ref`` against ``target``.

    A string names a method on ``target`` and is called with ``args``; any
    other callable is called with ``target`` followed by ``args``.
    """
    if isinstance(ref, str):
        return getattr(target, ref)(*args)
    if callable(ref):
        return ref(target, *args)
    raise TypeError(f"cannot evaluate {ref!r}")


def evaluate(target: Any, condition: Any) -> bool:
    """Evaluate a single guard value against ``target``."""
    if condition is None or isinstance(condition, bool):
        return bool(condition)
    return bool(call_on(target, condition))


def evaluate_condition(target: Any, if_: Any = None, unless: Any = None) -> bool:
    """Return True when the ``if_``/``unless`` pair allows ``target`` to proceed.

    ``None`` means the guard was not given.
    """
    if if_ is not None and not evaluate(target, if_):
        return False
    if unless is not None and evaluate(target, unless):
        return False
    return True


def normalize_statuses(statuses: Any) -> tuple[str, ...]:
    """Flatten a status or collection of statuses into unique strings, in order."""
    if statuses is None:
        return ()
    if isinstance(statuses, str):
        statuses = [statuses]

    seen: dict[str, None] = {}
    for status in statuses:
        seen.setdefault(str(getattr(status, "value", status)), None)
    return tuple(seen)


__all__ = [
    "call_on",
    "evaluate",
    "evaluate_condition",
    "generate_id",
    "monotonic_ms",
    "normalize_statuses",
]
