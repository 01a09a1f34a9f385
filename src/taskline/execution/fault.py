"""Control-flow exceptions raised when a result halts.

A ``Fault`` is never a bug report. It wraps exactly one non-successful
``Result`` and exists only to unwind the stack to the nearest executor or
workflow frame. ``Skipped`` and ``Failed`` are picked from the result's
status by :meth:`Fault.build`.

Examples:
    >>> try:
    ...     ChargeCard.call_or_raise(amount=0)
    ... except Fault as fault:
    ...     if not fault.is_for(ChargeCard):
    ...         raise
    ...     fault.result.reason
    'amount must be positive'

Tags:
    fault, control-flow, exceptions, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from taskline.core.errors import ErrorCategory, TasklineError
from taskline.core.locale import translate

if TYPE_CHECKING:
    from taskline.execution.chain import Chain
    from taskline.execution.context import Context
    from taskline.execution.result import Result
    from taskline.task import Task


class Fault(TasklineError):
    """Base for ``Skipped`` and ``Failed``; carries the halted result."""

    default_category = ErrorCategory.FAULT

    def __init__(self, result: Result):
        self.result = result
        super().__init__(result.reason or translate("taskline.faults.unspecified"))

    @classmethod
    def build(cls, result: Result) -> Fault:
        """Return the fault subclass instance matching ``result.status``."""
        if result.is_skipped:
            return Skipped(result)
        if result.is_failed:
            return Failed(result)
        raise ValueError(f"cannot build a fault from a {result.status} result")

    @property
    def task(self) -> Task:
        return self.result.task

    @property
    def context(self) -> Context:
        return self.result.context

    @property
    def chain(self) -> Chain:
        return self.result.chain

    @property
    def status(self) -> str:
        return self.result.status

    def is_for(self, *task_classes: type) -> bool:
        """True when the halted task is an instance of any of ``task_classes``."""
        return isinstance(self.task, task_classes)

    def matches(self, predicate: Callable[[Fault], Any]) -> bool:
        return bool(predicate(self))

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.result.status
        data["task"] = type(self.task).__name__
        return data


class Skipped(Fault):
    """Raised when a result halts with status ``skipped``."""


class Failed(Fault):
    """Raised when a result halts with status ``failed``."""


__all__ = ["Fault", "Skipped", "Failed"]
