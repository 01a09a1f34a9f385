"""
Workflow - ordered groups of tasks sharing one context.

A workflow is itself a task: it has a result, runs through the executor and
can be nested inside other workflows. Its ``work()`` is fixed: it walks the
declared groups in order, evaluates each group's guard, runs the group's
tasks with the shared context and adopts the first sub-result whose status
is in the group's halt set.

Architecture:
    ::

        class Onboard(Workflow): ...
        Onboard.process(CreateUser, SendWelcome)               group 1
        Onboard.process(GrantTrial, if_="is_trial")            group 2
        Onboard.process(NotifySales, halt=["failed", "skipped"])  group 3

        work():
          for group in groups:
              guard false ─────────────────▶ next group
              halt = group.halt | workflow_halt setting | {"failed"}
              for task in group.tasks:
                  result = task.call(self.context)
                  result.status in halt ─────▶ self.throw(result)  (raises)

    Skipped sub-tasks do not halt by default; they are bypass signals.

Examples:
    >>> class Onboard(Workflow):
    ...     pass
    >>> Onboard.process(CreateUser, SendWelcome)
    >>> Onboard.call(email="a@b.io").status
    'success'

Tags:
    workflow, groups, halt-policy, composition, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from taskline.core.utils import evaluate_condition, normalize_statuses
from taskline.execution.executor import DEFAULT_HALT
from taskline.task import Task


@dataclass(frozen=True)
class Group:
    """Task classes executed together plus their guard and halt options."""

    tasks: tuple[type[Task], ...]
    options: dict[str, Any] = field(default_factory=dict)


def _flatten(items: Iterable[Any]) -> list[Any]:
    flat: list[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


class Workflow(Task):
    """Task whose work is running its declared groups in order."""

    kind: ClassVar[str] = "Workflow"
    _settings_root: ClassVar[bool] = True

    groups: ClassVar[list[Group]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "work" in cls.__dict__:
            raise TypeError(f"{cls.__name__} is a workflow and cannot define work()")
        cls.groups = list(cls.groups)

    @classmethod
    def process(
        cls,
        *tasks: Any,
        if_: Any = None,
        unless: Any = None,
        halt: Any = None,
    ) -> Group:
        """Append a group of tasks.

        Args:
            *tasks: Task (or workflow) classes, or lists of them
            if_: Guard that must hold for the group to run
            unless: Guard that must not hold for the group to run
            halt: Status or statuses that abort the workflow for this group

        Raises:
            TypeError: If an item is not a Task subclass
        """
        if cls._settings_root:
            raise TypeError(f"cannot add groups to {cls.__name__}; subclass it")

        task_classes = _flatten(tasks)
        for task_class in task_classes:
            if not (isinstance(task_class, type) and issubclass(task_class, Task)):
                raise TypeError("must be a Task or Workflow")

        options = {
            key: value
            for key, value in (("if_", if_), ("unless", unless), ("halt", halt))
            if value is not None
        }
        group = Group(tuple(task_classes), options)
        cls.groups.append(group)
        return group

    def halt_statuses(self, group: Group) -> tuple[str, ...]:
        statuses = group.options.get("halt")
        if statuses is None:
            statuses = type(self).task_settings().get("workflow_halt")
        if statuses is None:
            return DEFAULT_HALT
        return normalize_statuses(statuses)

    def work(self) -> None:
        for group in self.groups:
            if not evaluate_condition(self, group.options.get("if_"), group.options.get("unless")):
                continue

            halt = self.halt_statuses(group)
            for task_class in group.tasks:
                result = task_class.call(self.context)
                if result.status in halt:
                    self.throw(result)


__all__ = ["Group", "Workflow"]
