"""Test Harness — utilities for testing tasks and workflows.

Manifesto:
Testing tasks mostly means running them and asserting on the frozen result:
its status, its reason and metadata, and where a failure came from in the
chain. This module provides off-the-shelf helpers so test code is concise
and expressive.

ARCHITECTURE
────────────
::

    Assertion helpers:
      assert_success(result)
      assert_skipped(result, reason=None, **metadata)
      assert_failed(result, reason=None, **metadata)
      assert_outcome(result, "interrupted")
      assert_chain_size(result, expected)
      assert_caused_by(result, TaskClass)
      assert_thrown_by(result, TaskClass)

    Factories:
      make_task(work)              → Task subclass from a plain function
      make_workflow(*task_classes) → Workflow subclass with one group

BEST PRACTICES
──────────────
- Prefer ``assert_failed(result, reason=...)`` over manual status checks;
  the error message includes the result's reason and metadata.
- Use ``make_task`` for throwaway tasks inside a single test.

Example::

    from taskline.testing import assert_failed, make_task

    def test_rejects_negative_amounts():
        task = make_task(lambda t: t.fail("negative", code=422))
        assert_failed(task.call(), reason="negative", code=422)

Tags:
    taskline, testing, harness, assertions

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from taskline.execution.result import Result
from taskline.task import Task
from taskline.workflow import Workflow

# ---------------------------------------------------------------------------
# Assertion helpers
# ---------------------------------------------------------------------------


class TaskAssertionError(AssertionError):
    """Raised when a task assertion fails.

    Provides contextual information about the task result.
    """

    def __init__(self, message: str, result: Result) -> None:
        self.result = result
        super().__init__(
            f"{message}\n  Task: {type(result.task).__qualname__}"
            f"\n  Status: {result.status}\n  Reason: {result.reason}"
        )


def _assert_status(result: Result, status: str, reason: str | None, metadata: dict[str, Any]) -> None:
    if result.status != status:
        raise TaskAssertionError(f"Expected {status}, got {result.status}", result)
    if reason is not None and result.reason != reason:
        raise TaskAssertionError(f"Expected reason {reason!r}, got {result.reason!r}", result)
    for key, expected in metadata.items():
        if key not in result.metadata:
            raise TaskAssertionError(
                f"Metadata missing key '{key}'. Available keys: {list(result.metadata)}",
                result,
            )
        actual = result.metadata[key]
        if actual != expected:
            raise TaskAssertionError(
                f"metadata['{key}']: expected {expected!r}, got {actual!r}",
                result,
            )


def assert_success(result: Result, **metadata: Any) -> None:
    """Assert that a task completed successfully.

    Raises
    ------
    TaskAssertionError
        If the status is not ``success`` or metadata does not match.
    """
    _assert_status(result, "success", None, metadata)


def assert_skipped(result: Result, reason: str | None = None, **metadata: Any) -> None:
    """Assert that a task was skipped, optionally with a reason and metadata."""
    _assert_status(result, "skipped", reason, metadata)


def assert_failed(result: Result, reason: str | None = None, **metadata: Any) -> None:
    """Assert that a task failed.

    Parameters
    ----------
    result
        The task result.
    reason
        Expected failure reason (optional).
    **metadata
        Metadata entries that must be present with these values.

    Raises
    ------
    TaskAssertionError
        If the task did not fail, or failed with a different reason.
    """
    _assert_status(result, "failed", reason, metadata)


def assert_outcome(result: Result, expected: str) -> None:
    if result.outcome != expected:
        raise TaskAssertionError(f"Expected outcome {expected}, got {result.outcome}", result)


def assert_chain_size(result: Result, expected: int) -> None:
    """Assert the number of results recorded in the result's chain."""
    actual = result.chain.size
    if actual != expected:
        raise TaskAssertionError(f"Expected {expected} results in chain, got {actual}", result)


def _assert_origin(result: Result, origin: Result | None, task_class: type[Task], label: str) -> None:
    if origin is None:
        raise TaskAssertionError(f"Expected failure {label} {task_class.__name__}, got none", result)
    if not isinstance(origin.task, task_class):
        raise TaskAssertionError(
            f"Expected failure {label} {task_class.__name__}, got {type(origin.task).__name__}",
            result,
        )


def assert_caused_by(result: Result, task_class: type[Task]) -> None:
    """Assert that the originating failure came from ``task_class``."""
    _assert_origin(result, result.caused_failure, task_class, "caused by")


def assert_thrown_by(result: Result, task_class: type[Task]) -> None:
    """Assert that ``result`` adopted its failure from ``task_class``."""
    _assert_origin(result, result.threw_failure, task_class, "thrown by")


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def make_task(
    work: Callable[[Task], Any] | None = None,
    *,
    name: str = "AdHocTask",
    base: type[Task] = Task,
    **settings: Any,
) -> type[Task]:
    """Create a Task subclass whose ``work()`` calls ``work(task)``.

    Example::

        Charge = make_task(lambda t: t.context.merge(charged=True))
        assert Charge.call().context.charged
    """
    namespace: dict[str, Any] = {"__module__": __name__}
    if work is not None:
        namespace["work"] = lambda self: work(self)

    task_class = type(name, (base,), namespace)
    if settings:
        task_class.task_settings(**settings)
    return task_class


def make_workflow(
    *task_classes: type[Task],
    name: str = "AdHocWorkflow",
    **group_options: Any,
) -> type[Workflow]:
    """Create a Workflow subclass with a single group of ``task_classes``."""
    workflow_class = type(name, (Workflow,), {"__module__": __name__})
    if task_classes:
        workflow_class.process(*task_classes, **group_options)
    return workflow_class


__all__ = [
    "TaskAssertionError",
    "assert_caused_by",
    "assert_chain_size",
    "assert_failed",
    "assert_outcome",
    "assert_skipped",
    "assert_success",
    "assert_thrown_by",
    "make_task",
    "make_workflow",
]
