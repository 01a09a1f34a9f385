"""Timeout middleware - fail a task whose execution exceeds a deadline.

The continuation runs in a worker thread (with a copy of the caller's
``contextvars`` so the active chain and log context follow it) while the
calling thread waits on the future with a timeout.

Manifesto:
    Tasks without deadlines block their callers indefinitely. The timeout
    middleware turns an overrun into an ordinary failed result instead of an
    exception, so workflows apply their usual halt policy to it.

Architecture:
    ::

        Timeout(seconds=5).call(task, next_)
          │
          ├── limit = seconds | task.<method>() | fn(task) | 3
          ├── run_with_timeout(next_, limit, args=(task,))
          │     └── ThreadPoolExecutor(max_workers=1) + copy_context().run
          └── TimeoutExpired ──▶ result.fail("[TimeoutExpired] ...",
                                              halt=False, cause=exc, limit=limit)

Guardrails:
    - The worker thread cannot be killed; it keeps running after expiry,
      but once abandoned its writes to the shared context, chain and result
      raise ``AbandonedError`` inside the worker
    - Not suitable for CPU-bound work that never releases the GIL

Tags:
    timeout, deadline, middleware, resilience, taskline

Doc-Types:
    api-reference
"""

from __future__ import annotations

import concurrent.futures
import contextvars
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from taskline.core.locale import translate
from taskline.core.utils import evaluate_condition
from taskline.execution.context import watch_abandonment
from taskline.execution.middleware import Continuation, Middleware

if TYPE_CHECKING:
    from taskline.execution.result import Result
    from taskline.task import Task


class TimeoutExpired(TimeoutError):
    """Raised when an operation exceeds its deadline.

    Inherits from built-in TimeoutError for broad exception handling.

    Attributes:
        timeout: The timeout value that was exceeded
        elapsed: How long the operation ran before being interrupted
        operation: Name/description of the operation
    """

    def __init__(
        self,
        timeout: float,
        elapsed: float | None = None,
        operation: str = "operation",
    ):
        self.timeout = timeout
        self.elapsed = elapsed
        self.operation = operation

        super().__init__(translate("taskline.middlewares.timeout", limit=timeout))


def run_with_timeout[T](
    func: Callable[..., T],
    timeout_seconds: float,
    operation: str | None = None,
    args: tuple[Any, ...] | None = None,
    kwargs: dict[str, Any] | None = None,
) -> T:
    """Run a callable with a timeout using ThreadPoolExecutor.

    Args:
        func: Callable to execute
        timeout_seconds: Maximum execution time
        operation: Name for error messages
        args: Positional arguments for func
        kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Raises:
        TimeoutExpired: If execution exceeds timeout
        Exception: Any exception raised by func
    """
    if timeout_seconds <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout_seconds}")

    start = time.monotonic()
    pos_args = args or ()
    kw_args = kwargs or {}
    abandoned = threading.Event()
    context = contextvars.copy_context()
    context.run(watch_abandonment, abandoned)

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(context.run, func, *pos_args, **kw_args)
        try:
            return future.result(timeout=timeout_seconds)
        except concurrent.futures.TimeoutError:
            # The worker keeps running; it cannot be killed.
            abandoned.set()
            raise TimeoutExpired(
                timeout=timeout_seconds,
                elapsed=time.monotonic() - start,
                operation=operation or getattr(func, "__name__", "unknown"),
            ) from None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


class Timeout(Middleware):
    """Fail the task when its execution takes longer than ``seconds``.

    Args:
        seconds: Number, task method name, or callable taking the task
        if_: Guard that must hold for the deadline to apply
        unless: Guard that must not hold for the deadline to apply
    """

    DEFAULT_LIMIT = 3

    def __init__(self, seconds: Any = None, *, if_: Any = None, unless: Any = None):
        self.seconds = seconds
        self.if_ = if_
        self.unless = unless

    def limit(self, task: Task) -> float:
        seconds = self.seconds
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return seconds
        if isinstance(seconds, str):
            return getattr(task, seconds)()
        if callable(seconds):
            return seconds(task)
        return self.DEFAULT_LIMIT

    def call(self, task: Task, next_: Continuation) -> Result:
        if not evaluate_condition(task, self.if_, self.unless):
            return next_(task)

        limit = self.limit(task)
        try:
            return run_with_timeout(next_, limit, operation=type(task).__name__, args=(task,))
        except TimeoutExpired as exc:
            if task.result.is_success:
                task.result.fail(
                    f"[{type(exc).__name__}] {exc}",
                    halt=False,
                    cause=exc,
                    limit=limit,
                )
            return task.result


__all__ = ["Timeout", "TimeoutExpired", "run_with_timeout"]
