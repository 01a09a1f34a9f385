"""
Executor - drives one task through validate → execute → finalize.

Manifesto:
    Business logic should only decide outcomes. Everything around it (hooks,
    retries, turning exceptions into failed results, freezing, logging) is
    the same for every task and lives here.

Architecture:
    ::

        Executor.execute(task, raise_exceptions=False)
          │
          ├── deprecation check
          ├── middlewares.call(task, protected)          ◀─ may short-circuit
          │     └── protected(task)
          │           ├── pre-execution (once)
          │           │     before_validation → define_and_verify
          │           │     → fail(errors) → after_validation → halt()
          │           ├── execution (retried)
          │           │     before_execution → executing() → work()
          │           └── except Fault / Exception → record on the result
          ├── executed() + on_<state> on_executed on_<status>
          │   on_good/on_bad after_execution          (skipped if nothing ran)
          ├── finalize: log, backtrace, freeze, clear chain at index 0
          └── raising mode: re-raise what the halt policy selects

Guardrails:
    ❌ DON'T: Catch UndefinedMethodError as a business failure
    ✅ DO: Let it propagate in both modes

    ❌ DON'T: Assume validation is re-run on retry
    ✅ DO: Expect retries to restart from before_execution

Tags:
    executor, lifecycle, retry, halt-policy, taskline

Doc-Types:
    - API Reference
    - Architecture Guide
"""

from __future__ import annotations

import time
import traceback
import warnings
from typing import TYPE_CHECKING, Any

from taskline.core.errors import AbandonedError, DeprecationError, UndefinedMethodError
from taskline.core.locale import translate
from taskline.core.utils import normalize_statuses
from taskline.execution.chain import Chain
from taskline.execution.fault import Fault
from taskline.execution.retry import RetryStrategy, retry_delay

if TYPE_CHECKING:
    from taskline.execution.result import Result
    from taskline.task import Task

DEFAULT_HALT = ("failed",)

_DEPRECATION_MODES = ("raise", "log", "warn")


class Executor:
    """Runs a single task instance through its lifecycle.

    Args:
        task: The task to execute
        raise_exceptions: ``True`` for the raising entry point
    """

    def __init__(self, task: Task, raise_exceptions: bool = False):
        self.task = task
        self.raise_exceptions = raise_exceptions
        self.settings = type(task).task_settings()
        self._validated = False
        self._pending: BaseException | None = None

    @classmethod
    def execute(cls, task: Task, *, raise_exceptions: bool = False) -> Result:
        return cls(task, raise_exceptions).run()

    def run(self) -> Result:
        task = self.task
        result = task.result
        task.chain = Chain.build(result)

        try:
            self._check_deprecation()
            self.settings["middlewares"].call(task, self._protected)
        except Exception:
            self._clear_chain()
            raise

        try:
            if not (result.is_initialized and result.is_success):
                result.executed()
                self._post_execution()
        finally:
            self._finalize()

        if self._pending is not None:
            raise self._pending

        return result

    # =========================================================================
    # Protected region
    # =========================================================================

    def _protected(self, task: Task) -> Result:
        result = task.result

        while True:
            try:
                if not self._validated:
                    self._pre_execution()
                self._execution()
            except (UndefinedMethodError, AbandonedError):
                raise
            except Fault as fault:
                result.throw(fault.result, halt=False, cause=fault)
                if self.raise_exceptions and fault.result.status in self.task_halt:
                    self._pending = fault
            except Exception as exc:
                if self._should_retry(exc):
                    continue

                result.fail(f"[{type(exc).__name__}] {exc}", halt=False, cause=exc)
                if self.raise_exceptions and "failed" in self.task_halt:
                    self._pending = exc
                elif (handler := self.settings.get("exception_handler")) is not None:
                    handler(task, exc)

            return result

    def _pre_execution(self) -> None:
        self._validated = True
        task = self.task

        self._invoke("before_validation")

        self.settings["attributes"].define_and_verify(task)
        if task.errors:
            task.result.fail(
                translate("taskline.faults.invalid"),
                halt=False,
                errors={
                    "full_message": str(task.errors),
                    "messages": task.errors.to_dict(),
                },
            )

        self._invoke("after_validation")
        task.result.halt()

    def _execution(self) -> None:
        self._invoke("before_execution")

        self.task.result.executing()
        self.task.work()

    # =========================================================================
    # Policies
    # =========================================================================

    @property
    def task_halt(self) -> tuple[str, ...]:
        statuses = self.settings.get("task_halt")
        return DEFAULT_HALT if statuses is None else normalize_statuses(statuses)

    def _should_retry(self, exc: Exception) -> bool:
        available = int(self.settings.get("retries") or 0)
        if available <= 0:
            return False

        metadata = self.task.result.metadata
        current = int(metadata.get("retries", 0))
        remaining = available - current
        if remaining <= 0:
            return False

        retry_on = self.settings.get("retry_on") or Exception
        if not isinstance(retry_on, tuple):
            retry_on = tuple(retry_on) if isinstance(retry_on, list) else (retry_on,)
        if not isinstance(exc, retry_on):
            return False

        metadata["retries"] = current + 1

        self.task.logger.warning(
            "task.retry",
            **self.task.to_dict(),
            reason=f"[{type(exc).__name__}] {exc}",
            remaining_retries=remaining,
        )

        delay = self._retry_delay(current)
        if delay > 0:
            time.sleep(delay)

        return True

    def _retry_delay(self, current: int) -> float:
        setting = self.settings.get("retry_delay")
        if isinstance(setting, str):
            return getattr(self.task, setting)(current)
        if callable(setting) and not isinstance(setting, RetryStrategy):
            return setting(self.task, current)
        return retry_delay(setting, current)

    def _check_deprecation(self) -> None:
        mode = self.settings.get("deprecate")
        if isinstance(mode, str) and mode not in _DEPRECATION_MODES:
            mode = getattr(self.task, mode)()
        elif callable(mode):
            mode = mode(self.task)

        if mode is None or mode is False:
            return

        name = type(self.task).__name__
        if mode is True or mode == "raise":
            raise DeprecationError(translate("taskline.deprecation.prohibited", task=name))
        if mode == "log":
            self.task.logger.warning("task.deprecated", message=translate("taskline.deprecation.warning"))
        elif mode == "warn":
            warnings.warn(
                f"[{name}] {translate('taskline.deprecation.warning')}",
                DeprecationWarning,
                stacklevel=4,
            )
        else:
            raise ValueError(f"unknown deprecation type {mode!r}")

    # =========================================================================
    # Post-execution
    # =========================================================================

    def _invoke(self, event: str) -> None:
        self.settings["callbacks"].invoke(event, self.task)

    def _post_execution(self) -> None:
        result = self.task.result

        self._invoke(f"on_{result.state}")
        if result.is_executed:
            self._invoke("on_executed")

        self._invoke(f"on_{result.status}")
        if result.is_good:
            self._invoke("on_good")
        if result.is_bad:
            self._invoke("on_bad")

        self._invoke("after_execution")

    # =========================================================================
    # Finalization
    # =========================================================================

    def _finalize(self) -> None:
        task = self.task
        result = task.result

        task.logger.info("task.executed", **result.to_dict())
        if self.settings.get("backtrace"):
            self._log_backtrace()

        outermost = result.index == 0
        if not self.settings.get("skip_freezing"):
            task.freeze()
            result.freeze()
            if outermost:
                task.context.freeze()
                task.chain.freeze()

        if outermost:
            Chain.clear()

    def _log_backtrace(self) -> None:
        result = self.task.result
        if not result.is_failed:
            return

        origin = result.caused_failure
        exception = origin.cause if origin is not None else None
        if exception is None or isinstance(exception, Fault):
            return

        lines: Any = traceback.format_exception(exception)
        if (cleaner := self.settings.get("backtrace_cleaner")) is not None:
            lines = cleaner(lines)

        self.task.logger.error(
            "task.backtrace",
            exception=f"[{type(exception).__name__}] {exception}",
            backtrace="".join(lines),
        )

    def _clear_chain(self) -> None:
        if self.task.result.index == 0:
            Chain.clear()


__all__ = ["DEFAULT_HALT", "Executor"]
