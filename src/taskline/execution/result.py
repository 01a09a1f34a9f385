"""
Result - the outcome record of one task execution.

A ``Result`` separates *where* execution got to (``state``) from *what the
business logic decided* (``status``). Workflows rely on that split to tell
"did not run to completion because something downstream blew up" apart from
"ran fine but chose to skip or fail".

Manifesto:
    - **Monotonic:** initialized → executing → complete | interrupted
    - **Once-only status:** success → skipped | failed, re-entry is a no-op
    - **Provenance:** every failed result can name the result that caused the
      failure and the result that surfaced it
    - **Immutable after finalize:** every mutator raises ``FrozenError``

Architecture:
    ::

        state:   initialized ──executing()──▶ executing ──complete()──▶ complete
                      │                           │
                      └────────interrupt()────────┴──────────▶ interrupted

        status:  success ──skip()──▶ skipped
                    └─────fail()──▶ failed

        halt():  non-success status ──▶ raise Skipped / Failed

Examples:
    >>> result = ChargeCard.call(amount=10)
    >>> result.state, result.status, result.outcome
    ('complete', 'success', 'success')
    >>> match result:
    ...     case Result("complete", "success"):
    ...         print("charged")
    charged

Tags:
    result, state-machine, provenance, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from taskline.core.errors import FrozenError, InvalidTransitionError
from taskline.core.locale import translate
from taskline.execution.context import ensure_live
from taskline.execution.fault import Fault

if TYPE_CHECKING:
    from taskline.execution.chain import Chain
    from taskline.execution.context import Context
    from taskline.task import Task


class State(str, Enum):
    """Lifecycle phase of an execution."""

    INITIALIZED = "initialized"
    EXECUTING = "executing"
    COMPLETE = "complete"
    INTERRUPTED = "interrupted"


class Status(str, Enum):
    """Business outcome of an execution."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


STATES: tuple[str, ...] = tuple(s.value for s in State)
STATUSES: tuple[str, ...] = tuple(s.value for s in Status)

_HANDLE_KEYS = frozenset(STATES + STATUSES + ("executed", "good", "bad"))


class Result:
    """Tracks state, status, reason, cause and metadata for one task.

    Created by the task constructor and mutated only by its own executor.
    """

    __match_args__ = ("state", "status")

    def __init__(self, task: Task):
        self.task = task
        self.state: str = State.INITIALIZED.value
        self.status: str = Status.SUCCESS.value
        self.reason: str | None = None
        self.cause: BaseException | None = None
        self.metadata: dict[str, Any] = {}
        self._frozen = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_frozen"):
            raise FrozenError(self)
        super().__setattr__(name, value)

    # =========================================================================
    # Delegation
    # =========================================================================

    @property
    def context(self) -> Context:
        return self.task.context

    @property
    def chain(self) -> Chain:
        return self.task.chain

    @property
    def index(self) -> int:
        """Position of this result in its chain."""
        return self.chain.index(self)

    @property
    def runtime(self) -> float | None:
        return self.metadata.get("runtime")

    # =========================================================================
    # Predicates
    # =========================================================================

    @property
    def is_initialized(self) -> bool:
        return self.state == State.INITIALIZED

    @property
    def is_executing(self) -> bool:
        return self.state == State.EXECUTING

    @property
    def is_complete(self) -> bool:
        return self.state == State.COMPLETE

    @property
    def is_interrupted(self) -> bool:
        return self.state == State.INTERRUPTED

    @property
    def is_executed(self) -> bool:
        return self.is_complete or self.is_interrupted

    @property
    def is_success(self) -> bool:
        return self.status == Status.SUCCESS

    @property
    def is_skipped(self) -> bool:
        return self.status == Status.SKIPPED

    @property
    def is_failed(self) -> bool:
        return self.status == Status.FAILED

    @property
    def is_good(self) -> bool:
        return not self.is_failed

    @property
    def is_bad(self) -> bool:
        return not self.is_success

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # =========================================================================
    # State transitions
    # =========================================================================

    def executing(self) -> None:
        self._ensure_mutable()
        if self.is_executing:
            return
        if not self.is_initialized:
            raise InvalidTransitionError(
                f"can only transition to {State.EXECUTING.value} from {State.INITIALIZED.value}"
            )
        self.state = State.EXECUTING.value

    def complete(self) -> None:
        self._ensure_mutable()
        if self.is_complete:
            return
        if not self.is_executing:
            raise InvalidTransitionError(
                f"can only transition to {State.COMPLETE.value} from {State.EXECUTING.value}"
            )
        self.state = State.COMPLETE.value

    def interrupt(self) -> None:
        self._ensure_mutable()
        if self.is_interrupted:
            return
        if self.is_complete:
            raise InvalidTransitionError(
                f"cannot transition to {State.INTERRUPTED.value} from {State.COMPLETE.value}"
            )
        self.state = State.INTERRUPTED.value

    def executed(self) -> None:
        """Close the lifecycle: complete on success, interrupt otherwise."""
        if self.is_success:
            self.complete()
        else:
            self.interrupt()

    # =========================================================================
    # Status transitions
    # =========================================================================

    def skip(
        self,
        reason: str | None = None,
        *,
        halt: bool = True,
        cause: BaseException | None = None,
        **metadata: Any,
    ) -> None:
        """Mark the result skipped and, by default, raise ``Skipped``."""
        self._transition_status(Status.SKIPPED, reason, halt, cause, metadata)

    def fail(
        self,
        reason: str | None = None,
        *,
        halt: bool = True,
        cause: BaseException | None = None,
        **metadata: Any,
    ) -> None:
        """Mark the result failed and, by default, raise ``Failed``."""
        self._transition_status(Status.FAILED, reason, halt, cause, metadata)

    def _transition_status(
        self,
        status: Status,
        reason: str | None,
        halt: bool,
        cause: BaseException | None,
        metadata: dict[str, Any],
    ) -> None:
        self._ensure_mutable()
        if self.status == status:
            return
        if not self.is_success:
            raise InvalidTransitionError(
                f"can only transition to {status.value} from {Status.SUCCESS.value}"
            )

        self.status = status.value
        self.reason = reason or translate("taskline.faults.unspecified")
        self.cause = cause
        self.metadata.update(metadata)
        self.metadata["reason"] = self.reason

        if halt:
            self.halt()

    def halt(self) -> None:
        """Raise the fault for the current status; no-op while successful."""
        if self.is_success:
            return
        raise Fault.build(self)

    def throw(
        self,
        result: Result,
        *,
        halt: bool = True,
        cause: BaseException | None = None,
        **metadata: Any,
    ) -> None:
        """Adopt another result's outcome as this result's own.

        Args:
            result: The sub-result to adopt (usually a nested task's)
            halt: Raise the matching fault after adopting
            cause: Exception recorded as the cause
            **metadata: Overrides merged over ``result.metadata``
        """
        if not isinstance(result, Result):
            raise TypeError("must be a Result")

        self._ensure_mutable()
        if result is self:
            if self.cause is None:
                self.cause = cause
        elif result.is_success:
            return
        else:
            self.state = result.state
            self.status = result.status
            self.reason = result.reason
            self.cause = cause
            self.metadata.update(result.metadata)
            self.metadata.update(metadata)

        if halt:
            self.halt()

    # =========================================================================
    # Failure provenance
    # =========================================================================

    @property
    def caused_failure(self) -> Result | None:
        """The result that originated the failure in this chain."""
        if not self.is_failed:
            return None
        return next((r for r in reversed(self.chain.results) if r.is_failed), None)

    @property
    def threw_failure(self) -> Result | None:
        """The nearest failed result after this one, else the last failed one."""
        if not self.is_failed:
            return None

        failed = [r for r in self.chain.results if r.is_failed]
        if not failed:
            return None

        index = self.index
        return next((r for r in failed if r.index > index), failed[-1])

    @property
    def is_caused_failure(self) -> bool:
        return self.is_failed and self.caused_failure is self

    @property
    def is_threw_failure(self) -> bool:
        return self.is_failed and self.threw_failure is self

    @property
    def is_thrown_failure(self) -> bool:
        return self.is_failed and not self.is_caused_failure

    @property
    def outcome(self) -> str:
        if self.is_initialized or self.is_thrown_failure:
            return self.state
        return self.status

    # =========================================================================
    # Handling
    # =========================================================================

    def handle(self, key: str, fn: Callable[[Result], Any]) -> Result:
        """Call ``fn(self)`` when ``key`` matches; returns self for chaining.

        ``key`` is a state, a status, ``executed``, ``good`` or ``bad``.
        """
        if key not in _HANDLE_KEYS:
            raise ValueError(f"unknown result handler {key}")

        if key in STATES:
            matched = self.state == key
        elif key in STATUSES:
            matched = self.status == key
        else:
            matched = getattr(self, f"is_{key}")

        if matched:
            fn(self)
        return self

    # =========================================================================
    # Finalization
    # =========================================================================

    def freeze(self) -> None:
        if self._frozen:
            return
        self.metadata = MappingProxyType(dict(self.metadata))  # type: ignore[assignment]
        self._frozen = True

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise FrozenError(self)
        ensure_live(self)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        data = self.task.to_dict()
        data.update(
            state=self.state,
            status=self.status,
            outcome=self.outcome,
            reason=self.reason,
            metadata=dict(self.metadata),
            runtime=self.runtime,
        )

        if self.is_failed:
            data["caused_failure"] = _reference(self.caused_failure)
            data["threw_failure"] = _reference(self.threw_failure)

        return data

    def __str__(self) -> str:
        return " ".join(f"{key}={value!r}" for key, value in self.to_dict().items())

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} task={type(self.task).__name__} "
            f"state={self.state} status={self.status}>"
        )


def _reference(result: Result | None) -> dict[str, Any] | None:
    if result is None:
        return None
    return {
        "index": result.index,
        "class": type(result.task).__name__,
        "id": result.task.id,
    }


__all__ = ["Result", "State", "Status", "STATES", "STATUSES"]
