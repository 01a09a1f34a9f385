"""
Chain - the ordered results of one top-level invocation.

The active chain lives in a ``ContextVar``: each thread, and each asyncio
task, sees its own value, so independent invocations never share results,
while nested task calls on the same call stack append to the same chain.
A task joins the active chain when its execution starts; until then it
sits alone in a detached chain, so constructing a task never leaves a
chain behind.

Architecture:
    ::

        Outer.call()
          ├── Executor.run(Outer)   Chain.build → new chain, index 0
          ├── Inner.call()
          │     └── Executor.run(Inner)   Chain.build → append, index 1
          └── finalize(Outer) → freeze chain, Chain.clear()

Tags:
    chain, contextvars, provenance, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from taskline.core.errors import FrozenError
from taskline.core.utils import generate_id
from taskline.execution.context import ensure_live

if TYPE_CHECKING:
    from taskline.execution.result import Result

_current_chain: ContextVar[Chain | None] = ContextVar("taskline_chain", default=None)


class Chain:
    """Append-only list of results sharing one correlation id."""

    def __init__(self) -> None:
        self.id = generate_id()
        self.results: list[Result] = []
        self._frozen = False

    # =========================================================================
    # Active chain
    # =========================================================================

    @classmethod
    def current(cls) -> Chain | None:
        return _current_chain.get()

    @classmethod
    def detached(cls, result: Result) -> Chain:
        """A chain holding only ``result`` that is not made active."""
        chain = cls()
        chain.append(result)
        return chain

    @classmethod
    def build(cls, result: Result) -> Chain:
        """Append ``result`` to the active chain, creating one if needed."""
        chain = _current_chain.get()
        if chain is None:
            chain = cls()
            _current_chain.set(chain)

        chain.append(result)
        return chain

    @classmethod
    def clear(cls) -> None:
        _current_chain.set(None)

    # =========================================================================
    # Results
    # =========================================================================

    def append(self, result: Result) -> None:
        if self._frozen:
            raise FrozenError(self)
        ensure_live(self)
        self.results.append(result)

    def index(self, result: Result) -> int:
        for position, candidate in enumerate(self.results):
            if candidate is result:
                return position
        raise ValueError(f"{result!r} is not in chain {self.id}")

    @property
    def first(self) -> Result | None:
        return self.results[0] if self.results else None

    @property
    def last(self) -> Result | None:
        return self.results[-1] if self.results else None

    @property
    def size(self) -> int:
        return len(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    # Overall outcome is the outermost result's.

    @property
    def state(self) -> str | None:
        return self.first.state if self.first else None

    @property
    def status(self) -> str | None:
        return self.first.status if self.first else None

    @property
    def outcome(self) -> str | None:
        return self.first.outcome if self.first else None

    @property
    def runtime(self) -> float | None:
        return self.first.runtime if self.first else None

    # =========================================================================
    # Finalization
    # =========================================================================

    def freeze(self) -> None:
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state,
            "status": self.status,
            "outcome": self.outcome,
            "runtime": self.runtime,
            "results": [result.to_dict() for result in self.results],
        }

    def __str__(self) -> str:
        header = f"chain: {self.id}"
        rule = "=" * len(header)
        footer = " | ".join(
            f"{key}: {getattr(self, key)}" for key in ("state", "status", "outcome", "runtime")
        )
        lines = [header, rule, *(str(result) for result in self.results), rule, footer]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<Chain id={self.id} size={self.size}>"


__all__ = ["Chain"]
