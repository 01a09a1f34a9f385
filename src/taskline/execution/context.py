"""Shared input/output bag passed between tasks of one chain.

``Context`` behaves as a mutable mapping with string keys and also allows
attribute access. Reading an unknown attribute returns ``None`` so task code
can probe optional inputs without guarding every lookup.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping, MutableMapping
from contextvars import ContextVar
from typing import Any

from taskline.core.errors import AbandonedError, FrozenError

# Signals of every enclosing worker whose caller may stop waiting for it.
_abandon_signals: ContextVar[tuple[threading.Event, ...]] = ContextVar(
    "taskline_abandon_signals", default=()
)


def watch_abandonment(signal: threading.Event) -> None:
    """Tie the current context to ``signal``; once set, shared writes are rejected.

    Call it inside the copied context a worker runs in (see
    :func:`taskline.middlewares.timeout.run_with_timeout`).
    """
    _abandon_signals.set(_abandon_signals.get() + (signal,))


def is_abandoned() -> bool:
    return any(signal.is_set() for signal in _abandon_signals.get())


def ensure_live(target: object) -> None:
    if is_abandoned():
        raise AbandonedError(target)


class Context(MutableMapping[str, Any]):
    """Mutable, freezable key/value bag with attribute access.

    Examples:
        >>> ctx = Context({"user_id": 7})
        >>> ctx.user_id
        7
        >>> ctx.total = 12
        >>> ctx["total"]
        12
        >>> ctx.missing is None
        True
    """

    def __init__(self, data: Mapping[str, Any] | None = None, **values: Any):
        object.__setattr__(self, "_table", {})
        object.__setattr__(self, "_frozen", False)
        if data is not None:
            self.update(_as_mapping(data))
        if values:
            self.update(values)

    @classmethod
    def build(cls, context: Any = None, **values: Any) -> Context:
        """Return a context for a new task.

        An unfrozen ``Context`` is shared by reference; a task or result is
        unwrapped to its context; anything else is copied into a new one.
        """
        if not isinstance(context, (Context, Mapping)) and hasattr(context, "context"):
            context = context.context

        if isinstance(context, cls) and not context.is_frozen:
            if values:
                context.update(values)
            return context

        return cls(context, **values)

    # =========================================================================
    # Mapping protocol
    # =========================================================================

    def __getitem__(self, key: str) -> Any:
        return self._table[_key(key)]

    def __setitem__(self, key: str, value: Any) -> None:
        self._ensure_writable()
        self._table[_key(key)] = value

    def __delitem__(self, key: str) -> None:
        self._ensure_writable()
        del self._table[_key(key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Context):
            return self._table == other._table
        if isinstance(other, Mapping):
            return self._table == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    # =========================================================================
    # Attribute access
    # =========================================================================

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._table.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            raise AttributeError(f"cannot set private attribute {name} on Context")
        self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    # =========================================================================
    # Helpers
    # =========================================================================

    def fetch(self, key: str, *default: Any) -> Any:
        """Like ``dict[key]`` but with an optional positional default."""
        if key in self._table:
            return self._table[key]
        if default:
            return default[0]
        raise KeyError(key)

    def merge(self, data: Mapping[str, Any] | None = None, **values: Any) -> Context:
        if data is not None:
            self.update(_as_mapping(data))
        self.update(values)
        return self

    def dig(self, key: str, *keys: Any) -> Any:
        """Walk nested mappings and sequences; ``None`` when a step is missing."""
        node: Any = self._table.get(_key(key))
        for part in keys:
            if node is None:
                return None
            try:
                node = node[part]
            except (KeyError, IndexError, TypeError):
                return None
        return node

    def to_dict(self) -> dict[str, Any]:
        return dict(self._table)

    def freeze(self) -> None:
        object.__setattr__(self, "_frozen", True)

    def _ensure_writable(self) -> None:
        if self._frozen:
            raise FrozenError(self)
        ensure_live(self)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __repr__(self) -> str:
        pairs = " ".join(f"{key}={value!r}" for key, value in self._table.items())
        return f"<Context {pairs}>" if pairs else "<Context>"


def _key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"{key!r} is not a string key")
    return key


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    if hasattr(data, "to_dict"):
        return data.to_dict()
    raise TypeError(f"cannot build a Context from {type(data).__name__}")


__all__ = ["Context", "ensure_live", "is_abandoned", "watch_abandonment"]
