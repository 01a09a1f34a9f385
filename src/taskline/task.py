"""
Task - a single unit of business logic with one lifecycle execution.

Manifesto:
    A task declares its inputs, implements ``work()`` and decides its
    outcome with ``skip()`` / ``fail()`` / ``throw()``. The executor does the
    rest: validation, hooks, middleware, retries, freezing and logging.

Architecture:
    ::

        ChargeCard.call(amount=10)
          │
          ├── ChargeCard(context)        Result + detached Chain
          └── Executor.execute(task)     Chain.build(result) joins the active chain
                └── task.work()

        Settings (per class, lazy):
          configuration() ──copy──▶ Task subclass ──copy──▶ sub-subclass

Examples:
    >>> class ChargeCard(Task):
    ...     def work(self):
    ...         if self.amount <= 0:
    ...             self.fail("amount must be positive", code=422)
    ...         self.context.charged = self.amount
    >>> ChargeCard.required("amount", types="integer")
    >>> result = ChargeCard.call(amount="10")
    >>> result.status, result.context.charged
    ('success', 10)

Tags:
    task, lifecycle, business-logic, taskline

Doc-Types:
    - API Reference
    - Getting Started
"""

from __future__ import annotations

from typing import Any, ClassVar

from taskline.attributes.attribute import Attribute
from taskline.attributes.errors import Errors
from taskline.core.configuration import configuration
from taskline.core.errors import FrozenError, UndefinedMethodError
from taskline.core.logging import get_logger
from taskline.core.utils import generate_id
from taskline.execution.chain import Chain
from taskline.execution.context import Context
from taskline.execution.executor import Executor
from taskline.execution.result import Result

_REGISTRIES = {
    "middleware": "middlewares",
    "coercion": "coercions",
    "validator": "validators",
}


def _inherit(settings: dict[str, Any]) -> dict[str, Any]:
    copied: dict[str, Any] = {}
    for key, value in settings.items():
        if hasattr(value, "dup"):
            copied[key] = value.dup()
        elif isinstance(value, list):
            copied[key] = list(value)
        else:
            copied[key] = value
    return copied


class Task:
    """Base class for tasks. Subclasses implement :meth:`work`."""

    kind: ClassVar[str] = "Task"

    # Root classes read defaults straight from the global configuration.
    _settings_root: ClassVar[bool] = True

    def __init__(self, context: Any = None, **values: Any):
        self.context = Context.build(context, **values)
        self.id = generate_id()
        self.errors = Errors()
        self.attributes: dict[str, Any] = {}
        self.result = Result(self)
        self.chain = Chain.detached(self.result)
        self._frozen = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "_settings_root" not in cls.__dict__:
            cls._settings_root = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_frozen"):
            raise FrozenError(self)
        super().__setattr__(name, value)

    # =========================================================================
    # Class settings
    # =========================================================================

    @classmethod
    def task_settings(cls, **options: Any) -> dict[str, Any]:
        """Return this class's settings, updating them with ``options``.

        Settings are created on first access by copying the parent class's
        settings, or the global configuration for direct subclasses of a
        root class.
        """
        if cls._settings_root:
            if options:
                cls._own_settings()
            return configuration().to_settings()

        settings = cls.__dict__.get("_task_settings")
        if settings is None:
            parent = next(
                base for base in cls.__mro__[1:] if isinstance(base, type) and issubclass(base, Task)
            )
            settings = _inherit(parent.task_settings())
            cls._task_settings = settings

        settings.update(options)
        return settings

    @classmethod
    def _own_settings(cls) -> dict[str, Any]:
        if cls._settings_root:
            raise TypeError(f"cannot change settings on {cls.__name__}; subclass it")
        return cls.task_settings()

    @classmethod
    def register(cls, kind: str, *args: Any, **kwargs: Any) -> None:
        """Register a middleware, callback, coercion or validator.

        Examples:
            >>> ChargeCard.register("middleware", Runtime)
            >>> ChargeCard.register("on_failed", "notify_support", if_="is_vip")
            >>> ChargeCard.register("coercion", "money", to_money)
        """
        settings = cls._own_settings()
        if kind in _REGISTRIES:
            settings[_REGISTRIES[kind]].register(*args, **kwargs)
        else:
            settings["callbacks"].register(kind, *args, **kwargs)

    @classmethod
    def deregister(cls, kind: str, *args: Any) -> None:
        settings = cls._own_settings()
        if kind in _REGISTRIES:
            settings[_REGISTRIES[kind]].deregister(*args)
        elif kind == "attribute":
            settings["attributes"].deregister(*args)
        else:
            settings["callbacks"].deregister(kind, *args)

    # =========================================================================
    # Attribute declaration
    # =========================================================================

    @classmethod
    def attribute(cls, *names: str, **options: Any) -> list[Attribute]:
        attributes = Attribute.define(*names, **options)
        cls._own_settings()["attributes"].register(attributes)
        return attributes

    @classmethod
    def required(cls, *names: str, **options: Any) -> list[Attribute]:
        return cls.attribute(*names, **{**options, "required": True})

    @classmethod
    def optional(cls, *names: str, **options: Any) -> list[Attribute]:
        return cls.attribute(*names, **{**options, "required": False})

    # =========================================================================
    # Entry points
    # =========================================================================

    @classmethod
    def call(cls, context: Any = None, **values: Any) -> Result:
        """Execute and return the result; faults and errors stay on the result."""
        return cls(context, **values).execute()

    @classmethod
    def call_or_raise(cls, context: Any = None, **values: Any) -> Result:
        """Execute and re-raise faults/errors whose status is in ``task_halt``."""
        return cls(context, **values).execute(raise_exceptions=True)

    def execute(self, *, raise_exceptions: bool = False) -> Result:
        return Executor.execute(self, raise_exceptions=raise_exceptions)

    def work(self) -> None:
        raise UndefinedMethodError(f"work method not defined in {type(self).__name__}")

    # =========================================================================
    # Outcome helpers
    # =========================================================================

    def skip(self, reason: str | None = None, **kwargs: Any) -> None:
        self.result.skip(reason, **kwargs)

    def fail(self, reason: str | None = None, **kwargs: Any) -> None:
        self.result.fail(reason, **kwargs)

    def throw(self, result: Result, **kwargs: Any) -> None:
        self.result.throw(result, **kwargs)

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def logger(self) -> Any:
        logger = type(self).task_settings().get("logger")
        if logger is not None:
            return logger
        return get_logger(f"{type(self).__module__}.{type(self).__qualname__}")

    @property
    def tags(self) -> list[str]:
        return list(type(self).task_settings().get("tags") or [])

    def freeze(self) -> None:
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.result.index,
            "chain_id": self.chain.id,
            "type": self.kind,
            "class": type(self).__qualname__,
            "id": self.id,
            "tags": self.tags,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"


__all__ = ["Task"]
