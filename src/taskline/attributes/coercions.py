"""
Coercions - convert raw attribute input into declared types.

Scalar types go through pydantic ``TypeAdapter`` lax validation, which
already knows how to turn ``"42"`` into ``42``, ``"yes"`` into ``True`` and
ISO strings into dates. Container types are handled natively.

Built-in type names:
    integer, float, decimal, boolean, date, datetime, time,
    string, array, hash

Python types are accepted as aliases (``int`` → ``integer``, ``dict`` →
``hash`` and so on).

Examples:
    >>> registry = CoercionRegistry()
    >>> registry.coerce("integer", task, "42")
    42
    >>> registry.coerce("array", task, '["a", "b"]')
    ['a', 'b']

Tags:
    coercion, pydantic, attributes, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import datetime as dt
import json
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from taskline.core.errors import CoercionError
from taskline.core.locale import translate

if TYPE_CHECKING:
    from taskline.task import Task

Coercion = Callable[[Any, dict[str, Any]], Any]

TYPE_ALIASES: dict[Any, str] = {
    int: "integer",
    float: "float",
    Decimal: "decimal",
    bool: "boolean",
    dt.date: "date",
    dt.datetime: "datetime",
    dt.time: "time",
    str: "string",
    list: "array",
    tuple: "array",
    dict: "hash",
}


def type_name(type_: Any) -> str:
    return TYPE_ALIASES.get(type_, type_ if isinstance(type_, str) else getattr(type_, "__name__", str(type_)))


def coercion_message(name: str) -> str:
    """Default failure message, e.g. ``could not coerce into an integer``."""
    label = translate(f"taskline.types.{name}", default=name)
    key = "into_an" if label[:1].lower() in "aeiou" else "into_a"
    return translate(f"taskline.coercions.{key}", type=label)


def _lax(name: str, target: type) -> Coercion:
    adapter = TypeAdapter(target)

    def coerce(value: Any, options: dict[str, Any]) -> Any:
        try:
            return adapter.validate_python(value)
        except PydanticValidationError as exc:
            raise CoercionError(coercion_message(name), cause=exc) from exc

    coerce.__name__ = f"coerce_{name}"
    return coerce


def coerce_string(value: Any, options: dict[str, Any]) -> str:
    if value is None:
        raise CoercionError(coercion_message("string"))
    return value if isinstance(value, str) else str(value)


def coerce_array(value: Any, options: dict[str, Any]) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, str) and value.lstrip().startswith("["):
        try:
            return list(json.loads(value))
        except json.JSONDecodeError as exc:
            raise CoercionError(coercion_message("array"), cause=exc) from exc
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def coerce_hash(value: Any, options: dict[str, Any]) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str) and value.lstrip().startswith("{"):
        try:
            return dict(json.loads(value))
        except json.JSONDecodeError as exc:
            raise CoercionError(coercion_message("hash"), cause=exc) from exc
    if isinstance(value, (list, tuple)):
        try:
            return dict(value)
        except (TypeError, ValueError) as exc:
            raise CoercionError(coercion_message("hash"), cause=exc) from exc
    raise CoercionError(coercion_message("hash"))


def default_coercions() -> dict[str, Coercion]:
    return {
        "integer": _lax("integer", int),
        "float": _lax("float", float),
        "decimal": _lax("decimal", Decimal),
        "boolean": _lax("boolean", bool),
        "date": _lax("date", dt.date),
        "datetime": _lax("datetime", dt.datetime),
        "time": _lax("time", dt.time),
        "string": coerce_string,
        "array": coerce_array,
        "hash": coerce_hash,
    }


class CoercionRegistry:
    """Type name → coercion callable ``fn(value, options)``.

    Custom coercions may also be a task method name; the method is called
    with ``(value, options)``.
    """

    def __init__(self, registry: dict[str, Any] | None = None):
        self.registry: dict[str, Any] = default_coercions() if registry is None else registry

    def dup(self) -> CoercionRegistry:
        return self.__class__(dict(self.registry))

    def register(self, name: str, coercion: Any) -> CoercionRegistry:
        self.registry[type_name(name)] = coercion
        return self

    def deregister(self, name: str) -> CoercionRegistry:
        self.registry.pop(type_name(name), None)
        return self

    def __contains__(self, name: object) -> bool:
        return type_name(name) in self.registry

    def coerce(
        self,
        type_: Any,
        task: Task,
        value: Any,
        options: dict[str, Any] | None = None,
    ) -> Any:
        name = type_name(type_)
        coercion = self.registry.get(name)
        if coercion is None:
            raise CoercionError(translate("taskline.coercions.unknown", type=name))

        if isinstance(coercion, str):
            return getattr(task, coercion)(value, options or {})
        return coercion(value, options or {})


__all__ = [
    "CoercionRegistry",
    "TYPE_ALIASES",
    "coercion_message",
    "default_coercions",
    "type_name",
]
