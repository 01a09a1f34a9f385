"""
Validators - rules checked against coerced attribute values.

Every validator is ``fn(value, options)`` and raises ``ValidationError``
with a human-readable message when the value is not acceptable. Messages
come from the locale unless the options carry an override (``message``,
or a rule-specific key such as ``min_message``); overrides may use the same
``{placeholders}`` as the locale strings.

Built-in validators and their options:

    presence    True | {"message": ...}
    absence     True | {"message": ...}
    format      pattern | {"with": pattern, "without": pattern}
    inclusion   [values] | {"in": [values] | range | (min, max), "within": ...}
    exclusion   [values] | {"in": ..., "within": ...}
    length      {"within" | "not_within" | "in" | "not_in" | "min" | "max" | "is" | "is_not"}
    numeric     same keys as length, applied to the value itself
    custom      fn | {"validator": fn(value, options) -> bool}

Ranges are given as ``(min, max)`` tuples (inclusive) or ``range`` objects.

Tags:
    validation, attributes, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from taskline.core.errors import ValidationError
from taskline.core.locale import translate

if TYPE_CHECKING:
    from taskline.task import Task

Validator = Callable[[Any, dict[str, Any]], None]


def _options(options: Any, key: str) -> dict[str, Any]:
    """Normalize the shorthand forms into an options dict."""
    if isinstance(options, Mapping):
        return dict(options)
    if options is True or options is None:
        return {}
    return {key: options}


def _fail(options: dict[str, Any], keys: tuple[str, ...], locale_key: str, **values: Any) -> None:
    for key in keys:
        message = options.get(key)
        if message is not None:
            raise ValidationError(message.format(**values) if values else message)
    raise ValidationError(translate(locale_key, **values))


def _bounds(bounds: Any) -> tuple[Any, Any]:
    if isinstance(bounds, range):
        return bounds.start, bounds[-1] if len(bounds) else bounds.start
    low, high = bounds
    return low, high


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if hasattr(value, "__len__"):
        return len(value) == 0
    return False


# =============================================================================
# Built-in validators
# =============================================================================


def presence(value: Any, options: Any) -> None:
    opts = _options(options, "presence")
    if _is_blank(value):
        _fail(opts, ("message",), "taskline.validators.presence")


def absence(value: Any, options: Any) -> None:
    opts = _options(options, "absence")
    if not _is_blank(value):
        _fail(opts, ("message",), "taskline.validators.absence")


def format_(value: Any, options: Any) -> None:
    opts = _options(options, "with")
    with_, without = opts.get("with"), opts.get("without")

    if not isinstance(value, str) or (with_ is None and without is None):
        valid = False
    else:
        valid = (with_ is None or re.search(with_, value) is not None) and (
            without is None or re.search(without, value) is None
        )

    if not valid:
        _fail(opts, ("message",), "taskline.validators.format")


def _membership(value: Any, opts: dict[str, Any]) -> tuple[bool, Any]:
    values = opts.get("in", opts.get("within"))
    if isinstance(values, (range, tuple)):
        low, high = _bounds(values)
        return low <= value <= high, (low, high)
    return value in (values or ()), values


def inclusion(value: Any, options: Any) -> None:
    opts = _options(options, "in")
    included, values = _membership(value, opts)
    if included:
        return

    if isinstance(values, tuple):
        low, high = values
        _fail(
            opts,
            ("in_message", "within_message", "message"),
            "taskline.validators.inclusion.within",
            min=low,
            max=high,
        )
    _fail(
        opts,
        ("of_message", "message"),
        "taskline.validators.inclusion.of",
        values=", ".join(repr(v) for v in values or ()),
    )


def exclusion(value: Any, options: Any) -> None:
    opts = _options(options, "in")
    included, values = _membership(value, opts)
    if not included:
        return

    if isinstance(values, tuple):
        low, high = values
        _fail(
            opts,
            ("in_message", "within_message", "message"),
            "taskline.validators.exclusion.within",
            min=low,
            max=high,
        )
    _fail(
        opts,
        ("of_message", "message"),
        "taskline.validators.exclusion.of",
        values=", ".join(repr(v) for v in values or ()),
    )


def _measure(measured: Any, opts: dict[str, Any], scope: str) -> None:
    key = f"taskline.validators.{scope}"

    for rule in ("within", "in"):
        if rule in opts:
            low, high = _bounds(opts[rule])
            if not low <= measured <= high:
                _fail(opts, (f"{rule}_message", "message"), f"{key}.within", min=low, max=high)
            return

    for rule in ("not_within", "not_in"):
        if rule in opts:
            low, high = _bounds(opts[rule])
            if low <= measured <= high:
                _fail(opts, (f"{rule}_message", "message"), f"{key}.not_within", min=low, max=high)
            return

    if "min" in opts and "max" in opts:
        low, high = opts["min"], opts["max"]
        if not low <= measured <= high:
            _fail(opts, ("within_message", "message"), f"{key}.within", min=low, max=high)
    elif "min" in opts:
        if measured < opts["min"]:
            _fail(opts, ("min_message", "message"), f"{key}.min", min=opts["min"])
    elif "max" in opts:
        if measured > opts["max"]:
            _fail(opts, ("max_message", "message"), f"{key}.max", max=opts["max"])
    elif "is" in opts:
        if measured != opts["is"]:
            _fail(opts, ("is_message", "message"), f"{key}.is", **{"is": opts["is"]})
    elif "is_not" in opts:
        if measured == opts["is_not"]:
            _fail(opts, ("is_not_message", "message"), f"{key}.is_not", is_not=opts["is_not"])
    else:
        raise ValueError(f"no known {scope} validator options given")


def length(value: Any, options: Any) -> None:
    opts = _options(options, "is")
    size = len(value) if hasattr(value, "__len__") else 0
    _measure(size, opts, "length")


def numeric(value: Any, options: Any) -> None:
    _measure(value, _options(options, "is"), "numeric")


def custom(value: Any, options: Any) -> None:
    opts = _options(options, "validator")
    validator = opts.get("validator")
    if validator is None:
        raise ValueError("custom validator requires a 'validator' callable")
    if not validator(value, opts):
        _fail(opts, ("message",), "taskline.validators.custom")


def default_validators() -> dict[str, Any]:
    return {
        "presence": presence,
        "absence": absence,
        "format": format_,
        "inclusion": inclusion,
        "exclusion": exclusion,
        "length": length,
        "numeric": numeric,
        "custom": custom,
    }


class ValidatorRegistry:
    """Option name → validator callable ``fn(value, options)``."""

    def __init__(self, registry: dict[str, Any] | None = None):
        self.registry: dict[str, Any] = default_validators() if registry is None else registry

    def dup(self) -> ValidatorRegistry:
        return self.__class__(dict(self.registry))

    def register(self, name: str, validator: Any) -> ValidatorRegistry:
        self.registry[name] = validator
        return self

    def deregister(self, name: str) -> ValidatorRegistry:
        self.registry.pop(name, None)
        return self

    def keys(self) -> list[str]:
        return list(self.registry)

    def __contains__(self, name: object) -> bool:
        return name in self.registry

    def validate(self, name: str, task: Task, value: Any, options: Any) -> None:
        validator = self.registry.get(name)
        if validator is None:
            raise ValueError(f"unknown validator {name}")

        if isinstance(validator, str):
            getattr(task, validator)(value, options)
        else:
            validator(value, options)


__all__ = [
    "ValidatorRegistry",
    "absence",
    "custom",
    "default_validators",
    "exclusion",
    "format_",
    "inclusion",
    "length",
    "numeric",
    "presence",
]
