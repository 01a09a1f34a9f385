"""Message lookup for default reasons and validation errors.

Messages live in YAML files bundled under ``taskline/locales``. Keys are
dotted paths below the locale root (``taskline.faults.unspecified``) and
values use ``str.format`` placeholders (``{min}``, ``{values}``).

Examples:
    >>> translate("taskline.faults.unspecified")
    'no reason given'
    >>> translate("taskline.validators.length.min", min=3)
    'length must be at least 3'
    >>> translate("taskline.nope")
    'Translation missing: taskline.nope'

Tags:
    locale, i18n, messages, yaml, taskline

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import functools
from importlib import resources
from typing import Any

import yaml

from taskline.core.errors import ConfigError

DEFAULT_LOCALE = "en"

_current_locale = DEFAULT_LOCALE


@functools.lru_cache(maxsize=None)
def load_messages(locale: str) -> dict[str, Any]:
    """Load and cache the message tree for ``locale``."""
    path = resources.files("taskline") / "locales" / f"{locale}.yml"
    if not path.is_file():
        raise ConfigError(f"unknown locale {locale!r}")

    with path.open(encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    return data.get(locale, {})


def use_locale(locale: str) -> None:
    """Switch the process-wide locale. Raises ConfigError if no file exists."""
    global _current_locale
    load_messages(locale)
    _current_locale = locale


def current_locale() -> str:
    return _current_locale


def _lookup(tree: dict[str, Any], key: str) -> Any:
    node: Any = tree
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def translate(key: str, *, default: Any = None, **options: Any) -> Any:
    """Resolve ``key`` in the current locale and interpolate ``options``.

    Args:
        key: Dotted message key
        default: Used when the key is absent from the locale file
        **options: Interpolation values

    Returns:
        The formatted message, the non-string default as-is, or
        ``"Translation missing: <key>"``.
    """
    message = _lookup(load_messages(_current_locale), key)
    if message is None:
        message = default

    if message is None:
        return f"Translation missing: {key}"
    if isinstance(message, str):
        return message.format(**options) if options else message
    return message


t = translate


__all__ = [
    "DEFAULT_LOCALE",
    "current_locale",
    "load_messages",
    "t",
    "translate",
    "use_locale",
]
