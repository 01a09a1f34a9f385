"""
Process-wide task defaults.

``Configuration`` is seeded from :class:`~taskline.core.settings.TasklineSettings`
(environment variables and ``.env``) and adds the things that cannot come
from the environment: the default middleware, callback, coercion and
validator registries, an exception handler, a backtrace cleaner and an
optional logger.

Every task class copies these defaults the first time its settings are
read (see ``Task.task_settings``), so configure before defining tasks.

Manifesto:
    - **One source of defaults:** env for scalars, code for callables
    - **Copy on inherit:** registries are duplicated, never shared
    - **Resettable:** tests call ``reset_configuration()``

Examples:
    >>> from taskline.core.configuration import configure
    >>> from taskline.middlewares import Runtime
    >>>
    >>> def setup(config):
    ...     config.middlewares.register(Runtime)
    ...     config.task_halt = ["failed", "skipped"]
    >>> configure(setup)

    Keyword form:

    >>> configure(retries=2, retry_delay=0.5)

Tags:
    configuration, settings, registries, taskline

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from taskline.attributes.attribute import AttributeRegistry
from taskline.attributes.coercions import CoercionRegistry
from taskline.attributes.validators import ValidatorRegistry
from taskline.core.errors import ConfigError
from taskline.core.locale import use_locale
from taskline.core.logging import configure_logging
from taskline.core.settings import TasklineSettings
from taskline.execution.callbacks import CallbackRegistry
from taskline.execution.middleware import MiddlewareRegistry


class Configuration:
    """Mutable process defaults inherited by every task class."""

    def __init__(self, settings: TasklineSettings | None = None):
        settings = settings or TasklineSettings()

        # ── Observability ────────────────────────────────────────────
        self.log_level = settings.log_level
        self.json_logs = settings.json_logs
        self.logger: Any = None
        self.backtrace = settings.backtrace
        self.backtrace_cleaner: Callable[[list[str]], list[str]] | None = None

        # ── Halt policy ──────────────────────────────────────────────
        self.task_halt: list[str] = list(settings.task_halt)
        self.workflow_halt: list[str] = list(settings.workflow_halt)

        # ── Retry ────────────────────────────────────────────────────
        self.retries = settings.retries
        self.retry_on: Any = (Exception,)
        self.retry_delay: Any = settings.retry_delay

        # ── Error handling ───────────────────────────────────────────
        self.exception_handler: Callable[[Any, Exception], Any] | None = None
        self.deprecate: Any = None

        # ── Finalization ─────────────────────────────────────────────
        self.skip_freezing = settings.skip_freezing

        # ── Messages ─────────────────────────────────────────────────
        self.locale = settings.locale

        # ── Registries ───────────────────────────────────────────────
        self.middlewares = MiddlewareRegistry()
        self.callbacks = CallbackRegistry()
        self.coercions = CoercionRegistry()
        self.validators = ValidatorRegistry()

    def to_settings(self) -> dict[str, Any]:
        """Fresh task-class settings built from these defaults."""
        return {
            "logger": self.logger,
            "backtrace": self.backtrace,
            "backtrace_cleaner": self.backtrace_cleaner,
            "task_halt": list(self.task_halt),
            "workflow_halt": list(self.workflow_halt),
            "retries": self.retries,
            "retry_on": self.retry_on,
            "retry_delay": self.retry_delay,
            "exception_handler": self.exception_handler,
            "deprecate": self.deprecate,
            "skip_freezing": self.skip_freezing,
            "middlewares": self.middlewares.dup(),
            "callbacks": self.callbacks.dup(),
            "coercions": self.coercions.dup(),
            "validators": self.validators.dup(),
            "attributes": AttributeRegistry(),
            "tags": [],
        }

    def setup_logging(self, service: str = "taskline") -> None:
        """Apply ``log_level`` / ``json_logs`` to structlog."""
        configure_logging(level=self.log_level, json_format=self.json_logs, service=service)

    def __repr__(self) -> str:
        return (
            f"<Configuration task_halt={self.task_halt} workflow_halt={self.workflow_halt} "
            f"retries={self.retries} middlewares={len(self.middlewares)}>"
        )


_configuration: Configuration | None = None
_lock = threading.Lock()


def configuration() -> Configuration:
    """Return the global configuration, creating it on first use."""
    global _configuration
    if _configuration is None:
        with _lock:
            if _configuration is None:
                _configuration = Configuration()
                use_locale(_configuration.locale)
    return _configuration


def configure(fn: Callable[[Configuration], Any] | None = None, **options: Any) -> Configuration:
    """Mutate the global configuration through ``fn`` and/or keyword options.

    Raises:
        ConfigError: If an option names an unknown setting
    """
    config = configuration()
    if fn is not None:
        fn(config)

    for name, value in options.items():
        if not hasattr(config, name) or name.startswith("_"):
            raise ConfigError(f"unknown configuration option {name}")
        setattr(config, name, value)

    use_locale(config.locale)
    return config


def reset_configuration() -> Configuration:
    """Discard the global configuration and rebuild it from the environment."""
    global _configuration
    with _lock:
        _configuration = None
    return configuration()


__all__ = ["Configuration", "configuration", "configure", "reset_configuration"]
