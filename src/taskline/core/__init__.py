"""
Core primitives: errors, logging, locale, settings and global configuration.

Everything the execution layer needs but that is not itself about running a
task lives here.
"""

from taskline.core.configuration import (
    Configuration,
    configuration,
    configure,
    reset_configuration,
)
from taskline.core.errors import (
    AbandonedError,
    AttributeDefinitionError,
    CoercionError,
    ConfigError,
    DeprecationError,
    ErrorCategory,
    ExecutionError,
    FrozenError,
    InvalidTransitionError,
    ParameterError,
    TasklineError,
    UndefinedMethodError,
    UnknownCallbackError,
    ValidationError,
)
from taskline.core.locale import translate, use_locale
from taskline.core.logging import LogContext, configure_logging, get_logger
from taskline.core.settings import TasklineSettings

__all__ = [
    # Configuration
    "Configuration",
    "TasklineSettings",
    "configuration",
    "configure",
    "reset_configuration",
    # Errors
    "AbandonedError",
    "AttributeDefinitionError",
    "CoercionError",
    "ConfigError",
    "DeprecationError",
    "ErrorCategory",
    "ExecutionError",
    "FrozenError",
    "InvalidTransitionError",
    "ParameterError",
    "TasklineError",
    "UndefinedMethodError",
    "UnknownCallbackError",
    "ValidationError",
    # Logging / locale
    "LogContext",
    "configure_logging",
    "get_logger",
    "translate",
    "use_locale",
]
