"""
Taskline - tasks with explicit outcomes, composable into workflows.

A task declares its inputs, implements ``work()`` and finishes with one of
three statuses (success, skipped, failed). The executor wraps it in
middleware, callbacks, retries, validation and logging; workflows run groups
of tasks over one shared context and stop when a sub-task's status is in the
halt set.

Examples:
    >>> from taskline import Task, Workflow
    >>> class Greet(Task):
    ...     def work(self):
    ...         self.context.greeting = f"hello {self.context.name}"
    >>> Greet.call(name="ada").context.greeting
    'hello ada'
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
    FrozenError,
    InvalidTransitionError,
    TasklineError,
    UndefinedMethodError,
    UnknownCallbackError,
    ValidationError,
)
from taskline.core.locale import t, translate
from taskline.core.logging import configure_logging, get_logger
from taskline.execution.callbacks import Callback
from taskline.execution.chain import Chain
from taskline.execution.context import Context
from taskline.execution.fault import Failed, Fault, Skipped
from taskline.execution.middleware import Middleware
from taskline.execution.result import Result, State, Status
from taskline.attributes import Attribute
from taskline.task import Task
from taskline.workflow import Group, Workflow

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Tasks
    "Task",
    "Workflow",
    "Group",
    "Attribute",
    # Execution
    "Result",
    "State",
    "Status",
    "Chain",
    "Context",
    "Fault",
    "Skipped",
    "Failed",
    "Callback",
    "Middleware",
    # Configuration
    "Configuration",
    "configuration",
    "configure",
    "reset_configuration",
    "configure_logging",
    "get_logger",
    "translate",
    "t",
    # Errors
    "TasklineError",
    "ConfigError",
    "UnknownCallbackError",
    "DeprecationError",
    "UndefinedMethodError",
    "InvalidTransitionError",
    "FrozenError",
    "AbandonedError",
    "CoercionError",
    "ValidationError",
    "AttributeDefinitionError",
]
