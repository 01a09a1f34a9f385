"""Execution layer: results, chains, context, faults, hooks and the executor."""

from taskline.execution.callbacks import Callback, CallbackRegistry
from taskline.execution.chain import Chain
from taskline.execution.context import Context
from taskline.execution.executor import Executor
from taskline.execution.fault import Failed, Fault, Skipped
from taskline.execution.middleware import Middleware, MiddlewareRegistry
from taskline.execution.result import STATES, STATUSES, Result, State, Status
from taskline.execution.retry import ConstantBackoff, ExponentialBackoff, LinearBackoff

__all__ = [
    "STATES",
    "STATUSES",
    "Callback",
    "CallbackRegistry",
    "Chain",
    "ConstantBackoff",
    "Context",
    "Executor",
    "ExponentialBackoff",
    "Failed",
    "Fault",
    "LinearBackoff",
    "Middleware",
    "MiddlewareRegistry",
    "Result",
    "Skipped",
    "State",
    "Status",
]
