"""Built-in middlewares: correlation ids, runtime measurement and timeouts."""

from taskline.middlewares.correlate import Correlate, current_correlation_id, use_correlation_id
from taskline.middlewares.runtime import Runtime
from taskline.middlewares.timeout import Timeout, TimeoutExpired, run_with_timeout

__all__ = [
    "Correlate",
    "Runtime",
    "Timeout",
    "TimeoutExpired",
    "current_correlation_id",
    "run_with_timeout",
    "use_correlation_id",
]
