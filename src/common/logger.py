import os
import time
import functools
import traceback
from typing import Any, Callable

import orjson
import psutil
import structlog


# Configure structlog for one JSON line per report run, rendered with orjson.
# PrintLogger writes text, so the orjson bytes are decoded first.
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(
            serializer=lambda obj, **kw: orjson.dumps(obj, **kw).decode()
        ),
    ],
    logger_factory=structlog.PrintLoggerFactory(),
)

logger = structlog.get_logger()


def get_memory_usage_mb() -> float:
    """Returns the current process memory usage (RSS) in MB using psutil."""
    process = psutil.Process(os.getpid())
    return round(process.memory_info().rss / (1024 * 1024), 2)


def elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 4)


class WideEventContext:
    """Accumulates the steps, metrics, context and non-fatal errors of one report run."""

    def __init__(self):
        self.steps = {}
        self.metrics = {}
        self.extra_context = {}
        self.errors = []

    def add_step(self, name: str, duration_ms: float, **metadata):
        self.steps[name] = {
            "duration_ms": duration_ms,
            "memory_mb": get_memory_usage_mb(),
            **metadata,
        }

    def add_metric(self, name: str, value: Any):
        self.metrics[name] = value

    def add_context(self, **kwargs):
        self.extra_context.update(kwargs)

    def register_error(self, error_type: str, message: str, **details):
        """Registers an edge case that the run recovered from (e.g. no eligible window)."""
        self.errors.append(
            {
                "type": error_type,
                "message": message,
                "timestamp": time.time(),
                "memory_mb": get_memory_usage_mb(),
                **details,
            }
        )


def canonical_logger(event_name: str, summarize: Callable[[Any], dict] | None = None):
    """
    Decorator for Canonical Logging (Wide Events) using structlog.
    Injects a 'ctx' object into the function to accumulate metadata and
    emits ONE structured JSON event when the call finishes, successful or not.
    On success, `summarize(result)` is merged into the event metrics, so the
    wrapped function only records what happens before its result exists.
    Exceptions are logged with their stack trace and re-raised unchanged.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            ctx = WideEventContext()
            start_time = time.perf_counter()
            start_mem = get_memory_usage_mb()
            status = "success"
            error_reason = None
            error_type = None
            stack_trace = None

            try:
                result = func(*args, ctx=ctx, **kwargs)
                if summarize:
                    ctx.metrics.update(summarize(result))
                return result
            except Exception as e:
                status = "failure"
                error_reason = str(e)
                error_type = type(e).__name__
                stack_trace = traceback.format_exc()
                raise
            finally:
                end_mem = get_memory_usage_mb()

                log_data = {
                    "event": event_name,
                    "status": status,
                    "total_duration_ms": round(
                        (time.perf_counter() - start_time) * 1000, 2
                    ),
                    "memory_usage": {
                        "start_mb": start_mem,
                        "end_mb": end_mem,
                        "delta_mb": round(end_mem - start_mem, 2),
                    },
                    "context": {
                        "function": func.__name__,
                        **ctx.extra_context,
                    },
                    "metrics": ctx.metrics,
                    "steps": ctx.steps,
                }

                if ctx.errors:
                    log_data["non_fatal_errors"] = ctx.errors

                if status == "failure":
                    log_data["failure_type"] = error_type
                    log_data["failure_reason"] = error_reason
                    log_data["stack_trace"] = stack_trace
                    logger.error(**log_data)
                else:
                    logger.info(**log_data)

        return wrapper

    return decorator
