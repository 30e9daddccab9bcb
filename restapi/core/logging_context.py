import logging
import contextvars
from contextlib import contextmanager
from typing import Any, Dict

# Extra fields attached to every record emitted inside a LoggingContext
_log_context: contextvars.ContextVar = contextvars.ContextVar("restapi_log_context", default={})


class ContextFilter(logging.Filter):
    def filter(self, record):
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return True


def current_log_context() -> Dict[str, Any]:
    return dict(_log_context.get())


@contextmanager
def LoggingContext(logger: logging.Logger, **kwargs):
    """
    Attach extra fields to log records for the duration of the block.

    example:
        with LoggingContext(logger, action="fetch_items", method="GET"):
            logger.info("normalizing request")
    """
    merged = _log_context.get().copy()
    merged.update(kwargs)
    token = _log_context.set(merged)
    try:
        yield
    finally:
        _log_context.reset(token)
