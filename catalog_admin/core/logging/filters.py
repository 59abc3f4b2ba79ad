import contextvars
import logging
import os
import socket
from contextlib import contextmanager
from typing import Any, Dict

from catalog_admin.core.config import settings

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("log_context", default={})


class ContextFilter(logging.Filter):
    """
    Enriches every record with static process details and the current contextvar log context.
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(name)

        self.hostname = socket.gethostname()
        self.process_id = os.getpid()
        self.app_name = settings.APP_NAME
        self.environment = settings.ENVIRONMENT
        self.app_version = settings.APP_VERSION

    def filter(self, record: logging.LogRecord) -> bool:
        record.hostname = self.hostname
        record.process_id = self.process_id
        record.app_name = self.app_name
        record.environment = self.environment
        record.app_version = self.app_version

        for key, value in _log_context.get().items():
            setattr(record, key, value)

        return True


class NoiseReductionFilter(logging.Filter):
    """
    Drops records from suppressed loggers or whose message contains a suppressed pattern.
    """

    def __init__(
        self,
        name: str = "",
        suppress_patterns: list[str] | None = None,
        suppress_loggers: list[str] | None = None,
    ) -> None:
        super().__init__(name)
        self.suppress_patterns = suppress_patterns or []
        self.suppress_loggers = suppress_loggers or []

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name in self.suppress_loggers:
            return False

        message = record.getMessage()
        return not any(pattern in message for pattern in self.suppress_patterns)


@contextmanager
def add_to_log_context(**kwargs: Any):
    """
    Context manager for temporarily adding context to logs.

    Example:
        with add_to_log_context(category_id="...", operation="delete"):
            logger.info("Reassigning children")  # Will include category_id and operation
    """
    token = _log_context.set({**_log_context.get(), **kwargs})

    try:
        yield
    finally:
        _log_context.reset(token)


def get_log_context() -> Dict[str, Any]:
    """Get the current logging context."""
    return _log_context.get()


def clear_log_context() -> None:
    """Reset the logging context to an empty state."""
    _log_context.set({})
