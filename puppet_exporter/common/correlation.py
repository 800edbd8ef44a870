"""
Correlation ID management for scrape tracing.
Each scrape request runs under its own correlation ID so that every log
line emitted while serving it can be grouped together.
"""
import uuid
import logging
from typing import Optional
from contextvars import ContextVar

# Thread-safe: each request handler thread gets its own context
_correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    'correlation_id', default=None
)

_component_var: ContextVar[Optional[str]] = ContextVar(
    'component', default=None
)


def generate_correlation_id() -> str:
    """Return a new UUID4 string."""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: Optional[str]) -> None:
    _correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


def set_component(component: str) -> None:
    """
    Set the component name for the current context.

    Args:
        component: Component name (e.g., "exporter", "server")
    """
    _component_var.set(component)


def get_component() -> Optional[str]:
    return _component_var.get()


class CorrelationFilter(logging.Filter):
    """
    Logging filter that injects correlation_id and component into log records.
    Reads from ContextVar so log statements inside a scrape carry its ID
    without explicit passing.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or ""
        record.component = get_component() or ""
        return True


class CorrelationContext:
    """
    Context manager binding a correlation ID for the duration of one scrape.
    Restores the previous ID on exit.

    Usage:
        with CorrelationContext() as ctx:
            logger.info("scrape started")  # carries ctx.correlation_id
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._previous_id: Optional[str] = None

    def __enter__(self) -> 'CorrelationContext':
        self._previous_id = get_correlation_id()
        set_correlation_id(self.correlation_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        set_correlation_id(self._previous_id)
