"""
Logging context management for userservice.

Holds per-request fields (request id, method, path) that are merged into
every log record emitted while the context is active.

Design:
- Stored in a ContextVar, so each asyncio task and each thread sees its own
  context and concurrent requests never leak fields into each other
- Copy-on-write updates: a context snapshot is never mutated in place
- Context manager interface for automatic cleanup

Example:
    >>> with logging_context(request_id="req-123", method="GET"):
    ...     logger.info("Handling request")  # Automatically includes both fields
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Optional

_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar(
    "userservice_log_context", default=None
)


class LogContext:
    """
    Task-local storage for logging context.

    Example:
        >>> LogContext.set("request_id", "req-123")
        >>> LogContext.get_context()
        {'request_id': 'req-123'}
    """

    @staticmethod
    def _current() -> Dict[str, Any]:
        return _context.get() or {}

    @classmethod
    def get_context(cls) -> Dict[str, Any]:
        """
        Get the current logging context.

        Returns:
            Copy of the context fields
        """
        return dict(cls._current())

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Set a single context field."""
        _context.set({**cls._current(), key: value})

    @classmethod
    def update(cls, fields: Dict[str, Any]) -> None:
        """Update multiple context fields at once."""
        _context.set({**cls._current(), **fields})

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a specific context field."""
        return cls._current().get(key, default)

    @classmethod
    def clear(cls) -> None:
        """Clear all context fields."""
        _context.set({})

    @classmethod
    def remove(cls, *keys: str) -> None:
        """Remove specific context fields."""
        current = cls._current()
        if not current:
            return
        _context.set({k: v for k, v in current.items() if k not in keys})


@contextmanager
def logging_context(**fields):
    """
    Context manager for automatic logging context management.

    Sets context fields on entry and restores the previous context on exit
    (even if an exception occurs), so nested contexts unwind cleanly.

    Example:
        >>> with logging_context(request_id="outer"):
        ...     with logging_context(operation="inner"):
        ...         pass  # both fields present
        ...     # only request_id remains
    """
    token = _context.set({**LogContext._current(), **fields})
    try:
        yield
    finally:
        _context.reset(token)
