"""Logging infrastructure for userservice."""

from .logger import ServiceLogger
from .context import LogContext, logging_context

__all__ = ["ServiceLogger", "LogContext", "logging_context"]
