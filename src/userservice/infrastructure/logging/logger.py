"""
Process-wide logger for userservice.

Records go to stderr in a readable line format and, when a log file is
configured, to that file as one JSON object per line. Fields held in
``LogContext`` (request id, method, path) are attached to every record.

The domain and application layers never log; adapters and infrastructure do.
"""

import json
import logging
import logging.handlers
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .context import LogContext

LOGGER_NAME = "userservice"

# LogRecord attributes that are not caller-supplied fields
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs", "message", "asctime",
    "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "taskName", "exc_info", "exc_text", "stack_info",
})


class JSONFormatter(logging.Formatter):
    """One JSON object per record: core fields, caller fields, then exception."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        )

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ServiceLogger:
    """
    Wrapper around the ``userservice`` logger.

    ``get_instance`` returns the shared logger, building it with the given
    settings on first use; ``configure`` rebuilds it, closing the old
    handlers. Each logging method merges the current ``LogContext`` into
    ``extra``, with explicit ``extra`` keys taking precedence.

    Example:
        >>> logger = ServiceLogger.configure(level="DEBUG", console=False, log_file=Path("app.log"))
        >>> logger.info("User created", extra={"user_id": "..."})
    """

    _instance: Optional['ServiceLogger'] = None
    _lock: threading.Lock = threading.Lock()

    def __init__(
        self,
        level: str = "INFO",
        log_file: Optional[Path] = None,
        console: bool = True,
        rotation: str = "daily",
        retention_days: int = 30,
    ):
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level.upper())
        self.logger.propagate = False

        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if console:
            self.logger.addHandler(self._console_handler(level))
        if log_file:
            self.logger.addHandler(self._file_handler(Path(log_file), rotation, retention_days))

    @staticmethod
    def _console_handler(level: str) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level.upper())
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, CONSOLE_DATE_FORMAT))
        return handler

    @staticmethod
    def _file_handler(log_file: Path, rotation: str, retention_days: int) -> logging.Handler:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if rotation == "daily":
            handler: logging.Handler = logging.handlers.TimedRotatingFileHandler(
                filename=str(log_file),
                when="midnight",
                backupCount=retention_days,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(str(log_file), encoding="utf-8")
        # Level filtering happens on the logger; the file keeps whatever passes it
        handler.setFormatter(JSONFormatter())
        return handler

    @classmethod
    def get_instance(cls, **settings) -> 'ServiceLogger':
        """Shared logger; ``settings`` only apply when it does not exist yet."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls(**settings)
        return cls._instance

    @classmethod
    def configure(cls, **settings) -> 'ServiceLogger':
        """Replace the shared logger with one built from ``settings``."""
        with cls._lock:
            cls._instance = cls(**settings)
        return cls._instance

    def _log(self, level: int, message: str, kwargs: Dict[str, Any]) -> None:
        context = LogContext.get_context()
        if context:
            kwargs = {**kwargs, "extra": {**context, **kwargs.get("extra", {})}}
        # stacklevel points the record at the caller of debug()/info()/...
        kwargs.setdefault("stacklevel", 3)
        self.logger.log(level, message, **kwargs)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)
