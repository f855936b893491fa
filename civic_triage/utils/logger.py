"""
Logging setup for the triage service.

Console output is human readable; the optional rotating file carries one
JSON object per record so audit events (report created, scope rejected,
report resolved) can be grepped by field.
"""
import logging
import logging.config
import json
import sys
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from pathlib import Path

ROOT_LOGGER_NAME = "civic_triage"
SERVICE_NAME = "civic-report-triage"

# Third-party loggers kept below the application level.
_QUIET_LOGGERS: Dict[str, str] = {
    "uvicorn": "INFO",
    "uvicorn.access": "WARNING",
    "sqlalchemy.engine": "WARNING",
}

# Record attributes that are not structured context.
_RESERVED_FIELDS = frozenset({"timestamp", "level", "logger", "message", "service"})

class JSONFormatter(logging.Formatter):
    """Render a record and its structured context as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        context = getattr(record, "context", None) or {}
        for key, value in context.items():
            entry[f"ctx_{key}" if key in _RESERVED_FIELDS else key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)

class ConsoleFormatter(logging.Formatter):
    """Plain text line followed by ``key=value`` context pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            line = f"{line} | " + " ".join(f"{k}={v}" for k, v in context.items())
        return line

class StructuredLogger:
    """
    Thin wrapper whose methods take keyword context:

        logger.info("Auto-priority computed", category=..., nearby_count=...)

    ``None`` values are dropped; ``exc_info`` goes to the stdlib logger.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _emit(self, level: int, message: str, exc_info: bool = False, **context):
        if not self.logger.isEnabledFor(level):
            return
        fields = {k: v for k, v in context.items() if v is not None}
        self.logger.log(level, message, exc_info=exc_info, extra={"context": fields}, stacklevel=3)

    def debug(self, message: str, **context):
        self._emit(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._emit(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._emit(logging.WARNING, message, **context)

    def error(self, message: str, **context):
        self._emit(logging.ERROR, message, **context)

    def exception(self, message: str, **context):
        self._emit(logging.ERROR, message, exc_info=True, **context)

def _handler_configs(log_level: str, log_file: Optional[str], enable_console: bool) -> Dict[str, Dict[str, Any]]:
    handlers: Dict[str, Dict[str, Any]] = {}
    if enable_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "console",
            "level": log_level,
        }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
            "formatter": "json",
            "level": log_level,
        }
    return handlers

def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True
) -> None:
    """
    Configure the ``civic_triage`` logger tree and quiet third-party loggers.

    Args:
        log_level: Level name for application loggers
        log_file: Optional path of the rotating JSON log
        enable_console: Whether to also write to stdout
    """
    handlers = _handler_configs(log_level, log_file, enable_console)
    handler_names = list(handlers)

    loggers: Dict[str, Dict[str, Any]] = {
        ROOT_LOGGER_NAME: {"level": log_level, "handlers": handler_names, "propagate": False},
    }
    for name, level in _QUIET_LOGGERS.items():
        loggers[name] = {"level": level, "handlers": handler_names, "propagate": False}

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JSONFormatter},
            "console": {
                "()": ConsoleFormatter,
                "fmt": "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": loggers,
        "root": {"level": "WARNING", "handlers": handler_names},
    })

def get_logger(name: str) -> StructuredLogger:
    """Return a StructuredLogger under the ``civic_triage`` namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return StructuredLogger(name)
    return StructuredLogger(f"{ROOT_LOGGER_NAME}.{name}")

def log_business_event(
    event_type: str,
    details: Dict[str, Any],
    admin_id: Optional[int] = None,
    request_id: Optional[str] = None,
    level: int = logging.INFO,
) -> None:
    """
    Write an audit record to ``civic_triage.audit``.

    Args:
        event_type: e.g. 'report_created', 'report_resolved', 'scope_rejected'
        details: Event fields; they cannot override event_type/admin_id/request_id
        admin_id: Acting administrator, when there is one
        request_id: Request ID for tracing
        level: Log level; rejections are logged as warnings
    """
    context = {**details, "event_type": event_type, "admin_id": admin_id, "request_id": request_id}
    get_logger("audit")._emit(level, f"Business event: {event_type}", **context)

def log_performance(
    operation: str,
    duration_ms: float,
    additional_data: Optional[Dict[str, Any]] = None,
    slow_threshold_ms: float = 500.0,
) -> None:
    """
    Record an operation timing under ``civic_triage.performance``.

    Timings above ``slow_threshold_ms`` are logged as warnings.
    """
    level = logging.WARNING if duration_ms > slow_threshold_ms else logging.INFO
    context = {**(additional_data or {}), "operation": operation, "duration_ms": round(duration_ms, 2)}
    get_logger("performance")._emit(level, f"Performance: {operation}", **context)
