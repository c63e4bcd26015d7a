"""
Logging setup for the filing core.

Two output modes share the same record fields:
- JSON lines for production log shipping
- Coloured single lines for local development

Every record carries the filing and actor bound with ``filing_context``
plus whatever a ``ContextLogger`` or ``extra_data`` adds.
"""

import inspect
import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional

filing_id_var: ContextVar[Optional[str]] = ContextVar('filing_id', default=None)
actor_id_var: ContextVar[Optional[str]] = ContextVar('actor_id', default=None)

PERFORMANCE_LOGGER = "performance"


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Correlation ids first, then non-empty extra_data entries."""
    fields: Dict[str, Any] = {}
    for key, var in (("filing_id", filing_id_var), ("actor_id", actor_id_var)):
        value = var.get()
        if value:
            fields[key] = value
    extra_data = getattr(record, 'extra_data', None) or {}
    fields.update((k, v) for k, v in extra_data.items() if v is not None)
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(_record_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """
    Development formatter.

    ``HH:MM:SS.mmm LEVEL [logger] message | key=value ...``
    """

    LEVEL_COLOURS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def _level(self, record: logging.LogRecord) -> str:
        label = record.levelname.ljust(8)
        if not self.use_colors:
            return label
        return f"{self.LEVEL_COLOURS.get(record.levelno, '')}{label}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S.%f')[:-3]
        line = f"{stamp} {self._level(record)} [{record.name}] {record.getMessage()}"

        fields = _record_fields(record)
        if fields:
            line = " | ".join([line] + [f"{k}={v}" for k, v in fields.items()])
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ContextLogger(logging.LoggerAdapter):
    """Adapter whose bound fields are merged under each record's extra_data."""

    def process(self, msg: str, kwargs: Dict) -> tuple:
        extra = dict(kwargs.get('extra') or {})
        extra['extra_data'] = {**self.extra, **extra.get('extra_data', {})}
        kwargs['extra'] = extra
        return msg, kwargs


@contextmanager
def filing_context(filing_id: Optional[str] = None, actor_id: Optional[str] = None) -> Iterator[None]:
    """
    Bind a filing id and actor id to every log line emitted inside the block.

    Example:
        with filing_context(filing.id, actor.user_id):
            logger.info("Submitting")
    """
    tokens = [
        (var, var.set(value))
        for var, value in ((filing_id_var, filing_id), (actor_id_var, actor_id))
        if value is not None
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None
) -> None:
    """
    Replace the root handlers with a stdout handler and an optional file.

    Args:
        level: Root log level name
        json_output: JSON lines on stdout instead of the readable format
        log_file: Extra destination, always written as JSON lines
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setFormatter(JsonFormatter() if json_output else ReadableFormatter())
    root.addHandler(stdout)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setFormatter(JsonFormatter())
        root.addHandler(to_file)

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def configure_from_settings(settings=None) -> None:
    """Configure logging from FilingSettings (log_level, log_json)."""
    from config.settings import get_settings

    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Logger that tags every record with ``extra``.

    Args:
        name: Logger name, usually __name__
        **extra: Fields such as organization_id or filing_type

    Returns:
        ContextLogger instance
    """
    return ContextLogger(logging.getLogger(name), extra)


def log_performance(name: Optional[str] = None) -> Callable:
    """
    Time a function or coroutine function.

    Completion is logged at DEBUG with ``duration_ms``; an exception is
    logged at ERROR with ``duration_ms`` and ``error`` and then re-raised.

    Args:
        name: Label for the log line, defaults to the qualified name
    """
    def decorator(func: Callable) -> Callable:
        label = name or func.__qualname__
        perf_logger = get_logger(PERFORMANCE_LOGGER)

        def report(started: float, error: Optional[BaseException] = None) -> None:
            fields: Dict[str, Any] = {'duration_ms': int((time.perf_counter() - started) * 1000)}
            if error is None:
                perf_logger.debug(f"{label} completed", extra={'extra_data': fields})
            else:
                fields['error'] = str(error)
                perf_logger.error(f"{label} failed", extra={'extra_data': fields})

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def timed_coroutine(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    report(started, exc)
                    raise
                report(started)
                return result

            return timed_coroutine

        @wraps(func)
        def timed(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                report(started, exc)
                raise
            report(started)
            return result

        return timed

    return decorator
