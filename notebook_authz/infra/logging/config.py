"""Logging configuration setup.

Provides logging configuration using:
- dictConfig for formatters and the root logger
- QueueHandler + QueueListener for non-blocking I/O
- ContextInjectingFilter for automatic context propagation
- JSONL format for machine parsing
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
import time
from typing import TYPE_CHECKING, Any

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_queue_handler: QueueHandler | None = None
logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

if TYPE_CHECKING:
    from notebook_authz.core.settings.logs import LoggingSettings


def complete() -> None:
    """Wait for all queued log records to be processed.

    Blocks until the queue is drained (at most 5 seconds). Call before
    process exit to make sure all records were written.
    """
    if _log_queue is None or _listener is None:
        return

    max_wait = 5.0
    start = time.time()

    while not _log_queue.empty() and (time.time() - start) < max_wait:
        time.sleep(0.01)

    time.sleep(0.05)


def shutdown() -> None:
    """Shutdown logging system and stop QueueListener.

    Automatically called via atexit handler.
    """
    global _log_queue, _listener, _queue_handler, _LOGGING_INITIALIZED

    if _listener is not None:
        complete()
        _listener.stop()
        _listener = None

    if _queue_handler is not None:
        logging.getLogger().removeHandler(_queue_handler)
        _queue_handler = None

    _log_queue = None
    _LOGGING_INITIALIZED = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from notebook_authz.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = settings_obj.to_logging_kwargs()
    if configure_kwargs:
        log_config = {**log_config, **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    console_level: str | None = None,
    file_level: str | None = None,
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    include_function_name: bool = False,
    include_thread_info: bool = False,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    service_name: str = "notebook-authz",
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig and QueueHandler pattern.

    All handlers are driven by a QueueListener; the root logger only
    carries a QueueHandler, and application loggers propagate up.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        console_level: Console handler level. If None, uses log_level.
        file_level: File handler level. If None, uses log_level.
        file_path: Path to log file. None disables file logging.
        json_logs: Enable JSONL (JSON Lines) structured logging.
        console_enabled: Enable console/stderr logging.
        include_context: Enable ContextInjectingFilter for auto context.
        capture_warnings: Forward Python warnings to logging system.
        include_function_name: Include function name in records.
        include_thread_info: Include thread ID and name in records.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        service_name: Static ``service`` field of JSON records.
        **kwargs: Ignored extra settings.

    Example:
        from notebook_authz.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs.keys())))

    # Drop a previous listener so reconfiguration does not duplicate output
    shutdown()

    if capture_warnings:
        logging.captureWarnings(True)

    path = Path(file_path) if file_path else None
    if path:
        path.parent.mkdir(parents=True, exist_ok=True)

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _build_formatters_config(
            json_logs=json_logs,
            include_function_name=include_function_name,
            include_thread_info=include_thread_info,
            service_name=service_name,
        ),
        # Handlers are attached to the QueueListener, not to root
        "root": {
            "level": log_level.upper(),
            "handlers": [],
        },
    }

    logging.config.dictConfig(logging_config)

    _setup_queue_logging(
        console_enabled=console_enabled,
        file_path=path,
        console_level=console_level or log_level,
        file_level=file_level or log_level,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
        json_logs=json_logs,
        include_context=include_context,
        include_function_name=include_function_name,
        include_thread_info=include_thread_info,
        service_name=service_name,
    )


def _build_formatters_config(
    json_logs: bool,
    include_function_name: bool,
    include_thread_info: bool,
    service_name: str,
) -> dict[str, Any]:
    """Build formatters configuration for dictConfig."""
    formatters: dict[str, Any] = {}

    if json_logs:
        fmt_keys = {
            "level": "levelname",
            "logger": "name",
            "message": "message",
        }
        if include_function_name:
            fmt_keys["function"] = "funcName"

        formatters["json"] = {
            "()": "notebook_authz.infra.logging.formatters.JSONFormatter",
            "fmt_keys": fmt_keys,
            "static": {"service": service_name},
            "include_thread_info": include_thread_info,
        }
    else:
        format_parts = ["%(asctime)s", "%(levelname)s", "%(name)s"]
        if include_function_name:
            format_parts.append("%(funcName)s")
        if include_thread_info:
            format_parts.append("[%(threadName)s:%(thread)d]")
        format_parts.append("%(message)s")

        formatters["text"] = {
            "format": " - ".join(format_parts),
            "datefmt": _DATE_FORMAT,
        }

    return formatters


def _make_formatter(
    json_logs: bool,
    include_function_name: bool,
    include_thread_info: bool,
    service_name: str,
) -> logging.Formatter:
    from notebook_authz.infra.logging.formatters import JSONFormatter

    config = _build_formatters_config(
        json_logs=json_logs,
        include_function_name=include_function_name,
        include_thread_info=include_thread_info,
        service_name=service_name,
    )
    if json_logs:
        return JSONFormatter(
            fmt_keys=config["json"]["fmt_keys"],
            static=config["json"]["static"],
            include_thread_info=include_thread_info,
        )
    return logging.Formatter(fmt=config["text"]["format"], datefmt=_DATE_FORMAT)


def _setup_queue_logging(
    console_enabled: bool,
    file_path: Path | None,
    console_level: str,
    file_level: str,
    file_max_bytes: int,
    file_backup_count: int,
    json_logs: bool,
    include_context: bool,
    include_function_name: bool,
    include_thread_info: bool,
    service_name: str,
) -> None:
    """Set up QueueHandler + QueueListener for non-blocking logging."""
    global _log_queue, _listener, _queue_handler

    from notebook_authz.infra.logging.context import ContextInjectingFilter

    _log_queue = Queue()
    handlers: list[logging.Handler] = []

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(
            _make_formatter(json_logs, include_function_name, include_thread_info, service_name)
        )
        handlers.append(console_handler)

    if file_path:
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            _make_formatter(json_logs, include_function_name, include_thread_info, service_name)
        )
        handlers.append(file_handler)

    if handlers:
        _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
        _listener.start()
        atexit.register(shutdown)

    _queue_handler = QueueHandler(_log_queue)
    if include_context:
        # Context vars are read in the emitting thread, before the record is queued
        _queue_handler.addFilter(ContextInjectingFilter())
    logging.getLogger().addHandler(_queue_handler)
