"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

# Log file configuration
LOG_DIR = Path.home() / ".local" / "state" / "cvm"
LOG_FILE = LOG_DIR / "cvm.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5  # Keep 5 rotated files
RETENTION_DAYS = 30  # Delete logs older than 30 days

# Marks handlers installed here so reconfiguring replaces them
_HANDLER_ATTR = "_cvm_handler"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _cleanup_old_logs(log_file: Path) -> None:
    """Delete rotated files of ``log_file`` older than RETENTION_DAYS."""
    if not log_file.parent.exists():
        return
    cutoff = datetime.now() - timedelta(days=RETENTION_DAYS)
    for path in log_file.parent.glob(f"{log_file.name}*"):
        try:
            if datetime.fromtimestamp(path.stat().st_mtime) < cutoff:
                path.unlink()
        except OSError:
            pass  # Ignore errors during cleanup


def _file_handler(log_file: Path) -> logging.Handler:
    """Create a rotating JSON file handler for persistent logging."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs(log_file)

    handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
    )
    handler.setLevel(logging.DEBUG)  # Capture everything to file
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    return handler


def _console_handler(log_level: int, json_output: bool, debug: bool) -> logging.Handler:
    """Create the stderr handler; stdout is left to command output."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.RichTracebackFormatter(
                show_locals=debug,
            ),
        )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    return handler


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure structured logging for the application.

    Console logs go to stderr, human-readable by default or as JSON lines
    for in-cluster use. With ``log_file`` set, everything down to DEBUG is
    also written there as JSON with rotation (10MB max, 5 backups) and
    retention cleanup (30 days). Calling this again replaces the handlers
    installed by the previous call.

    Args:
        verbose: Enable verbose (INFO level) output.
        debug: Enable debug mode (DEBUG level).
        json_output: Output logs in JSON format.
        log_file: Path of the rotating log file, e.g. ``LOG_FILE``.
    """
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    # The file handler needs every record, so filtering happens per handler
    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if log_file else log_level
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers = [_console_handler(log_level, json_output, debug)]
    if log_file is not None:
        handlers.append(_file_handler(log_file))

    root_logger.setLevel(logging.DEBUG)  # Let handlers filter
    for handler in handlers:
        setattr(handler, _HANDLER_ATTR, True)
        root_logger.addHandler(handler)

    # The kubernetes client logs request bodies at DEBUG
    logging.getLogger("kubernetes").setLevel(logging.INFO if debug else logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a configured logger with optional initial context.

    Args:
        name: Logger name. If None, uses the calling module's name.
        **initial_context: Initial context variables to bind to the logger.

    Returns:
        A bound structlog logger.
    """
    logger: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
