"""Structured logging for restartctl.

Every event goes through structlog into stdlib logging, where two named
handlers pick it up: a console handler on stderr at the level chosen on the
command line, and a rotating JSON file that keeps a DEBUG-level audit trail
of each pass.
"""

from __future__ import annotations

import contextlib
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

LOG_DIR = Path.home() / ".local" / "state" / "restartctl"
LOG_FILE = LOG_DIR / "restartctl.log"
MAX_LOG_SIZE = 10 * 1024 * 1024
BACKUP_COUNT = 5
RETENTION_DAYS = 30

CONSOLE_HANDLER = "restartctl-console"
FILE_HANDLER = "restartctl-file"


def _cleanup_old_logs() -> None:
    """Remove rotated log files not modified within RETENTION_DAYS."""
    if not LOG_DIR.exists():
        return
    oldest_allowed = time.time() - RETENTION_DAYS * 24 * 60 * 60
    for path in LOG_DIR.glob(f"{LOG_FILE.name}*"):
        with contextlib.suppress(OSError):
            if path.stat().st_mtime < oldest_allowed:
                path.unlink()


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _render_with(renderer: structlog.types.Processor) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_pre_chain())


def _console_handler(level: int, debug: bool, json_output: bool) -> logging.Handler:
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=debug),
        )
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(CONSOLE_HANDLER)
    handler.setLevel(level)
    handler.setFormatter(_render_with(renderer))
    return handler


def _file_handler() -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs()

    handler = RotatingFileHandler(LOG_FILE, maxBytes=MAX_LOG_SIZE, backupCount=BACKUP_COUNT)
    handler.set_name(FILE_HANDLER)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(_render_with(structlog.processors.JSONRenderer()))
    return handler


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
    log_to_file: bool = True,
) -> None:
    """Install the restartctl handlers, replacing any installed earlier.

    Args:
        verbose: Show INFO events on the console.
        debug: Show DEBUG events on the console, with locals in tracebacks.
        json_output: Render console events as JSON lines.
        log_to_file: Also write ``LOG_FILE`` (10MB per file, 5 backups,
            files older than 30 days removed).
    """
    console_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    handlers = [_console_handler(console_level, debug, json_output)]
    if log_to_file:
        handlers.append(_file_handler())

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if log_to_file else console_level
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() in (CONSOLE_HANDLER, FILE_HANDLER):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.DEBUG)
    for handler in handlers:
        root.addHandler(handler)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a structlog logger, bound to ``initial_context`` when given."""
    logger: structlog.BoundLogger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger
