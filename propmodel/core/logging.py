"""Logging configuration for propmodel.

The engine is a library, so it configures the ``propmodel`` logger
hierarchy only and leaves the root logger to the host application. Events
are structlog key/value records rendered as JSON or plain console lines.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

ROOT_LOGGER_NAME = "propmodel"

LOG_DIR = Path.cwd() / "logs"
LOG_FILE = LOG_DIR / "propmodel.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

_configured: bool = False


def _handlers(log_to_file: bool) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    # Never write files from the test suite
    if log_to_file and not os.environ.get("PYTEST_CURRENT_TEST"):
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                str(LOG_FILE),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            ))
        except OSError as e:
            sys.stderr.write(f"propmodel: file logging disabled ({e})\n")

    return handlers


def _processors(json_output: bool) -> list[Any]:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
    force: bool = False,
) -> None:
    """Attach handlers to the ``propmodel`` logger and set up structlog.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Defaults to ``settings.log_level``.
        json_output: Render JSON lines. Defaults to ``settings.json_logs``.
        force: Reconfigure even if logging was already set up.
    """
    global _configured

    if _configured and not force:
        return

    from propmodel.core.settings import get_settings

    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.json_logs

    engine_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(engine_logger.handlers):
        engine_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(message)s")
    for handler in _handlers(settings.log_to_file):
        handler.setFormatter(formatter)
        engine_logger.addHandler(handler)
    engine_logger.setLevel(getattr(logging, level_name, logging.INFO))
    engine_logger.propagate = False

    structlog.configure(
        processors=_processors(json_output),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for a module of the engine, configuring logging on first use.

    Names outside the ``propmodel`` hierarchy are nested under it so they
    share its handlers.
    """
    if not _configured:
        configure_logging()

    name = name or ROOT_LOGGER_NAME
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return structlog.get_logger(name)
