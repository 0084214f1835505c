"""Logging configuration."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog


def configure_logging(
    level: int = logging.WARNING,
    json_output: bool = False,
    log_file: Optional[Path] = None,
) -> None:
    """Configure structlog and the stdlib root handler it writes through."""
    root = logging.getLogger("jirakit")
    root.setLevel(level)

    formatter = logging.Formatter("%(message)s")

    if not root.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    for handler in root.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "jirakit") -> structlog.stdlib.BoundLogger:
    """Get a bound logger for ``name``."""
    return structlog.get_logger(name)
