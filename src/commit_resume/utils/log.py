"""Logging setup: rich handler on stderr, verbosity toggled by DEBUG."""

from __future__ import annotations

import logging
import os

from rich.logging import RichHandler

from commit_resume.utils.output import error_console

LOGGER_NAME = "commit_resume"
_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    return os.environ.get("DEBUG", "").strip().lower() in _TRUTHY


def setup_logging(debug: bool | None = None) -> logging.Logger:
    """Attach a RichHandler to the package logger.

    Level is DEBUG when ``debug`` is true (or the DEBUG environment variable
    is set), WARNING otherwise. Calling it again only adjusts the level.
    """
    if debug is None:
        debug = debug_enabled()
    level = logging.DEBUG if debug else logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=error_console,
            show_path=debug,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger
