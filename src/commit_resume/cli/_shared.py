"""Shared CLI utilities to avoid circular imports."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import typer

from commit_resume.cli.menu import SelectionCancelled
from commit_resume.errors import CommitResumeError, SetupError
from commit_resume.utils.output import error, hint, info, show_cursor
from commit_resume.utils.process import ProcessRunner

logger = logging.getLogger(__name__)

FORMAT_OPTION = typer.Option(None, "--format", "-F", help="Output format: json or text")


def get_runner() -> ProcessRunner:
    return ProcessRunner()


@contextmanager
def handle_errors() -> Iterator[None]:
    """Top-level handler: report fatal errors, restore the cursor, pick the exit code.

    A cancelled selection exits 0; setup failures and other errors exit 1.
    """
    try:
        yield
    except typer.Exit:
        raise
    except SelectionCancelled:
        show_cursor()
        info("Cancelled.")
        raise typer.Exit(0)
    except SetupError as e:
        show_cursor()
        error(str(e))
        for line in e.hints:
            hint(line)
        raise typer.Exit(1)
    except CommitResumeError as e:
        show_cursor()
        error(str(e))
        raise typer.Exit(1)
    except KeyboardInterrupt:
        show_cursor()
        error("Interrupted.")
        raise typer.Exit(1)
    except Exception as e:
        show_cursor()
        logger.debug("Unhandled error", exc_info=True)
        error(f"Unexpected error: {e}")
        raise typer.Exit(1)
