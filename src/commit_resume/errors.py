"""Exception hierarchy shared across commit-resume."""

from __future__ import annotations


class CommitResumeError(Exception):
    """Base class for every error raised by commit-resume."""


class ProcessError(CommitResumeError):
    """Raised when an external command fails, times out, or cannot start."""

    def __init__(self, cmd: list[str], message: str, returncode: int | None = None) -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        super().__init__(f"{cmd[0] if cmd else '?'}: {message}")


class SetupError(CommitResumeError):
    """Raised when a required external tool is missing or unauthenticated.

    ``hints`` holds remediation lines shown to the user under the message.
    """

    def __init__(self, message: str, hints: list[str] | None = None) -> None:
        self.hints = hints or []
        super().__init__(message)


class GenerationError(CommitResumeError):
    """Raised when the text-generation CLI returns an error or nothing."""


class DocumentError(CommitResumeError):
    """Raised when a commit document cannot be read."""
