"""Text generation through the Claude Code CLI.

The CLI is driven non-interactively (``claude -p``) with streamed JSON
output. The first non-empty assistant text block is the answer; a result
message flagged ``is_error`` fails the call.
"""

from __future__ import annotations

import json
import logging
import platform
import re
import shutil
from pathlib import Path
from typing import Protocol

from commit_resume.errors import GenerationError, ProcessError
from commit_resume.utils.log import debug_enabled
from commit_resume.utils.paths import claude_static_candidates, claude_version_manager_candidates
from commit_resume.utils.process import ProcessRunner

logger = logging.getLogger(__name__)

GENERATION_TIMEOUT = 600.0
_DEBUG_PREVIEW = 500
_FENCE_OPEN = re.compile(r"^```(?:markdown|md)?\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```$")


class TextGenerator(Protocol):
    async def generate(self, prompt: str, cwd: Path) -> str: ...


class ClaudeGenerator:
    """Generate text with one non-interactive ``claude`` invocation per prompt."""

    def __init__(
        self,
        claude_path: str | Path,
        runner: ProcessRunner | None = None,
        timeout: float = GENERATION_TIMEOUT,
    ) -> None:
        self.claude_path = str(claude_path)
        self.runner = runner or ProcessRunner()
        self.timeout = timeout

    def command(self, prompt: str) -> list[str]:
        return [
            self.claude_path,
            "-p", prompt,
            "--output-format", "stream-json",
            "--verbose",
            "--max-turns", "1",
            "--permission-mode", "bypassPermissions",
        ]

    async def generate(self, prompt: str, cwd: Path) -> str:
        try:
            result = await self.runner.run_async(self.command(prompt), cwd=cwd, timeout=self.timeout)
        except ProcessError as e:
            raise GenerationError(str(e))
        text = extract_text(result.stdout)
        if not text.strip():
            raise GenerationError("Claude returned an empty response")
        return strip_code_fence(text)


def extract_text(stream: str) -> str:
    """Pull the first non-empty assistant text out of stream-json output."""
    text = ""
    debug = debug_enabled()
    for line in stream.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Ignoring non-JSON line from claude: %s", line[:_DEBUG_PREVIEW])
            continue
        if not isinstance(message, dict):
            continue
        if debug:
            logger.debug("[%s] %s", message.get("type"), line[:_DEBUG_PREVIEW])

        kind = message.get("type")
        if kind == "assistant" and not text:
            text = _assistant_text(message)
        elif kind == "result" and message.get("is_error"):
            errors = message.get("errors") or [message.get("result") or "unknown error"]
            raise GenerationError("\n".join(str(e) for e in errors))
    return text


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def find_claude_path(
    configured: str | None = None, runner: ProcessRunner | None = None
) -> str | None:
    """Locate the claude executable, or None when it is not installed."""
    if configured:
        return configured if Path(configured).exists() else None

    found = shutil.which("claude")
    if found:
        return found

    for candidate in [*claude_static_candidates(), *claude_version_manager_candidates()]:
        if candidate.exists():
            return str(candidate)

    # login shells on macOS often know PATH entries the current process does not
    runner = runner or ProcessRunner()
    shells = ["/bin/zsh", "/bin/bash"] if platform.system() == "Darwin" else ["/bin/bash"]
    for shell in shells:
        if not Path(shell).exists():
            continue
        found = runner.run_sync([shell, "-lc", "command -v claude"], timeout=5)
        if found:
            return found.splitlines()[0].strip()
    return None


# -- Module-level helpers --


def _assistant_text(message: dict) -> str:
    content = (message.get("message") or {}).get("content")
    if isinstance(content, str):
        return content if content.strip() else ""
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text" and (block.get("text") or "").strip():
                return block["text"]
    return ""
