"""Narrow wrapper around external commands (gh, git, claude).

Core logic never spawns processes directly; it goes through a
``ProcessRunner`` so tests can substitute a fake one.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from commit_resume.errors import ProcessError

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    stdout: str
    stderr: str = ""
    returncode: int = 0


class ProcessRunner:
    """Runs argv lists without a shell."""

    def run_sync(
        self,
        cmd: list[str],
        cwd: Path | str | None = None,
        timeout: float | None = None,
    ) -> str | None:
        """Run a command and return its stripped stdout.

        Returns None on non-zero exit, missing binary, or timeout. Never raises.
        """
        logger.debug("run_sync: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd, cwd=cwd, capture_output=True, text=True, timeout=timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("run_sync failed: %s: %s", cmd[0], e)
            return None
        if result.returncode != 0:
            logger.debug("run_sync exit %d: %s", result.returncode, result.stderr.strip())
            return None
        return result.stdout.strip()

    async def run_async(
        self,
        cmd: list[str],
        cwd: Path | str | None = None,
        timeout: float | None = None,
        max_output: int | None = None,
    ) -> ProcessResult:
        """Run a command on the event loop.

        Raises ProcessError on spawn failure, non-zero exit, timeout, or when
        stdout exceeds ``max_output`` bytes. A timed-out child is killed and
        reaped before the error is raised.
        """
        logger.debug("run_async: %s (cwd=%s, timeout=%s)", " ".join(cmd), cwd, timeout)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessError(cmd, f"could not start: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await _kill(proc)
            raise ProcessError(cmd, f"timed out after {timeout}s")
        except asyncio.CancelledError:
            await _kill(proc)
            raise

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip() or "failed"
            raise ProcessError(cmd, message, proc.returncode)
        if max_output is not None and len(stdout) > max_output:
            raise ProcessError(cmd, f"output exceeded {max_output} bytes", proc.returncode)

        return ProcessResult(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            returncode=proc.returncode,
        )


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()
