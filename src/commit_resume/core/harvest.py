"""Per-repository harvesting: shallow clone, extract authored commits, clean up.

Every failure inside a single harvest is absorbed into an empty result so
one unreachable repository never aborts the scan of the others.
"""

from __future__ import annotations

import logging
import re
import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from commit_resume.core.scheduler import run_bounded
from commit_resume.core.schema import CommitRecord, Repository
from commit_resume.errors import ProcessError
from commit_resume.utils.paths import SCRATCH_PREFIX
from commit_resume.utils.process import ProcessRunner

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "<|>"
LOG_FORMAT = f"%H{FIELD_DELIMITER}%s{FIELD_DELIMITER}%aI"

CLONE_TIMEOUT = 120.0
LOG_TIMEOUT = 60.0
MAX_LOG_OUTPUT = 500 * 1024 * 1024

# scratch roots younger than this may belong to a collect still running
STALE_SCRATCH_AGE = 3600.0

_REPO_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")


def scratch_dir_for(scratch_root: Path, repo: Repository) -> Path:
    """Deterministic working-copy location for ``repo`` under ``scratch_root``.

    The repository name is used unchanged, so sibling repositories such as
    ``.github`` and ``github`` never share a directory. Names outside
    GitHub's ``[A-Za-z0-9._-]`` alphabet, and ``.``/``..``, raise ValueError.
    """
    name = repo.name
    if name in (".", "..") or not _REPO_NAME_RE.match(name):
        raise ValueError(f"unsafe repository name: {name!r}")
    return scratch_root / name


def clone_command(repo: Repository, dest: Path) -> list[str]:
    return ["git", "clone", "--quiet", "--filter=blob:none", repo.url, str(dest)]


def log_command(authors: Sequence[str]) -> list[str]:
    cmd = ["git", "log", "--all"]
    cmd.extend(f"--author={author}" for author in authors)
    cmd.extend([f"--format={LOG_FORMAT}", "--date=iso"])
    return cmd


def parse_log_output(text: str, repo: Repository) -> list[CommitRecord]:
    """Turn ``git log`` output into records; malformed lines are dropped."""
    records: list[CommitRecord] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = line.split(FIELD_DELIMITER)
        if len(parts) < 3:
            continue
        # subjects may themselves contain the delimiter: hash first, date last
        commit_hash = parts[0].strip()
        date_text = parts[-1].strip()
        message = FIELD_DELIMITER.join(parts[1:-1])
        try:
            date = datetime.fromisoformat(date_text.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("%s: unparsable commit date %r", repo.name, date_text)
            continue
        if date.tzinfo is None:
            continue
        records.append(CommitRecord(
            hash=commit_hash,
            message=message,
            date=date,
            repo_name=repo.name,
            repo_url=repo.url,
        ))
    return records


async def harvest(
    repo: Repository,
    authors: Sequence[str],
    scratch_root: Path,
    runner: ProcessRunner | None = None,
    clone_timeout: float = CLONE_TIMEOUT,
    log_timeout: float = LOG_TIMEOUT,
    max_output: int = MAX_LOG_OUTPUT,
) -> list[CommitRecord]:
    """Clone ``repo``, return commits by any of ``authors``, remove the clone."""
    runner = runner or ProcessRunner()
    try:
        dest = scratch_dir_for(scratch_root, repo)
    except ValueError as e:
        logger.warning("Skipping %s: %s", repo.name, e)
        return []

    try:
        try:
            await runner.run_async(clone_command(repo, dest), timeout=clone_timeout)
        except ProcessError as e:
            logger.debug("Skipping %s: clone failed: %s", repo.name, e)
            return []

        try:
            result = await runner.run_async(
                log_command(authors),
                cwd=dest,
                timeout=log_timeout,
                max_output=max_output,
            )
        except ProcessError as e:
            logger.warning("Skipping %s: log extraction failed: %s", repo.name, e)
            return []

        return parse_log_output(result.stdout, repo)
    finally:
        shutil.rmtree(dest, ignore_errors=True)


async def harvest_all(
    repos: Sequence[Repository],
    authors: Sequence[str],
    scratch_root: Path,
    runner: ProcessRunner | None = None,
    limit: int | None = None,
    on_done: Callable[[Repository, list[CommitRecord]], None] | None = None,
    clone_timeout: float = CLONE_TIMEOUT,
    log_timeout: float = LOG_TIMEOUT,
) -> list[CommitRecord]:
    """Harvest every repository concurrently and merge the results.

    ``limit=None`` clones all repositories at once. ``on_done`` is called as
    each repository settles, in completion order.
    """
    runner = runner or ProcessRunner()

    def _task(repo: Repository):
        async def _run() -> list[CommitRecord]:
            commits = await harvest(
                repo, authors, scratch_root, runner,
                clone_timeout=clone_timeout, log_timeout=log_timeout,
            )
            if on_done is not None:
                on_done(repo, commits)
            return commits
        return _run

    results = await run_bounded([_task(repo) for repo in repos], limit)

    merged: list[CommitRecord] = []
    for commits in results:
        merged.extend(commits)
    return merged


def cleanup_stale_scratch(
    base_dir: Path, max_age: float = STALE_SCRATCH_AGE, now: float | None = None
) -> int:
    """Remove scratch roots left behind by interrupted runs. Returns the count.

    Only roots older than ``max_age`` seconds are removed; a younger root may
    belong to another collect running in the same directory. Age comes from
    the millisecond suffix of the root name, or its mtime when the suffix is
    not a number.
    """
    removed = 0
    if not base_dir.is_dir():
        return removed
    now = time.time() if now is None else now
    for entry in base_dir.iterdir():
        if not entry.is_dir() or not entry.name.startswith(SCRATCH_PREFIX):
            continue
        if now - _scratch_created_at(entry) < max_age:
            logger.debug("Keeping recent scratch root %s", entry)
            continue
        shutil.rmtree(entry, ignore_errors=True)
        removed += 1
    return removed


def _scratch_created_at(root: Path) -> float:
    suffix = root.name[len(SCRATCH_PREFIX):]
    if suffix.isdigit():
        return int(suffix) / 1000
    return root.stat().st_mtime
