"""Shared fixtures: real fixture repos, a scripted git runner, isolated config."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

import git
import pytest

from commit_resume.errors import ProcessError
from commit_resume.utils.process import ProcessResult, ProcessRunner


def _git_date(iso: str) -> str:
    """ISO-8601 -> git internal '<unix> <+hhmm>' (unambiguous for GitPython)."""
    dt = datetime.fromisoformat(iso)
    offset = dt.utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset else 0
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{int(dt.timestamp())} {sign}{minutes // 60:02d}{minutes % 60:02d}"


@pytest.fixture
def make_repo(tmp_path: Path):
    """Factory: create a local git repo with commits by given authors.

    Each commit is (author_name, author_email, message, iso_date).
    """

    def _make(name: str, commits: list[tuple[str, str, str, str]]) -> Path:
        path = tmp_path / "remotes" / name
        repo = git.Repo.init(path)
        for i, (author_name, email, message, date) in enumerate(commits):
            filename = f"file{i}.txt"
            (path / filename).write_text(f"{message}\n")
            repo.index.add([filename])
            actor = git.Actor(author_name, email)
            repo.index.commit(
                message,
                author=actor,
                committer=actor,
                author_date=_git_date(date),
                commit_date=_git_date(date),
            )
        return path

    return _make


class FakeGitRunner(ProcessRunner):
    """Scripted stand-in for git clone / git log.

    ``logs`` maps repository name to raw ``git log`` output. Names in
    ``fail_clone`` / ``fail_log`` raise ProcessError. ``delays`` adds an
    artificial clone latency per repository. A failing clone still creates
    its destination first, like a real partial clone.
    """

    def __init__(
        self,
        logs: dict[str, str] | None = None,
        fail_clone: set[str] | None = None,
        fail_log: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.logs = logs or {}
        self.fail_clone = fail_clone or set()
        self.fail_log = fail_log or set()
        self.delays = delays or {}
        self.calls: list[list[str]] = []
        self.created: list[Path] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def run_async(self, cmd, cwd=None, timeout=None, max_output=None):
        self.calls.append(list(cmd))
        if cmd[1] == "clone":
            dest = Path(cmd[-1])
            name = dest.name
            dest.mkdir(parents=True)
            (dest / ".git").mkdir()
            self.created.append(dest)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(self.delays.get(name, 0))
            finally:
                self.in_flight -= 1
            if name in self.fail_clone:
                raise ProcessError(cmd, f"timed out after {timeout}s")
            return ProcessResult(stdout="")
        if cmd[1] == "log":
            name = Path(cwd).name
            if name in self.fail_log:
                raise ProcessError(cmd, "fatal: bad revision", 128)
            return ProcessResult(stdout=self.logs.get(name, ""))
        raise AssertionError(f"unexpected command: {cmd}")


@pytest.fixture
def fake_git():
    """The FakeGitRunner class, for building scripted runners in tests."""
    return FakeGitRunner


@pytest.fixture
def clean_config(monkeypatch, tmp_path: Path) -> Path:
    """Redirect the global config dir to a temp directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setattr("commit_resume.utils.config.global_config_dir", lambda: config_dir)
    return config_dir

