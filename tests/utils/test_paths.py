"""Tests for path helpers: run timestamps, scratch roots, claude candidates."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from commit_resume.utils.paths import (
    SCRATCH_PREFIX,
    claude_version_manager_candidates,
    new_scratch_root,
    run_timestamp,
)


class TestTimestamps:
    def test_run_timestamp_is_utc_and_filename_safe(self):
        kst = timezone(timedelta(hours=9))
        assert run_timestamp(datetime(2024, 3, 1, 18, 15, 0, tzinfo=kst)) == "2024-03-01T09-15-00"

    def test_new_scratch_root(self, tmp_path):
        root = new_scratch_root(tmp_path)
        assert root.is_dir()
        assert root.name.startswith(SCRATCH_PREFIX)
        assert root.name[len(SCRATCH_PREFIX):].isdigit()


class TestClaudeCandidates:
    def test_nvm_versions_only(self, tmp_path):
        nvm = tmp_path / ".nvm" / "versions" / "node"
        (nvm / "v20.1.0").mkdir(parents=True)
        (nvm / "system").mkdir()

        candidates = claude_version_manager_candidates(tmp_path)

        assert nvm / "v20.1.0" / "bin" / "claude" in candidates
        assert all("system" not in str(c) for c in candidates)
