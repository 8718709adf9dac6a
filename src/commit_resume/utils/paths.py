"""Path utilities: run timestamps, scratch directories, claude CLI lookup."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path


SCRATCH_PREFIX = ".temp-repos-"
SECTIONS_PREFIX = ".temp-resume-parts-"
DOCUMENT_PREFIX = "commits-"
RESUME_PREFIX = "resume-"


def run_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp safe for filenames, e.g. 2024-03-01T09-15-00."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")


def new_scratch_root(base_dir: Path) -> Path:
    """Create a fresh scratch root for one collection run."""
    root = base_dir / f"{SCRATCH_PREFIX}{time.time_ns() // 1_000_000}"
    root.mkdir(parents=True, exist_ok=True)
    return root


# Claude CLI path resolution


def claude_static_candidates(home: Path | None = None) -> list[Path]:
    home = home or Path.home()
    return [
        Path("/usr/local/bin/claude"),
        Path("/opt/homebrew/bin/claude"),
        Path("/usr/bin/claude"),
        home / ".npm-global" / "bin" / "claude",
        home / ".local" / "bin" / "claude",
        home / ".claude" / "local" / "claude",
        home / "n" / "bin" / "claude",
    ]


def claude_version_manager_candidates(home: Path | None = None) -> list[Path]:
    """Candidates inside node version manager trees (nvm, fnm, volta, asdf, Homebrew)."""
    home = home or Path.home()
    trees = [
        (home / ".nvm" / "versions" / "node", True, "bin/claude"),
        (home / "Library" / "Application Support" / "fnm" / "node-versions", True, "installation/bin/claude"),
        (home / ".local" / "share" / "fnm" / "node-versions", True, "installation/bin/claude"),
        (home / ".fnm" / "node-versions", True, "installation/bin/claude"),
        (Path("/opt/homebrew/Cellar/node"), False, "bin/claude"),
        (Path("/usr/local/Cellar/node"), False, "bin/claude"),
        (home / ".volta" / "tools" / "image" / "node", False, "bin/claude"),
        (home / ".asdf" / "installs" / "nodejs", False, "bin/claude"),
    ]
    candidates: list[Path] = []
    for base, versioned_only, sub_path in trees:
        if not base.is_dir():
            continue
        try:
            entries = sorted(base.iterdir())
        except OSError:
            continue
        for entry in entries:
            if versioned_only and not entry.name.startswith("v"):
                continue
            candidates.append(entry / sub_path)
    return candidates
