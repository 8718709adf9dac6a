"""GitHub account discovery via the gh CLI.

Resolves the authenticated login, the organizations it belongs to and the
repositories owned by an account or organization. All calls go through a
``ProcessRunner`` so tests never reach the network.
"""

from __future__ import annotations

import json
import logging

import git

from commit_resume.core.schema import Repository
from commit_resume.errors import SetupError
from commit_resume.utils.process import ProcessRunner

logger = logging.getLogger(__name__)

# gh repo list caps at this many repositories per owner
DEFAULT_REPO_LIMIT = 1000

_INSTALL_HINTS = [
    "Install the GitHub CLI (gh):",
    "  macOS:   brew install gh",
    "  Windows: winget install GitHub.cli",
    "  Linux:   https://github.com/cli/cli/blob/trunk/docs/install_linux.md",
]

_AUTH_HINTS = [
    "Run the following command and try again:",
    "  gh auth login",
]


def check_gh_cli(runner: ProcessRunner) -> None:
    """Raise SetupError if gh is missing or not authenticated."""
    if runner.run_sync(["gh", "--version"]) is None:
        raise SetupError("GitHub CLI (gh) is not installed.", _INSTALL_HINTS)
    if runner.run_sync(["gh", "auth", "status"]) is None:
        raise SetupError("GitHub CLI is not authenticated.", _AUTH_HINTS)


def get_login(runner: ProcessRunner) -> str:
    login = runner.run_sync(["gh", "api", "user", "--jq", ".login"])
    if not login:
        raise SetupError("Could not fetch GitHub user information.", _AUTH_HINTS)
    return login.splitlines()[0].strip()


def list_organizations(runner: ProcessRunner) -> list[str]:
    """Organizations the user belongs to, sorted; empty on failure."""
    raw = runner.run_sync(["gh", "api", "user/orgs", "--jq", ".[].login"])
    if not raw:
        return []
    return sorted((line.strip() for line in raw.splitlines() if line.strip()), key=str.lower)


def list_repositories(
    runner: ProcessRunner, owner: str, limit: int = DEFAULT_REPO_LIMIT
) -> list[Repository]:
    """Repositories owned by ``owner``; empty on failure or malformed output."""
    raw = runner.run_sync([
        "gh", "repo", "list", owner,
        "--limit", str(limit),
        "--json", "name,url",
    ])
    if not raw:
        return []
    return _parse_repo_list(raw)


def get_git_email() -> str:
    """The local git ``user.email``, or an empty string when unset."""
    try:
        return git.Git().config("--get", "user.email").strip()
    except (git.GitCommandError, git.GitCommandNotFound):
        return ""


# -- Module-level helpers --


def _parse_repo_list(raw: str) -> list[Repository]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Unexpected gh repo list output: %s", e)
        return []
    if not isinstance(data, list):
        return []

    repos: list[Repository] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        url = item.get("url")
        if name and url:
            repos.append(Repository(name=name, url=url))
    return repos
