"""collect: harvest authored commits from every repository of an owner."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from commit_resume.cli._shared import get_runner, handle_errors
from commit_resume.cli.menu import Choice, ask_text, choose
from commit_resume.core.document import document_filename, write_document
from commit_resume.core.harvest import cleanup_stale_scratch, harvest_all
from commit_resume.core.schema import CommitRecord, Repository, build_author_filter
from commit_resume.sources.github import (
    check_gh_cli,
    get_git_email,
    get_login,
    list_organizations,
    list_repositories,
)
from commit_resume.utils.config import get_setting, load_global_config
from commit_resume.utils.output import console, error, heading, info, success
from commit_resume.utils.paths import new_scratch_root


def collect_commits(
    owner: str | None = None,
    authors: list[str] | None = None,
    base_dir: Path | None = None,
) -> Path:
    """Interactive collection flow; returns the written document path.

    Exits 1 when the owner has no repositories.
    """
    base_dir = base_dir or Path.cwd()
    runner = get_runner()
    config = load_global_config()

    heading("Collect GitHub commits")
    check_gh_cli(runner)

    with console.status("Fetching GitHub user..."):
        login = get_login(runner)
        email = get_git_email()
    success(f"User: [cyan]{login}[/cyan]" + (f" ({email})" if email else "") + "\n")

    if authors is None:
        info("e.g. old-username, old@email.com")
        extra: str | list[str] = ask_text("Additional emails/handles to search (Enter to skip)")
    else:
        extra = authors
    author_filter = build_author_filter(login, email, extra)
    success(f"Searching for: {', '.join(author_filter)}\n")

    if owner is None:
        with console.status("Fetching organizations..."):
            orgs = list_organizations(runner)
        success(f"Found {len(orgs)} organizations\n")
        choices = [Choice(f"{login} (personal repositories)", login)]
        choices.extend(Choice(org, org) for org in orgs)
        owner = choose("Select owner", choices)

    with console.status(f"Fetching repositories of {owner}..."):
        repos = list_repositories(runner, owner)
    if not repos:
        error(f"No repositories found for {owner}.")
        raise typer.Exit(1)
    success(f"Found {len(repos)} repositories\n")

    output_path = base_dir / document_filename(owner)
    cleanup_stale_scratch(base_dir)
    scratch_root = new_scratch_root(base_dir)
    try:
        commits = _harvest_with_progress(
            repos, author_filter, scratch_root, runner,
            clone_timeout=get_setting("clone_timeout", config),
            log_timeout=get_setting("log_timeout", config),
        )
    finally:
        shutil.rmtree(scratch_root, ignore_errors=True)
    success(f"Scanned {len(repos)} repositories")

    write_document(output_path, commits, owner, login)

    console.print()
    heading("Collection complete")
    console.print(f"{len(commits)} commits found")
    console.print(f"Output file: [underline]{output_path}[/underline]\n")
    return output_path


def collect_command(
    owner: Optional[str] = typer.Option(
        None, "--owner", "-o", help="Account or organization to scan (prompted when omitted)"
    ),
    author: Optional[List[str]] = typer.Option(
        None, "--author", "-a", help="Extra author email/handle (repeatable; skips the prompt)"
    ),
) -> None:
    """Collect your commits from every repository of an account or organization."""
    with handle_errors():
        collect_commits(owner=owner, authors=author or None)


# -- Internal helpers --


def _harvest_with_progress(
    repos: list[Repository],
    authors: tuple[str, ...],
    scratch_root: Path,
    runner,
    clone_timeout: float,
    log_timeout: float,
) -> list[CommitRecord]:
    with Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning", total=len(repos))

        def on_done(repo: Repository, commits: list[CommitRecord]) -> None:
            if commits:
                progress.console.print(f"[green]● {repo.name}[/green] → {len(commits)} commits")
            progress.advance(task)

        return asyncio.run(harvest_all(
            repos, authors, scratch_root, runner,
            on_done=on_done,
            clone_timeout=clone_timeout,
            log_timeout=log_timeout,
        ))
