"""generate: turn a commit document into a resume with the claude CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from commit_resume.cli._shared import get_runner, handle_errors
from commit_resume.cli.menu import Choice, choose
from commit_resume.core.document import find_documents, read_document
from commit_resume.core.grouping import group_by_year_month
from commit_resume.core.schema import Section
from commit_resume.errors import GenerationError, SetupError
from commit_resume.generation.claude import ClaudeGenerator, TextGenerator, find_claude_path
from commit_resume.generation.sections import generate_resume
from commit_resume.utils.config import get_setting, load_global_config
from commit_resume.utils.output import console, error, heading, info, success
from commit_resume.utils.paths import SECTIONS_PREFIX, run_timestamp


def get_generator(config: dict) -> TextGenerator:
    """Resolve the claude CLI; raises SetupError when it is not installed."""
    runner = get_runner()
    claude_path = find_claude_path(get_setting("claude_path", config), runner)
    if not claude_path:
        raise SetupError(
            "Claude CLI not found.",
            ["Install Claude Code: https://claude.ai/code",
             "or point to it: commit-resume config set claude_path /path/to/claude"],
        )
    success(f"Claude CLI: [dim]{claude_path}[/dim]\n")
    return ClaudeGenerator(claude_path, runner)


def select_document(base_dir: Path) -> Path:
    documents = find_documents(base_dir)
    if not documents:
        raise SetupError(
            "No commits-*.md file found.",
            ['Run "commit-resume collect" first to collect your commit history.'],
        )
    if len(documents) == 1:
        return documents[0]
    return choose("Select commit document", [Choice(p.name, p) for p in documents])


def generate_from_document(
    document: Path | None = None,
    base_dir: Path | None = None,
    generator: TextGenerator | None = None,
) -> Path:
    """Parse, group, generate sections and assemble; returns the resume path.

    Exits 1 when the final assembly fails; section files are kept.
    """
    base_dir = base_dir or Path.cwd()
    config = load_global_config()

    heading("Generate resume")
    generator = generator or get_generator(config)

    if document is None:
        document = select_document(base_dir)

    info("Parsing document...")
    rows = read_document(document)
    success(f"{len(rows)} commits found\n")

    buckets = group_by_year_month(rows)
    success(f"Grouped into {len(buckets)} year-month buckets\n")
    if not buckets:
        raise GenerationError(f"No commits to summarize in {document.name}")

    timestamp = run_timestamp()
    sections_dir = base_dir / f"{SECTIONS_PREFIX}{timestamp}"
    total = len(buckets)
    completed = 0

    def on_section(year_month: str, section: Section | None, exc: Exception | None) -> None:
        nonlocal completed
        completed += 1
        prefix = f"[dim][{completed}/{total}][/dim]"
        if section is not None:
            console.print(f"{prefix} [green]✔[/green] {year_month} done")
        else:
            console.print(f"{prefix} [red]✘[/red] {year_month} failed: {exc}")

    console.print("[bold]Generating resume sections...[/bold]\n")
    try:
        with console.status("Generating with Claude..."):
            path = asyncio.run(generate_resume(
                generator, buckets, base_dir, base_dir, sections_dir,
                timestamp=timestamp,
                limit=get_setting("generation_concurrency", config),
                language=get_setting("resume_language", config),
                on_section=on_section,
            ))
    except GenerationError as e:
        error(f"Final resume generation failed: {e}")
        if sections_dir.is_dir():
            info(f"Section files kept in {sections_dir}")
        raise typer.Exit(1)

    console.print()
    heading("Done")
    console.print(f"Final resume: [underline]{path}[/underline]\n")
    return path


def generate_command(
    document: Optional[Path] = typer.Argument(
        None, help="Commit document to use (prompted when several exist)"
    ),
) -> None:
    """Generate a resume from a collected commit document."""
    with handle_errors():
        if document is not None and not document.is_file():
            error(f"File not found: {document}")
            raise typer.Exit(1)
        generate_from_document(document)
