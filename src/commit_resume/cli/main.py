"""Typer app: interactive menu, collect/generate/run commands, config group."""

from __future__ import annotations

from typing import Optional

import typer

from commit_resume.cli._shared import handle_errors
from commit_resume.cli.collect_cmd import collect_command, collect_commits
from commit_resume.cli.generate_cmd import generate_command, generate_from_document
from commit_resume.cli.menu import Choice, choose
from commit_resume.utils.log import setup_logging
from commit_resume.utils.output import heading, info

app = typer.Typer(
    name="commit-resume",
    help="Collect your GitHub commit history and turn it into a resume.",
    invoke_without_command=True,
)

MENU_CHOICES = [
    Choice("📥 Collect commits", "collect"),
    Choice("📝 Generate resume", "generate"),
    Choice("🚀 Collect, then generate resume", "both"),
]


@app.callback()
def main(
    ctx: typer.Context,
    debug: Optional[bool] = typer.Option(
        None, "--debug/--no-debug", help="Verbose logging (also enabled by DEBUG=1)"
    ),
) -> None:
    """Without a subcommand, show the interactive menu."""
    setup_logging(debug)
    if ctx.invoked_subcommand is not None:
        return

    with handle_errors():
        heading("GitHub commit resume generator")
        mode = choose("What would you like to do?", MENU_CHOICES)
        if mode == "collect":
            collect_commits()
        elif mode == "generate":
            generate_from_document()
        else:
            _collect_then_generate()


@app.command("run")
def run_command() -> None:
    """Collect commits, then generate a resume from the new document."""
    with handle_errors():
        _collect_then_generate()


def _collect_then_generate() -> None:
    document = collect_commits()
    info("Starting resume generation...\n")
    generate_from_document(document)


app.command("collect")(collect_command)
app.command("generate")(generate_command)

# Register subcommand groups
from commit_resume.cli.config_cmd import config_app

app.add_typer(config_app, name="config", help="Manage global configuration")
