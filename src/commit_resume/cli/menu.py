"""Interactive selection menu and free-text prompts.

On a TTY the menu is driven by arrow keys with the terminal in cbreak
mode. ``raw_terminal`` owns that mode and always restores the previous
settings, including when the user presses Esc or Ctrl-C. Without a TTY
(or when a prompt function is injected) a numbered ``rich`` prompt is used.
"""

from __future__ import annotations

import os
import select
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.prompt import Prompt
from rich.text import Text

from commit_resume.utils.output import console as default_console
from commit_resume.utils.output import is_piped

# Time to wait for the rest of an escape sequence before treating ESC as a key.
_ESCAPE_WAIT = 0.05
_SEQUENCES = {"[A": "up", "[B": "down", "OA": "up", "OB": "down"}


class SelectionCancelled(Exception):
    """Raised when the user aborts a selection with Esc or Ctrl-C."""


@dataclass
class Choice:
    name: str
    value: Any


@contextmanager
def raw_terminal(fd: int) -> Iterator[None]:
    """Put ``fd`` in cbreak mode for the duration of the block."""
    import termios
    import tty

    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def read_key(fd: int) -> str:
    """Read one keypress: up, down, enter, escape, interrupt, or the character."""
    ch = os.read(fd, 1).decode("utf-8", errors="ignore")
    if ch == "\x1b":
        ready, _, _ = select.select([fd], [], [], _ESCAPE_WAIT)
        if not ready:
            return "escape"
        seq = os.read(fd, 2).decode("utf-8", errors="ignore")
        return _SEQUENCES.get(seq, "unknown")
    if ch in ("\r", "\n"):
        return "enter"
    if ch == "\x03":
        return "interrupt"
    if ch == "k":
        return "up"
    if ch == "j":
        return "down"
    return ch


def apply_key(index: int, key: str, count: int) -> int:
    """New highlighted index after ``key``; wraps at both ends."""
    if key == "up":
        return index - 1 if index > 0 else count - 1
    if key == "down":
        return index + 1 if index < count - 1 else 0
    return index


def render_menu(message: str, choices: Sequence[Choice], index: int) -> Group:
    lines: list[Text] = [Text(message, style="bold"), Text("")]
    for i, choice in enumerate(choices):
        if i == index:
            lines.append(Text(f"❯ {choice.name}", style="cyan"))
        else:
            lines.append(Text(f"  {choice.name}", style="dim"))
    return Group(*lines)


def choose(
    message: str,
    choices: Sequence[Choice],
    console: Console | None = None,
    prompt_fn: Callable[..., str] | None = None,
    key_reader: Callable[[], str] | None = None,
) -> Any:
    """Let the user pick one of ``choices`` and return its value.

    Raises SelectionCancelled on Esc or Ctrl-C.
    """
    if not choices:
        raise ValueError("choose() needs at least one choice")
    console = console or default_console

    if key_reader is not None:
        index = _menu_loop(message, choices, console, key_reader)
    elif prompt_fn is not None or is_piped() or sys.platform == "win32":
        index = _numbered_prompt(message, choices, console, prompt_fn or Prompt.ask)
    else:
        fd = sys.stdin.fileno()
        with raw_terminal(fd):
            index = _menu_loop(message, choices, console, lambda: read_key(fd))

    console.print(f"[green]✔[/green] {message}: [cyan]{choices[index].name}[/cyan]\n")
    return choices[index].value


def ask_text(
    question: str,
    console: Console | None = None,
    prompt_fn: Callable[..., str] | None = None,
) -> str:
    """Free-text prompt; returns the stripped answer (empty when skipped)."""
    console = console or default_console
    prompt_fn = prompt_fn or Prompt.ask
    try:
        answer = prompt_fn(question, console=console, default="", show_default=False)
    except (KeyboardInterrupt, EOFError):
        raise SelectionCancelled()
    return (answer or "").strip()


# -- Internal helpers --


def _menu_loop(
    message: str,
    choices: Sequence[Choice],
    console: Console,
    key_reader: Callable[[], str],
) -> int:
    index = 0
    console.show_cursor(False)
    try:
        with Live(
            render_menu(message, choices, index),
            console=console,
            auto_refresh=False,
            transient=True,
        ) as live:
            while True:
                try:
                    key = key_reader()
                except KeyboardInterrupt:
                    key = "interrupt"
                if key == "enter":
                    return index
                if key in ("escape", "interrupt"):
                    raise SelectionCancelled()
                index = apply_key(index, key, len(choices))
                live.update(render_menu(message, choices, index), refresh=True)
    finally:
        console.show_cursor(True)


def _numbered_prompt(
    message: str,
    choices: Sequence[Choice],
    console: Console,
    prompt_fn: Callable[..., str],
) -> int:
    console.print(f"[bold]{message}[/bold]\n")
    for i, choice in enumerate(choices, 1):
        console.print(f"  [cyan]{i}[/cyan]. {choice.name}")
    valid = [str(i) for i in range(1, len(choices) + 1)]
    try:
        picked = prompt_fn("Number", console=console, choices=valid, default="1")
    except (KeyboardInterrupt, EOFError):
        raise SelectionCancelled()
    return int(picked) - 1
