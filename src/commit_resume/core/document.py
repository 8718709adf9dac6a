"""Commit document: a markdown table of harvested commits.

Layout::

    # <owner> - commit history of <user>

    Generated: 2024-03-01 18:00:00 KST

    | Date | Repository | Commit Message | Link |
    |------|------------|----------------|------|
    | 2024-03-01 18:00:00 | repo | fix a \\| b | [link](https://github.com/o/repo/commit/abc) |

Dates are rendered in Asia/Seoul at second granularity; sub-second and
original-offset information does not survive a round trip. Literal pipes
in messages are escaped on write and unescaped on read.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from commit_resume.core.schema import (
    DISPLAY_DATE_FORMAT,
    DISPLAY_TIMEZONE,
    DISPLAY_TZ_LABEL,
    CommitRecord,
    DocumentRow,
)
from commit_resume.errors import DocumentError
from commit_resume.utils.paths import DOCUMENT_PREFIX, run_timestamp

logger = logging.getLogger(__name__)

TABLE_HEADER = "| Date | Repository | Commit Message | Link |"
TABLE_SEPARATOR = "|------|------------|----------------|------|"
LINK_LABEL = "link"

# Leading tokens of the header row; the second is written by older releases.
_HEADER_TOKENS = ("| Date |", "| 일시 |")
_CELL_SPLIT = re.compile(r"(?<!\\)\|")
_LINK_RE = re.compile(r"\[[^\]]*\]\((.*?)\)")
_NAME_TIMESTAMP_RE = re.compile(r"-(\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2})$")


def escape_cell(text: str) -> str:
    return " ".join(text.splitlines()).replace("|", "\\|")


def unescape_cell(text: str) -> str:
    return text.replace("\\|", "|")


def sort_newest_first(records: Iterable[CommitRecord]) -> list[CommitRecord]:
    return sorted(records, key=lambda r: r.date.timestamp(), reverse=True)


def format_row(record: CommitRecord) -> str:
    return (
        f"| {record.display_date} | {record.repo_name} | {escape_cell(record.message)} "
        f"| [{LINK_LABEL}]({record.link}) |"
    )


def render_document(
    records: Iterable[CommitRecord],
    owner: str,
    user: str,
    generated_at: datetime | None = None,
) -> str:
    """Render records (newest first) with the title and generation header."""
    generated_at = generated_at or datetime.now(timezone.utc)
    generated = generated_at.astimezone(DISPLAY_TIMEZONE).strftime(DISPLAY_DATE_FORMAT)

    lines = [
        f"# {owner} - commit history of {user}",
        "",
        f"Generated: {generated} {DISPLAY_TZ_LABEL}",
        "",
        TABLE_HEADER,
        TABLE_SEPARATOR,
    ]
    lines.extend(format_row(record) for record in sort_newest_first(records))
    return "\n".join(lines) + "\n"


def write_document(
    path: Path,
    records: Iterable[CommitRecord],
    owner: str,
    user: str,
    generated_at: datetime | None = None,
) -> Path:
    path.write_text(render_document(records, owner, user, generated_at), encoding="utf-8")
    return path


def parse_row(line: str) -> DocumentRow | None:
    """Parse one table row; None when it has fewer than four non-empty cells."""
    cells = [cell.strip() for cell in _CELL_SPLIT.split(line)]
    cells = [cell for cell in cells if cell]
    if len(cells) < 4:
        return None
    match = _LINK_RE.search(cells[3])
    return DocumentRow(
        date=cells[0],
        repo=cells[1],
        message=unescape_cell(cells[2]),
        link=match.group(1) if match else "",
    )


def parse_document(text: str) -> list[DocumentRow]:
    """Parse every commit row that follows the table header."""
    rows: list[DocumentRow] = []
    in_table = False
    for line in text.splitlines():
        if line.startswith(_HEADER_TOKENS):
            in_table = True
            continue
        if line.startswith("|---"):
            continue
        if not in_table or not line.startswith("|"):
            continue
        row = parse_row(line)
        if row is None:
            logger.debug("Skipping malformed row: %s", line)
            continue
        rows.append(row)
    return rows


def read_document(path: Path) -> list[DocumentRow]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentError(f"Cannot read commit document {path}: {e}")
    return parse_document(text)


# -- File naming --


def document_filename(owner: str, now: datetime | None = None) -> str:
    return f"{DOCUMENT_PREFIX}{owner}-{run_timestamp(now)}.md"


def find_documents(directory: Path) -> list[Path]:
    """Commit documents in ``directory``, newest run timestamp first.

    Files without a run timestamp in their name sort last.
    """
    if not directory.is_dir():
        return []
    found = [
        p for p in directory.iterdir()
        if p.is_file() and p.name.startswith(DOCUMENT_PREFIX) and p.suffix == ".md"
    ]
    return sorted(found, key=_document_sort_key, reverse=True)


def _document_sort_key(path: Path) -> tuple[str, str]:
    match = _NAME_TIMESTAMP_RE.search(path.stem)
    return (match.group(1) if match else "", path.name)
