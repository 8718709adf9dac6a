"""Temporal and per-repository grouping of parsed commit rows."""

from __future__ import annotations

import re
from typing import Iterable

from commit_resume.core.schema import DocumentRow

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})")


def year_month_of(date: str) -> str | None:
    match = _YEAR_MONTH_RE.match(date)
    if not match:
        return None
    return f"{match.group(1)}-{match.group(2)}"


def group_by_year_month(rows: Iterable[DocumentRow]) -> dict[str, list[DocumentRow]]:
    """Bucket rows by ``YYYY-MM``, newest bucket first.

    Rows keep document order inside a bucket. Rows whose date does not start
    with a year and month are left out.
    """
    buckets: dict[str, list[DocumentRow]] = {}
    for row in rows:
        key = year_month_of(row.date)
        if key is None:
            continue
        buckets.setdefault(key, []).append(row)
    return {key: buckets[key] for key in sorted(buckets, reverse=True)}


def group_by_repository(rows: Iterable[DocumentRow]) -> dict[str, list[DocumentRow]]:
    groups: dict[str, list[DocumentRow]] = {}
    for row in rows:
        groups.setdefault(row.repo, []).append(row)
    return groups
