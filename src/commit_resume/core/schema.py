"""Pydantic v2 models for repositories, commits, document rows and sections."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, field_validator

DISPLAY_TIMEZONE = ZoneInfo("Asia/Seoul")
DISPLAY_TZ_LABEL = "KST"
DISPLAY_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# -- Harvesting --


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class CommitRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    message: str
    date: datetime
    repo_name: str
    repo_url: str

    @field_validator("date")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("commit date must be timezone-aware")
        return value

    @property
    def link(self) -> str:
        return f"{self.repo_url.rstrip('/')}/commit/{self.hash}"

    @property
    def display_date(self) -> str:
        return self.date.astimezone(DISPLAY_TIMEZONE).strftime(DISPLAY_DATE_FORMAT)


def build_author_filter(login: str, email: str = "", extra: str | list[str] = "") -> tuple[str, ...]:
    """Combine identities into an ordered, de-duplicated OR-filter.

    ``extra`` is either the comma-separated free text typed by the user or
    an already split list.
    """
    if isinstance(extra, str):
        extra = extra.split(",")
    authors: list[str] = []
    for candidate in [login, email, *extra]:
        candidate = (candidate or "").strip()
        if candidate and candidate not in authors:
            authors.append(candidate)
    return tuple(authors)


# -- Commit document --


class DocumentRow(BaseModel):
    """One table row read back from a commit document."""

    model_config = ConfigDict(frozen=True)

    date: str
    repo: str
    message: str
    link: str

    @property
    def hash(self) -> str:
        _, sep, commit_hash = self.link.rpartition("/commit/")
        return commit_hash if sep else ""

    @property
    def repo_url(self) -> str:
        base, sep, _ = self.link.rpartition("/commit/")
        return base if sep else ""

    @property
    def timestamp(self) -> datetime | None:
        try:
            parsed = datetime.strptime(self.date, DISPLAY_DATE_FORMAT)
        except ValueError:
            return None
        return parsed.replace(tzinfo=DISPLAY_TIMEZONE)


# -- Generation --


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    year_month: str
    content: str
    path: Path | None = None
