"""Monthly resume sections and the final assembled resume."""

from __future__ import annotations

import calendar
import logging
from pathlib import Path
from typing import Callable, Sequence

from commit_resume.core.grouping import group_by_repository
from commit_resume.core.scheduler import GENERATION_CONCURRENCY, run_bounded
from commit_resume.core.schema import DocumentRow, Section
from commit_resume.errors import GenerationError
from commit_resume.generation.claude import TextGenerator
from commit_resume.utils.paths import RESUME_PREFIX, run_timestamp

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "English"

SECTION_TEMPLATE = """\
Summarize the commit history below into 3-5 resume bullet points.

Rules:
- No preamble, start directly with "-"
- Include the [repository name] in every bullet
- Mention the technology stack
- Write in {language}

Example:
- [exif-frame] Improved EXIF metadata handling (JavaScript, Canvas API)

{commits}
Output:"""

FINAL_TEMPLATE = """\
Write a resume based on the monthly development activity below.

Format:
# Technical Skills
(technologies used, organized by category)

# Project Experience
(treat each [repository name] as a project, group under "## repository name", focus on outcomes)

Rules:
- Do not use code blocks (```)
- Start directly with "# Technical Skills"
- Write in {language}

{sections}"""


def format_bucket_text(year_month: str, rows: Sequence[DocumentRow]) -> str:
    """Render one month of commits as markdown, grouped by repository."""
    year, month = year_month.split("-")
    lines = [f"## Activity in {calendar.month_name[int(month)]} {year}", ""]
    for repo, repo_rows in group_by_repository(rows).items():
        lines.append(f"### {repo}")
        lines.extend(f"- {row.message}" for row in repo_rows)
        lines.append("")
    return "\n".join(lines) + "\n"


def build_section_prompt(
    year_month: str, rows: Sequence[DocumentRow], language: str = DEFAULT_LANGUAGE
) -> str:
    return SECTION_TEMPLATE.format(language=language, commits=format_bucket_text(year_month, rows))


def build_final_prompt(sections: Sequence[Section], language: str = DEFAULT_LANGUAGE) -> str:
    joined = "\n\n".join(f"## {s.year_month}\n{s.content}" for s in sections)
    return FINAL_TEMPLATE.format(language=language, sections=joined)


async def generate_sections(
    generator: TextGenerator,
    buckets: dict[str, list[DocumentRow]],
    cwd: Path,
    out_dir: Path | None = None,
    limit: int = GENERATION_CONCURRENCY,
    language: str = DEFAULT_LANGUAGE,
    on_done: Callable[[str, Section | None, Exception | None], None] | None = None,
) -> list[Section]:
    """Generate one section per bucket, at most ``limit`` at a time.

    A bucket whose generation fails or comes back empty is reported through
    ``on_done`` and left out; it is not retried. Sections are written to
    ``out_dir/<YYYY-MM>.md`` when ``out_dir`` is given and returned newest
    first.
    """
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    def _task(year_month: str, rows: list[DocumentRow]):
        async def _run() -> Section | None:
            try:
                content = (await generator.generate(
                    build_section_prompt(year_month, rows, language), cwd
                )).strip()
                if not content:
                    raise GenerationError("empty response")
                path = None
                if out_dir is not None:
                    path = out_dir / f"{year_month}.md"
                    path.write_text(content, encoding="utf-8")
            except (GenerationError, OSError) as e:
                logger.warning("Section %s failed: %s", year_month, e)
                if on_done is not None:
                    on_done(year_month, None, e)
                return None
            section = Section(year_month=year_month, content=content, path=path)
            if on_done is not None:
                on_done(year_month, section, None)
            return section
        return _run

    results = await run_bounded(
        [_task(ym, rows) for ym, rows in buckets.items()], limit
    )
    sections = [s for s in results if s is not None]
    return sorted(sections, key=lambda s: s.year_month, reverse=True)


async def assemble_resume(
    generator: TextGenerator,
    sections: Sequence[Section],
    cwd: Path,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    """Restructure the monthly sections into a single resume.

    Raises GenerationError when there is nothing to assemble or the call fails.
    """
    if not sections:
        raise GenerationError("No sections were generated; nothing to assemble")
    ordered = sorted(sections, key=lambda s: s.year_month, reverse=True)
    return await generator.generate(build_final_prompt(ordered, language), cwd)


def resume_filename(timestamp: str | None = None) -> str:
    return f"{RESUME_PREFIX}{timestamp or run_timestamp()}.md"


async def generate_resume(
    generator: TextGenerator,
    buckets: dict[str, list[DocumentRow]],
    cwd: Path,
    output_dir: Path,
    sections_dir: Path,
    timestamp: str | None = None,
    limit: int = GENERATION_CONCURRENCY,
    language: str = DEFAULT_LANGUAGE,
    on_section: Callable[[str, Section | None, Exception | None], None] | None = None,
) -> Path:
    """Sections, then the final resume written to ``output_dir``.

    Section files stay on disk even when the final assembly fails.
    """
    sections = await generate_sections(
        generator, buckets, cwd, sections_dir,
        limit=limit, language=language, on_done=on_section,
    )
    resume = await assemble_resume(generator, sections, cwd, language)
    path = output_dir / resume_filename(timestamp)
    path.write_text(resume, encoding="utf-8")
    return path
