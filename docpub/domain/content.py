"""Domain models for content features.

Provides dataclasses for table-of-contents entries and git commit
information attached to a pipeline run.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class TocEntry:
    """A single section heading inside a chapter unit.

    AsciiDoc section levels map to ``level``: ``==`` is 1, ``===`` is 2,
    ``====`` is 3.
    """

    title: str
    level: int
    anchor: str  # URL-friendly slug
    children: list["TocEntry"] = field(default_factory=list)


@dataclass
class ChapterToc:
    """TOC for a single chapter unit."""

    path: str
    chapter_title: str
    entries: list[TocEntry] = field(default_factory=list)


@dataclass
class EditionToc:
    """Full TOC of one edition, in include order."""

    title: str
    lang: str
    chapters: list[ChapterToc] = field(default_factory=list)

    def to_markdown(self) -> str:
        """Render the TOC as markdown."""
        lines = [f"# {self.title}", ""]
        for number, chapter in enumerate(self.chapters, start=1):
            lines.append(
                f"{number}. [{chapter.chapter_title}](#{_slugify(chapter.chapter_title)})"
            )
            for entry in chapter.entries:
                lines.extend(_render_toc_entry(entry, 1))
        return "\n".join(lines)


@dataclass
class CommitInfo:
    """Information about the commit a run checked out."""

    hash: str  # Full SHA-1 hash
    short_hash: str  # Abbreviated hash (7 chars)
    author: str
    author_email: str
    date: datetime
    subject: str  # First line of commit message


def _slugify(text: str) -> str:
    """Convert text to URL-friendly slug."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def _render_toc_entry(entry: TocEntry, base_indent: int) -> list[str]:
    """Render a TOC entry and its children."""
    indent = "   " * (base_indent + entry.level - 1)
    lines = [f"{indent}- [{entry.title}](#{entry.anchor})"]
    for child in entry.children:
        lines.extend(_render_toc_entry(child, base_indent))
    return lines
