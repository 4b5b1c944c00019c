"""TOC (Table of Contents) service implementation.

Builds the table of contents of an edition from its resolved document
tree: chapter order is include order, entries are the section titles
found in each chapter unit.
"""

import re

from ..domain import ChapterToc, DocumentTree, EditionToc, TocEntry
from .asciidoc_service import AsciiDocService


class TocService:
    """Service for extracting and building tables of contents.

    Units included directly by the index unit are chapters; sections of
    units nested below a chapter are folded into that chapter's entries.
    """

    def __init__(self, asciidoc_service: AsciiDocService) -> None:
        """Initialize the TOC service with required dependencies.

        Args:
            asciidoc_service: Scanner for section titles.
        """
        self._asciidoc = asciidoc_service

    def build_edition_toc(self, tree: DocumentTree) -> EditionToc:
        """Build the TOC of one edition.

        Args:
            tree: The resolved document tree.

        Returns:
            EditionToc with one ChapterToc per top-level chapter unit.
        """
        index_scan = self._asciidoc.scan(
            tree.edition.index_path.read_text(encoding="utf-8")
        )
        toc = EditionToc(
            title=index_scan.title or tree.edition.stem,
            lang=tree.edition.lang,
        )

        current: ChapterToc | None = None
        for unit in tree.units:
            scan = self._asciidoc.scan(unit.path.read_text(encoding="utf-8"))
            sections = list(scan.sections)

            if unit.depth == 1 or current is None:
                title = scan.title
                if title is None and sections and sections[0][0] == 1:
                    title = sections.pop(0)[1]
                current = ChapterToc(path=unit.rel_path, chapter_title=title or unit.path.stem)
                toc.chapters.append(current)

            current.entries.extend(self._build_hierarchy(sections))

        return toc

    def _build_hierarchy(self, sections: list[tuple[int, str, int]]) -> list[TocEntry]:
        """Build hierarchical structure from flat section titles.

        Nests entries based on their level, with lower-level entries
        becoming children of higher-level ones.
        """
        result: list[TocEntry] = []
        stack: list[TocEntry] = []

        for level, title, _line in sections:
            entry = TocEntry(title=title, level=level, anchor=self._slugify(title))

            # Find parent at lower level
            while stack and stack[-1].level >= entry.level:
                stack.pop()

            if stack:
                stack[-1].children.append(entry)
            else:
                result.append(entry)

            stack.append(entry)

        return result

    def _slugify(self, text: str) -> str:
        """Convert text to URL-friendly slug."""
        text = text.lower().strip()
        text = re.sub(r"[^\w\s-]", "", text)
        text = re.sub(r"[\s_-]+", "-", text)
        return text.strip("-")
