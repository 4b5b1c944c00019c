"""Render service implementation.

Writes the landing page of a build artifact: a small HTML document,
rendered from markdown with the markdown library, that links every
edition's HTML and PDF forms.
"""

import logging
import re
from pathlib import Path

import markdown
from markdown.extensions.tables import TableExtension
from markdown.extensions.toc import TocExtension

from ..domain import BuildArtifact, Edition

logger = logging.getLogger(__name__)


# HTML template for the landing page
HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            max-width: 800px;
            margin: 0 auto;
            padding: 2rem;
            color: #333;
        }}
        h1, h2, h3, h4 {{ color: #2c3e50; }}
        table {{ border-collapse: collapse; width: 100%; margin: 1rem 0; }}
        th, td {{ border: 1px solid #ddd; padding: 0.75rem; text-align: left; }}
        th {{ background: #f5f5f5; }}
    </style>
</head>
<body>
    <article>
        {content}
    </article>
</body>
</html>"""


class RenderService:
    """Service for rendering the artifact landing page.

    Uses the markdown library with the tables and toc extensions.
    """

    LANDING_PAGE = "index.html"

    def __init__(self, title: str = "Documentation", lang: str = "en") -> None:
        """Initialize the render service.

        Args:
            title: Heading and document title of the landing page.
            lang: ``lang`` attribute of the landing page.
        """
        self._title = title
        self._lang = lang
        self._md = markdown.Markdown(
            extensions=[
                TableExtension(),
                TocExtension(slugify=self._slugify),
            ],
            output_format="html5",
        )

    def render_markdown(self, content: str) -> str:
        """Render markdown to an HTML fragment."""
        # Reset markdown processor state
        self._md.reset()
        return self._md.convert(content)

    def landing_page_markdown(self, artifact: BuildArtifact, editions: list[Edition]) -> str:
        """Markdown source of the landing page: one table row per edition."""
        lines = [
            f"# {self._title}",
            "",
            "| Edition | Language | HTML | PDF |",
            "| --- | --- | --- | --- |",
        ]
        for edition in editions:
            files = artifact.files_for(edition.stem)
            html = self._links(artifact.output_dir, [p for p in files if p.suffix == ".html"])
            pdf = self._links(artifact.output_dir, [p for p in files if p.suffix == ".pdf"])
            lines.append(f"| {edition.name} | {edition.lang} | {html} | {pdf} |")
        return "\n".join(lines) + "\n"

    def write_landing_page(
        self, artifact: BuildArtifact, editions: list[Edition]
    ) -> Path | None:
        """Write ``index.html`` at the artifact root unless the build made one.

        Returns:
            The written path, or None when an index page already existed.
        """
        page = artifact.output_dir / self.LANDING_PAGE
        if page.exists():
            return None

        content = self.render_markdown(self.landing_page_markdown(artifact, editions))
        page.write_text(
            HTML_TEMPLATE.format(lang=self._lang, title=self._title, content=content),
            encoding="utf-8",
        )
        logger.info("Wrote landing page %s", page)
        return page

    def _links(self, root: Path, paths: list[Path]) -> str:
        if not paths:
            return "-"
        return ", ".join(
            f"[{p.name}]({p.relative_to(root).as_posix()})" for p in paths
        )

    def _slugify(self, value: str, separator: str = "-") -> str:
        """Convert heading text to URL-friendly slug."""
        value = re.sub(r"[^\w\s-]", "", value.lower().strip())
        return re.sub(r"[\s_-]+", separator, value).strip(separator)
