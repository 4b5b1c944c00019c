"""
Tests for edition table of contents

Tests:
- Chapter order follows include order
- Chapter titles come from the first level-1 section
- Section hierarchy within a chapter
- Markdown rendering
"""

import pytest

from docpub.services import TocService


@pytest.fixture
def toc_service(asciidoc_service) -> TocService:
    return TocService(asciidoc_service)


class TestEditionToc:
    """Test building the TOC of one edition."""

    def test_chapter_order_and_titles(self, toc_service, tree_service, corpus):
        """Chapters follow include order and take their == title."""
        default, zh = tree_service.load_all(corpus)

        toc = toc_service.build_edition_toc(default)

        assert toc.title == "Learning JavaFX"
        assert toc.lang == "en"
        assert [c.chapter_title for c in toc.chapters] == ["Scene Graph", "Layout"]
        assert [c.path for c in toc.chapters] == [
            "chapters/scenegraph.adoc",
            "chapters/layout.adoc",
        ]

    def test_localized_titles(self, toc_service, tree_service, corpus):
        """The zh edition lists its translated chapter first."""
        _, zh = tree_service.load_all(corpus)

        toc = toc_service.build_edition_toc(zh)

        assert toc.title == "学习 JavaFX"
        assert [c.chapter_title for c in toc.chapters] == ["场景图", "Layout"]

    def test_section_entries(self, toc_service, tree_service, corpus):
        """=== sections become entries; listing content is ignored."""
        default, _ = tree_service.load_all(corpus)

        toc = toc_service.build_edition_toc(default)
        scenegraph = toc.chapters[0]

        assert [e.title for e in scenegraph.entries] == ["Nodes", "Properties"]
        assert scenegraph.entries[0].anchor == "nodes"

    def test_nested_sections(self, toc_service, tree_service, tmp_path):
        """Deeper sections nest under the preceding shallower one."""
        (tmp_path / "index.adoc").write_text("include::ch.adoc[]\n", encoding="utf-8")
        (tmp_path / "ch.adoc").write_text(
            "== Bindings\n=== Properties\n==== Listeners\n=== Expressions\n",
            encoding="utf-8",
        )
        (tree,) = tree_service.load_all(tmp_path)

        toc = toc_service.build_edition_toc(tree)
        entries = toc.chapters[0].entries

        assert [e.title for e in entries] == ["Properties", "Expressions"]
        assert [c.title for c in entries[0].children] == ["Listeners"]

    def test_nested_unit_folds_into_chapter(self, toc_service, tree_service, tmp_path):
        """Sections of a unit included by a chapter belong to that chapter."""
        (tmp_path / "index.adoc").write_text("include::ch.adoc[]\n", encoding="utf-8")
        (tmp_path / "ch.adoc").write_text(
            "== Tasks\ninclude::worker.adoc[]\n", encoding="utf-8"
        )
        (tmp_path / "worker.adoc").write_text("=== Worker\n", encoding="utf-8")
        (tree,) = tree_service.load_all(tmp_path)

        toc = toc_service.build_edition_toc(tree)

        assert len(toc.chapters) == 1
        assert [e.title for e in toc.chapters[0].entries] == ["Worker"]

    def test_untitled_unit_uses_file_stem(self, toc_service, tree_service, tmp_path):
        """A unit without titles is listed under its file name."""
        (tmp_path / "index.adoc").write_text("include::notes.adoc[]\n", encoding="utf-8")
        (tmp_path / "notes.adoc").write_text("Plain text.\n", encoding="utf-8")
        (tree,) = tree_service.load_all(tmp_path)

        toc = toc_service.build_edition_toc(tree)

        assert toc.title == "index"
        assert toc.chapters[0].chapter_title == "notes"


class TestTocMarkdown:
    """Test markdown rendering of a TOC."""

    def test_markdown(self, toc_service, tree_service, corpus):
        """The markdown TOC numbers chapters and links sections."""
        default, _ = tree_service.load_all(corpus)

        md = toc_service.build_edition_toc(default).to_markdown()

        assert md.startswith("# Learning JavaFX\n")
        assert "1. [Scene Graph](#scene-graph)" in md
        assert "2. [Layout](#layout)" in md
        assert "- [HBox](#hbox)" in md
