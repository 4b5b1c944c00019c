"""Tests for document tree loading and validation.

Covers edition discovery, include resolution order, asset references,
edition language rules and include cycles.
"""

import pytest

from docpub.domain import IssueKind


class TestEditionDiscovery:
    """Tests for finding editions in a source root."""

    def test_default_and_localized(self, tree_service, corpus):
        """index.adoc is the default edition, index_zh.adoc the zh one."""
        editions = tree_service.discover_editions(corpus)

        assert [(e.name, e.lang) for e in editions] == [("default", "en"), ("zh", "zh")]
        assert editions[0].index_path == corpus / "index.adoc"

    def test_lang_attribute_overrides_tag(self, tree_service, tmp_path):
        """A :lang: entry in the index unit sets the edition language."""
        (tmp_path / "index.adoc").write_text("= Book\n:lang: fr\n", encoding="utf-8")

        editions = tree_service.discover_editions(tmp_path)

        assert editions[0].lang == "fr"

    def test_missing_source_root(self, tree_service, tmp_path):
        """A missing source root raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            tree_service.discover_editions(tmp_path / "nope")

    def test_no_index_units(self, tree_service, tmp_path):
        """A directory without index units has no editions."""
        (tmp_path / "chapter.adoc").write_text("== Chapter\n", encoding="utf-8")

        assert tree_service.discover_editions(tmp_path) == []


class TestIncludeResolution:
    """Tests for include order and dangling includes."""

    def test_valid_corpus_has_no_issues(self, tree_service, corpus):
        """Every include and asset in the sample corpus resolves."""
        assert tree_service.validate(corpus) == []

    def test_units_in_include_order(self, tree_service, corpus):
        """Units appear in include order; code listings are not units."""
        default, zh = tree_service.load_all(corpus)

        assert default.unit_paths == ["chapters/scenegraph.adoc", "chapters/layout.adoc"]
        assert zh.unit_paths == ["zh/scenegraph.adoc", "chapters/layout.adoc"]
        assert default.units[0].included_from == "index.adoc"
        assert default.units[0].depth == 1

    def test_nested_includes_are_depth_first(self, tree_service, tmp_path):
        """A chapter's own includes follow it before the next chapter."""
        (tmp_path / "parts").mkdir()
        (tmp_path / "index.adoc").write_text(
            "include::parts/one.adoc[]\ninclude::parts/three.adoc[]\n", encoding="utf-8"
        )
        (tmp_path / "parts" / "one.adoc").write_text(
            "== One\ninclude::two.adoc[]\n", encoding="utf-8"
        )
        (tmp_path / "parts" / "two.adoc").write_text("=== Two\n", encoding="utf-8")
        (tmp_path / "parts" / "three.adoc").write_text("== Three\n", encoding="utf-8")

        (tree,) = tree_service.load_all(tmp_path)

        assert tree.unit_paths == ["parts/one.adoc", "parts/two.adoc", "parts/three.adoc"]
        assert [u.depth for u in tree.units] == [1, 2, 1]

    def test_missing_include_reported(self, tree_service, corpus):
        """A dangling include is reported at the directive's location."""
        (corpus / "chapters" / "layout.adoc").unlink()

        issues = tree_service.validate(corpus)

        assert {i.kind for i in issues} == {IssueKind.MISSING_INCLUDE}
        assert {i.edition for i in issues} == {"default", "zh"}
        default_issue = next(i for i in issues if i.edition == "default")
        assert default_issue.unit == "index.adoc"
        assert default_issue.line_number == 6
        assert default_issue.target == "chapters/layout.adoc"

    def test_missing_code_listing_reported(self, tree_service, corpus):
        """Non-AsciiDoc includes must exist too."""
        (corpus / "code" / "Hello.java").unlink()

        issues = tree_service.validate(corpus)

        assert len(issues) == 1
        assert issues[0].kind == IssueKind.MISSING_INCLUDE
        assert issues[0].unit == "chapters/scenegraph.adoc"

    def test_include_cycle_reported(self, tree_service, tmp_path):
        """An include cycle is reported instead of recursing forever."""
        (tmp_path / "index.adoc").write_text("include::a.adoc[]\n", encoding="utf-8")
        (tmp_path / "a.adoc").write_text("include::b.adoc[]\n", encoding="utf-8")
        (tmp_path / "b.adoc").write_text("include::a.adoc[]\n", encoding="utf-8")

        issues = tree_service.validate(tmp_path)

        assert [i.kind for i in issues] == [IssueKind.INCLUDE_CYCLE]
        assert issues[0].unit == "b.adoc"

    def test_remote_include_skipped(self, tree_service, tmp_path):
        """URL includes are not checked."""
        (tmp_path / "index.adoc").write_text(
            "include::https://example.com/x.adoc[]\n", encoding="utf-8"
        )

        (tree,) = tree_service.load_all(tmp_path)

        assert tree.is_valid
        assert tree.units == []


class TestAssets:
    """Tests for image asset references."""

    def test_assets_resolved_against_imagesdir(self, tree_service, corpus):
        """Image targets resolve under :imagesdir: relative to the index unit."""
        default, _ = tree_service.load_all(corpus)

        resolved = [a.resolved for a in default.assets]
        assert resolved == [
            (corpus / "images" / "scenegraph.png").resolve(),
            (corpus / "images" / "icons" / "node.png").resolve(),
        ]
        assert default.missing_assets == []

    def test_missing_asset_reported(self, tree_service, corpus):
        """A missing image is a MISSING_ASSET issue in every edition using it."""
        (corpus / "images" / "scenegraph.png").unlink()

        issues = tree_service.validate(corpus)

        assert {i.kind for i in issues} == {IssueKind.MISSING_ASSET}
        assert sorted(i.unit for i in issues) == [
            "chapters/scenegraph.adoc",
            "zh/scenegraph.adoc",
        ]

    def test_without_imagesdir_uses_index_directory(self, tree_service, tmp_path):
        """Without :imagesdir: images resolve against the index unit's directory."""
        (tmp_path / "ch").mkdir()
        (tmp_path / "logo.png").write_bytes(b"png")
        (tmp_path / "index.adoc").write_text("include::ch/one.adoc[]\n", encoding="utf-8")
        (tmp_path / "ch" / "one.adoc").write_text("image::logo.png[]\n", encoding="utf-8")

        (tree,) = tree_service.load_all(tmp_path)

        assert tree.is_valid
        assert tree.assets[0].resolved == (tmp_path / "logo.png").resolve()

    def test_imagesdir_set_in_earlier_chapter(self, tree_service, tmp_path):
        """An :imagesdir: entry in one chapter applies to the chapters after it."""
        (tmp_path / "imgs").mkdir()
        (tmp_path / "imgs" / "x.png").write_bytes(b"png")
        (tmp_path / "index.adoc").write_text(
            "= Book\n\ninclude::a.adoc[]\ninclude::b.adoc[]\n", encoding="utf-8"
        )
        (tmp_path / "a.adoc").write_text("== A\n:imagesdir: imgs\n", encoding="utf-8")
        (tmp_path / "b.adoc").write_text("== B\n\nimage::x.png[]\n", encoding="utf-8")

        (tree,) = tree_service.load_all(tmp_path)

        assert tree.issues == []
        assert tree.assets[0].resolved == (tmp_path / "imgs" / "x.png").resolve()

    def test_chapter_attribute_used_by_later_include(self, tree_service, tmp_path):
        """Attributes set by an included unit are substituted in the parent afterwards."""
        (tmp_path / "parts").mkdir()
        (tmp_path / "index.adoc").write_text(
            "include::setup.adoc[]\ninclude::{partsdir}/one.adoc[]\n", encoding="utf-8"
        )
        (tmp_path / "setup.adoc").write_text(":partsdir: parts\n", encoding="utf-8")
        (tmp_path / "parts" / "one.adoc").write_text("== One\n", encoding="utf-8")

        (tree,) = tree_service.load_all(tmp_path)

        assert tree.issues == []
        assert tree.unit_paths == ["setup.adoc", "parts/one.adoc"]

    def test_external_images_not_checked(self, tree_service, tmp_path):
        """URL image targets are assumed to exist."""
        (tmp_path / "index.adoc").write_text(
            "image::https://example.com/a.png[]\n", encoding="utf-8"
        )

        (tree,) = tree_service.load_all(tmp_path)

        assert tree.is_valid
        assert tree.assets[0].resolved is None


class TestEditionLanguage:
    """Tests for the edition language rule."""

    def test_default_edition_including_localized_unit(self, tree_service, corpus):
        """The English edition may not include a unit under zh/."""
        (corpus / "index.adoc").write_text(
            "= Book\n:imagesdir: images\ninclude::zh/scenegraph.adoc[]\n",
            encoding="utf-8",
        )

        issues = tree_service.validate(corpus)

        assert [(i.edition, i.kind) for i in issues] == [
            ("default", IssueKind.LANGUAGE_MISMATCH)
        ]

    def test_suffix_marker(self, tree_service):
        """A _<tag> stem suffix marks a unit as localized."""
        langs = {"en", "zh"}

        assert tree_service.language_marker("chapters/intro_zh.adoc", langs) == "zh"
        assert tree_service.language_marker("zh/intro.adoc", langs) == "zh"
        assert tree_service.language_marker("chapters/intro.adoc", langs) is None


class TestUnreadableUnits:
    """Tests for units that cannot be decoded or read."""

    def test_undecodable_chapter_reported(self, tree_service, corpus):
        """A chapter that is not UTF-8 is an issue at the include directive."""
        (corpus / "chapters" / "layout.adoc").write_bytes(b"== Layout\n\xff\xfe bad\n")

        default, zh = tree_service.load_all(corpus)

        assert [(i.kind, i.unit, i.line_number) for i in default.issues] == [
            (IssueKind.UNREADABLE_UNIT, "index.adoc", 6)
        ]
        assert "chapters/layout.adoc" not in default.unit_paths
        assert [i.kind for i in zh.issues] == [IssueKind.UNREADABLE_UNIT]

    def test_undecodable_index_reported(self, tree_service, tmp_path):
        """An unreadable index unit still yields an edition, with one issue."""
        (tmp_path / "index_zh.adoc").write_bytes(b"= \xff\xfe\n")

        (tree,) = tree_service.load_all(tmp_path)

        assert tree.edition.lang == "zh"
        assert [(i.kind, i.unit) for i in tree.issues] == [
            (IssueKind.UNREADABLE_UNIT, "index_zh.adoc")
        ]
        assert tree.units == []
