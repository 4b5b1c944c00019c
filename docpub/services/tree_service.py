"""Document tree service implementation.

Discovers editions in a source root and resolves each edition's index
unit into its ordered chapter units and asset references, recording every
integrity problem found on the way.
"""

import logging
import re
from pathlib import Path

from ..config import PipelineSettings
from ..domain import (
    AssetRef,
    ChapterUnit,
    Directive,
    DocumentTree,
    Edition,
    IssueKind,
    TreeIssue,
)
from .asciidoc_service import AsciiDocService

logger = logging.getLogger(__name__)


class TreeService:
    """Service for loading and validating document trees.

    Uses constructor injection for the directive scanner.
    """

    ASCIIDOC_SUFFIXES = {".adoc", ".asciidoc", ".asc", ".ad"}
    EXTERNAL_PREFIXES = ("http://", "https://", "//", "data:")
    INDEX_SUFFIX_PATTERN = re.compile(r"^index(?:[_-](?P<tag>[\w-]+))?$")

    def __init__(
        self,
        asciidoc_service: AsciiDocService,
        index_glob: str = PipelineSettings.INDEX_GLOB,
        default_lang: str = PipelineSettings.DEFAULT_LANG,
    ) -> None:
        """Initialize the tree service.

        Args:
            asciidoc_service: Scanner for AsciiDoc directives.
            index_glob: Glob selecting index units in the source root.
            default_lang: Language of an index unit with no tag or ``:lang:``.
        """
        self._asciidoc = asciidoc_service
        self._index_glob = index_glob
        self._default_lang = default_lang

    def discover_editions(self, source_root: Path) -> list[Edition]:
        """Find one edition per index unit in ``source_root``.

        ``index.adoc`` is the default edition; ``index_zh.adoc`` or
        ``index-zh.adoc`` is the ``zh`` edition. A ``:lang:`` attribute in
        the index unit overrides the tag derived from the file name.

        Raises:
            FileNotFoundError: If the source root does not exist.
        """
        if not source_root.is_dir():
            raise FileNotFoundError(f"Source directory not found: {source_root}")

        editions: list[Edition] = []
        for index_path in sorted(source_root.glob(self._index_glob)):
            if not index_path.is_file():
                continue
            match = self.INDEX_SUFFIX_PATTERN.match(index_path.stem)
            tag = match.group("tag") if match else None
            name = tag or (index_path.stem if not match else "default")
            try:
                attributes = self._asciidoc.read_attributes(self._read(index_path))
            except (OSError, UnicodeDecodeError) as e:
                # load_tree reports the unit; the tag still names the edition
                logger.debug("Cannot read attributes of %s: %s", index_path, e)
                attributes = {}
            lang = attributes.get("lang") or tag or self._default_lang
            editions.append(Edition(name=name, lang=lang, index_path=index_path))

        # Default edition first, localized ones after
        editions.sort(key=lambda e: (e.name != "default", e.name))
        logger.debug("Discovered editions: %s", [e.name for e in editions])
        return editions

    def load_tree(
        self,
        edition: Edition,
        source_root: Path,
        known_langs: set[str] | None = None,
    ) -> DocumentTree:
        """Resolve an edition's include tree.

        Args:
            edition: The edition to resolve.
            source_root: Root used for relative unit paths.
            known_langs: Language tags that mark localized units; defaults
                to the edition's own tag.

        Returns:
            DocumentTree with units in include order and all issues found.
        """
        tree = DocumentTree(edition=edition, source_root=source_root)
        langs = set(known_langs or ()) | {edition.lang}
        index_rel = self._relative(edition.index_path, source_root)
        try:
            content = self._read(edition.index_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read index unit %s: %s", index_rel, e)
            tree.issues.append(
                TreeIssue(
                    kind=IssueKind.UNREADABLE_UNIT,
                    edition=edition.name,
                    unit=index_rel,
                    line_number=0,
                    target=index_rel,
                )
            )
            return tree

        self._walk(
            tree=tree,
            unit_path=edition.index_path,
            content=content,
            attributes={},
            depth=0,
            active=[edition.index_path.resolve()],
            langs=langs,
        )
        return tree

    def load_all(self, source_root: Path) -> list[DocumentTree]:
        """Load the trees of every edition found in ``source_root``."""
        editions = self.discover_editions(source_root)
        known = {e.lang for e in editions}
        return [self.load_tree(e, source_root, known) for e in editions]

    def validate(self, source_root: Path) -> list[TreeIssue]:
        """Collect the issues of every edition, in edition order."""
        issues: list[TreeIssue] = []
        for tree in self.load_all(source_root):
            issues.extend(tree.issues)
        return issues

    def language_marker(self, rel_path: str, known_langs: set[str]) -> str | None:
        """Language tag a unit path is marked with, or None for shared units."""
        parts = rel_path.split("/")
        for part in parts[:-1]:
            if part in known_langs:
                return part
        stem = Path(parts[-1]).stem
        for lang in sorted(known_langs, key=len, reverse=True):
            if stem.endswith(f"_{lang}") or stem.endswith(f"-{lang}"):
                return lang
        return None

    def _walk(
        self,
        tree: DocumentTree,
        unit_path: Path,
        content: str,
        attributes: dict[str, str],
        depth: int,
        active: list[Path],
        langs: set[str],
    ) -> None:
        unit_rel = self._relative(unit_path, tree.source_root)

        # Includes are textual: the included unit shares the attribute map,
        # so entries it sets stay in effect for the directives after it.
        for directive in self._asciidoc.iter_directives(content, attributes):
            if directive.name == "image":
                tree.assets.append(self._asset_ref(tree, directive, unit_rel, attributes))
                continue

            if directive.target.startswith(self.EXTERNAL_PREFIXES):
                logger.debug("Skipping remote include %s", directive.target)
                continue

            target = (unit_path.parent / directive.target).resolve()
            if not target.is_file():
                tree.issues.append(
                    self._issue(tree, IssueKind.MISSING_INCLUDE, unit_rel, directive)
                )
                continue

            if target.suffix.lower() not in self.ASCIIDOC_SUFFIXES:
                continue

            if target in active:
                tree.issues.append(
                    self._issue(tree, IssueKind.INCLUDE_CYCLE, unit_rel, directive)
                )
                continue

            rel = self._relative(target, tree.source_root)
            marker = self.language_marker(rel, langs)
            if marker is not None and marker != tree.edition.lang:
                tree.issues.append(
                    self._issue(tree, IssueKind.LANGUAGE_MISMATCH, unit_rel, directive)
                )

            try:
                child_content = self._read(target)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Cannot read %s: %s", rel, e)
                tree.issues.append(
                    self._issue(tree, IssueKind.UNREADABLE_UNIT, unit_rel, directive)
                )
                continue

            tree.units.append(
                ChapterUnit(
                    path=target,
                    rel_path=rel,
                    depth=depth + 1,
                    included_from=unit_rel,
                    line_number=directive.line_number,
                    language=marker,
                )
            )
            self._walk(
                tree, target, child_content, attributes, depth + 1, active + [target], langs
            )

    def _asset_ref(
        self,
        tree: DocumentTree,
        directive: Directive,
        unit_rel: str,
        attributes: dict[str, str],
    ) -> AssetRef:
        target = directive.target
        imagesdir = attributes.get("imagesdir", "")
        if target.startswith(self.EXTERNAL_PREFIXES) or imagesdir.startswith(
            self.EXTERNAL_PREFIXES
        ):
            return AssetRef(target=target, unit=unit_rel, line_number=directive.line_number)

        asset_root = tree.edition.index_path.parent
        if imagesdir:
            asset_root = asset_root / imagesdir
        resolved = (asset_root / target).resolve()
        exists = resolved.is_file()
        if not exists:
            tree.issues.append(
                self._issue(tree, IssueKind.MISSING_ASSET, unit_rel, directive)
            )
        return AssetRef(
            target=target,
            unit=unit_rel,
            line_number=directive.line_number,
            resolved=resolved,
            exists=exists,
        )

    def _issue(
        self,
        tree: DocumentTree,
        kind: IssueKind,
        unit_rel: str,
        directive: Directive,
    ) -> TreeIssue:
        issue = TreeIssue(
            kind=kind,
            edition=tree.edition.name,
            unit=unit_rel,
            line_number=directive.line_number,
            target=directive.target,
        )
        logger.debug("Tree issue: %s", issue)
        return issue

    def _relative(self, path: Path, source_root: Path) -> str:
        try:
            return path.resolve().relative_to(source_root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def _read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")
