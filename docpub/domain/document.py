"""Domain models for the AsciiDoc document tree.

An edition is rooted at one index unit. Its include directives, followed
depth-first, give the ordered chapter units of the document tree.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class IssueKind(str, Enum):
    """Integrity problems a document tree can have."""

    MISSING_INCLUDE = "missing-include"
    INCLUDE_CYCLE = "include-cycle"
    LANGUAGE_MISMATCH = "language-mismatch"
    MISSING_ASSET = "missing-asset"
    UNREADABLE_UNIT = "unreadable-unit"  # Not UTF-8, or an I/O error


@dataclass(frozen=True)
class TreeIssue:
    """A single integrity problem, located at the directive that caused it."""

    kind: IssueKind
    edition: str
    unit: str  # Path of the unit holding the directive, relative to source root
    line_number: int
    target: str

    def __str__(self) -> str:
        return f"[{self.edition}] {self.unit}:{self.line_number}: {self.kind.value} {self.target}"


@dataclass(frozen=True)
class Directive:
    """An ``include::`` or ``image::`` directive found in a unit."""

    name: str  # "include" or "image"
    target: str  # Target after attribute substitution
    line_number: int


@dataclass
class AssetRef:
    """A reference to an image in a chapter unit."""

    target: str
    unit: str
    line_number: int
    resolved: Path | None = None  # None for URLs and data URIs
    exists: bool = True


@dataclass
class ChapterUnit:
    """An included content file."""

    path: Path  # Absolute path
    rel_path: str  # Relative to source root, forward slashes
    depth: int  # 1 for units included directly by the index unit
    included_from: str
    line_number: int
    language: str | None = None  # Language marker, None for shared units


@dataclass
class Edition:
    """A language/localization variant of the document tree."""

    name: str
    lang: str
    index_path: Path

    @property
    def stem(self) -> str:
        return self.index_path.stem


@dataclass
class DocumentTree:
    """The resolved chapter order and asset references of one edition."""

    edition: Edition
    source_root: Path
    units: list[ChapterUnit] = field(default_factory=list)
    assets: list[AssetRef] = field(default_factory=list)
    issues: list[TreeIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def unit_paths(self) -> list[str]:
        return [unit.rel_path for unit in self.units]

    @property
    def missing_assets(self) -> list[AssetRef]:
        return [asset for asset in self.assets if not asset.exists]


@dataclass
class BuildArtifact:
    """The rendered output directory produced by the build stage."""

    output_dir: Path
    html_files: list[Path] = field(default_factory=list)
    pdf_files: list[Path] = field(default_factory=list)

    def files_for(self, stem: str) -> list[Path]:
        """Rendered forms whose file stem matches an index unit stem."""
        return [p for p in self.html_files + self.pdf_files if p.stem == stem]
