"""AsciiDoc directive scanning.

Finds include directives, image macros, attribute entries and section
titles in AsciiDoc source, line by line. This is not a parser: block
structure is tracked only as far as needed to skip comments and listing
content, which is what the document tree checks require.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from ..domain import Directive


@dataclass
class ScanResult:
    """Everything the scanner extracts from one unit."""

    directives: list[Directive] = field(default_factory=list)
    # Attribute map in effect at each directive, keyed by line number.
    attributes_at: dict[int, dict[str, str]] = field(default_factory=dict)
    title: str | None = None
    # (level, title, line_number); level 1 is "==".
    sections: list[tuple[int, str, int]] = field(default_factory=list)

    @property
    def includes(self) -> list[Directive]:
        return [d for d in self.directives if d.name == "include"]

    @property
    def images(self) -> list[Directive]:
        return [d for d in self.directives if d.name == "image"]


class AsciiDocService:
    """Service for extracting directives from AsciiDoc content.

    Attribute entries update the attribute map passed in, so attributes
    set by an index unit are visible in the units it includes, as they
    are when the document is rendered.
    """

    INCLUDE_PATTERN = re.compile(r"^include::(\S+?)\[(.*)\]\s*$")
    BLOCK_IMAGE_PATTERN = re.compile(r"^image::(\S+?)\[")
    INLINE_IMAGE_PATTERN = re.compile(r"(?<![\w:])image:(?!:)([^\s\[]+)\[")
    ATTRIBUTE_PATTERN = re.compile(r"^:(!?)([\w][\w-]*)(!?):(?:\s+(.*))?$")
    TITLE_PATTERN = re.compile(r"^(={1,6})\s+(.+?)\s*$")
    ATTRIBUTE_REF_PATTERN = re.compile(r"\{([\w][\w-]*)\}")

    COMMENT_DELIMITER = "////"
    # Delimiters whose content is verbatim: no macros, titles or attributes.
    VERBATIM_DELIMITERS = ("----", "....", "```", "++++")

    def scan(self, content: str, attributes: dict[str, str] | None = None) -> ScanResult:
        """Scan one unit's content.

        Args:
            content: The AsciiDoc source.
            attributes: Attribute map in effect; updated in place with
                entries found in ``content``.

        Returns:
            ScanResult with directives in document order.
        """
        if attributes is None:
            attributes = {}

        result = ScanResult()
        for directive in self.iter_directives(content, attributes, result):
            result.directives.append(directive)
            result.attributes_at[directive.line_number] = dict(attributes)
        return result

    def iter_directives(
        self,
        content: str,
        attributes: dict[str, str],
        result: ScanResult | None = None,
    ) -> Iterator[Directive]:
        """Yield the include and image directives of ``content`` lazily.

        ``attributes`` is read and updated as lines are consumed, so a
        caller that follows an include between two directives and lets the
        included unit change the map affects every directive after it.
        Titles and sections are recorded on ``result`` when one is given.
        """
        in_comment = False
        verbatim: str | None = None

        for line_num, line in enumerate(content.split("\n"), start=1):
            stripped = line.rstrip()

            if in_comment:
                if stripped == self.COMMENT_DELIMITER:
                    in_comment = False
                continue
            if verbatim is None and stripped == self.COMMENT_DELIMITER:
                in_comment = True
                continue

            # Includes are preprocessor directives and apply inside verbatim blocks too
            include_match = self.INCLUDE_PATTERN.match(stripped)
            if include_match:
                target = self.substitute(include_match.group(1), attributes)
                yield Directive("include", target, line_num)
                continue

            delimiter = self._verbatim_delimiter(stripped)
            if verbatim is not None:
                if delimiter == verbatim:
                    verbatim = None
                continue
            if delimiter is not None:
                verbatim = delimiter
                continue

            if stripped.startswith("//"):
                continue

            attr_match = self.ATTRIBUTE_PATTERN.match(stripped)
            if attr_match:
                self._apply_attribute(attr_match, attributes)
                continue

            title_match = self.TITLE_PATTERN.match(stripped)
            if title_match:
                if result is not None:
                    self._record_title(result, title_match, attributes, line_num)
                continue

            block_image = self.BLOCK_IMAGE_PATTERN.match(stripped)
            if block_image:
                yield Directive("image", self.substitute(block_image.group(1), attributes), line_num)
                continue

            for inline_image in self.INLINE_IMAGE_PATTERN.finditer(stripped):
                yield Directive("image", self.substitute(inline_image.group(1), attributes), line_num)

    def substitute(self, text: str, attributes: dict[str, str]) -> str:
        """Replace ``{name}`` references; unknown references are left as is."""

        def _replace(match: re.Match) -> str:
            return attributes.get(match.group(1), match.group(0))

        return self.ATTRIBUTE_REF_PATTERN.sub(_replace, text)

    def read_attributes(self, content: str) -> dict[str, str]:
        """Collect the attribute entries of a unit (its header and body)."""
        attributes: dict[str, str] = {}
        self.scan(content, attributes)
        return attributes

    def _record_title(
        self,
        result: ScanResult,
        match: re.Match,
        attributes: dict[str, str],
        line_num: int,
    ) -> None:
        level = len(match.group(1)) - 1
        title = self.substitute(match.group(2), attributes)
        if level == 0:
            if result.title is None:
                result.title = title
        else:
            result.sections.append((level, title, line_num))

    def _apply_attribute(self, match: re.Match, attributes: dict[str, str]) -> None:
        name = match.group(2)
        if match.group(1) or match.group(3):
            attributes.pop(name, None)
            return
        value = (match.group(4) or "").strip()
        attributes[name] = self.substitute(value, attributes)

    def _verbatim_delimiter(self, line: str) -> str | None:
        for delimiter in self.VERBATIM_DELIMITERS:
            if line.startswith(delimiter) and set(line) == {delimiter[0]}:
                return line
            if delimiter == "```" and line.startswith("```"):
                return "```"
        return None
