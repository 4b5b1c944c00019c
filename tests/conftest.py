"""Shared fixtures: a small two-edition AsciiDoc corpus and a fake generator."""

import sys
from pathlib import Path

import pytest

from docpub.services import AsciiDocService, TreeService


INDEX_EN = """\
= Learning JavaFX
:imagesdir: images
:chapters: chapters

include::{chapters}/scenegraph.adoc[]
include::{chapters}/layout.adoc[]
"""

INDEX_ZH = """\
= 学习 JavaFX
:lang: zh
:imagesdir: images

include::zh/scenegraph.adoc[]
include::chapters/layout.adoc[]
"""

SCENEGRAPH_EN = """\
== Scene Graph

image::scenegraph.png[Scene graph]

=== Nodes

Every node has a parent. See image:icons/node.png[] for the icon.

[source,java]
----
include::../code/Hello.java[]
image::not-an-image.png[]
== Not a section
----

//image::commented-out.png[]

=== Properties
"""

LAYOUT = """\
== Layout

=== HBox

=== VBox
"""

SCENEGRAPH_ZH = """\
== 场景图

image::scenegraph.png[]
"""

HELLO_JAVA = """\
public class Hello {}
"""

# Writes one HTML and one PDF per edition, the way the gradle task does.
FAKE_GENERATOR = """\
from pathlib import Path
out = Path("build") / "docs"
out.mkdir(parents=True, exist_ok=True)
for stem in ("index", "index_zh"):
    (out / (stem + ".html")).write_text("<html></html>")
    (out / (stem + ".pdf")).write_bytes(b"%PDF-1.4")
"""


@pytest.fixture
def corpus(tmp_path) -> Path:
    """Create a valid English + Chinese corpus."""
    root = tmp_path / "docs-src"
    files = {
        "index.adoc": INDEX_EN,
        "index_zh.adoc": INDEX_ZH,
        "chapters/scenegraph.adoc": SCENEGRAPH_EN,
        "chapters/layout.adoc": LAYOUT,
        "zh/scenegraph.adoc": SCENEGRAPH_ZH,
        "code/Hello.java": HELLO_JAVA,
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    for rel in ("images/scenegraph.png", "images/icons/node.png"):
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x89PNG")

    return root


@pytest.fixture
def fake_generator() -> list[str]:
    """Command line that renders the corpus into build/docs."""
    return [sys.executable, "-c", FAKE_GENERATOR]


@pytest.fixture
def asciidoc_service() -> AsciiDocService:
    return AsciiDocService()


@pytest.fixture
def tree_service(asciidoc_service) -> TreeService:
    return TreeService(asciidoc_service)
