"""Service interfaces for the pipeline collaborators.

The driver depends only on these protocols, so checkout, build and publish
can be replaced by stubs in tests or by other tools in deployment.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from ..domain import CommitInfo


@runtime_checkable
class ISourceCheckout(Protocol):
    """Fetches the source tree onto the build host."""

    def checkout(self, workspace: Path, ref: str) -> CommitInfo | None:
        """Make ``ref`` available in ``workspace``.

        Returns:
            The checked-out commit, or None when it cannot be determined.

        Raises:
            CheckoutError: If the tree cannot be fetched.
        """
        ...


@runtime_checkable
class IDocumentBuilder(Protocol):
    """Turns a source tree into rendered output."""

    def build(self, source_dir: Path) -> Path:
        """Build the documents under ``source_dir``.

        Returns:
            The output directory holding the rendered HTML and PDF files.

        Raises:
            BuildError: On a missing include, malformed markup, missing
                asset or any failure of the generator.
        """
        ...


@runtime_checkable
class IPublisher(Protocol):
    """Uploads a build artifact to a static-hosting destination."""

    def publish(self, output_dir: Path, credential: str | None) -> None:
        """Replace the published content with the contents of ``output_dir``.

        Raises:
            PublishError: On authentication, network or upload failure.
        """
        ...
