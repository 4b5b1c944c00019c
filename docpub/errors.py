"""Exception hierarchy for pipeline failures.

Every stage signals failure by raising a subclass of PipelineError. The
driver catches PipelineError only; anything else is a bug and propagates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .domain.pipeline import Stage

if TYPE_CHECKING:
    from .domain.document import TreeIssue


class PipelineError(Exception):
    """Base class for all stage failures."""

    stage: Stage | None = None
    exit_code: int = 1


class TriggerRejected(PipelineError):
    """The triggering event is not one the pipeline runs for."""

    exit_code = 5


class CheckoutError(PipelineError):
    """Fetching the source tree failed."""

    stage = Stage.CHECKOUT
    exit_code = Stage.CHECKOUT.exit_code


class BuildError(PipelineError):
    """The document build failed or produced no usable artifact."""

    stage = Stage.BUILD
    exit_code = Stage.BUILD.exit_code

    def __init__(self, message: str, issues: list[TreeIssue] | None = None) -> None:
        super().__init__(message)
        self.issues = list(issues or [])


class PublishError(PipelineError):
    """Uploading the build artifact failed."""

    stage = Stage.PUBLISH
    exit_code = Stage.PUBLISH.exit_code
