"""docpub - build and publish an AsciiDoc documentation corpus.

Runs checkout, the documentation generator and a GitHub Pages deploy as
one fail-fast pipeline, and checks the document tree (includes, assets,
edition languages) on the way.
"""

from .errors import BuildError, CheckoutError, PipelineError, PublishError, TriggerRejected

__all__ = [
    "PipelineError",
    "TriggerRejected",
    "CheckoutError",
    "BuildError",
    "PublishError",
]
