"""Service layer for the documentation pipeline.

Provides the collaborator interfaces (protocols) and their
implementations for tree validation, checkout, build, publish and the
pipeline driver.
"""

from .interfaces import (
    ISourceCheckout,
    IDocumentBuilder,
    IPublisher,
)
from .asciidoc_service import AsciiDocService, ScanResult
from .tree_service import TreeService
from .toc_service import TocService
from .render_service import RenderService
from .git_service import GitService, GitCheckout
from .build_service import CommandBuilder
from .publish_service import GitHubPagesPublisher, DirectoryPublisher
from .trigger_service import TriggerService
from .pipeline_service import PipelineDriver

__all__ = [
    "ISourceCheckout",
    "IDocumentBuilder",
    "IPublisher",
    "AsciiDocService",
    "ScanResult",
    "TreeService",
    "TocService",
    "RenderService",
    "GitService",
    "GitCheckout",
    "CommandBuilder",
    "GitHubPagesPublisher",
    "DirectoryPublisher",
    "TriggerService",
    "PipelineDriver",
]
