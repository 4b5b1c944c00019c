"""Domain layer for document trees and pipeline runs."""

from .content import TocEntry, ChapterToc, EditionToc, CommitInfo
from .document import (
    AssetRef,
    BuildArtifact,
    ChapterUnit,
    Directive,
    DocumentTree,
    Edition,
    IssueKind,
    TreeIssue,
)
from .pipeline import (
    PipelineConfig,
    PipelineRun,
    RunState,
    Stage,
    StageResult,
    Trigger,
    TriggerKind,
    TriggerRule,
)

__all__ = [
    "TocEntry",
    "ChapterToc",
    "EditionToc",
    "CommitInfo",
    "AssetRef",
    "BuildArtifact",
    "ChapterUnit",
    "Directive",
    "DocumentTree",
    "Edition",
    "IssueKind",
    "TreeIssue",
    "PipelineConfig",
    "PipelineRun",
    "RunState",
    "Stage",
    "StageResult",
    "Trigger",
    "TriggerKind",
    "TriggerRule",
]
