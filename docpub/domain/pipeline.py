"""Domain models for pipeline runs.

Covers the trigger configuration (which events run the pipeline and whether
they publish), the stage sequence, and the per-run state machine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .content import CommitInfo


class TriggerKind(str, Enum):
    """Events the CI host can start a run with."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    WORKFLOW_DISPATCH = "workflow_dispatch"


class Stage(str, Enum):
    """Pipeline stages in execution order."""

    CHECKOUT = "checkout"
    BUILD = "build"
    PUBLISH = "publish"

    @property
    def exit_code(self) -> int:
        return _STAGE_EXIT_CODES[self]


_STAGE_EXIT_CODES = {
    Stage.CHECKOUT: 2,
    Stage.BUILD: 3,
    Stage.PUBLISH: 4,
}


class RunState(str, Enum):
    """Lifecycle of a single pipeline run."""

    NOT_STARTED = "not_started"
    CHECKED_OUT = "checked_out"
    BUILT = "built"
    PUBLISHED = "published"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.PUBLISHED, RunState.FAILED)


# Forward transitions; FAILED is reachable from any non-terminal state.
_TRANSITIONS = {
    RunState.NOT_STARTED: {RunState.CHECKED_OUT},
    RunState.CHECKED_OUT: {RunState.BUILT},
    RunState.BUILT: {RunState.PUBLISHED},
}


@dataclass(frozen=True)
class Trigger:
    """A concrete triggering event.

    For pull requests ``branch`` is the target (base) branch and ``ref``
    names the change to build.
    """

    kind: TriggerKind
    branch: str
    ref: str | None = None

    @property
    def checkout_ref(self) -> str:
        return self.ref or self.branch


@dataclass(frozen=True)
class TriggerRule:
    """How the pipeline reacts to one kind of trigger."""

    kind: TriggerKind
    branches: tuple[str, ...]
    publish: bool

    def matches(self, trigger: Trigger) -> bool:
        return trigger.kind == self.kind and trigger.branch in self.branches

    @property
    def effect(self) -> str:
        return "build-and-publish" if self.publish else "build-only"


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit trigger configuration plus the fixed publish constants."""

    rules: tuple[TriggerRule, ...]
    output_dir: Path = Path("build/docs")
    publish_email: str = ""

    @classmethod
    def for_branch(
        cls,
        branch: str,
        output_dir: Path = Path("build/docs"),
        publish_email: str = "",
    ) -> "PipelineConfig":
        """Default rules: push and dispatch publish, pull requests build only."""
        branches = (branch,)
        return cls(
            rules=(
                TriggerRule(TriggerKind.PUSH, branches, publish=True),
                TriggerRule(TriggerKind.PULL_REQUEST, branches, publish=False),
                TriggerRule(TriggerKind.WORKFLOW_DISPATCH, branches, publish=True),
            ),
            output_dir=output_dir,
            publish_email=publish_email,
        )

    def rule_for(self, trigger: Trigger) -> TriggerRule | None:
        for rule in self.rules:
            if rule.matches(trigger):
                return rule
        return None


@dataclass
class StageResult:
    """Outcome of one executed stage."""

    stage: Stage
    succeeded: bool
    message: str = ""


@dataclass
class PipelineRun:
    """Mutable record of a single run.

    Tracks the state machine and the results of every stage that executed.
    """

    trigger: Trigger
    state: RunState = RunState.NOT_STARTED
    stages: list[StageResult] = field(default_factory=list)
    commit: CommitInfo | None = None
    artifact_dir: Path | None = None
    failed_stage: Stage | None = None
    exit_code: int = 0

    def advance(self, new_state: RunState) -> None:
        """Move to ``new_state``, rejecting transitions the lifecycle forbids."""
        if self.state.is_terminal:
            raise ValueError(f"Run already finished in state {self.state.value}")
        if new_state == RunState.FAILED:
            self.state = new_state
            return
        if new_state not in _TRANSITIONS.get(self.state, set()):
            raise ValueError(
                f"Illegal transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state

    def record(self, stage: Stage, succeeded: bool, message: str = "") -> None:
        self.stages.append(StageResult(stage, succeeded, message))

    def fail(self, stage: Stage | None, message: str, exit_code: int) -> None:
        """Mark the run failed at ``stage`` (None when rejected before any stage)."""
        if stage is not None:
            self.record(stage, False, message)
        self.failed_stage = stage
        self.exit_code = exit_code
        self.advance(RunState.FAILED)

    @property
    def executed_stages(self) -> list[Stage]:
        return [result.stage for result in self.stages]

    @property
    def succeeded(self) -> bool:
        return self.state != RunState.FAILED and self.exit_code == 0
