"""Trigger resolution.

Turns the CI host's event description into a Trigger and decides, from
the explicit trigger configuration, whether the run builds only or builds
and publishes.
"""

import logging
import os
from collections.abc import Mapping

from ..domain import PipelineConfig, Trigger, TriggerKind, TriggerRule
from ..errors import TriggerRejected

logger = logging.getLogger(__name__)


class TriggerService:
    """Service for resolving triggering events against the configuration."""

    HEADS_PREFIX = "refs/heads/"

    def __init__(self, config: PipelineConfig) -> None:
        self._config = config

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def parse_kind(self, event: str) -> TriggerKind:
        """Map an event name to a TriggerKind.

        Raises:
            TriggerRejected: For events the pipeline does not recognize.
        """
        try:
            return TriggerKind(event.strip().lower())
        except ValueError as e:
            raise TriggerRejected(f"Unrecognized trigger event: {event!r}") from e

    def from_environment(self, env: Mapping[str, str] | None = None) -> Trigger:
        """Build a Trigger from GitHub Actions environment variables.

        Raises:
            TriggerRejected: If the event is missing or unrecognized, or
                the branch cannot be determined.
        """
        if env is None:
            env = os.environ

        event = env.get("GITHUB_EVENT_NAME")
        if not event:
            raise TriggerRejected("GITHUB_EVENT_NAME is not set; pass --event")
        kind = self.parse_kind(event)

        if kind == TriggerKind.PULL_REQUEST:
            branch = env.get("GITHUB_BASE_REF", "")
        else:
            # GITHUB_REF_NAME also holds tag names, so only refs/heads/ counts
            branch = self.branch_from_ref(env.get("GITHUB_REF", ""))
        if not branch:
            raise TriggerRejected(f"Cannot determine branch for {kind.value} event")

        return Trigger(kind=kind, branch=branch, ref=env.get("GITHUB_SHA") or None)

    def branch_from_ref(self, ref: str) -> str:
        """Strip ``refs/heads/`` from a full ref; other refs yield ''."""
        if ref.startswith(self.HEADS_PREFIX):
            return ref[len(self.HEADS_PREFIX):]
        return ""

    def resolve(self, trigger: Trigger) -> TriggerRule:
        """Find the rule governing ``trigger``.

        Raises:
            TriggerRejected: If no rule matches.
        """
        rule = self._config.rule_for(trigger)
        if rule is None:
            raise TriggerRejected(
                f"No pipeline for {trigger.kind.value} on branch {trigger.branch!r}"
            )
        logger.info(
            "Trigger %s on %s: %s", trigger.kind.value, trigger.branch, rule.effect
        )
        return rule
