"""Pipeline driver.

Runs checkout, build and publish in order for one trigger. The first
failing stage ends the run; nothing is retried.
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from ..domain import PipelineRun, RunState, Stage, Trigger
from ..errors import PipelineError, TriggerRejected
from .interfaces import IDocumentBuilder, IPublisher, ISourceCheckout
from .trigger_service import TriggerService

logger = logging.getLogger(__name__)


class PipelineDriver:
    """Executes the checkout -> build -> publish sequence.

    Collaborators are injected so each stage can be replaced; the
    credential is fetched through ``credential_provider`` only once the
    publish stage starts.
    """

    def __init__(
        self,
        trigger_service: TriggerService,
        checkout: ISourceCheckout,
        builder: IDocumentBuilder,
        publisher: IPublisher,
        credential_provider: Callable[[], str | None],
        keep_artifact: bool = False,
    ) -> None:
        self._triggers = trigger_service
        self._checkout = checkout
        self._builder = builder
        self._publisher = publisher
        self._credential_provider = credential_provider
        self._keep_artifact = keep_artifact

    def run(self, trigger: Trigger, workspace: Path) -> PipelineRun:
        """Run the pipeline for ``trigger`` in ``workspace``.

        Returns:
            The finished PipelineRun; ``exit_code`` reflects the first
            failing stage (0 on success).
        """
        run = PipelineRun(trigger=trigger)

        try:
            rule = self._triggers.resolve(trigger)
        except TriggerRejected as e:
            logger.error("%s", e)
            run.fail(None, str(e), e.exit_code)
            return run

        # Checkout
        try:
            run.commit = self._checkout.checkout(workspace, trigger.checkout_ref)
        except PipelineError as e:
            return self._failed(run, Stage.CHECKOUT, e)
        run.record(Stage.CHECKOUT, True)
        run.advance(RunState.CHECKED_OUT)

        # Build
        try:
            output_dir = self._builder.build(workspace)
        except PipelineError as e:
            return self._failed(run, Stage.BUILD, e)
        run.artifact_dir = output_dir
        run.record(Stage.BUILD, True, str(output_dir))
        run.advance(RunState.BUILT)

        if not rule.publish:
            logger.info("Build-only trigger; skipping publish")
            return run

        # Publish
        try:
            self._publisher.publish(output_dir, self._credential_provider())
        except PipelineError as e:
            return self._failed(run, Stage.PUBLISH, e)
        run.record(Stage.PUBLISH, True)
        run.advance(RunState.PUBLISHED)

        if not self._keep_artifact:
            self._discard(output_dir)
        return run

    def _failed(self, run: PipelineRun, stage: Stage, error: PipelineError) -> PipelineRun:
        logger.error("%s stage failed: %s", stage.value, error)
        run.fail(stage, str(error), stage.exit_code)
        return run

    def _discard(self, output_dir: Path) -> None:
        try:
            shutil.rmtree(output_dir)
        except OSError as e:
            logger.warning("Could not remove build artifact %s: %s", output_dir, e)
        else:
            logger.debug("Discarded build artifact %s", output_dir)
