"""Build stage implementation.

Validates the document tree, runs the external documentation generator
and checks that it left a usable artifact behind.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path

from ..config import PipelineSettings
from ..domain import BuildArtifact
from ..errors import BuildError
from .render_service import RenderService
from .tree_service import TreeService

logger = logging.getLogger(__name__)


class CommandBuilder:
    """Document builder that runs a generator command in the source tree.

    The default command is the gradle ``run`` task, which renders every
    edition's index unit to HTML and PDF under ``build/docs``.
    """

    def __init__(
        self,
        tree_service: TreeService,
        render_service: RenderService | None = None,
        command: list[str] | None = None,
        output_dir: Path = PipelineSettings.OUTPUT_DIR,
        timeout: float | None = PipelineSettings.BUILD_TIMEOUT,
        secret_env_vars: tuple[str, ...] = PipelineSettings.CREDENTIAL_ENV_VARS,
        validate: bool = True,
    ) -> None:
        """Initialize the builder.

        Args:
            tree_service: Service used to validate the document tree.
            render_service: Writes a landing page when the tool produces
                none; None disables it.
            command: Generator command line (default: ``./gradlew run``).
            output_dir: Output directory, relative to the source directory
                unless absolute.
            timeout: Seconds to wait for the generator; None waits forever.
            secret_env_vars: Variables removed from the generator's environment.
            validate: Check includes, assets and languages before building.
        """
        self._tree_service = tree_service
        self._render_service = render_service
        self._command = list(command or PipelineSettings.BUILD_COMMAND)
        self._output_dir = Path(output_dir)
        self._timeout = timeout
        self._secret_env_vars = secret_env_vars
        self._validate = validate
        self.last_artifact: BuildArtifact | None = None

    def output_dir_for(self, source_dir: Path) -> Path:
        if self._output_dir.is_absolute():
            return self._output_dir
        return source_dir / self._output_dir

    def build(self, source_dir: Path) -> Path:
        """Build the documents under ``source_dir``.

        Returns:
            The output directory.

        Raises:
            BuildError: If the tree is invalid, the generator fails, or
                the output lacks HTML or PDF files.
        """
        source_dir = source_dir.resolve()
        output_dir = self.output_dir_for(source_dir)
        self._check_output_location(source_dir, output_dir)
        if self._validate:
            self.check_tree(source_dir)

        self._clean(output_dir)
        self._run_generator(source_dir)

        artifact = self.inspect_output(output_dir)
        self._check_editions(source_dir, artifact)
        if self._render_service is not None:
            self._render_service.write_landing_page(
                artifact, self._tree_service.discover_editions(source_dir)
            )
        self.last_artifact = artifact
        logger.info(
            "Build produced %d HTML and %d PDF file(s) in %s",
            len(artifact.html_files),
            len(artifact.pdf_files),
            output_dir,
        )
        return output_dir

    def check_tree(self, source_dir: Path) -> None:
        """Raise BuildError when any edition has integrity issues."""
        try:
            editions = self._tree_service.discover_editions(source_dir)
        except FileNotFoundError as e:
            raise BuildError(str(e)) from e

        if not editions:
            raise BuildError(f"No index units found in {source_dir}")

        issues = self._tree_service.validate(source_dir)
        if issues:
            for issue in issues:
                logger.error("%s", issue)
            raise BuildError(
                f"Document tree has {len(issues)} problem(s); first: {issues[0]}",
                issues=issues,
            )
        logger.info("Document tree valid for %d edition(s)", len(editions))

    def inspect_output(self, output_dir: Path) -> BuildArtifact:
        """Collect the rendered files and require at least one HTML and one PDF."""
        if not output_dir.is_dir():
            raise BuildError(f"Build produced no output directory: {output_dir}")

        artifact = BuildArtifact(
            output_dir=output_dir,
            html_files=sorted(output_dir.rglob("*.html")),
            pdf_files=sorted(output_dir.rglob("*.pdf")),
        )
        if not any(output_dir.iterdir()):
            raise BuildError(f"Build output directory is empty: {output_dir}")
        if not artifact.html_files:
            raise BuildError(f"Build produced no HTML files in {output_dir}")
        if not artifact.pdf_files:
            raise BuildError(f"Build produced no PDF file in {output_dir}")
        return artifact

    def _run_generator(self, source_dir: Path) -> None:
        env = {
            key: value
            for key, value in os.environ.items()
            if key not in self._secret_env_vars
        }
        logger.info("Running %s in %s", " ".join(self._command), source_dir)
        try:
            result = subprocess.run(
                self._command,
                cwd=source_dir,
                env=env,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise BuildError(f"Build tool not found: {self._command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise BuildError(f"Build timed out after {self._timeout}s") from e

        for line in result.stdout.splitlines():
            logger.debug("%s", line)
        if result.returncode != 0:
            tail = "\n".join(result.stderr.strip().splitlines()[-20:])
            raise BuildError(
                f"Build command exited with status {result.returncode}: {tail}"
            )

    def _check_editions(self, source_dir: Path, artifact: BuildArtifact) -> None:
        for edition in self._tree_service.discover_editions(source_dir):
            suffixes = {p.suffix for p in artifact.files_for(edition.stem)}
            for expected in (".html", ".pdf"):
                if expected not in suffixes:
                    logger.warning(
                        "Edition %s has no %s output named %s%s",
                        edition.name,
                        expected[1:].upper(),
                        edition.stem,
                        expected,
                    )

    def _check_output_location(self, source_dir: Path, output_dir: Path) -> None:
        # The output directory is deleted before each build
        resolved = output_dir.resolve()
        if resolved == source_dir or resolved in source_dir.parents:
            raise BuildError(
                f"Output directory {output_dir} contains the source directory {source_dir}"
            )

    def _clean(self, output_dir: Path) -> None:
        if not output_dir.exists():
            return
        logger.debug("Removing previous output %s", output_dir)
        try:
            shutil.rmtree(output_dir)
        except OSError as e:
            raise BuildError(f"Cannot clear output directory {output_dir}: {e}") from e
