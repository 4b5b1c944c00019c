"""
Configuration settings for the documentation pipeline.
"""

import os
import shlex
from pathlib import Path

from .domain.pipeline import PipelineConfig


class PipelineSettings:
    """Configuration class for pipeline settings.

    Class attributes hold the fixed defaults; the classmethods apply
    ``DOCPUB_*`` environment overrides.
    """

    # Branch the pipeline runs for
    DEFAULT_BRANCH = "master"

    # Build stage
    BUILD_COMMAND = ["./gradlew", "run"]
    OUTPUT_DIR = Path("build") / "docs"
    BUILD_TIMEOUT = None  # seconds; None waits for the tool

    # Editions: index units matching this glob in the source root
    INDEX_GLOB = "index*.adoc"
    DEFAULT_LANG = "en"

    # Publish stage
    PUBLISH_EMAIL = "jonathan@jonathangiles.net"
    PUBLISH_NAME = "docpub"
    PAGES_BRANCH = "gh-pages"
    COMMIT_MESSAGE = "Deploy to GitHub pages"
    GIT_TIMEOUT = 300

    # Credential lookup, first match wins
    CREDENTIAL_ENV_VARS = ("ACCESS_TOKEN", "GITHUB_TOKEN")

    @classmethod
    def get_branch(cls) -> str:
        """Get the designated branch, checking environment variables."""
        return os.environ.get("DOCPUB_BRANCH") or cls.DEFAULT_BRANCH

    @classmethod
    def get_build_command(cls) -> list[str]:
        env_command = os.environ.get("DOCPUB_BUILD_COMMAND")
        if env_command:
            return shlex.split(env_command)
        return list(cls.BUILD_COMMAND)

    @classmethod
    def get_output_dir(cls) -> Path:
        env_dir = os.environ.get("DOCPUB_OUTPUT_DIR")
        if env_dir:
            return Path(env_dir)
        return cls.OUTPUT_DIR

    @classmethod
    def get_index_glob(cls) -> str:
        """Get the glob, relative to the source root, selecting index units."""
        return os.environ.get("DOCPUB_INDEX_GLOB") or cls.INDEX_GLOB

    @classmethod
    def get_publish_email(cls) -> str:
        return os.environ.get("DOCPUB_PUBLISH_EMAIL") or cls.PUBLISH_EMAIL

    @classmethod
    def get_repository(cls) -> str | None:
        """Get the ``owner/name`` slug of the repository to publish to."""
        return os.environ.get("DOCPUB_REPOSITORY") or os.environ.get(
            "GITHUB_REPOSITORY"
        )

    @classmethod
    def get_credential(cls) -> str | None:
        """Read the publish credential. Only the publish stage calls this."""
        for name in cls.CREDENTIAL_ENV_VARS:
            value = os.environ.get(name)
            if value:
                return value
        return None

    @classmethod
    def pipeline_config(cls) -> PipelineConfig:
        """Build the trigger configuration for the designated branch."""
        return PipelineConfig.for_branch(
            cls.get_branch(),
            output_dir=cls.get_output_dir(),
            publish_email=cls.get_publish_email(),
        )
