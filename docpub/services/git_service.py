"""Git integration for the checkout stage.

Provides repository inspection (HEAD commit) and the source
checkout collaborator, using subprocess calls to the git CLI.
"""

import logging
import subprocess
from datetime import datetime
from pathlib import Path

from ..config import PipelineSettings
from ..domain import CommitInfo
from ..errors import CheckoutError
from ..logging_config import redact

logger = logging.getLogger(__name__)


class GitService:
    """Service for git operations on the source workspace."""

    # Git log format for parsing commits
    # Fields: hash, short_hash, author, email, timestamp, subject
    LOG_FORMAT = "%H%n%h%n%an%n%ae%n%at%n%s%n---COMMIT_END---"

    def __init__(self, timeout: int | None = PipelineSettings.GIT_TIMEOUT) -> None:
        """Initialize the git service.

        Args:
            timeout: Seconds allowed for each git invocation.
        """
        self._timeout = timeout

    def run(
        self,
        args: list[str],
        cwd: Path,
        secrets: list[str | None] | None = None,
    ) -> subprocess.CompletedProcess:
        """Run a git command, returning the completed process.

        Raises:
            FileNotFoundError: If git is not installed.
            subprocess.TimeoutExpired: If the command exceeds the timeout.
        """
        logger.debug("git %s (in %s)", redact(" ".join(args), secrets or []), cwd)
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=self._timeout,
        )

    def is_git_repo(self, path: Path) -> bool:
        """Check if a path is inside a git repository.

        Args:
            path: Path to check.

        Returns:
            True if the path is inside a git repo.
        """
        try:
            result = self.run(
                ["rev-parse", "--git-dir"],
                cwd=path if path.is_dir() else path.parent,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def head_commit(self, path: Path) -> CommitInfo | None:
        """Get the commit checked out at ``path``, or None if unavailable."""
        try:
            result = self.run(["log", "-n1", f"--format={self.LOG_FORMAT}"], cwd=path)
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return None

        if result.returncode != 0:
            return None

        commits = self._parse_log_output(result.stdout)
        return commits[0] if commits else None

    def _parse_log_output(self, output: str) -> list[CommitInfo]:
        """Parse git log output into CommitInfo objects.

        Args:
            output: Raw git log output.

        Returns:
            List of CommitInfo objects.
        """
        commits = []
        raw_commits = output.split("---COMMIT_END---")

        for raw in raw_commits:
            raw = raw.strip()
            if not raw:
                continue

            lines = raw.split("\n")
            if len(lines) < 6:
                continue

            try:
                commits.append(
                    CommitInfo(
                        hash=lines[0].strip(),
                        short_hash=lines[1].strip(),
                        author=lines[2].strip(),
                        author_email=lines[3].strip(),
                        date=datetime.fromtimestamp(int(lines[4].strip())),
                        subject=lines[5].strip(),
                    )
                )
            except (ValueError, IndexError):
                continue

        return commits


class GitCheckout:
    """Checkout stage backed by git.

    With a repository URL the workspace is cloned (or fetched and reset
    when it already holds a clone). Without one the workspace is taken as
    already checked out, which is the case when the CI host performed the
    checkout before invoking the pipeline.
    """

    def __init__(self, git_service: GitService, repository_url: str | None = None) -> None:
        self._git = git_service
        self._repository_url = repository_url

    def checkout(self, workspace: Path, ref: str) -> CommitInfo | None:
        """Make ``ref`` available in ``workspace``.

        Raises:
            CheckoutError: On a missing workspace, git failure or timeout.
        """
        try:
            if self._repository_url:
                self._fetch(workspace, ref)
            elif not workspace.is_dir():
                raise CheckoutError(f"Workspace not found: {workspace}")
        except subprocess.TimeoutExpired as e:
            raise CheckoutError(f"Timed out checking out {ref}") from e
        except FileNotFoundError as e:
            raise CheckoutError("git executable not found") from e

        if not self._git.is_git_repo(workspace):
            logger.warning("Workspace %s is not a git repository; using it as is", workspace)
            return None

        commit = self._git.head_commit(workspace)
        if commit is not None:
            logger.info("Checked out %s (%s)", commit.short_hash, commit.subject)
        return commit

    def _fetch(self, workspace: Path, ref: str) -> None:
        url = self._repository_url
        secrets = [self._url_secret()]
        if not workspace.exists() or not any(workspace.iterdir()):
            # An empty repository with the remote set up; the fetch below
            # accepts branches, pull request refs and commit SHAs alike.
            workspace.mkdir(parents=True, exist_ok=True)
            logger.info("Initializing clone of %s in %s", redact(url, secrets), workspace)
            self._check(self._git.run(["init", "--quiet"], cwd=workspace), "init")
            self._check(
                self._git.run(["remote", "add", "origin", url], cwd=workspace, secrets=secrets),
                "remote add",
            )
        elif not (workspace / ".git").exists():
            raise CheckoutError(
                f"Workspace {workspace} is not empty and is not a git clone"
            )

        logger.info("Fetching %s into %s", ref, workspace)
        self._check(
            self._git.run(
                ["fetch", "--depth", "1", "origin", ref],
                cwd=workspace,
                secrets=secrets,
            ),
            f"fetch of {ref}",
        )
        self._check(
            self._git.run(["checkout", "--force", "--quiet", "FETCH_HEAD"], cwd=workspace),
            f"checkout of {ref}",
        )

    def _check(self, result: subprocess.CompletedProcess, what: str) -> None:
        if result.returncode != 0:
            detail = redact(result.stderr.strip(), [self._url_secret()])
            raise CheckoutError(f"git {what} failed: {detail}")

    def _url_secret(self) -> str | None:
        # Userinfo embedded in the URL (https://token@host/...) is a secret
        url = self._repository_url or ""
        if "://" in url and "@" in url.split("://", 1)[1].split("/", 1)[0]:
            return url.split("://", 1)[1].split("@", 1)[0]
        return None
