"""Git operations on the implementation working tree.

The workspace wraps a GitPython ``Repo`` for the handful of operations the
pipeline performs: set the committer identity, create the implementation
branch, stage and commit everything the agent changed, and push the branch.

Key Exports:
    GitWorkspace: Operations on a checked-out repository.

Example:
    >>> workspace = GitWorkspace("/path/to/checkout")
    >>> workspace.configure_identity("PRP Bot", "prp-bot@example.com")
    >>> workspace.create_branch("implement/test-feature-1718000000")
    >>> result = workspace.commit_all("feat: implement PRP test-feature")
    >>> if result.has_changes:
    ...     workspace.push("implement/test-feature-1718000000")

Dependencies:
    Requires GitPython (gitpython) and a git executable on PATH.
"""

import time
from collections.abc import Callable
from pathlib import Path

import git
import structlog
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from prp_runner.exceptions import GitOperationError
from prp_runner.git.exceptions import BranchExistsError, NotGitRepositoryError, PushError
from prp_runner.models.domain import CommitResult

log = structlog.get_logger(__name__)


class GitWorkspace:
    """A checked-out repository that the pipeline mutates.

    The ``git.Repo`` object is created lazily so that a GitWorkspace can be
    built before the path is validated.

    Attributes:
        path: Resolved working tree root
    """

    def __init__(self, path: str | Path = ".", sleep: Callable[[float], None] = time.sleep) -> None:
        """Initialize the workspace.

        Args:
            path: Working tree root (no parent directory search)
            sleep: Delay function used between push attempts
        """
        self.path = Path(path).resolve()
        self._repo: git.Repo | None = None
        self._sleep = sleep

    def _get_repo(self) -> git.Repo:
        if self._repo is None:
            try:
                self._repo = git.Repo(self.path)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise NotGitRepositoryError(str(self.path)) from e
        return self._repo

    @property
    def current_branch(self) -> str:
        repo = self._get_repo()
        try:
            return repo.active_branch.name
        except TypeError as e:
            raise GitOperationError("HEAD is detached; no current branch") from e

    def branch_exists(self, name: str) -> bool:
        return name in [head.name for head in self._get_repo().heads]

    def configure_identity(self, user_name: str, user_email: str) -> None:
        """Set the committer identity in the repository config.

        Raises:
            GitOperationError: If either value is empty or the config cannot be written
        """
        if not user_name or not user_email:
            raise GitOperationError("Git user name and email are required")

        repo = self._get_repo()
        try:
            with repo.config_writer() as writer:
                writer.set_value("user", "name", user_name)
                writer.set_value("user", "email", user_email)
        except OSError as e:
            raise GitOperationError(f"Failed to configure git user: {e}") from e

        log.info("git_identity_configured", user_name=user_name, user_email=user_email)

    def create_branch(self, name: str) -> None:
        """Create a branch from HEAD and check it out.

        Raises:
            BranchExistsError: If a local branch with that name exists
            GitOperationError: If git refuses the checkout
        """
        if self.branch_exists(name):
            raise BranchExistsError(name)

        try:
            self._get_repo().git.checkout("-b", name)
        except GitCommandError as e:
            raise GitOperationError(f"Failed to create branch {name}: {e.stderr.strip() or e}") from e

        log.info("branch_created", branch=name)

    def staged_files(self) -> list[str]:
        output = self._get_repo().git.diff("--cached", "--name-only")
        return [line for line in output.splitlines() if line.strip()]

    def commit_all(self, message: str) -> CommitResult:
        """Stage every change (``git add -A``) and commit when anything is staged.

        Returns:
            CommitResult with has_changes False when the tree was clean

        Raises:
            GitOperationError: If staging or committing fails
        """
        repo = self._get_repo()
        try:
            repo.git.add(A=True)
            changed = self.staged_files()
            if not changed:
                log.info("commit_skipped_no_changes")
                return CommitResult(has_changes=False)

            repo.git.commit("-m", message)
        except GitCommandError as e:
            raise GitOperationError(f"Failed to commit changes: {e.stderr.strip() or e}") from e

        sha = repo.head.commit.hexsha
        log.info("changes_committed", sha=sha, files=len(changed))
        return CommitResult(has_changes=True, sha=sha, changed_files=changed)

    def push(self, branch: str, remote: str = "origin", attempts: int = 3, retry_delay: float = 5.0) -> int:
        """Push a branch, rebasing onto the remote branch between failed attempts.

        Args:
            branch: Local branch to push
            remote: Remote name
            attempts: Maximum number of push attempts
            retry_delay: Seconds to wait before retrying

        Returns:
            The attempt number that succeeded

        Raises:
            PushError: If every attempt failed
        """
        repo = self._get_repo()
        last_error = ""

        for attempt in range(1, attempts + 1):
            try:
                repo.git.push(remote, branch)
                log.info("branch_pushed", branch=branch, remote=remote, attempt=attempt)
                return attempt
            except GitCommandError as e:
                last_error = (e.stderr or str(e)).strip()
                log.warning(
                    "push_attempt_failed",
                    branch=branch,
                    attempt=attempt,
                    max_attempts=attempts,
                    error=last_error,
                )

            if attempt < attempts:
                self._sleep(retry_delay)
                try:
                    repo.git.pull("--rebase", remote, branch)
                except GitCommandError as e:
                    # the remote branch usually does not exist yet
                    log.debug("pull_rebase_failed", branch=branch, error=str(e))

        raise PushError(branch, attempts, last_error or None)
