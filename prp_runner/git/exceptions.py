"""Git workspace exceptions.

All exceptions inherit from GitWorkspaceError (itself a GitOperationError)
and can carry a hint shown under the message.

Example:
    >>> from prp_runner.git.exceptions import NotGitRepositoryError
    >>> raise NotGitRepositoryError("/tmp/not-a-repo")
    Traceback (most recent call last):
        ...
    NotGitRepositoryError: Not a Git repository: /tmp/not-a-repo

    Hint: Check out the repository before running prp-runner.
"""

from prp_runner.exceptions import GitOperationError


class GitWorkspaceError(GitOperationError):
    """Base exception for git workspace errors.

    Attributes:
        message: Error message
        hint: Optional hint for resolution
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


class NotGitRepositoryError(GitWorkspaceError):
    """Raised when the workspace is not a Git repository.

    Attributes:
        path: Directory that is not a Git repository
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Not a Git repository: {path}",
            hint="Check out the repository before running prp-runner.",
        )


class BranchExistsError(GitWorkspaceError):
    """Raised when the implementation branch name is already taken."""

    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(
            f"Branch already exists: {branch}",
            hint="Use the 'monotonic' or 'uuid' branch id strategy to avoid collisions.",
        )


class PushError(GitWorkspaceError):
    """Raised when a branch could not be pushed after all attempts.

    Attributes:
        branch: Branch that failed to push
        attempts: Number of attempts made
    """

    def __init__(self, branch: str, attempts: int, detail: str | None = None) -> None:
        self.branch = branch
        self.attempts = attempts
        message = f"Failed to push branch {branch} after {attempts} attempts"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
