"""Git working tree operations for the PRP pipeline.

Example:
    >>> from prp_runner.git import GitWorkspace
    >>> workspace = GitWorkspace(".")
    >>> workspace.create_branch("implement/test-feature-1718000000")
"""

from prp_runner.git.exceptions import (
    BranchExistsError,
    GitWorkspaceError,
    NotGitRepositoryError,
    PushError,
)
from prp_runner.git.workspace import GitWorkspace

__all__ = [
    "GitWorkspace",
    "GitWorkspaceError",
    "NotGitRepositoryError",
    "BranchExistsError",
    "PushError",
]
