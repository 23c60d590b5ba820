"""Domain models for the PRP pipeline.

Key Models:
    - TaskReference: PRP path extracted from a comment
    - TaskFile: PRP file located in the workspace
    - Resolution: outputs of the comment-to-task resolver
    - CommitResult, PullRequest, AgentResult: later pipeline stages
    - PipelineResult: outcome of a whole implementation run
"""

from prp_runner.models.domain import (
    AgentResult,
    Comment,
    CommitResult,
    Issue,
    PipelineResult,
    PullRequest,
    Resolution,
    TaskFile,
    TaskReference,
)

__all__ = [
    "AgentResult",
    "Comment",
    "CommitResult",
    "Issue",
    "PipelineResult",
    "PullRequest",
    "Resolution",
    "TaskFile",
    "TaskReference",
]
