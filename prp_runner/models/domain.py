"""
Domain models for the PRP pipeline.

These dataclasses are produced and consumed within a single run: a
TaskReference is extracted from a comment, validated into a TaskFile,
named, archived, and summarized in a Resolution whose fields become the
step outputs of the CI job.

Example:
    Describing a resolved PRP::

        resolution = Resolution(
            has_prp=True,
            reference=TaskReference("PRPs/test-feature.md"),
            identifier="test-feature",
            branch_name="implement/test-feature-1718000000",
            archived_path="PRPs/done/test-feature.md",
            prompt_path=Path("/tmp/prp-implementation-prompt.md"),
        )
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath

from prp_runner.enums import TaskState


@dataclass(frozen=True)
class TaskReference:
    """A PRP path as written in a comment, relative to the workspace root."""

    path: str

    @property
    def identifier(self) -> str:
        """File stem without the ``.md`` extension."""
        return PurePosixPath(self.path).stem

    def __str__(self) -> str:
        return self.path


@dataclass
class TaskFile:
    """A PRP file located on disk.

    Attributes:
        reference: Reference the file was resolved from
        path: Absolute path of the file
        state: PENDING until the mover relocates it
    """

    reference: TaskReference
    path: Path
    state: TaskState = TaskState.PENDING


@dataclass
class Resolution:
    """Outputs of one comment-to-task resolution.

    When ``has_prp`` is False every other field is None.
    """

    has_prp: bool
    reference: TaskReference | None = None
    identifier: str | None = None
    branch_name: str | None = None
    archived_path: str | None = None
    prompt_path: Path | None = None
    branch_created: bool = False

    @classmethod
    def not_found(cls) -> "Resolution":
        return cls(has_prp=False)

    def to_outputs(self) -> dict[str, str]:
        """Flatten into CI step outputs (string values only)."""
        outputs = {"has_prp": "true" if self.has_prp else "false"}
        if not self.has_prp:
            return outputs
        outputs.update(
            {
                "prp_path": str(self.reference),
                "prp_name": self.identifier or "",
                "branch_name": self.branch_name or "",
                "archived_path": self.archived_path or "",
                "prompt_path": str(self.prompt_path) if self.prompt_path else "",
            }
        )
        return outputs


@dataclass
class CommitResult:
    """Result of staging and committing the working tree."""

    has_changes: bool
    sha: str | None = None
    changed_files: list[str] = field(default_factory=list)


@dataclass
class Comment:
    """An issue comment as returned by the GitHub provider."""

    id: int
    body: str
    author: str
    created_at: datetime


@dataclass
class Issue:
    """The subset of a GitHub issue the pipeline needs."""

    number: int
    title: str
    body: str
    url: str


@dataclass
class PullRequest:
    """A pull request opened for an implementation branch."""

    number: int
    title: str
    head: str
    base: str
    url: str
    draft: bool = False


@dataclass
class AgentResult:
    """Outcome of one coding agent run."""

    success: bool
    output: str
    error: str | None = None
    attempts: int = 1


@dataclass
class PipelineResult:
    """Outcome of the full implementation pipeline.

    ``completed`` is True only when a pull request was opened.
    """

    resolution: Resolution
    skipped_reason: str | None = None
    agent: AgentResult | None = None
    commit: CommitResult | None = None
    pull_request: PullRequest | None = None

    @property
    def completed(self) -> bool:
        return self.pull_request is not None

    def to_outputs(self) -> dict[str, str]:
        outputs = self.resolution.to_outputs()
        outputs["has_changes"] = "true" if self.commit and self.commit.has_changes else "false"
        outputs["completed"] = "true" if self.completed else "false"
        if self.pull_request:
            outputs["pr_number"] = str(self.pull_request.number)
            outputs["pr_url"] = self.pull_request.url
        return outputs
