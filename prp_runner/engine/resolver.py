"""Comment-to-task resolution: Extract, Validate, Name, Move, Build Prompt.

The resolver runs the fixed sequence against an explicit workspace handle
and never consults the process working directory. It performs no locking;
callers must serialize concurrent runs against the same working tree.

Outcomes:
    no-op         No PRP reference in the comment. Returns
                  ``Resolution(has_prp=False)``.
    hard failure  Reference found but unusable, or a filesystem / git step
                  failed. A PrpRunnerError subclass is raised.
    success       A populated Resolution.
"""

from pathlib import Path

import structlog

from prp_runner.config.settings import PipelineSettings
from prp_runner.engine.extractor import extract_task_reference
from prp_runner.engine.mover import archive_task_file, check_archive_destination
from prp_runner.engine.namer import BranchNamer
from prp_runner.engine.prompt_builder import PromptBuilder
from prp_runner.engine.validator import validate_reference
from prp_runner.git.workspace import GitWorkspace
from prp_runner.models.domain import Resolution

log = structlog.get_logger(__name__)


class TaskResolver:
    """Turns a comment into an archived PRP, a branch name and a prompt file.

    Example:
        >>> resolver = TaskResolver(Path("/checkout"), PipelineSettings())
        >>> resolution = resolver.resolve("Please implement PRPs/test-feature.md", 123)
        >>> resolution.branch_name
        'implement/test-feature-1718000000123456789'
    """

    def __init__(
        self,
        workspace: Path,
        settings: PipelineSettings,
        git_workspace: GitWorkspace | None = None,
        namer: BranchNamer | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            workspace: Working tree root every relative path is resolved against
            settings: Pipeline settings (layout and branch sections are used)
            git_workspace: Git handle for branch creation; built from workspace when omitted
            namer: Branch namer; built from settings when omitted
        """
        self.workspace = workspace.resolve()
        self.settings = settings
        self._git = git_workspace
        self.namer = namer or BranchNamer(
            prefix=settings.branch.prefix,
            strategy=settings.branch.id_strategy,
        )

    @property
    def git(self) -> GitWorkspace:
        if self._git is None:
            self._git = GitWorkspace(self.workspace)
        return self._git

    def resolve(
        self,
        comment_body: str,
        issue_number: int | None = None,
        create_branch: bool = True,
        move_to_done: bool = True,
    ) -> Resolution:
        """Run the resolution sequence for one comment.

        Args:
            comment_body: Raw comment text
            issue_number: Issue the comment belongs to, used for log context
            create_branch: Check out the implementation branch
            move_to_done: Archive the PRP into the done directory

        Returns:
            Resolution describing the outcome

        Raises:
            PrpNotFoundError: Reference found but no such file
            ArchiveConflictError: Archive destination already exists
            TemplateError: Prompt template lacks the placeholder
            WorkspaceError, GitOperationError: A filesystem or git step failed
        """
        layout = self.settings.layout
        bound_log = log.bind(issue=issue_number)

        reference = extract_task_reference(comment_body, layout.task_directory)
        if reference is None:
            bound_log.info("resolution_skipped", reason="no_prp_reference")
            return Resolution.not_found()

        task_file = validate_reference(self.workspace, reference)
        identifier = self.namer.identifier(reference)
        branch_name = self.namer.branch_name(reference)
        bound_log.info("prp_resolved", prp_path=reference.path, prp_name=identifier, branch=branch_name)

        # every check that can fail runs before the branch or the tree changes
        destination: Path | None = None
        if move_to_done:
            destination = check_archive_destination(
                self.workspace, task_file, done_directory=layout.done_directory, policy=layout.archive_conflict
            )
            prompt_reference = destination.relative_to(self.workspace).as_posix()
        else:
            prompt_reference = reference.path
        builder = PromptBuilder(self.workspace, layout.template_path)
        prompt = builder.build(prompt_reference)

        branch_created = False
        if create_branch:
            self.git.create_branch(branch_name)
            branch_created = True

        archived_path: str | None = None
        if destination is not None:
            archive_task_file(
                self.workspace,
                task_file,
                done_directory=layout.done_directory,
                policy=layout.archive_conflict,
            )
            archived_path = prompt_reference

        prompt_path = builder.save(prompt, layout.prompt_output)

        return Resolution(
            has_prp=True,
            reference=reference,
            identifier=identifier,
            branch_name=branch_name,
            archived_path=archived_path,
            prompt_path=prompt_path,
            branch_created=branch_created,
        )
