"""End-to-end PRP implementation: resolve, run the agent, commit, push, open a PR.

Stages run strictly in order and every stage's failure aborts the run. A
run is ``completed`` only when a pull request was opened; an agent that
changes nothing ends the run cleanly without pushing.
"""

import asyncio
from pathlib import Path

import structlog

from prp_runner.config.settings import PipelineSettings
from prp_runner.engine.resolver import TaskResolver
from prp_runner.exceptions import ExternalServiceError, PreflightError
from prp_runner.git.workspace import GitWorkspace
from prp_runner.models.domain import PipelineResult, PullRequest, Resolution
from prp_runner.providers.agent import ClaudeCodeAgent
from prp_runner.providers.github_rest import GitHubRestProvider
from prp_runner.rendering import MessageContext, MessageRenderer
from prp_runner.utils.retry import async_retry

log = structlog.get_logger(__name__)

PR_REFERENCE_MARKER = "PR #"


def create_github_provider(settings: PipelineSettings) -> GitHubRestProvider:
    """Build the GitHub provider from settings.

    Raises:
        PreflightError: If the token or repository is not configured
    """
    github = settings.github
    if github.token is None or not github.token.get_secret_value():
        raise PreflightError("GitHub token is required (github.token or PRP_GITHUB__TOKEN)")
    if not github.owner or not github.name:
        raise PreflightError("GitHub repository is required (github.repository or GITHUB_REPOSITORY)")
    return GitHubRestProvider(
        token=github.token.get_secret_value(),
        owner=github.owner,
        repo=github.name,
        base_url=github.base_url,
    )


class ImplementationPipeline:
    """Drives one PRP from issue comment to pull request.

    Collaborators are injectable so tests can replace the agent, GitHub and
    git layers; by default they are built from the settings.
    """

    def __init__(
        self,
        workspace: Path,
        settings: PipelineSettings,
        git_workspace: GitWorkspace | None = None,
        agent: ClaudeCodeAgent | None = None,
        github: GitHubRestProvider | None = None,
        renderer: MessageRenderer | None = None,
        runner: str | None = None,
    ) -> None:
        self.workspace = workspace.resolve()
        self.settings = settings
        self.git = git_workspace or GitWorkspace(self.workspace)
        self.agent = agent or ClaudeCodeAgent(settings.agent, self.workspace)
        self._github = github
        self._github_connected = github is not None
        self.renderer = renderer or MessageRenderer()
        self.runner = runner
        self.resolver = TaskResolver(self.workspace, settings, git_workspace=self.git)

    async def github(self) -> GitHubRestProvider:
        if self._github is None:
            self._github = create_github_provider(self.settings)
        if not self._github_connected:
            await self._github.connect()
            self._github_connected = True
        return self._github

    def message_context(
        self,
        resolution: Resolution,
        issue_number: int | None,
        has_changes: bool = False,
        pr_url: str | None = None,
    ) -> MessageContext:
        agent = self.settings.agent
        return MessageContext(
            prp_name=resolution.identifier or "",
            prp_path=str(resolution.reference),
            archived_path=resolution.archived_path or str(resolution.reference),
            branch_name=resolution.branch_name or "",
            issue_number=issue_number,
            api_provider=str(agent.api_provider),
            model=agent.model,
            runner=self.runner,
            timeout_minutes=agent.timeout_minutes,
            allowed_tools=agent.allowed_tools,
            repository=self.settings.github.repository,
            server_url=self.settings.github.server_url,
            pr_url=pr_url,
            has_changes=has_changes,
        )

    async def open_pull_request(self, context: MessageContext) -> PullRequest:
        github = await self.github()
        settings = self.settings.github

        @async_retry(max_attempts=settings.max_attempts, exceptions=(ExternalServiceError,))
        async def _create() -> PullRequest:
            return await github.create_pull_request(
                title=self.renderer.pull_request_title(context),
                body=self.renderer.pull_request_body(context),
                head=context.branch_name,
                base=settings.base_branch,
                draft=settings.draft_pr,
            )

        return await _create()

    async def run(
        self,
        comment_body: str,
        issue_number: int,
        skip_pr_check: bool = False,
        notify_issue: bool = False,
    ) -> PipelineResult:
        """Run the full pipeline for one comment.

        Args:
            comment_body: Raw comment text
            issue_number: Issue the comment was posted on
            skip_pr_check: Process comments that mention ``PR #`` too
            notify_issue: Post a status comment on the issue at the end

        Returns:
            PipelineResult; ``skipped_reason`` is set for clean no-op exits
        """
        bound_log = log.bind(issue=issue_number)

        if not skip_pr_check and PR_REFERENCE_MARKER in comment_body:
            bound_log.info("pipeline_skipped", reason="comment_references_pr")
            return PipelineResult(Resolution.not_found(), skipped_reason="Comment references a pull request")

        self.git.configure_identity(self.settings.git.user_name, self.settings.git.user_email)

        resolution = self.resolver.resolve(comment_body, issue_number)
        if not resolution.has_prp:
            return PipelineResult(resolution, skipped_reason="No PRP file path found in comment")

        result = PipelineResult(resolution)
        result.agent = await self.agent.run_prompt_file(resolution.prompt_path)  # type: ignore[arg-type]

        context = self.message_context(resolution, issue_number)
        result.commit = self.git.commit_all(self.renderer.commit_message(context))
        if not result.commit.has_changes:
            bound_log.info("pipeline_no_changes", branch=resolution.branch_name)
        else:
            git_settings = self.settings.git
            await asyncio.to_thread(
                self.git.push,
                resolution.branch_name,
                git_settings.remote,
                git_settings.push_attempts,
                git_settings.push_retry_delay,
            )
            result.pull_request = await self.open_pull_request(context)

        if notify_issue:
            final_context = self.message_context(
                resolution,
                issue_number,
                has_changes=result.commit.has_changes,
                pr_url=result.pull_request.url if result.pull_request else None,
            )
            github = await self.github()
            await github.add_comment(issue_number, self.renderer.issue_comment(final_context))

        bound_log.info(
            "pipeline_finished",
            prp_name=resolution.identifier,
            has_changes=result.commit.has_changes,
            completed=result.completed,
        )
        return result

    async def close(self) -> None:
        if self._github is not None and self._github_connected:
            await self._github.disconnect()
