"""CLI commands for the implementation pipeline and its individual steps.

``implement`` runs everything for one comment. ``commit``, ``push``,
``create-pr`` and ``comment`` run a single step, for workflows that
interleave their own steps (tests, linters) between them.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import click
import structlog

from prp_runner.cli.common import command_errors, get_actions, get_settings, get_workspace
from prp_runner.engine.pipeline import ImplementationPipeline
from prp_runner.models.domain import Comment, PipelineResult, PullRequest, Resolution, TaskReference
from prp_runner.rendering import MessageContext

log = structlog.get_logger(__name__)


def _prp_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options describing an already resolved PRP."""
    func = click.option("--issue", type=int, default=None, help="Issue number the PRP was requested on")(func)
    func = click.option("--archived-path", default=None, help="Path of the archived PRP")(func)
    func = click.option("--branch", required=True, help="Implementation branch name")(func)
    func = click.option("--prp-path", required=True, help="Original PRP path, e.g. PRPs/feature.md")(func)
    return func


def _context_from_options(
    pipeline: ImplementationPipeline,
    prp_path: str,
    branch: str,
    archived_path: str | None,
    issue: int | None,
    has_changes: bool = False,
    pr_url: str | None = None,
) -> MessageContext:
    reference = TaskReference(prp_path)
    resolution = Resolution(
        has_prp=True,
        reference=reference,
        identifier=reference.identifier,
        branch_name=branch,
        archived_path=archived_path,
    )
    return pipeline.message_context(resolution, issue, has_changes=has_changes, pr_url=pr_url)


def _summary(result: PipelineResult) -> str:
    resolution = result.resolution
    lines = ["## PRP Implementation", ""]
    if not resolution.has_prp or result.skipped_reason:
        lines.append(f"Skipped: {result.skipped_reason}")
        return "\n".join(lines)

    lines.extend(
        [
            f"- **PRP**: `{resolution.reference}`",
            f"- **Branch**: `{resolution.branch_name}`",
            f"- **Archived to**: `{resolution.archived_path}`",
        ]
    )
    if result.agent is not None:
        lines.append(f"- **Agent attempts**: {result.agent.attempts}")
    if result.pull_request is not None:
        lines.append(f"- **Pull request**: {result.pull_request.url}")
    elif result.commit is not None and not result.commit.has_changes:
        lines.append("- No changes were made by the agent")
    return "\n".join(lines)


@click.command(name="implement")
@click.option(
    "--comment-body",
    required=True,
    envvar="COMMENT_BODY",
    help="Body of the triggering comment (or $COMMENT_BODY)",
)
@click.option("--issue", type=int, required=True, help="Issue number the comment was posted on")
@click.option("--skip-pr-check", is_flag=True, help="Process comments that mention a pull request")
@click.option("--notify-issue", is_flag=True, help="Post a status comment on the issue when done")
@click.option("--runner", default=None, help="Runner label, recorded in the commit and PR")
@click.pass_context
def implement_command(
    ctx: click.Context,
    comment_body: str,
    issue: int,
    skip_pr_check: bool,
    notify_issue: bool,
    runner: str | None,
) -> None:
    """Implement the PRP referenced in a comment and open a pull request.

    Resolves the PRP, runs the coding agent on the generated prompt, commits
    the result, pushes the branch and opens a pull request. A comment
    without a PRP reference, or one that references a pull request, ends
    the command successfully without doing anything.

    Examples:

        prp implement --issue 123 --comment-body "Please implement PRPs/test-feature.md"
    """
    actions = get_actions(ctx)
    with command_errors("implement", actions):
        pipeline = ImplementationPipeline(get_workspace(ctx), get_settings(ctx), runner=runner)

        async def _run() -> PipelineResult:
            try:
                return await pipeline.run(
                    comment_body,
                    issue,
                    skip_pr_check=skip_pr_check,
                    notify_issue=notify_issue,
                )
            finally:
                await pipeline.close()

        result = asyncio.run(_run())

        actions.write_outputs(result.to_outputs())
        actions.write_step_summary(_summary(result))
        if result.skipped_reason:
            actions.notice(result.skipped_reason)
        elif result.pull_request is not None:
            actions.notice(f"Created pull request: {result.pull_request.url}")
        else:
            actions.warning("No changes were made by the agent")


@click.command(name="commit")
@_prp_options
@click.pass_context
def commit_command(
    ctx: click.Context,
    prp_path: str,
    branch: str,
    archived_path: str | None,
    issue: int | None,
) -> None:
    """Stage all changes and commit them with the PRP commit message.

    Writes ``has_changes`` and, when a commit was made, ``commit_sha``.
    """
    actions = get_actions(ctx)
    with command_errors("commit", actions):
        settings = get_settings(ctx)
        pipeline = ImplementationPipeline(get_workspace(ctx), settings)
        pipeline.git.configure_identity(settings.git.user_name, settings.git.user_email)

        context = _context_from_options(pipeline, prp_path, branch, archived_path, issue)
        commit = pipeline.git.commit_all(pipeline.renderer.commit_message(context))

        actions.write_output("has_changes", "true" if commit.has_changes else "false")
        if commit.has_changes:
            actions.write_output("commit_sha", commit.sha or "")
            actions.notice(f"Committed {len(commit.changed_files)} file(s) on {branch}")
        else:
            actions.warning("No changes to commit")


@click.command(name="push")
@click.option("--branch", required=True, help="Branch to push")
@click.pass_context
def push_command(ctx: click.Context, branch: str) -> None:
    """Push a branch, retrying with ``pull --rebase`` between attempts."""
    actions = get_actions(ctx)
    with command_errors("push", actions):
        settings = get_settings(ctx)
        pipeline = ImplementationPipeline(get_workspace(ctx), settings)
        attempt = pipeline.git.push(
            branch,
            remote=settings.git.remote,
            attempts=settings.git.push_attempts,
            retry_delay=settings.git.push_retry_delay,
        )
        actions.write_output("push_attempts", str(attempt))
        actions.notice(f"Pushed {branch} to {settings.git.remote}")


@click.command(name="create-pr")
@_prp_options
@click.option("--runner", default=None, help="Runner label, recorded in the PR body")
@click.pass_context
def create_pr_command(
    ctx: click.Context,
    prp_path: str,
    branch: str,
    archived_path: str | None,
    issue: int | None,
    runner: str | None,
) -> None:
    """Open the pull request for an implementation branch.

    Writes ``pr_number`` and ``pr_url``.
    """
    actions = get_actions(ctx)
    with command_errors("create_pr", actions):
        pipeline = ImplementationPipeline(get_workspace(ctx), get_settings(ctx), runner=runner)
        context = _context_from_options(pipeline, prp_path, branch, archived_path, issue, has_changes=True)

        async def _create() -> PullRequest:
            try:
                return await pipeline.open_pull_request(context)
            finally:
                await pipeline.close()

        pull_request = asyncio.run(_create())
        actions.write_outputs({"pr_number": str(pull_request.number), "pr_url": pull_request.url})
        actions.notice(f"Created pull request: {pull_request.url}")


@click.command(name="comment")
@_prp_options
@click.option("--pr-url", default=None, help="URL of the opened pull request, if any")
@click.option("--has-changes/--no-changes", default=False, help="Whether the agent changed anything")
@click.pass_context
def comment_command(
    ctx: click.Context,
    prp_path: str,
    branch: str,
    archived_path: str | None,
    issue: int | None,
    pr_url: str | None,
    has_changes: bool,
) -> None:
    """Post the implementation status comment on the issue."""
    if issue is None:
        raise click.UsageError("--issue is required to post a comment")

    actions = get_actions(ctx)
    with command_errors("comment", actions):
        pipeline = ImplementationPipeline(get_workspace(ctx), get_settings(ctx))
        context = _context_from_options(
            pipeline, prp_path, branch, archived_path, issue, has_changes=has_changes, pr_url=pr_url
        )

        async def _comment() -> Comment:
            try:
                github = await pipeline.github()
                return await github.add_comment(issue, pipeline.renderer.issue_comment(context))
            finally:
                await pipeline.close()

        comment = asyncio.run(_comment())
        actions.write_output("comment_id", str(comment.id))
        log.info("status_comment_posted", issue=issue, comment_id=comment.id)
