"""CLI command for resolving a PRP reference from an issue comment."""

import click
import structlog

from prp_runner.cli.common import command_errors, get_actions, get_settings, get_workspace
from prp_runner.engine.resolver import TaskResolver

log = structlog.get_logger(__name__)


@click.command(name="resolve")
@click.option(
    "--comment-body",
    required=True,
    envvar="COMMENT_BODY",
    help="Body of the triggering comment (or $COMMENT_BODY)",
)
@click.option("--issue", type=int, default=None, help="Issue number the comment was posted on")
@click.option(
    "--create-branch/--no-create-branch",
    default=True,
    show_default=True,
    help="Check out the implementation branch",
)
@click.option(
    "--move-to-done/--no-move-to-done",
    default=True,
    show_default=True,
    help="Archive the PRP into the done directory",
)
@click.pass_context
def resolve_command(
    ctx: click.Context,
    comment_body: str,
    issue: int | None,
    create_branch: bool,
    move_to_done: bool,
) -> None:
    """Resolve the PRP referenced in an issue comment.

    Writes ``has_prp``, ``prp_path``, ``prp_name``, ``branch_name``,
    ``archived_path`` and ``prompt_path`` as step outputs. A comment with no
    PRP reference is not an error: ``has_prp=false`` is written and the
    command exits 0.

    Examples:

        prp resolve --issue 123 --comment-body "Please implement PRPs/test-feature.md"

        prp resolve --no-create-branch --no-move-to-done --comment-body "$COMMENT_BODY"
    """
    actions = get_actions(ctx)
    with command_errors("resolve", actions):
        resolver = TaskResolver(get_workspace(ctx), get_settings(ctx))
        resolution = resolver.resolve(
            comment_body,
            issue_number=issue,
            create_branch=create_branch,
            move_to_done=move_to_done,
        )

        actions.write_outputs(resolution.to_outputs())
        if not resolution.has_prp:
            actions.notice("No PRP file path found in comment")
            return

        actions.notice(f"Found PRP file: {resolution.reference}")
        if resolution.branch_created:
            actions.notice(f"Created branch: {resolution.branch_name}")
        if resolution.archived_path:
            actions.notice(f"Moved PRP to: {resolution.archived_path}")
