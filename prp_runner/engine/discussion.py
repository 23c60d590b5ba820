"""Issue discussion context for drafting a new PRP.

When someone asks the bot to write a PRP, the whole issue thread becomes
the ``$ARGUMENTS`` of the PRP-creation template. The bot stays quiet when
the latest comment is its own, so it never answers itself.
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from prp_runner.engine.prompt_builder import PLACEHOLDER, PromptBuilder
from prp_runner.models.domain import Comment, Issue
from prp_runner.providers.github_rest import GitHubRestProvider

log = structlog.get_logger(__name__)


@dataclass
class BotStatus:
    should_process: bool
    context: str | None = None
    prompt_path: Path | None = None

    def to_outputs(self) -> dict[str, str]:
        outputs = {"should_process": "true" if self.should_process else "false"}
        if self.prompt_path is not None:
            outputs["prompt_path"] = str(self.prompt_path)
        return outputs


def should_process(comments: list[Comment], bot_username: str) -> bool:
    """True unless the most recent comment was written by the bot."""
    if not comments:
        return True
    return comments[-1].author != bot_username


def build_discussion_context(issue: Issue, comments: list[Comment]) -> str:
    context = f"# Issue: {issue.title}\n\n{issue.body}\n\n"
    if comments:
        context += "## Discussion:\n\n"
        for comment in comments:
            context += f"**{comment.author}** ({comment.created_at.isoformat()}):\n{comment.body}\n\n"
    return context


async def check_bot_status(
    github: GitHubRestProvider,
    issue_number: int,
    bot_username: str,
    workspace: Path,
    template_path: str,
    output_path: str,
) -> BotStatus:
    """Decide whether to respond and, if so, write the PRP-creation prompt.

    A missing creation template falls back to the raw discussion context.
    """
    comments = await github.get_comments(issue_number)
    if not should_process(comments, bot_username):
        log.info("bot_status_skip", issue=issue_number, reason="last_comment_from_bot")
        return BotStatus(should_process=False)

    issue = await github.get_issue(issue_number)
    context = build_discussion_context(issue, comments)

    builder = PromptBuilder(workspace, template_path, fallback=PLACEHOLDER)
    prompt_path = builder.write(context, output_path)
    log.info("discussion_prompt_written", issue=issue_number, comments=len(comments))
    return BotStatus(should_process=True, context=context, prompt_path=prompt_path)
