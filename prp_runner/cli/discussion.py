"""CLI command for answering PRP-creation requests on an issue."""

import asyncio

import click

from prp_runner.cli.common import command_errors, get_actions, get_settings, get_workspace
from prp_runner.engine.discussion import BotStatus, check_bot_status
from prp_runner.engine.pipeline import create_github_provider


@click.command(name="check-bot-status")
@click.option("--issue", type=int, required=True, help="Issue number to inspect")
@click.option("--bot-username", default=None, help="Bot account name (defaults to github.bot_username)")
@click.pass_context
def check_bot_status_command(ctx: click.Context, issue: int, bot_username: str | None) -> None:
    """Decide whether the bot should answer and write the PRP-creation prompt.

    Writes ``should_process`` and, when processing, ``prompt_path``. The bot
    stays silent when the latest comment on the issue is its own.
    """
    actions = get_actions(ctx)
    with command_errors("check_bot_status", actions):
        settings = get_settings(ctx)
        github = create_github_provider(settings)

        async def _check() -> BotStatus:
            await github.connect()
            try:
                return await check_bot_status(
                    github,
                    issue,
                    bot_username or settings.github.bot_username,
                    get_workspace(ctx),
                    settings.layout.create_template_path,
                    settings.layout.dynamic_prompt_output,
                )
            finally:
                await github.disconnect()

        status = asyncio.run(_check())
        actions.write_outputs(status.to_outputs())
        if not status.should_process:
            actions.notice("Last comment is from the bot, skipping")
