"""CLI commands for preflight checks and runner selection."""

import os

import click
from pydantic import ValidationError

from prp_runner.cli.common import command_errors, get_actions, get_settings
from prp_runner.engine.preflight import run_preflight
from prp_runner.engine.runner_select import select_runner
from prp_runner.enums import RunnerType
from prp_runner.exceptions import ConfigurationError


@click.command(name="preflight")
@click.option("--skip-github", is_flag=True, help="Only check the agent credentials")
@click.pass_context
def preflight_command(ctx: click.Context, skip_github: bool) -> None:
    """Validate agent credentials and GitHub settings before any work starts."""
    actions = get_actions(ctx)
    with command_errors("preflight", actions):
        checks = run_preflight(get_settings(ctx), require_github=not skip_github)
        for check in checks:
            actions.notice(check)
        actions.write_output("api_provider", str(get_settings(ctx).agent.api_provider))


@click.command(name="select-runner")
@click.option(
    "--runner-type",
    type=click.Choice([t.value for t in RunnerType]),
    default=None,
    help="Override runner.runner_type",
)
@click.option("--runner-size", default=None, help="Override runner.runner_size (e.g. 4vcpu)")
@click.option(
    "--owner",
    default=None,
    help="Repository owner used by auto detection (defaults to $GITHUB_REPOSITORY_OWNER)",
)
@click.pass_context
def select_runner_command(
    ctx: click.Context,
    runner_type: str | None,
    runner_size: str | None,
    owner: str | None,
) -> None:
    """Select the runner label for the implementation job.

    Writes ``runner`` and ``fallback_runner``.
    """
    actions = get_actions(ctx)
    with command_errors("select_runner", actions):
        config = get_settings(ctx).runner
        updates: dict[str, object] = {}
        if runner_type is not None:
            updates["runner_type"] = RunnerType(runner_type)
        if runner_size is not None:
            updates["runner_size"] = runner_size
        if updates:
            try:
                config = config.model_validate({**config.model_dump(), **updates})
            except ValidationError as e:
                raise ConfigurationError(f"Invalid runner options: {e}") from e

        owner = owner or os.environ.get("GITHUB_REPOSITORY_OWNER") or get_settings(ctx).github.owner
        selection = select_runner(config, owner)
        actions.write_outputs(selection.to_outputs())
        actions.notice(f"Selected {selection.runner_type} runner: {selection.runner}")
