"""CLI entry point for prp-runner."""

import os
import sys
from pathlib import Path

import click
import structlog
from pydantic import SecretStr

from prp_runner.cli.discussion import check_bot_status_command
from prp_runner.cli.implement import (
    comment_command,
    commit_command,
    create_pr_command,
    implement_command,
    push_command,
)
from prp_runner.cli.preflight import preflight_command, select_runner_command
from prp_runner.cli.resolve import resolve_command
from prp_runner.config.settings import PipelineSettings
from prp_runner.exceptions import ConfigurationError
from prp_runner.utils.actions import GitHubActions
from prp_runner.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

DEFAULT_CONFIG_PATH = ".github/prp-runner.yaml"


def apply_actions_environment(settings: PipelineSettings, environ: dict[str, str] | None = None) -> None:
    """Fill GitHub settings left unset from the variables GitHub Actions provides."""
    environ = dict(os.environ) if environ is None else environ
    if settings.github.repository is None and environ.get("GITHUB_REPOSITORY"):
        settings.github.repository = environ["GITHUB_REPOSITORY"]
    if settings.github.token is None and environ.get("GITHUB_TOKEN"):
        settings.github.token = SecretStr(environ["GITHUB_TOKEN"])
    if environ.get("GITHUB_SERVER_URL") and "server_url" not in settings.github.model_fields_set:
        settings.github.server_url = environ["GITHUB_SERVER_URL"]


@click.group()
@click.option(
    "--config",
    default=DEFAULT_CONFIG_PATH,
    envvar="PRP_CONFIG",
    show_default=True,
    help="Path to configuration file (optional; defaults apply when missing)",
)
@click.option("--log-level", default="INFO", help="Logging level")
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    envvar="GITHUB_WORKSPACE",
    help="Repository checkout to operate on (defaults to $GITHUB_WORKSPACE or .)",
)
@click.pass_context
def cli(ctx: click.Context, config: str, log_level: str, workspace: Path) -> None:
    """prp-runner: turn PRP references in issue comments into pull requests."""
    configure_logging(log_level)

    workspace = workspace.resolve()
    config_path = Path(config)
    if not config_path.is_absolute():
        config_path = workspace / config_path

    try:
        settings = PipelineSettings.load(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Unexpected error loading configuration: {e}", err=True)
        log.error("config_error_unexpected", exc_info=True)
        sys.exit(1)

    apply_actions_environment(settings)
    log.debug("settings_loaded", config=str(config_path), workspace=str(workspace))

    ctx.obj = {"settings": settings, "workspace": workspace, "actions": GitHubActions()}


cli.add_command(resolve_command)
cli.add_command(implement_command)
cli.add_command(commit_command)
cli.add_command(push_command)
cli.add_command(create_pr_command)
cli.add_command(comment_command)
cli.add_command(check_bot_status_command)
cli.add_command(preflight_command)
cli.add_command(select_runner_command)


if __name__ == "__main__":
    cli()
