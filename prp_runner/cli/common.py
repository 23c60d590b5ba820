"""Helpers shared by the CLI commands."""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
import structlog

from prp_runner.config.settings import PipelineSettings
from prp_runner.exceptions import PrpRunnerError
from prp_runner.utils.actions import GitHubActions

log = structlog.get_logger(__name__)


@contextmanager
def command_errors(command: str, actions: GitHubActions) -> Iterator[None]:
    """Report failures of a command and exit with the matching status.

    PrpRunnerError exits 1 with its message and an ``::error::`` annotation,
    KeyboardInterrupt exits 130, anything else exits 1 with the traceback
    logged.
    """
    try:
        yield
    except PrpRunnerError as e:
        actions.error(str(e), title=type(e).__name__)
        click.echo(f"Error: {e}", err=True)
        log.debug(f"{command}_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        actions.error(f"Unexpected error: {e}")
        click.echo(f"Unexpected error: {e}", err=True)
        log.error(f"{command}_unexpected", exc_info=True)
        sys.exit(1)


def get_settings(ctx: click.Context) -> PipelineSettings:
    return ctx.obj["settings"]


def get_workspace(ctx: click.Context) -> Path:
    return ctx.obj["workspace"]


def get_actions(ctx: click.Context) -> GitHubActions:
    return ctx.obj["actions"]
