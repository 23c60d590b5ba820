"""GitHub Actions integration: step outputs, annotations and step summaries.

Outside of Actions (no ``GITHUB_OUTPUT`` in the environment) outputs are
printed as ``name=value`` lines so the commands stay usable from a shell.
"""

import os
import uuid
from collections.abc import Mapping
from pathlib import Path

import click


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


class GitHubActions:
    """Handle GitHub Actions environment interactions.

    Attributes:
        output_file: Path from $GITHUB_OUTPUT, or None when not running in Actions
        summary_file: Path from $GITHUB_STEP_SUMMARY, or None
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        environ = os.environ if environ is None else environ
        output = environ.get("GITHUB_OUTPUT")
        summary = environ.get("GITHUB_STEP_SUMMARY")
        self.output_file = Path(output) if output else None
        self.summary_file = Path(summary) if summary else None

    @property
    def enabled(self) -> bool:
        return self.output_file is not None

    def write_output(self, name: str, value: str) -> None:
        """Write to $GITHUB_OUTPUT for subsequent steps.

        Multi-line values use the heredoc form with a random delimiter.
        """
        if self.output_file is None:
            click.echo(f"{name}={value}")
            return

        with open(self.output_file, "a", encoding="utf-8") as f:
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                f.write(f"{name}={value}\n")

    def write_outputs(self, outputs: Mapping[str, str]) -> None:
        for name, value in outputs.items():
            self.write_output(name, value)

    def write_step_summary(self, text: str) -> None:
        """Append markdown to $GITHUB_STEP_SUMMARY, if available."""
        if self.summary_file is None:
            return
        with open(self.summary_file, "a", encoding="utf-8") as f:
            f.write(text.rstrip("\n") + "\n")

    def _annotate(self, level: str, message: str, title: str | None) -> None:
        props = f" title={_escape_property(title)}" if title else ""
        click.echo(f"::{level}{props}::{_escape_data(message)}")

    def notice(self, message: str, title: str | None = None) -> None:
        self._annotate("notice", message, title)

    def warning(self, message: str, title: str | None = None) -> None:
        self._annotate("warning", message, title)

    def error(self, message: str, title: str | None = None) -> None:
        self._annotate("error", message, title)
