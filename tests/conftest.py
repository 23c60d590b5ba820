"""Pytest configuration and shared fixtures."""

import subprocess
from datetime import UTC, datetime
from pathlib import Path

import pytest
import structlog

from prp_runner.config.settings import LayoutConfig, PipelineSettings
from prp_runner.models.domain import Comment, Issue

PRP_CONTENT = "# Test Feature\n\nImplement the test feature.\n"
EXECUTE_TEMPLATE = "# Execute PRP\n\nRead the PRP at $ARGUMENTS and implement it.\n"


def git(cwd: Path, *args: str) -> str:
    """Run a git command in a test repository and return stdout."""
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout.strip()


@pytest.fixture(autouse=True)
def clean_actions_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests independent of the GitHub Actions environment they may run in."""
    for name in (
        "GITHUB_OUTPUT",
        "GITHUB_STEP_SUMMARY",
        "GITHUB_REPOSITORY",
        "GITHUB_REPOSITORY_OWNER",
        "GITHUB_TOKEN",
        "GITHUB_SERVER_URL",
        "GITHUB_WORKSPACE",
        "COMMENT_BODY",
        "PRP_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging calls, which bind the current sys.stderr."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Plain working tree with a pending PRP and an execute template."""
    root = tmp_path / "workspace"
    (root / "PRPs").mkdir(parents=True)
    (root / "PRPs" / "test-feature.md").write_text(PRP_CONTENT)
    template = root / ".claude" / "commands" / "PRPs" / "prp-base-execute.md"
    template.parent.mkdir(parents=True)
    template.write_text(EXECUTE_TEMPLATE)
    return root


@pytest.fixture
def git_repo(workspace: Path) -> Path:
    """The workspace fixture initialized as a Git repository with one commit on main."""
    git(workspace, "init", "--initial-branch=main")
    git(workspace, "config", "user.email", "test@example.com")
    git(workspace, "config", "user.name", "Test User")
    git(workspace, "config", "commit.gpgsign", "false")
    git(workspace, "add", "-A")
    git(workspace, "commit", "-m", "Initial commit")
    return workspace


@pytest.fixture
def bare_remote(tmp_path: Path, git_repo: Path) -> Path:
    """A bare repository registered as ``origin`` of git_repo."""
    remote = tmp_path / "remote.git"
    subprocess.run(["git", "init", "--bare", str(remote)], check=True, capture_output=True)
    git(git_repo, "remote", "add", "origin", str(remote))
    git(git_repo, "push", "origin", "main")
    return remote


@pytest.fixture
def settings(tmp_path: Path) -> PipelineSettings:
    """Default settings with scratch prompt files kept inside tmp_path."""
    return PipelineSettings(
        layout=LayoutConfig(
            prompt_output=str(tmp_path / "prp-implementation-prompt.md"),
            dynamic_prompt_output=str(tmp_path / "dynamic-prompt.md"),
        )
    )


@pytest.fixture
def sample_issue() -> Issue:
    return Issue(
        number=123,
        title="Add test feature",
        body="We need the test feature.",
        url="https://github.com/octo/repo/issues/123",
    )


@pytest.fixture
def sample_comments() -> list[Comment]:
    return [
        Comment(
            id=1,
            body="Could the bot draft a PRP for this?",
            author="developer",
            created_at=datetime(2024, 6, 1, 12, 0, tzinfo=UTC),
        ),
        Comment(
            id=2,
            body="Please include error handling.",
            author="reviewer",
            created_at=datetime(2024, 6, 1, 13, 30, tzinfo=UTC),
        ),
    ]
