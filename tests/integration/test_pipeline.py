"""Tests for the implementation pipeline.

Git operations run against a real repository with a bare remote; the agent
and GitHub are replaced with mocks.
"""

import subprocess
from unittest.mock import AsyncMock, Mock

import pytest
from pydantic import SecretStr

from prp_runner.config.settings import GitHubConfig
from prp_runner.engine.pipeline import ImplementationPipeline, create_github_provider
from prp_runner.exceptions import AgentError, ExternalServiceError, PreflightError
from prp_runner.models.domain import AgentResult, Comment, CommitResult, PullRequest

COMMENT = "Please implement PRPs/test-feature.md"


def git(cwd, *args):
    return subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True).stdout.strip()


@pytest.fixture
def pipeline_settings(settings):
    settings.github = GitHubConfig(token=SecretStr("ghp_test"), repository="octo/repo", max_attempts=1)
    settings.git.push_retry_delay = 0
    return settings


@pytest.fixture
def agent(git_repo):
    """Agent mock that implements the feature by writing a file."""

    async def implement(prompt_path):
        (git_repo / "feature.py").write_text("def feature():\n    return True\n")
        return AgentResult(success=True, output="done")

    mock = Mock()
    mock.run_prompt_file = AsyncMock(side_effect=implement)
    return mock


@pytest.fixture
def github():
    provider = Mock()
    provider.create_pull_request = AsyncMock(
        side_effect=lambda title, body, head, base, draft: PullRequest(
            number=7, title=title, head=head, base=base, url="https://github.com/octo/repo/pull/7", draft=draft
        )
    )
    provider.add_comment = AsyncMock(return_value=Mock(spec=Comment, id=11))
    provider.disconnect = AsyncMock()
    return provider


@pytest.fixture
def pipeline(git_repo, bare_remote, pipeline_settings, agent, github):
    return ImplementationPipeline(git_repo, pipeline_settings, agent=agent, github=github, runner="ubuntu-latest")


class TestImplementationPipeline:
    @pytest.mark.asyncio
    async def test_full_run(self, pipeline, git_repo, bare_remote, agent, github):
        result = await pipeline.run(COMMENT, 123)

        branch = result.resolution.branch_name
        assert result.completed is True
        assert result.commit.has_changes is True
        assert result.pull_request.number == 7

        agent.run_prompt_file.assert_awaited_once_with(result.resolution.prompt_path)
        assert git(bare_remote, "rev-parse", branch) == result.commit.sha
        assert git(git_repo, "log", "-1", "--format=%s") == "feat: implement PRP test-feature"
        assert git(git_repo, "log", "-1", "--format=%an") == "Claude PRP Implementation Bot"

        files = git(git_repo, "show", "--name-only", "--format=", "HEAD").splitlines()
        assert "feature.py" in files
        assert "PRPs/done/test-feature.md" in files

        kwargs = github.create_pull_request.await_args.kwargs
        assert kwargs["title"] == "feat: implement test-feature"
        assert kwargs["head"] == branch
        assert kwargs["base"] == "main"
        assert kwargs["draft"] is False
        assert "**Runner:** ubuntu-latest" in kwargs["body"]

        outputs = result.to_outputs()
        assert outputs["completed"] == "true"
        assert outputs["pr_url"] == "https://github.com/octo/repo/pull/7"

    @pytest.mark.asyncio
    async def test_skips_comment_referencing_pr(self, pipeline, git_repo, agent):
        result = await pipeline.run("Follow-up on PR #12 for PRPs/test-feature.md", 123)

        assert result.skipped_reason is not None
        assert result.resolution.has_prp is False
        agent.run_prompt_file.assert_not_awaited()
        assert (git_repo / "PRPs" / "test-feature.md").exists()

    @pytest.mark.asyncio
    async def test_skip_pr_check(self, pipeline):
        result = await pipeline.run("Follow-up on PR #12 for PRPs/test-feature.md", 123, skip_pr_check=True)

        assert result.completed is True

    @pytest.mark.asyncio
    async def test_no_reference(self, pipeline, agent, github):
        result = await pipeline.run("Thanks!", 123)

        assert result.skipped_reason == "No PRP file path found in comment"
        assert result.to_outputs() == {"has_prp": "false", "has_changes": "false", "completed": "false"}
        agent.run_prompt_file.assert_not_awaited()
        github.create_pull_request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_archive_commit_without_agent_changes(self, pipeline, agent, github):
        agent.run_prompt_file = AsyncMock(return_value=AgentResult(success=True, output="nothing to do"))

        result = await pipeline.run(COMMENT, 123)

        # the archived PRP itself is a change
        assert result.commit.has_changes is True
        assert result.completed is True

    @pytest.mark.asyncio
    async def test_no_changes_skips_push_and_pr(self, pipeline, bare_remote, github):
        pipeline.git.commit_all = Mock(return_value=CommitResult(has_changes=False))
        pipeline.git.push = Mock()

        result = await pipeline.run(COMMENT, 123, notify_issue=True)

        assert result.completed is False
        assert result.to_outputs()["has_changes"] == "false"
        pipeline.git.push.assert_not_called()
        github.create_pull_request.assert_not_awaited()
        _, body = github.add_comment.await_args.args
        assert "without changing any files" in body

    @pytest.mark.asyncio
    async def test_agent_failure_aborts(self, pipeline, agent, github):
        agent.run_prompt_file = AsyncMock(side_effect=AgentError("boom", agent_command="claude", exit_code=1))

        with pytest.raises(AgentError):
            await pipeline.run(COMMENT, 123)

        github.create_pull_request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pull_request_failure_propagates(self, pipeline, github):
        github.create_pull_request = AsyncMock(side_effect=ExternalServiceError("Failed to create pull request"))

        with pytest.raises(ExternalServiceError):
            await pipeline.run(COMMENT, 123)

    @pytest.mark.asyncio
    async def test_notify_issue(self, pipeline, github):
        await pipeline.run(COMMENT, 123, notify_issue=True)

        issue, body = github.add_comment.await_args.args
        assert issue == 123
        assert "https://github.com/octo/repo/pull/7" in body

    @pytest.mark.asyncio
    async def test_close_disconnects(self, pipeline, github):
        await pipeline.close()

        github.disconnect.assert_awaited_once()


class TestCreateGitHubProvider:
    def test_requires_token(self, settings):
        settings.github = GitHubConfig(repository="octo/repo")

        with pytest.raises(PreflightError, match="token"):
            create_github_provider(settings)

    def test_requires_repository(self, settings):
        settings.github = GitHubConfig(token=SecretStr("ghp_test"))

        with pytest.raises(PreflightError, match="repository"):
            create_github_provider(settings)

    def test_builds_provider(self, settings):
        settings.github = GitHubConfig(token=SecretStr("ghp_test"), repository="octo/repo")

        provider = create_github_provider(settings)

        assert provider.owner == "octo"
        assert provider.repo == "repo"
