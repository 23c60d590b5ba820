"""Tests for prp_runner/providers/agent.py - Claude Code agent invocation."""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import SecretStr

from prp_runner.config.settings import AgentConfig
from prp_runner.enums import ApiProvider
from prp_runner.exceptions import AgentError, AgentTimeoutError, PreflightError
from prp_runner.providers.agent import ClaudeCodeAgent

RUN_COMMAND = "prp_runner.providers.agent.run_command"


@pytest.fixture
def config():
    return AgentConfig(oauth_token=SecretStr("oauth-token-123"), timeout_minutes=1, max_attempts=3)


@pytest.fixture
def agent(config, tmp_path):
    return ClaudeCodeAgent(config, tmp_path, retry_backoff=0)


class TestBuildCommand:
    def test_default_command(self, agent):
        cmd = agent.build_command()

        assert cmd[:4] == ["claude", "--print", "--model", "claude-sonnet-4-20250514"]
        assert cmd[4] == "--allowedTools"
        assert cmd[5].startswith("Bash,Read,Write")

    def test_no_allowed_tools(self, config, tmp_path):
        agent = ClaudeCodeAgent(config.model_copy(update={"allowed_tools": ""}), tmp_path)

        assert "--allowedTools" not in agent.build_command()


class TestBuildEnv:
    def test_anthropic_token(self, agent):
        env = agent.build_env()

        assert env["CLAUDE_CODE_OAUTH_TOKEN"] == "oauth-token-123"

    def test_moonshot_token_and_base_url(self, tmp_path):
        config = AgentConfig(
            api_provider=ApiProvider.MOONSHOT,
            auth_token=SecretStr("moonshot-token"),
            base_url="https://api.moonshot.ai/anthropic",
        )

        env = ClaudeCodeAgent(config, tmp_path).build_env()

        assert env["ANTHROPIC_AUTH_TOKEN"] == "moonshot-token"
        assert env["ANTHROPIC_BASE_URL"] == "https://api.moonshot.ai/anthropic"

    @pytest.mark.parametrize("provider", [ApiProvider.ANTHROPIC, ApiProvider.MOONSHOT])
    def test_missing_token(self, provider, tmp_path):
        with pytest.raises(PreflightError):
            ClaudeCodeAgent(AgentConfig(api_provider=provider), tmp_path).build_env()


class TestRun:
    @pytest.mark.asyncio
    async def test_success(self, agent, tmp_path):
        with patch(RUN_COMMAND, new_callable=AsyncMock, return_value=("done", "", 0)) as mock_run:
            result = await agent.run("Implement PRPs/done/x.md")

        assert result.success is True
        assert result.output == "done"
        assert result.attempts == 1
        kwargs = mock_run.call_args.kwargs
        assert kwargs["input"] == "Implement PRPs/done/x.md"
        assert kwargs["cwd"] == tmp_path
        assert kwargs["timeout"] == 60
        assert kwargs["check"] is False

    @pytest.mark.asyncio
    async def test_non_zero_exit_not_retried(self, agent):
        with patch(RUN_COMMAND, new_callable=AsyncMock, return_value=("", "boom", 2)) as mock_run:
            with pytest.raises(AgentError) as exc_info:
                await agent.run("prompt")

        assert mock_run.await_count == 1
        assert exc_info.value.exit_code == 2
        assert exc_info.value.message == "boom"

    @pytest.mark.asyncio
    async def test_timeout_retried_then_succeeds(self, agent):
        outcomes = [TimeoutError(), ("ok", "", 0)]
        with patch(RUN_COMMAND, new_callable=AsyncMock, side_effect=outcomes):
            result = await agent.run("prompt")

        assert result.success is True
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_timeout_exhausted(self, agent):
        with patch(RUN_COMMAND, new_callable=AsyncMock, side_effect=TimeoutError()) as mock_run:
            with pytest.raises(AgentTimeoutError) as exc_info:
                await agent.run("prompt")

        assert mock_run.await_count == 3
        assert exc_info.value.timeout_seconds == 60

    @pytest.mark.asyncio
    async def test_missing_cli(self, agent):
        with patch(RUN_COMMAND, new_callable=AsyncMock, side_effect=FileNotFoundError("claude")):
            with pytest.raises(AgentError, match="Cannot start agent"):
                await agent.run_once("prompt")

    @pytest.mark.asyncio
    async def test_run_prompt_file(self, agent, tmp_path):
        prompt = tmp_path / "prompt.md"
        prompt.write_text("Implement PRPs/done/x.md")

        with patch(RUN_COMMAND, new_callable=AsyncMock, return_value=("ok", "", 0)) as mock_run:
            await agent.run_prompt_file(prompt)

        assert mock_run.call_args.kwargs["input"] == "Implement PRPs/done/x.md"

    @pytest.mark.asyncio
    async def test_unreadable_prompt_file(self, agent, tmp_path):
        with pytest.raises(AgentError, match="Cannot read prompt file"):
            await agent.run_prompt_file(tmp_path / "missing.md")


class TestConnect:
    @pytest.mark.asyncio
    async def test_cli_available(self, agent):
        with patch(RUN_COMMAND, new_callable=AsyncMock, return_value=("1.0.0", "", 0)) as mock_run:
            await agent.connect()

        assert mock_run.call_args.args == ("claude", "--version")

    @pytest.mark.asyncio
    async def test_cli_missing(self, agent):
        with patch(RUN_COMMAND, new_callable=AsyncMock, side_effect=FileNotFoundError()):
            with pytest.raises(AgentError, match="not found in PATH"):
                await agent.connect()
