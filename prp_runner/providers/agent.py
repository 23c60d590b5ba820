"""External coding agent that implements a PRP by running Claude Code as a CLI."""

import os
from pathlib import Path

import structlog

from prp_runner.config.settings import AgentConfig
from prp_runner.enums import ApiProvider
from prp_runner.exceptions import AgentError, AgentTimeoutError, PreflightError
from prp_runner.models.domain import AgentResult
from prp_runner.utils.async_subprocess import run_command
from prp_runner.utils.retry import async_retry

log = structlog.get_logger(__name__)


class ClaudeCodeAgent:
    """Runs the agent CLI in the workspace with the prompt on stdin.

    The agent edits files in place; the pipeline commits whatever it leaves
    behind. Only timeouts are retried: a non-zero exit is reported at once.
    """

    def __init__(self, config: AgentConfig, working_dir: Path, retry_backoff: float = 2.0):
        """Initialize the agent.

        Args:
            config: Agent section of the pipeline settings
            working_dir: Directory the agent runs in (the workspace root)
            retry_backoff: Backoff factor between timed-out attempts
        """
        self.config = config
        self.working_dir = working_dir
        self.retry_backoff = retry_backoff

    def build_command(self) -> list[str]:
        cmd = [self.config.command, "--print", "--model", self.config.model]
        if self.config.allowed_tools:
            cmd.extend(["--allowedTools", self.config.allowed_tools])
        return cmd

    def build_env(self) -> dict[str, str]:
        """Environment for the agent process, with credentials for the API provider.

        Raises:
            PreflightError: If the provider's token is not configured
        """
        env = dict(os.environ)
        if self.config.base_url:
            env["ANTHROPIC_BASE_URL"] = self.config.base_url

        if self.config.api_provider == ApiProvider.ANTHROPIC:
            if self.config.oauth_token is None:
                raise PreflightError("agent.oauth_token is required for the anthropic API provider")
            env["CLAUDE_CODE_OAUTH_TOKEN"] = self.config.oauth_token.get_secret_value()
        else:
            if self.config.auth_token is None:
                raise PreflightError("agent.auth_token is required for the moonshot API provider")
            env["ANTHROPIC_AUTH_TOKEN"] = self.config.auth_token.get_secret_value()
        return env

    async def connect(self) -> None:
        """Check that the agent CLI is on PATH."""
        try:
            _, _, code = await run_command(self.config.command, "--version", check=False, timeout=30)
        except FileNotFoundError as e:
            log.error("agent_cli_not_found", command=self.config.command)
            raise AgentError(f"{self.config.command} CLI not found in PATH", agent_command=self.config.command) from e

        if code == 0:
            log.info("agent_cli_available", command=self.config.command)
        else:
            log.warning("agent_cli_check_failed", command=self.config.command, code=code)

    async def run_once(self, prompt: str) -> AgentResult:
        """Run the agent a single time.

        Raises:
            AgentTimeoutError: If the run exceeded the timeout
            AgentError: If the CLI is missing or exited non-zero
        """
        cmd = self.build_command()
        env = self.build_env()
        timeout = self.config.timeout_seconds
        log.info("agent_run_started", command=cmd[0], model=self.config.model, prompt_length=len(prompt))

        try:
            stdout, stderr, code = await run_command(
                *cmd,
                cwd=self.working_dir,
                check=False,
                timeout=timeout,
                input=prompt,
                env=env,
            )
        except TimeoutError as e:
            raise AgentTimeoutError("Agent run timed out", timeout_seconds=timeout, agent_command=cmd[0]) from e
        except (FileNotFoundError, PermissionError) as e:
            raise AgentError(f"Cannot start agent: {e}", agent_command=cmd[0]) from e

        if code != 0:
            log.error("agent_run_failed", code=code, stderr=stderr[-2000:])
            raise AgentError(stderr.strip() or "Agent exited with an error", agent_command=cmd[0], exit_code=code)

        log.info("agent_run_completed", output_length=len(stdout))
        return AgentResult(success=True, output=stdout)

    async def run(self, prompt: str) -> AgentResult:
        """Run the agent, retrying up to ``max_attempts`` times on timeout."""
        attempts = 0

        @async_retry(
            max_attempts=self.config.max_attempts,
            backoff_factor=self.retry_backoff,
            exceptions=(AgentTimeoutError,),
        )
        async def _attempt() -> AgentResult:
            nonlocal attempts
            attempts += 1
            return await self.run_once(prompt)

        result = await _attempt()
        result.attempts = attempts
        return result

    async def run_prompt_file(self, prompt_path: Path) -> AgentResult:
        try:
            prompt = prompt_path.read_text(encoding="utf-8")
        except OSError as e:
            raise AgentError(f"Cannot read prompt file {prompt_path}: {e}") from e
        return await self.run(prompt)
