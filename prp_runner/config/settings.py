"""
Configuration system using Pydantic for type-safe settings management.

This module provides configuration classes for every stage of the PRP
pipeline: working tree layout, branch naming, git identity, the coding
agent, GitHub access and runner selection. All sections have defaults that
reproduce the stock GitHub Actions behaviour, so a configuration file is
optional; environment variables prefixed with ``PRP_`` override fields
(``PRP_GITHUB__TOKEN``, ``PRP_AGENT__MODEL``...).
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prp_runner.enums import ApiProvider, ArchivePolicy, BranchIdStrategy, RunnerType
from prp_runner.exceptions import ConfigurationError

ENV_REFERENCE = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


class LayoutConfig(BaseModel):
    """Working tree layout: where PRPs live and where prompts are written."""

    task_directory: str = Field(default="PRPs", description="Directory holding pending PRP files")
    done_directory: str = Field(default="PRPs/done", description="Directory archived PRP files are moved to")
    template_path: str = Field(
        default=".claude/commands/PRPs/prp-base-execute.md",
        description="Prompt template used to implement a PRP",
    )
    create_template_path: str = Field(
        default=".claude/commands/PRPs/prp-base-create.md",
        description="Prompt template used to draft a PRP from an issue discussion",
    )
    prompt_output: str = Field(
        default="/tmp/prp-implementation-prompt.md", description="Scratch file for the implementation prompt"
    )
    dynamic_prompt_output: str = Field(
        default="/tmp/dynamic-prompt.md", description="Scratch file for the PRP-creation prompt"
    )
    archive_conflict: ArchivePolicy = Field(
        default=ArchivePolicy.FAIL, description="Behaviour when the archive destination already exists"
    )

    @field_validator("task_directory", "done_directory")
    @classmethod
    def validate_relative(cls, v: str) -> str:
        """Directories are relative to the workspace root."""
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("Directory must not be empty")
        if Path(v).is_absolute():
            raise ValueError(f"Directory must be relative to the workspace: {v}")
        if ".." in Path(v).parts:
            raise ValueError(f"Directory must stay inside the workspace: {v}")
        return v


class BranchConfig(BaseModel):
    """Implementation branch naming."""

    prefix: str = Field(default="implement", description="Branch name prefix")
    id_strategy: BranchIdStrategy = Field(
        default=BranchIdStrategy.MONOTONIC, description="Generator for the unique branch suffix"
    )

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        v = v.strip().strip("/")
        if not v or " " in v:
            raise ValueError("Branch prefix must be a non-empty string without spaces")
        return v


class GitConfig(BaseModel):
    """Git identity and push behaviour."""

    user_name: str = Field(default="Claude PRP Implementation Bot", description="Committer name")
    user_email: str = Field(default="claude-prp-bot@users.noreply.github.com", description="Committer email")
    remote: str = Field(default="origin", description="Remote to push implementation branches to")
    push_attempts: int = Field(default=3, ge=1, le=10, description="Maximum push attempts")
    push_retry_delay: float = Field(default=5.0, ge=0.0, description="Seconds to wait between push attempts")


class AgentConfig(BaseModel):
    """AI coding agent invocation.

    Tokens support ``${ENV}`` interpolation in the YAML file:
    - oauth_token: "${CLAUDE_CODE_OAUTH_TOKEN}"
    - auth_token: "${ANTHROPIC_AUTH_TOKEN}"
    """

    api_provider: ApiProvider = Field(default=ApiProvider.ANTHROPIC, description="API backend for the agent")
    command: str = Field(default="claude", description="Agent CLI executable")
    model: str = Field(default="claude-sonnet-4-20250514", description="Model identifier")
    allowed_tools: str = Field(
        default=(
            "Bash,Read,Write,Edit,Glob,Grep,Task,LS,MultiEdit,NotebookRead,"
            "NotebookEdit,WebFetch,WebSearch,TodoWrite"
        ),
        description="Comma-separated tools the agent may use",
    )
    timeout_minutes: float = Field(default=90, gt=0, description="Timeout for a single agent run")
    max_attempts: int = Field(default=3, ge=1, le=10, description="Attempts when the agent times out")
    base_url: str | None = Field(default=None, description="ANTHROPIC_BASE_URL for compatible endpoints")
    oauth_token: SecretStr | None = Field(default=None, description="Claude Code OAuth token")
    auth_token: SecretStr | None = Field(default=None, description="Anthropic-compatible API token")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_minutes * 60


class GitHubConfig(BaseModel):
    """GitHub API access for pull requests and comments."""

    token: SecretStr | None = Field(default=None, description="Bot token used for API operations")
    repository: str | None = Field(default=None, description="Repository in owner/name form")
    base_url: str = Field(default="https://api.github.com", description="API base URL")
    server_url: str = Field(default="https://github.com", description="Web URL used for links")
    base_branch: str = Field(default="main", description="Pull request base branch")
    draft_pr: bool = Field(default=False, description="Open pull requests as drafts")
    bot_username: str = Field(default="Claude AI Bot", description="Login used to detect the bot's own comments")
    max_attempts: int = Field(default=3, ge=1, le=10, description="Attempts for pull request creation")

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str | None) -> str | None:
        if v is None:
            return v
        owner, sep, name = v.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Repository must be in owner/name form, got: {v}")
        return f"{owner}/{name}"

    @property
    def owner(self) -> str | None:
        return self.repository.split("/")[0] if self.repository else None

    @property
    def name(self) -> str | None:
        return self.repository.split("/")[1] if self.repository else None


class RunnerConfig(BaseModel):
    """CI runner selection."""

    runner_type: RunnerType = Field(default=RunnerType.AUTO, description="Runner family, or auto-detect")
    runner_size: str = Field(default="2vcpu", description="Runner size: 2vcpu, 4vcpu, 8vcpu or 16vcpu")
    org_owners: list[str] = Field(default_factory=list, description="Owners routed to organization runners")
    personal_owners: list[str] = Field(default_factory=list, description="Owners routed to personal runners")

    @field_validator("runner_size")
    @classmethod
    def validate_size(cls, v: str) -> str:
        if v not in ("2vcpu", "4vcpu", "8vcpu", "16vcpu"):
            raise ValueError(f"Unsupported runner size: {v}")
        return v


class PipelineSettings(BaseSettings):
    """Main prp-runner settings.

    This class combines all configuration sections and provides methods
    for loading from YAML files with environment variable interpolation.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRP_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    branch: BranchConfig = Field(default_factory=BranchConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> PipelineSettings:
        """Load settings from a YAML file when it exists, else from defaults and environment.

        Args:
            config_path: Optional path to a YAML configuration file

        Returns:
            PipelineSettings instance

        Raises:
            ConfigurationError: If the file exists but is invalid
        """
        if config_path is not None and Path(config_path).exists():
            return cls.from_yaml(str(config_path))
        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str) -> PipelineSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            PipelineSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except TypeError as e:
            raise ConfigurationError(f"Missing or invalid configuration fields: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Expand ${VAR} and ${VAR:-default} outside YAML comment lines.

        Raises:
            ValueError: A ${VAR} without default names an unset variable
        """

        def expand(match: re.Match[str]) -> str:
            name, default = match.group(1), match.group(2)
            value = os.environ.get(name, default)
            if value is None:
                raise ValueError(f"Environment variable {name} is not set")
            return value

        return "\n".join(
            line if line.lstrip().startswith("#") else ENV_REFERENCE.sub(expand, line) for line in content.split("\n")
        )
