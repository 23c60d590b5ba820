"""Tests for prp_runner.config.settings."""

import pytest
from pydantic import ValidationError

from prp_runner.config.settings import (
    BranchConfig,
    GitHubConfig,
    LayoutConfig,
    PipelineSettings,
    RunnerConfig,
)
from prp_runner.enums import ApiProvider, ArchivePolicy, BranchIdStrategy, RunnerType
from prp_runner.exceptions import ConfigurationError


class TestDefaults:
    def test_layout_defaults(self):
        layout = LayoutConfig()

        assert layout.task_directory == "PRPs"
        assert layout.done_directory == "PRPs/done"
        assert layout.template_path == ".claude/commands/PRPs/prp-base-execute.md"
        assert layout.prompt_output == "/tmp/prp-implementation-prompt.md"
        assert layout.archive_conflict == ArchivePolicy.FAIL

    def test_pipeline_defaults(self):
        settings = PipelineSettings()

        assert settings.branch.prefix == "implement"
        assert settings.branch.id_strategy == BranchIdStrategy.MONOTONIC
        assert settings.agent.api_provider == ApiProvider.ANTHROPIC
        assert settings.agent.timeout_seconds == 90 * 60
        assert settings.github.base_branch == "main"
        assert settings.runner.runner_type == RunnerType.AUTO


class TestValidation:
    def test_directories_are_normalized(self):
        layout = LayoutConfig(task_directory="tasks/", done_directory=" tasks/done/ ")

        assert layout.task_directory == "tasks"
        assert layout.done_directory == "tasks/done"

    @pytest.mark.parametrize("value", ["", "/", "/abs/PRPs"])
    def test_invalid_directories(self, value):
        with pytest.raises(ValidationError):
            LayoutConfig(task_directory=value)

    @pytest.mark.parametrize("value", ["../elsewhere", "PRPs/../../done", ".."])
    def test_done_directory_outside_workspace(self, value):
        with pytest.raises(ValidationError, match="inside the workspace"):
            LayoutConfig(done_directory=value)

    def test_branch_prefix_with_spaces(self):
        with pytest.raises(ValidationError):
            BranchConfig(prefix="my branch")

    def test_repository_parts(self):
        github = GitHubConfig(repository="octo/repo")

        assert github.owner == "octo"
        assert github.name == "repo"

    @pytest.mark.parametrize("value", ["octo", "octo/", "/repo", "a/b/c"])
    def test_invalid_repository(self, value):
        with pytest.raises(ValidationError):
            GitHubConfig(repository=value)

    def test_repository_unset(self):
        github = GitHubConfig()

        assert github.owner is None
        assert github.name is None

    def test_invalid_runner_size(self):
        with pytest.raises(ValidationError):
            RunnerConfig(runner_size="3vcpu")


class TestFromYaml:
    def test_load_full_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_OAUTH_TOKEN", "oauth-token-value")
        config = tmp_path / "config.yaml"
        config.write_text(
            """
# ${NOT_INTERPOLATED} in comments
layout:
  task_directory: tasks
  done_directory: tasks/done
  archive_conflict: overwrite
branch:
  id_strategy: uuid
agent:
  api_provider: moonshot
  oauth_token: ${TEST_OAUTH_TOKEN}
  timeout_minutes: ${AGENT_TIMEOUT:-30}
github:
  repository: octo/repo
  draft_pr: true
runner:
  org_owners: [octo-org]
"""
        )

        settings = PipelineSettings.from_yaml(str(config))

        assert settings.layout.task_directory == "tasks"
        assert settings.layout.archive_conflict == ArchivePolicy.OVERWRITE
        assert settings.branch.id_strategy == BranchIdStrategy.UUID
        assert settings.agent.api_provider == ApiProvider.MOONSHOT
        assert settings.agent.oauth_token.get_secret_value() == "oauth-token-value"
        assert settings.agent.timeout_minutes == 30
        assert settings.github.draft_pr is True
        assert settings.runner.org_owners == ["octo-org"]

    def test_empty_file_gives_defaults(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("")

        assert PipelineSettings.from_yaml(str(config)).layout.task_directory == "PRPs"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            PipelineSettings.from_yaml(str(tmp_path / "missing.yaml"))

    def test_missing_env_var(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PRP_TEST_UNSET_VAR", raising=False)
        config = tmp_path / "config.yaml"
        config.write_text("github:\n  token: ${PRP_TEST_UNSET_VAR}\n")

        with pytest.raises(ConfigurationError, match="PRP_TEST_UNSET_VAR"):
            PipelineSettings.from_yaml(str(config))

    def test_invalid_yaml(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("layout: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            PipelineSettings.from_yaml(str(config))

    def test_scalar_document(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("just a string\n")

        with pytest.raises(ConfigurationError, match="YAML object"):
            PipelineSettings.from_yaml(str(config))

    def test_invalid_values(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("layout:\n  archive_conflict: merge\n")

        with pytest.raises(ConfigurationError, match="Failed to validate"):
            PipelineSettings.from_yaml(str(config))


class TestLoad:
    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        settings = PipelineSettings.load(tmp_path / "absent.yaml")

        assert settings.layout.done_directory == "PRPs/done"

    def test_no_path(self):
        assert PipelineSettings.load().git.remote == "origin"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PRP_AGENT__MODEL", "custom-model")
        monkeypatch.setenv("PRP_GITHUB__REPOSITORY", "octo/repo")

        settings = PipelineSettings.load()

        assert settings.agent.model == "custom-model"
        assert settings.github.repository == "octo/repo"
