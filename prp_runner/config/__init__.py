"""Configuration package for prp-runner."""

from prp_runner.config.settings import (
    AgentConfig,
    BranchConfig,
    GitConfig,
    GitHubConfig,
    LayoutConfig,
    PipelineSettings,
    RunnerConfig,
)

__all__ = [
    "AgentConfig",
    "BranchConfig",
    "GitConfig",
    "GitHubConfig",
    "LayoutConfig",
    "PipelineSettings",
    "RunnerConfig",
]
