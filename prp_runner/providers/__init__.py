"""External services used by the pipeline: GitHub and the coding agent."""

from prp_runner.providers.agent import ClaudeCodeAgent
from prp_runner.providers.github_rest import GitHubRestProvider

__all__ = ["ClaudeCodeAgent", "GitHubRestProvider"]
