"""prp-runner: issue-comment driven PRP implementation pipeline."""

__version__ = "0.3.0"
