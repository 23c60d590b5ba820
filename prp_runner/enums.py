"""Enumerations for prp-runner configuration and outcomes."""

from enum import Enum


class ApiProvider(str, Enum):
    """Backends the coding agent can authenticate against.

    - anthropic: Anthropic API using a Claude Code OAuth token
    - moonshot: Anthropic-compatible endpoint using an auth token and base URL
    """

    ANTHROPIC = "anthropic"
    MOONSHOT = "moonshot"

    def __str__(self) -> str:
        return self.value


class BranchIdStrategy(str, Enum):
    """How the unique suffix of an implementation branch name is generated."""

    TIMESTAMP = "timestamp"  # Unix seconds, collides within one second
    MONOTONIC = "monotonic"  # nanoseconds, strictly increasing per process
    UUID = "uuid"  # random hex

    def __str__(self) -> str:
        return self.value


class ArchivePolicy(str, Enum):
    """What the mover does when the archive destination already exists."""

    FAIL = "fail"
    OVERWRITE = "overwrite"

    def __str__(self) -> str:
        return self.value


class RunnerType(str, Enum):
    """CI runner families that an implementation job can be scheduled on."""

    AUTO = "auto"
    ORG = "org"
    PERSONAL = "personal"
    DEFAULT = "default"

    def __str__(self) -> str:
        return self.value


class TaskState(str, Enum):
    """Lifecycle of a PRP file in the working tree."""

    PENDING = "pending"
    ARCHIVED = "archived"

    def __str__(self) -> str:
        return self.value
