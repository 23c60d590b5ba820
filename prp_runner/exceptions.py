"""Custom exception hierarchy for prp-runner.

This module defines a structured exception hierarchy that lets the CLI
separate expected hard failures (a stale PRP reference, an archive conflict,
a broken template) from unexpected crashes, and report each with a
human-readable cause.

Exception Hierarchy:
    PrpRunnerError (base)
    ├── ConfigurationError
    ├── PreflightError
    ├── TaskReferenceError
    │   └── PrpNotFoundError
    ├── WorkspaceError
    │   └── ArchiveConflictError
    ├── TemplateError
    ├── GitOperationError
    ├── ExternalServiceError
    └── AgentError
        └── AgentTimeoutError

Note that "no PRP reference in the comment" is not an exception at all: the
extractor returns None and the pipeline exits cleanly.

Example Usage:
    >>> from prp_runner.exceptions import PrpNotFoundError
    >>> try:
    ...     task_file = validate_reference(workspace, reference)
    ... except PrpNotFoundError as e:
    ...     print(e.message)
"""

from pathlib import Path


class PrpRunnerError(Exception):
    """Base exception for all prp-runner errors.

    All custom exceptions inherit from this base class, allowing callers to
    catch every prp-runner-specific error with a single except clause.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(PrpRunnerError):
    """Configuration-related errors.

    Raised when configuration files are invalid, unreadable, or contain
    incompatible settings.

    Examples:
        - Invalid YAML syntax
        - Missing required environment variable referenced as ${VAR}
        - Invalid configuration values
    """

    pass


class PreflightError(PrpRunnerError):
    """A preflight check on credentials or API configuration failed."""

    pass


class TaskReferenceError(PrpRunnerError):
    """A PRP reference was extracted but cannot be used.

    Attributes:
        reference: The offending reference as it appeared in the comment
    """

    def __init__(self, message: str, reference: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: The task reference that failed
        """
        self.reference = reference
        super().__init__(message)


class PrpNotFoundError(TaskReferenceError):
    """The referenced PRP file does not exist in the workspace.

    This is a hard failure and is deliberately distinct from "no reference
    found", which is a normal outcome.
    """

    pass


class WorkspaceError(PrpRunnerError):
    """A filesystem operation on the working tree failed.

    Attributes:
        path: Path the operation was acting on, if known
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            path: Path involved in the failed operation
        """
        self.path = Path(path) if path is not None else None
        full_message = message if path is None else f"{message} (path: {path})"
        super().__init__(full_message)
        self.message = message


class ArchiveConflictError(WorkspaceError):
    """The archive destination already holds a file."""

    pass


class TemplateError(PrpRunnerError):
    """Template loading or rendering errors.

    Examples:
        - Prompt template lacks the substitution placeholder
        - Jinja2 template not found or has a syntax error
        - Template references an undefined variable
    """

    pass


class GitOperationError(PrpRunnerError):
    """Git operation errors.

    Raised when branch creation, staging, committing or pushing fails, or the
    workspace is not a Git repository.
    """

    pass


class ExternalServiceError(PrpRunnerError):
    """External service communication errors.

    Raised when a GitHub API call fails.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.message = message
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


# =============================================================================
# Agent Errors
# =============================================================================


class AgentError(PrpRunnerError):
    """The AI coding agent failed to run.

    Attributes:
        agent_command: Executable that was invoked
        exit_code: Process exit code, if the process ran at all
    """

    def __init__(
        self,
        message: str,
        agent_command: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            agent_command: Executable that was invoked
            exit_code: Exit code returned by the agent process
        """
        self.agent_command = agent_command
        self.exit_code = exit_code

        parts = []
        if agent_command:
            parts.append(f"agent: {agent_command}")
        if exit_code is not None:
            parts.append(f"exit code: {exit_code}")

        full_message = f"{message} ({', '.join(parts)})" if parts else message
        super().__init__(full_message)
        self.message = message


class AgentTimeoutError(AgentError):
    """Agent run exceeded the configured timeout.

    Attributes:
        timeout_seconds: The timeout that was exceeded
    """

    def __init__(
        self,
        message: str,
        timeout_seconds: float | None = None,
        agent_command: str | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        if timeout_seconds and "timeout" not in message.lower():
            message = f"{message} (timeout: {timeout_seconds}s)"
        super().__init__(message, agent_command=agent_command)
