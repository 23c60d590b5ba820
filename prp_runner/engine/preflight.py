"""Preflight checks run before any agent work starts."""

import re

from prp_runner.config.settings import PipelineSettings
from prp_runner.enums import ApiProvider
from prp_runner.exceptions import PreflightError

TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
MIN_TOKEN_LENGTH = 10


def validate_api_config(provider: str, has_oauth: bool, has_api_key: bool) -> ApiProvider:
    """Check that the secret required by the API provider is present.

    anthropic needs the Claude Code OAuth token; moonshot needs the
    Anthropic-compatible auth token.

    Raises:
        PreflightError: Unknown provider or missing secret
    """
    try:
        api_provider = ApiProvider(provider)
    except ValueError as e:
        raise PreflightError(f"Unknown API provider: {provider}") from e

    if api_provider == ApiProvider.ANTHROPIC and not has_oauth:
        raise PreflightError("claude_oauth_token is required for Anthropic API")
    if api_provider == ApiProvider.MOONSHOT and not has_api_key:
        raise PreflightError("anthropic_auth_token is required for Moonshot API")
    return api_provider


def validate_token(token: str | None, name: str = "Claude OAuth token") -> None:
    """Basic format check for an API token.

    Raises:
        PreflightError: Token missing, malformed, or shorter than 10 characters
    """
    if not token:
        raise PreflightError(f"{name} is required")
    if not TOKEN_PATTERN.match(token):
        raise PreflightError(f"Invalid {name} format")
    if len(token) < MIN_TOKEN_LENGTH:
        raise PreflightError(f"{name} appears to be too short")


def run_preflight(settings: PipelineSettings, require_github: bool = True) -> list[str]:
    """Validate the agent credentials and, optionally, GitHub access settings.

    Returns:
        Human-readable lines describing what was checked

    Raises:
        PreflightError: On the first failed check
    """
    agent = settings.agent
    oauth = agent.oauth_token.get_secret_value() if agent.oauth_token else None
    auth = agent.auth_token.get_secret_value() if agent.auth_token else None

    provider = validate_api_config(str(agent.api_provider), bool(oauth), bool(auth))
    if provider == ApiProvider.ANTHROPIC:
        validate_token(oauth)
    else:
        validate_token(auth, name="Anthropic auth token")
    checks = [f"API configuration validated for: {provider}"]

    if require_github:
        if settings.github.token is None or not settings.github.token.get_secret_value():
            raise PreflightError("GitHub token is required (github.token or PRP_GITHUB__TOKEN)")
        if not settings.github.repository:
            raise PreflightError("GitHub repository is required (github.repository or GITHUB_REPOSITORY)")
        checks.append(f"GitHub repository: {settings.github.repository}")

    return checks
