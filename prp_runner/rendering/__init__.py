"""Template rendering for commit messages, pull request bodies and issue comments.

Templates live in ``prp_runner/templates`` and are rendered by the sandboxed
engine in ``engine.py``.

Key Exports:
    SecureTemplateEngine: Low-level secure Jinja2 rendering engine.
    MessageRenderer: High-level API for the pipeline's messages.
    MessageContext: Pydantic model validating the template variables.

Example:
    >>> from prp_runner.rendering import MessageContext, MessageRenderer
    >>> renderer = MessageRenderer()
    >>> context = MessageContext(
    ...     prp_name="test-feature",
    ...     prp_path="PRPs/test-feature.md",
    ...     archived_path="PRPs/done/test-feature.md",
    ...     branch_name="implement/test-feature-1718000000",
    ...     issue_number=123,
    ... )
    >>> print(renderer.commit_message(context))
"""

from pathlib import Path

from pydantic import BaseModel, Field

from prp_runner.rendering.engine import SecureTemplateEngine

__all__ = [
    "MessageContext",
    "MessageRenderer",
    "SecureTemplateEngine",
]


class MessageContext(BaseModel):
    """Variables available to the message templates."""

    prp_name: str
    prp_path: str
    archived_path: str
    branch_name: str
    issue_number: int | None = None
    api_provider: str = "anthropic"
    model: str = ""
    runner: str | None = None
    timeout_minutes: float = 90
    allowed_tools: str = ""
    repository: str | None = None
    server_url: str = "https://github.com"
    pr_url: str | None = None
    has_changes: bool = Field(default=False)


class MessageRenderer:
    """Renders the pipeline's commit message, PR body and status comment.

    Attributes:
        engine: The underlying SecureTemplateEngine instance.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        self.engine = SecureTemplateEngine(template_dir=template_dir)

    def _render(self, template_name: str, context: MessageContext) -> str:
        # None values stay in the context so {% if %} tests work under StrictUndefined
        return self.engine.render(template_name, context.model_dump(mode="python"))

    def commit_message(self, context: MessageContext) -> str:
        return self._render("commit_message.md.j2", context).strip() + "\n"

    def pull_request_title(self, context: MessageContext) -> str:
        return f"feat: implement {context.prp_name}"

    def pull_request_body(self, context: MessageContext) -> str:
        return self._render("pull_request.md.j2", context)

    def issue_comment(self, context: MessageContext) -> str:
        return self._render("issue_comment.md.j2", context).strip()
