"""Build agent prompts by substituting a path or context into a template.

Prompt templates are plain markdown files (Claude Code slash-command files)
that contain the literal token ``$ARGUMENTS``. Substitution is textual: every
occurrence of the token is replaced and no other character changes. A
template without the token is rejected instead of silently producing a
prompt that never mentions the PRP.
"""

from pathlib import Path

import structlog

from prp_runner.exceptions import TemplateError, WorkspaceError

log = structlog.get_logger(__name__)

PLACEHOLDER = "$ARGUMENTS"
FALLBACK_IMPLEMENT_TEMPLATE = f"Please implement the PRP located at: {PLACEHOLDER}\n"


def render_prompt(template: str, value: str, placeholder: str = PLACEHOLDER) -> str:
    """Replace every placeholder occurrence in a template.

    Raises:
        TemplateError: If the template does not contain the placeholder
    """
    if placeholder not in template:
        raise TemplateError(f"Prompt template does not contain the {placeholder} placeholder")
    return template.replace(placeholder, value)


class PromptBuilder:
    """Loads a prompt template from the workspace and writes rendered prompts.

    Attributes:
        template_path: Template location; relative paths are resolved
            against the workspace
        fallback: Template used when the file is absent, or None to make a
            missing template a hard failure
    """

    def __init__(
        self,
        workspace: Path,
        template_path: str | Path,
        fallback: str | None = FALLBACK_IMPLEMENT_TEMPLATE,
    ) -> None:
        self.workspace = workspace
        path = Path(template_path)
        self.template_path = path if path.is_absolute() else workspace / path
        self.fallback = fallback

    def load_template(self) -> str:
        if self.template_path.is_file():
            try:
                return self.template_path.read_text(encoding="utf-8")
            except OSError as e:
                raise TemplateError(f"Cannot read prompt template {self.template_path}: {e}") from e

        if self.fallback is None:
            raise TemplateError(f"Prompt template not found: {self.template_path}")

        log.warning("prompt_template_missing", template=str(self.template_path), using="fallback")
        return self.fallback

    def build(self, value: str) -> str:
        return render_prompt(self.load_template(), value)

    def write(self, value: str, output_path: str | Path) -> Path:
        """Render the prompt and write it to the scratch location.

        Args:
            value: Text substituted for the placeholder (an archived PRP path)
            output_path: Destination file; relative paths resolve against the workspace

        Returns:
            Path of the written prompt file
        """
        return self.save(self.build(value), output_path)

    def save(self, prompt: str, output_path: str | Path) -> Path:
        destination = Path(output_path)
        if not destination.is_absolute():
            destination = self.workspace / destination

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(prompt, encoding="utf-8")
        except OSError as e:
            raise WorkspaceError(f"Cannot write prompt file: {e}", path=destination) from e

        log.info("prompt_written", prompt_path=str(destination), length=len(prompt))
        return destination
