"""Sandboxed Jinja2 rendering for commit messages and pull request bodies.

Comment text and PRP names end up in the render context, so templates are
evaluated in a ``SandboxedEnvironment``. ``StrictUndefined`` turns a
misspelled variable into an error instead of an empty string, and
template names are confined to the template directory.

Example:
    >>> engine = SecureTemplateEngine()
    >>> body = engine.render("pull_request.md.j2", context)
"""

from pathlib import Path
from typing import Any, cast

from jinja2 import FileSystemLoader, StrictUndefined, TemplateError as JinjaTemplateError, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment

from prp_runner.exceptions import TemplateError

PACKAGED_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"


def split_list(value: str, separator: str = ",") -> list[str]:
    """Split a separated string into stripped, non-empty items."""
    return [item.strip() for item in str(value).split(separator) if item.strip()]


class SecureTemplateEngine:
    """Renders ``.j2`` files from a single directory.

    Output is markdown or plain text, so autoescaping is off. Block tags
    are trimmed and the final newline of each template is kept.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        """
        Raises:
            ValueError: ``template_dir`` is missing or not a directory
        """
        root = (template_dir or PACKAGED_TEMPLATES).resolve()
        if not root.is_dir():
            problem = "is not a directory" if root.exists() else "does not exist"
            raise ValueError(f"Template directory {problem}: {root}")
        self.template_dir = root

        self.env = SandboxedEnvironment(
            loader=FileSystemLoader(str(root)),
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["split_list"] = split_list

    def _locate(self, name: str) -> Path:
        candidate = (self.template_dir / name).resolve()
        if not candidate.is_relative_to(self.template_dir):
            raise TemplateError(f"Template name escapes {self.template_dir}: {name}")
        if not candidate.is_file():
            raise TemplateError(f"Template not found: {name}")
        return candidate

    def render(self, name: str, context: dict[str, Any]) -> str:
        """Render ``name`` with ``context``.

        Raises:
            TemplateError: Bad name, missing file, syntax error, undefined
                variable, or an operation the sandbox refuses
        """
        self._locate(name)
        try:
            return cast(str, self.env.get_template(name).render(**context))
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {name}") from e
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render {name}: {e}") from e
