"""PRP resolution and implementation engine.

The resolver chain (extractor, validator, namer, mover, prompt builder)
turns a comment into an archived PRP and an agent prompt. The pipeline
wraps it with the agent run, commit, push and pull request.
"""

from prp_runner.engine.extractor import extract_task_reference
from prp_runner.engine.mover import archive_task_file, check_archive_destination
from prp_runner.engine.namer import BranchNamer
from prp_runner.engine.prompt_builder import PromptBuilder, render_prompt
from prp_runner.engine.resolver import TaskResolver
from prp_runner.engine.validator import validate_reference

__all__ = [
    "BranchNamer",
    "PromptBuilder",
    "TaskResolver",
    "archive_task_file",
    "check_archive_destination",
    "extract_task_reference",
    "render_prompt",
    "validate_reference",
]
