"""Confirm that an extracted PRP reference points at a real file."""

from pathlib import Path

import structlog

from prp_runner.exceptions import PrpNotFoundError, TaskReferenceError
from prp_runner.models.domain import TaskFile, TaskReference

log = structlog.get_logger(__name__)


def validate_reference(workspace: Path, reference: TaskReference) -> TaskFile:
    """Resolve a reference inside the workspace and check that the file exists.

    Args:
        workspace: Root of the working tree
        reference: Reference extracted from a comment

    Returns:
        TaskFile pointing at the absolute file path

    Raises:
        TaskReferenceError: If the reference escapes the workspace root
        PrpNotFoundError: If no regular file exists at the reference
    """
    root = workspace.resolve()
    candidate = (root / reference.path).resolve()

    if not candidate.is_relative_to(root):
        raise TaskReferenceError(
            f"PRP reference points outside the workspace: {reference.path}",
            reference=reference.path,
        )

    if not candidate.is_file():
        log.error("prp_file_missing", prp_path=reference.path, workspace=str(root))
        raise PrpNotFoundError(f"PRP file does not exist: {reference.path}", reference=reference.path)

    log.debug("prp_file_validated", prp_path=reference.path)
    return TaskFile(reference=reference, path=candidate)
