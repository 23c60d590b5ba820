"""Extract a PRP reference from free-form comment text."""

import re

import structlog

from prp_runner.models.domain import TaskReference

log = structlog.get_logger(__name__)


def build_reference_pattern(task_directory: str = "PRPs") -> re.Pattern[str]:
    """Compile the reference pattern for a task directory.

    The pattern is ``<task_directory>/`` followed by one or more characters
    that are neither whitespace nor ``)``, ending in ``.md``. Excluding ``)``
    lets markdown links such as ``[design](PRPs/feature.md)`` resolve to the
    bare path.
    """
    directory = task_directory.strip().rstrip("/")
    return re.compile(re.escape(directory) + r"/[^\s)]+\.md")


def extract_task_reference(comment_body: str, task_directory: str = "PRPs") -> TaskReference | None:
    """Return the first PRP reference in a comment, or None.

    No match is an expected outcome (most comments do not reference a PRP),
    so it is reported as None rather than raised.

    Args:
        comment_body: Raw comment text
        task_directory: Directory prefix that PRP paths start with

    Returns:
        TaskReference for the first match, or None
    """
    if not comment_body:
        return None

    match = build_reference_pattern(task_directory).search(comment_body)
    if match is None:
        log.info("prp_reference_not_found", comment_length=len(comment_body))
        return None

    reference = TaskReference(match.group(0))
    log.info("prp_reference_found", prp_path=reference.path)
    return reference
