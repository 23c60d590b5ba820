"""Archive a PRP file into the done directory.

The move is a rename within the working tree. It is not atomic across a
crash: recovering from a run that died between the move and the commit is
left to the CI orchestrator re-running from a clean checkout.
"""

import shutil
from pathlib import Path

import structlog

from prp_runner.enums import ArchivePolicy, TaskState
from prp_runner.exceptions import ArchiveConflictError, WorkspaceError
from prp_runner.models.domain import TaskFile

log = structlog.get_logger(__name__)


def archive_destination(workspace: Path, done_directory: str, identifier: str) -> Path:
    return workspace.resolve() / done_directory / f"{identifier}.md"


def check_archive_destination(
    workspace: Path,
    task_file: TaskFile,
    done_directory: str = "PRPs/done",
    policy: ArchivePolicy = ArchivePolicy.FAIL,
) -> Path:
    """Return where ``task_file`` would be archived, refusing conflicts up front.

    Raises:
        ArchiveConflictError: If the destination exists under the FAIL policy,
            or source and destination are the same file
    """
    identifier = task_file.reference.identifier
    destination = archive_destination(workspace, done_directory, identifier)

    if task_file.path.resolve() == destination:
        raise ArchiveConflictError(f"PRP is already archived: {task_file.reference.path}", path=destination)

    if destination.exists() and policy == ArchivePolicy.FAIL:
        raise ArchiveConflictError(
            f"Archived PRP already exists, refusing to overwrite: {done_directory}/{identifier}.md",
            path=destination,
        )
    return destination


def archive_task_file(
    workspace: Path,
    task_file: TaskFile,
    done_directory: str = "PRPs/done",
    policy: ArchivePolicy = ArchivePolicy.FAIL,
) -> Path:
    """Move a pending PRP to ``<done_directory>/<identifier>.md``.

    Args:
        workspace: Root of the working tree
        task_file: Validated PRP file
        done_directory: Archive directory relative to the workspace
        policy: FAIL raises when the destination exists, OVERWRITE replaces it

    Returns:
        Absolute path of the archived file

    Raises:
        ArchiveConflictError: If the destination exists under the FAIL policy,
            or source and destination are the same file
        WorkspaceError: If creating the directory or moving the file fails
    """
    source = task_file.path
    destination = check_archive_destination(workspace, task_file, done_directory, policy)
    if destination.exists():
        log.warning("prp_archive_overwrite", destination=str(destination))

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"Cannot create archive directory: {e}", path=destination.parent) from e

    if not source.is_file():
        raise WorkspaceError("PRP file disappeared before it could be archived", path=source)

    try:
        # rename replaces an existing destination in one step
        shutil.move(str(source), str(destination))
    except OSError as e:
        raise WorkspaceError(f"Cannot move PRP to archive: {e}", path=source) from e

    task_file.path = destination
    task_file.state = TaskState.ARCHIVED
    log.info("prp_archived", source=task_file.reference.path, destination=str(destination))
    return destination
