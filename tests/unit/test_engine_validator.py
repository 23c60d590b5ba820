"""Tests for prp_runner.engine.validator."""

import pytest

from prp_runner.engine.validator import validate_reference
from prp_runner.enums import TaskState
from prp_runner.exceptions import PrpNotFoundError, TaskReferenceError
from prp_runner.models.domain import TaskReference


class TestValidateReference:
    def test_existing_file(self, workspace):
        task_file = validate_reference(workspace, TaskReference("PRPs/test-feature.md"))

        assert task_file.path == (workspace / "PRPs" / "test-feature.md").resolve()
        assert task_file.state == TaskState.PENDING
        assert task_file.reference.path == "PRPs/test-feature.md"

    def test_missing_file_is_hard_failure(self, workspace):
        with pytest.raises(PrpNotFoundError) as exc_info:
            validate_reference(workspace, TaskReference("PRPs/missing.md"))

        assert exc_info.value.reference == "PRPs/missing.md"
        assert "PRPs/missing.md" in exc_info.value.message

    def test_directory_is_not_a_prp(self, workspace):
        (workspace / "PRPs" / "folder.md").mkdir()

        with pytest.raises(PrpNotFoundError):
            validate_reference(workspace, TaskReference("PRPs/folder.md"))

    def test_reference_escaping_workspace(self, workspace):
        (workspace.parent / "outside.md").write_text("secret")

        with pytest.raises(TaskReferenceError) as exc_info:
            validate_reference(workspace, TaskReference("PRPs/../../outside.md"))

        assert not isinstance(exc_info.value, PrpNotFoundError)
