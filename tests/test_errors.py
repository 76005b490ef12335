"""Tests for mpdev error classes.

Tests cover:
- Error hierarchy
- Messages name the resource and command
- stderr is preserved on command failures
"""

import pytest

from mpdev.errors import (
    ApplyError,
    CommandExecutionError,
    DefinitionError,
    MissingReferenceError,
    MpdevError,
    ReferenceKindMismatchError,
    ReferenceNotFoundError,
    ResolutionError,
    ResourceIOError,
)


class TestHierarchy:
    """Tests for the error class tree."""

    @pytest.mark.parametrize(
        "cls",
        [MissingReferenceError, ReferenceNotFoundError, ReferenceKindMismatchError],
    )
    def test_resolution_errors(self, cls):
        assert issubclass(cls, ResolutionError)
        assert issubclass(cls, MpdevError)

    @pytest.mark.parametrize("cls", [CommandExecutionError, ResourceIOError])
    def test_apply_errors(self, cls):
        assert issubclass(cls, ApplyError)
        assert issubclass(cls, MpdevError)

    def test_definition_error(self):
        assert issubclass(DefinitionError, MpdevError)
        assert not issubclass(DefinitionError, ApplyError)

    def test_base_is_exception(self):
        assert issubclass(MpdevError, Exception)


class TestResolutionErrors:
    """Tests for resolution error attributes."""

    def test_not_found(self):
        error = ReferenceNotFoundError("autogen")
        assert error.name == "autogen"
        assert "autogen" in str(error)

    def test_kind_mismatch(self):
        error = ReferenceKindMismatchError("dm", "DeploymentManagerAutogenTemplate", "DeploymentManagerTemplate")
        assert error.expected_kind == "DeploymentManagerAutogenTemplate"
        assert error.actual_kind == "DeploymentManagerTemplate"
        assert "'dm'" in str(error)

    def test_missing_default_message(self):
        assert str(MissingReferenceError()) == "reference is not set"


class TestApplyErrors:
    """Tests for apply error messages."""

    def test_apply_error_names_resource(self):
        error = ApplyError("dm-temp", "something broke")
        assert error.resource_name == "dm-temp"
        assert str(error) == "dm-temp: something broke"

    def test_command_error_keeps_stderr(self):
        error = CommandExecutionError(
            "dm-temp", "gsutil", ["cp", "a.zip", "gs://b/a.zip"], returncode=1,
            stderr=b"AccessDeniedException: 403\n",
        )
        assert error.resource_name == "dm-temp"
        assert error.command == "gsutil"
        assert error.args_list == ["cp", "a.zip", "gs://b/a.zip"]
        assert error.returncode == 1
        assert error.stderr == b"AccessDeniedException: 403\n"
        message = str(error)
        assert "gsutil cp a.zip gs://b/a.zip" in message
        assert "exit code 1" in message
        assert "AccessDeniedException: 403" in message

    def test_command_error_with_reason(self):
        error = CommandExecutionError("img", "docker", ["build"], reason="No such file or directory")
        assert error.returncode is None
        assert "No such file or directory" in str(error)

    def test_can_be_caught_as_mpdev_error(self):
        with pytest.raises(MpdevError):
            raise ResourceIOError("autogen", "disk full")
