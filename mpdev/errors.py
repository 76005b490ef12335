"""
Error classes for mpdev apply.

Resolution errors are raised before any command runs:
- MissingReferenceError: a required reference field is empty
- ReferenceNotFoundError: no resource registered under the referenced name
- ReferenceKindMismatchError: the referenced resource has the wrong kind

Apply errors carry the name of the resource that failed:
- CommandExecutionError: an external command exited non-zero or did not start
- ResourceIOError: a local filesystem operation failed

Errors propagate immediately. Nothing is retried.
"""

from typing import Optional, Sequence


class MpdevError(Exception):
    """Base exception for mpdev."""
    pass


class ResolutionError(MpdevError):
    """A reference could not be resolved against the registry."""
    pass


class MissingReferenceError(ResolutionError):
    """Raised when a required reference has no name configured."""

    def __init__(self, message: str = "reference is not set"):
        super().__init__(message)


class ReferenceNotFoundError(ResolutionError):
    """Raised when no resource is registered under the referenced name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"resource not found: {name!r}")


class ReferenceKindMismatchError(ResolutionError):
    """Raised when the referenced resource is not of the expected kind."""

    def __init__(self, name: str, expected_kind: str, actual_kind: str):
        self.name = name
        self.expected_kind = expected_kind
        self.actual_kind = actual_kind
        super().__init__(
            f"resource {name!r} has kind {actual_kind!r}, expected {expected_kind!r}"
        )


class ApplyError(MpdevError):
    """
    Applying a resource failed.

    Attributes:
        resource_name: Name of the resource being applied
    """

    def __init__(self, resource_name: str, message: str):
        self.resource_name = resource_name
        super().__init__(f"{resource_name}: {message}")


class CommandExecutionError(ApplyError):
    """
    An external command failed to start or exited with a non-zero status.

    stderr is kept so the caller can show what the tool reported.
    """

    def __init__(
        self,
        resource_name: str,
        command: str,
        args: Sequence[str],
        returncode: Optional[int] = None,
        stderr: bytes = b"",
        reason: Optional[str] = None,
    ):
        self.command = command
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr or b""

        cmdline = " ".join([command, *self.args_list])
        if reason is None:
            reason = f"exit code {returncode}"
        message = f"command failed ({reason}): {cmdline}"
        detail = self.stderr.decode("utf-8", errors="replace").strip()
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(resource_name, message)


class ResourceIOError(ApplyError):
    """A local filesystem operation failed during apply."""
    pass


class DefinitionError(MpdevError):
    """A resource definition document is malformed."""
    pass
