"""
Registry - Bind named resources and drive apply.

The registry provides:
- Registration of resources together with the directory they were loaded from
- Reference resolution by name, with kind validation
- Command dispatch through the executor, wrapping failures per resource
- Whole-registry apply in registration order (fail-fast)

There is no process-wide registry. Each apply run constructs its own.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from mpdev.config import ApplyConfig
from mpdev.errors import (
    CommandExecutionError,
    MissingReferenceError,
    ReferenceKindMismatchError,
    ReferenceNotFoundError,
)
from mpdev.executor import CommandExecutor, CommandResult
from mpdev.resources.base import BaseResource, Reference


logger = logging.getLogger(__name__)


@dataclass
class RegisteredResource:
    """A resource bound to its source directory."""

    resource: BaseResource
    source_dir: str


class Registry:
    """
    Registry of resources keyed by name.

    Re-registering a name replaces the previous resource silently (a warning
    is logged). The entry keeps its original position in apply order.

    Usage:
        registry = Registry(SubprocessExecutor())
        registry.register_resource(autogen, "defs/")
        registry.register_resource(dm_template, "defs/")

        # Apply everything in registration order
        registry.apply()

        # Or a single resource
        dm_template.apply(registry)
    """

    def __init__(self, executor: CommandExecutor, config: Optional[ApplyConfig] = None):
        """
        Initialize an empty registry.

        Args:
            executor: Executor used for every external command
            config: Tool configuration (defaults to built-in defaults)
        """
        self._executor = executor
        self._config = config or ApplyConfig()
        self._resources: dict[str, RegisteredResource] = {}

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    @property
    def config(self) -> ApplyConfig:
        return self._config

    def register_resource(self, resource: BaseResource, source_dir: str) -> None:
        """
        Register a resource under its name.

        Args:
            resource: The resource to register
            source_dir: Directory the resource definition was loaded from
        """
        if resource.name in self._resources:
            logger.warning(
                f"Resource {resource.name!r} registered twice, replacing previous definition",
                extra={"resource": resource.name, "event": "resource_replaced"},
            )
        self._resources[resource.name] = RegisteredResource(resource, source_dir)

    def get_resource(self, name: str) -> BaseResource:
        """
        Get a registered resource by name.

        Raises:
            ReferenceNotFoundError: If no resource is registered under name
        """
        if name not in self._resources:
            raise ReferenceNotFoundError(name)
        return self._resources[name].resource

    def get_working_directory(self, resource: BaseResource) -> str:
        """
        Absolute source directory a resource was registered with.

        Raises:
            ReferenceNotFoundError: If the resource is not registered
        """
        entry = self._resources.get(resource.name)
        if entry is None or entry.resource is not resource:
            raise ReferenceNotFoundError(resource.name)
        return os.path.abspath(entry.source_dir)

    def resources(self) -> List[BaseResource]:
        """Registered resources, in registration order."""
        return [entry.resource for entry in self._resources.values()]

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: str) -> bool:
        return name in self._resources

    def resolve(self, reference: Reference, expected_kind: Optional[str] = None) -> BaseResource:
        """
        Resolve a reference to the registered resource it names.

        Args:
            reference: The reference to resolve
            expected_kind: Kind the caller requires. Defaults to the kind
                           recorded on the reference.

        Returns:
            The referenced resource

        Raises:
            MissingReferenceError: If the reference has no name
            ReferenceNotFoundError: If the name is not registered
            ReferenceKindMismatchError: If the kinds do not match
        """
        if reference.is_empty():
            raise MissingReferenceError(
                f"reference is not set (expected kind {expected_kind or reference.kind or 'any'})"
            )

        if expected_kind and reference.kind and reference.kind != expected_kind:
            raise ReferenceKindMismatchError(reference.name, expected_kind, reference.kind)
        expected = expected_kind or reference.kind

        resource = self.get_resource(reference.name)
        if expected and resource.kind != expected:
            raise ReferenceKindMismatchError(reference.name, expected, resource.kind)
        return resource

    def validate_references(self) -> None:
        """
        Resolve every configured reference without applying anything.

        Raises:
            ResolutionError: For the first reference that does not resolve
        """
        for resource in self.resources():
            for attr, ref, expected_kind in resource.references():
                logger.debug(
                    f"Checking {resource.name}.{attr} -> {ref.name}",
                    extra={"resource": resource.name, "event": "reference_checked"},
                )
                self.resolve(ref, expected_kind=expected_kind)

    def run_command(
        self,
        resource: BaseResource,
        command: str,
        *args: str,
        cwd: Optional[str] = None,
    ) -> CommandResult:
        """
        Run an external command on behalf of a resource.

        Args:
            resource: Resource issuing the command (named in errors)
            command: Executable name or path
            *args: Command arguments
            cwd: Working directory for the command

        Returns:
            CommandResult of a successful command

        Raises:
            CommandExecutionError: If the command fails to start or exits non-zero
        """
        try:
            result = self._executor.run(command, *args, cwd=cwd)
        except OSError as e:
            raise CommandExecutionError(resource.name, command, args, reason=str(e)) from e

        if result.returncode != 0:
            raise CommandExecutionError(
                resource.name,
                command,
                args,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    def apply_resource(self, resource: BaseResource) -> None:
        """Apply a single resource, resolving its references through this registry."""
        logger.info(
            f"Applying {resource.kind} {resource.name}",
            extra={"resource": resource.name, "event": "apply_started"},
        )
        resource.apply(self)
        logger.info(
            f"Applied {resource.name}",
            extra={"resource": resource.name, "event": "apply_completed"},
        )

    def apply(self) -> List[str]:
        """
        Apply all registered resources in registration order.

        Stops at the first failure.

        Returns:
            Names of the applied resources

        Raises:
            MpdevError: The first error raised by any resource
        """
        applied = []
        for resource in self.resources():
            self.apply_resource(resource)
            applied.append(resource.name)
        return applied
