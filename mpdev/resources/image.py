"""ContainerImage resource: builds a container image and pushes it."""

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from mpdev.errors import ApplyError
from mpdev.resources.base import BaseResource, Reference

if TYPE_CHECKING:
    from mpdev.registry import Registry


logger = logging.getLogger(__name__)

BASE_IMAGE_BUILD_ARG = "BASE_IMAGE"


@dataclass
class ContainerImage(BaseResource):
    """
    Builds `image` from a local build context with docker.

    context and dockerfile are resolved against the directory the resource
    was registered with. When base_image_ref points at another
    ContainerImage, that image's built tag is passed as the BASE_IMAGE
    build argument. After a successful apply, built_image holds the tag.
    """

    KIND = "ContainerImage"
    REFERENCE_FIELDS = (("base_image_ref", "ContainerImage"),)

    image: str = ""
    context: str = "."
    dockerfile: Optional[str] = None
    build_args: Dict[str, str] = field(default_factory=dict)
    base_image_ref: Reference = field(default_factory=Reference)
    push: bool = True

    built_image: Optional[str] = field(default=None, init=False, repr=False, compare=False)

    def apply(self, registry: "Registry") -> None:
        if not self.image:
            raise ApplyError(self.name, "image is not set")

        build_args = {k: str(v) for k, v in self.build_args.items()}
        if not self.base_image_ref.is_empty():
            base = registry.resolve(self.base_image_ref, expected_kind=self.KIND)
            if not base.built_image:
                raise ApplyError(
                    self.name,
                    f"referenced resource {base.name!r} has not been applied",
                )
            build_args[BASE_IMAGE_BUILD_ARG] = base.built_image

        working_dir = registry.get_working_directory(self)
        docker = registry.config.docker_bin

        logger.info(
            f"Building image {self.image}",
            extra={"resource": self.name, "event": "image_build_started"},
        )
        registry.run_command(self, docker, *self._build_args(working_dir, build_args))

        if self.push:
            logger.info(
                f"Pushing image {self.image}",
                extra={"resource": self.name, "event": "image_push_started"},
            )
            registry.run_command(self, docker, "push", self.image)

        self.built_image = self.image

    def _build_args(self, working_dir: str, build_args: Dict[str, str]) -> List[str]:
        args = ["build", "-t", self.image]
        if self.dockerfile:
            args.extend(["-f", os.path.normpath(os.path.join(working_dir, self.dockerfile))])
        for key in sorted(build_args):
            args.extend(["--build-arg", f"{key}={build_args[key]}"])
        args.append(os.path.normpath(os.path.join(working_dir, self.context)))
        return args
