"""
Deployment Manager resources.

DeploymentManagerAutogenTemplate runs the autogen container to generate a
Deployment Manager package into a fresh output directory.
DeploymentManagerTemplate zips a referenced autogen output directory and
either uploads the archive to object storage or saves it locally.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import yaml

from mpdev.container import ContainerProcess, Mount
from mpdev.errors import ApplyError, ResourceIOError
from mpdev.resources.base import BaseResource, Reference

if TYPE_CHECKING:
    from mpdev.registry import Registry


logger = logging.getLogger(__name__)

# Paths inside the autogen container
AUTOGEN_INPUT_DIR = "/autogen"
AUTOGEN_INPUT_FILE = "autogen.yaml"
AUTOGEN_OUTPUT_DIR = "/tmp/out"

# Archive name used when the destination is remote
TRANSIENT_ZIP_NAME = "dm_template.zip"


@dataclass
class DeploymentManagerAutogenTemplate(BaseResource):
    """
    Generates a Deployment Manager package with the autogen container.

    The autogen specification is written to autogen.yaml in a unique temp
    directory and mounted into the container together with a unique output
    directory. After a successful apply, output_dir holds the generated
    package.
    """

    KIND = "DeploymentManagerAutogenTemplate"

    partner_id: str = ""
    solution_id: str = ""
    autogen_spec: Any = None

    output_dir: Optional[str] = field(default=None, init=False, repr=False, compare=False)

    def apply(self, registry: "Registry") -> None:
        if registry.executor.dry_run:
            self._apply_dry_run(registry)
            return

        temp_root = registry.config.temp_dir

        try:
            input_dir = tempfile.mkdtemp(prefix="autogen", dir=temp_root)
        except OSError as e:
            raise ResourceIOError(self.name, f"failed to create autogen input directory: {e}")

        try:
            input_file = os.path.join(input_dir, AUTOGEN_INPUT_FILE)
            try:
                with open(input_file, "w") as f:
                    yaml.safe_dump(self.autogen_spec, f, default_flow_style=False, sort_keys=False)
                out_dir = tempfile.mkdtemp(prefix="autogen-out", dir=temp_root)
            except OSError as e:
                raise ResourceIOError(self.name, f"failed to prepare autogen input: {e}")

            self._run_autogen(registry, input_dir, out_dir)
        finally:
            shutil.rmtree(input_dir, ignore_errors=True)

        self.output_dir = out_dir

    def _apply_dry_run(self, registry: "Registry") -> None:
        # Nothing is written; dependents see the placeholder output path.
        temp_root = registry.config.temp_dir or tempfile.gettempdir()
        input_dir = os.path.join(temp_root, "autogen-dry-run")
        out_dir = os.path.join(temp_root, "autogen-out-dry-run")

        self._run_autogen(registry, input_dir, out_dir)
        self.output_dir = out_dir

    def _run_autogen(self, registry: "Registry", input_dir: str, out_dir: str) -> None:
        process = ContainerProcess(
            image=registry.config.autogen_image,
            mounts=[
                Mount(src=out_dir, dst=AUTOGEN_OUTPUT_DIR),
                Mount(src=input_dir, dst=AUTOGEN_INPUT_DIR),
            ],
            args=[
                "--input_type", "YAML",
                "--single_input", f"{AUTOGEN_INPUT_DIR}/{AUTOGEN_INPUT_FILE}",
                "--output_type", "PACKAGE",
                "--output", AUTOGEN_OUTPUT_DIR,
            ],
        )

        logger.info(
            f"Generating Deployment Manager package for {self.partner_id}/{self.solution_id}",
            extra={
                "resource": self.name,
                "event": "autogen_started",
                "metadata": {"output_dir": out_dir},
            },
        )
        registry.run_command(self, registry.config.docker_bin, *process.run_args())


@dataclass
class DeploymentManagerTemplate(BaseResource):
    """
    Packages a generated Deployment Manager template as a zip archive.

    zip_file_path is either an object-storage URI (the archive is built in
    the producer's output directory, uploaded, then removed) or a local path,
    absolute or relative to the directory the resource was registered with.
    """

    KIND = "DeploymentManagerTemplate"
    REFERENCE_FIELDS = (("deployment_manager_ref", DeploymentManagerAutogenTemplate.KIND),)

    deployment_manager_ref: Reference = field(default_factory=Reference)
    zip_file_path: str = ""

    def apply(self, registry: "Registry") -> None:
        autogen = registry.resolve(
            self.deployment_manager_ref,
            expected_kind=DeploymentManagerAutogenTemplate.KIND,
        )
        if not autogen.output_dir:
            raise ApplyError(
                self.name,
                f"referenced resource {autogen.name!r} has not been applied",
            )
        if not self.zip_file_path:
            raise ApplyError(self.name, "zipFilePath is not set")

        src_dir = autogen.output_dir

        if registry.config.is_remote(self.zip_file_path):
            local_zip = os.path.join(src_dir, TRANSIENT_ZIP_NAME)
            self._zip(registry, src_dir, local_zip)
            logger.info(
                f"Uploading {local_zip} to {self.zip_file_path}",
                extra={"resource": self.name, "event": "upload_started"},
            )
            registry.run_command(self, registry.config.gsutil_bin, "cp", local_zip, self.zip_file_path)
            if not registry.executor.dry_run:
                self._remove(local_zip)
            return

        if os.path.isabs(self.zip_file_path):
            local_zip = self.zip_file_path
        else:
            local_zip = os.path.join(registry.get_working_directory(self), self.zip_file_path)

        if not registry.executor.dry_run:
            try:
                os.makedirs(os.path.dirname(local_zip), exist_ok=True)
            except OSError as e:
                raise ResourceIOError(self.name, f"failed to create directory for {local_zip}: {e}")
            self._remove(local_zip)
        self._zip(registry, src_dir, local_zip)

    def _zip(self, registry: "Registry", src_dir: str, zip_path: str) -> None:
        logger.info(
            f"Archiving {src_dir} into {zip_path}",
            extra={"resource": self.name, "event": "archive_started"},
        )
        registry.run_command(self, registry.config.zip_bin, "-r", zip_path, ".", cwd=src_dir)

    def _remove(self, path: str) -> None:
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            raise ResourceIOError(self.name, f"failed to remove {path}: {e}")
