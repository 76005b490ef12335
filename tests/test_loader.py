"""Tests for mpdev.loader: YAML definitions to resources."""

from pathlib import Path

import pytest
import yaml

from mpdev.errors import DefinitionError
from mpdev.loader import load_documents, load_resources, resource_from_dict
from mpdev.resources import (
    API_VERSION,
    ContainerImage,
    DeploymentManagerAutogenTemplate,
    DeploymentManagerTemplate,
    Reference,
)


DEFINITIONS = """
apiVersion: dev.marketplace.cloud.google.com/v1alpha1
kind: DeploymentManagerAutogenTemplate
metadata:
  name: autogen
partnerId: partner
solutionId: solution
autogenSpec:
  singleVm:
    bootDisk:
      diskSize:
        defaultSizeGb: 10
---
apiVersion: dev.marketplace.cloud.google.com/v1alpha1
kind: DeploymentManagerTemplate
metadata:
  name: dm-template
deploymentManagerRef:
  name: autogen
zipFilePath: gs://bucket/template.zip
"""


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestResourceFromDict:

    def test_autogen(self):
        resource = resource_from_dict({
            "apiVersion": API_VERSION,
            "kind": "DeploymentManagerAutogenTemplate",
            "metadata": {"name": "autogen"},
            "partnerId": "p",
            "solutionId": "s",
            "autogenSpec": {"a": [1, 2]},
        })
        assert isinstance(resource, DeploymentManagerAutogenTemplate)
        assert resource.name == "autogen"
        assert resource.partner_id == "p"
        assert resource.solution_id == "s"
        assert resource.autogen_spec == {"a": [1, 2]}
        assert resource.output_dir is None

    def test_container_image(self):
        resource = resource_from_dict({
            "apiVersion": API_VERSION,
            "kind": "ContainerImage",
            "metadata": {"name": "app"},
            "image": "gcr.io/p/app:1",
            "buildArgs": {"A": "1"},
            "baseImageRef": {"name": "base", "kind": "ContainerImage"},
            "push": False,
        })
        assert isinstance(resource, ContainerImage)
        assert resource.build_args == {"A": "1"}
        assert resource.base_image_ref == Reference(name="base", kind="ContainerImage")
        assert resource.push is False

    def test_missing_reference_field_is_empty(self):
        resource = resource_from_dict({
            "apiVersion": API_VERSION,
            "kind": "DeploymentManagerTemplate",
            "metadata": {"name": "dm"},
            "zipFilePath": "out.zip",
        })
        assert resource.deployment_manager_ref.is_empty()
        assert resource.references() == []

    @pytest.mark.parametrize(
        "data, message",
        [
            ([], "mapping"),
            ({"apiVersion": "v2", "kind": "ContainerImage", "metadata": {"name": "x"}}, "apiVersion"),
            ({"apiVersion": API_VERSION, "kind": "Bucket", "metadata": {"name": "x"}}, "unknown kind"),
            ({"apiVersion": API_VERSION, "kind": "ContainerImage", "metadata": {}}, "metadata.name"),
            ({"apiVersion": API_VERSION, "kind": "ContainerImage", "metadata": {"name": "x"}, "tag": "1"}, "unknown field"),
            ({"apiVersion": API_VERSION, "kind": "ContainerImage", "metadata": {"name": "x"}, "push": "yes"}, "invalid type"),
            ({"apiVersion": API_VERSION, "kind": "ContainerImage", "metadata": {"name": "x"}, "baseImageRef": "base"}, "invalid baseImageRef"),
            ({"apiVersion": API_VERSION, "kind": "ContainerImage", "metadata": {"name": "x"}, "outputDir": "/tmp"}, "unknown field"),
        ],
    )
    def test_rejects(self, data, message):
        with pytest.raises(DefinitionError, match=message):
            resource_from_dict(data)


class TestLoadFiles:

    def test_multi_document(self, tmp_path):
        path = _write(tmp_path / "defs" / "resources.yaml", DEFINITIONS)
        resources = load_documents(path)

        assert [r.kind for r in resources] == [
            "DeploymentManagerAutogenTemplate",
            "DeploymentManagerTemplate",
        ]
        dm = resources[1]
        assert isinstance(dm, DeploymentManagerTemplate)
        assert dm.deployment_manager_ref == Reference(name="autogen")
        assert dm.zip_file_path == "gs://bucket/template.zip"

    def test_source_dir_is_file_directory(self, tmp_path):
        first = _write(tmp_path / "a" / "autogen.yaml", DEFINITIONS.split("---")[0])
        second = _write(tmp_path / "b" / "dm.yaml", DEFINITIONS.split("---")[1])

        loaded = load_resources([first, second])

        assert [(r.name, d) for r, d in loaded] == [
            ("autogen", str((tmp_path / "a").resolve())),
            ("dm-template", str((tmp_path / "b").resolve())),
        ]

    def test_empty_documents_skipped(self, tmp_path):
        path = _write(tmp_path / "r.yaml", "---\n" + DEFINITIONS + "\n---\n")
        assert len(load_documents(path)) == 2

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path / "r.yaml", "kind: [oops")
        with pytest.raises(DefinitionError, match="Invalid YAML"):
            load_documents(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DefinitionError, match="Failed to read"):
            load_documents(tmp_path / "nope.yaml")

    def test_error_names_file(self, tmp_path):
        doc = yaml.safe_load(DEFINITIONS.split("---")[0])
        doc["kind"] = "Nope"
        path = _write(tmp_path / "bad.yaml", yaml.dump(doc))
        with pytest.raises(DefinitionError, match="bad.yaml"):
            load_documents(path)
