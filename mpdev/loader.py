"""
Loader - Build resources from YAML definition documents.

A definition file may hold several YAML documents. Each document has
apiVersion, kind and metadata.name plus kind-specific fields in camelCase:

    apiVersion: dev.marketplace.cloud.google.com/v1alpha1
    kind: DeploymentManagerTemplate
    metadata:
      name: dm-temp
    deploymentManagerRef:
      name: autogen
    zipFilePath: gs://bucket/template.zip
"""

import dataclasses
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from mpdev.errors import DefinitionError
from mpdev.resources import API_VERSION, RESOURCE_KINDS, BaseResource, Metadata, Reference

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Declared field type -> accepted YAML value types
_FIELD_TYPES = {
    str: str,
    bool: bool,
    Optional[str]: (str, type(None)),
    Dict[str, str]: dict,
}


def _to_snake(name: str) -> str:
    """partnerId -> partner_id"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def resource_from_dict(data: Any) -> BaseResource:
    """
    Build a resource from one parsed definition document.

    Args:
        data: Parsed YAML document

    Returns:
        The resource instance

    Raises:
        DefinitionError: If the document is malformed
    """
    if not isinstance(data, dict):
        raise DefinitionError(f"definition must be a mapping, got {type(data).__name__}")

    api_version = data.get("apiVersion")
    if api_version != API_VERSION:
        raise DefinitionError(
            f"unsupported apiVersion {api_version!r} (expected {API_VERSION!r})"
        )

    kind = data.get("kind")
    cls = RESOURCE_KINDS.get(kind)
    if cls is None:
        raise DefinitionError(
            f"unknown kind {kind!r}. Known kinds: {sorted(RESOURCE_KINDS)}"
        )

    metadata = data.get("metadata") or {}
    name = metadata.get("name") if isinstance(metadata, dict) else None
    if not name or not isinstance(name, str):
        raise DefinitionError(f"{kind}: metadata.name is required")

    fields = {
        f.name: f
        for f in dataclasses.fields(cls)
        if f.init and f.name not in ("metadata", "api_version")
    }
    reference_attrs = {attr for attr, _ in cls.REFERENCE_FIELDS}

    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key in ("apiVersion", "kind", "metadata"):
            continue
        attr = _to_snake(key)
        if attr not in fields:
            raise DefinitionError(f"{kind} {name}: unknown field {key!r}")
        if attr in reference_attrs:
            try:
                value = Reference.from_dict(value)
            except ValueError as e:
                raise DefinitionError(f"{kind} {name}: invalid {key}: {e}")
        else:
            expected_type = _FIELD_TYPES.get(fields[attr].type)
            if expected_type is not None and not isinstance(value, expected_type):
                raise DefinitionError(
                    f"{kind} {name}: {key} has invalid type {type(value).__name__}"
                )
        kwargs[attr] = value

    try:
        return cls(Metadata(name=name), api_version=api_version, **kwargs)
    except TypeError as e:
        raise DefinitionError(f"{kind} {name}: {e}")


def load_documents(path: Path) -> List[BaseResource]:
    """
    Load every resource defined in a YAML file, in document order.

    Raises:
        DefinitionError: If the file cannot be read or a document is invalid
    """
    path = Path(path)
    try:
        with open(path) as f:
            documents = [doc for doc in yaml.safe_load_all(f) if doc is not None]
    except OSError as e:
        raise DefinitionError(f"Failed to read {path}: {e}")
    except yaml.YAMLError as e:
        raise DefinitionError(f"Invalid YAML in {path}: {e}")

    resources = []
    for doc in documents:
        try:
            resources.append(resource_from_dict(doc))
        except DefinitionError as e:
            raise DefinitionError(f"{path}: {e}")
    return resources


def load_resources(paths: Iterable[Path]) -> List[Tuple[BaseResource, str]]:
    """
    Load resources from several files.

    Returns:
        (resource, source directory) pairs in file and document order; the
        source directory is the directory containing the definition file
    """
    loaded = []
    for path in paths:
        path = Path(path)
        source_dir = str(path.resolve().parent)
        for resource in load_documents(path):
            loaded.append((resource, source_dir))
    return loaded
