"""Resource kinds that can be registered and applied."""

from mpdev.resources.base import API_VERSION, BaseResource, Metadata, Reference
from mpdev.resources.deployment_manager import (
    DeploymentManagerAutogenTemplate,
    DeploymentManagerTemplate,
)
from mpdev.resources.image import ContainerImage

# Kind name -> resource class, used when loading definitions
RESOURCE_KINDS = {
    cls.KIND: cls
    for cls in (
        DeploymentManagerAutogenTemplate,
        DeploymentManagerTemplate,
        ContainerImage,
    )
}

__all__ = [
    "API_VERSION",
    "BaseResource",
    "Metadata",
    "Reference",
    "DeploymentManagerAutogenTemplate",
    "DeploymentManagerTemplate",
    "ContainerImage",
    "RESOURCE_KINDS",
]
