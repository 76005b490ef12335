"""
Base classes for resources.

Every resource kind inherits from BaseResource and implements apply().
References to other resources are lookup keys, resolved through the
Registry at apply time.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Tuple

if TYPE_CHECKING:
    from mpdev.registry import Registry


API_VERSION = "dev.marketplace.cloud.google.com/v1alpha1"


@dataclass(frozen=True)
class Metadata:
    """Resource metadata. The name is unique within a registry."""

    name: str


@dataclass(frozen=True)
class Reference:
    """
    Typed lookup key pointing at another resource by name.

    An empty name means no reference is configured. The kind may be left
    empty in definitions; the field that holds the reference supplies the
    expected kind when it is resolved.
    """

    name: str = ""
    kind: str = ""

    def is_empty(self) -> bool:
        return not self.name

    @classmethod
    def from_dict(cls, data: Any) -> "Reference":
        """Build a Reference from a {name, kind} mapping (None means empty)."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"reference must be a mapping, got {type(data).__name__}")
        unknown = set(data) - {"name", "kind"}
        if unknown:
            raise ValueError(f"unknown reference fields: {sorted(unknown)}")
        return cls(name=data.get("name") or "", kind=data.get("kind") or "")

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "kind": self.kind}


@dataclass
class BaseResource(ABC):
    """
    Abstract base class for resources.

    Subclasses set KIND and implement apply(). Reference fields are listed
    in REFERENCE_FIELDS as (attribute name, expected kind) pairs so the
    registry can validate them without applying.
    """

    KIND: ClassVar[str] = ""
    REFERENCE_FIELDS: ClassVar[Tuple[Tuple[str, str], ...]] = ()

    metadata: Metadata
    api_version: str = field(default=API_VERSION, kw_only=True)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def kind(self) -> str:
        return self.KIND

    def get_reference(self) -> Reference:
        """Return a Reference that resolves to this resource."""
        return Reference(name=self.name, kind=self.kind)

    def references(self) -> List[Tuple[str, Reference, str]]:
        """
        Configured references of this resource.

        Returns:
            (field name, reference, expected kind) for every non-empty
            reference field
        """
        refs = []
        for attr, expected_kind in self.REFERENCE_FIELDS:
            ref = getattr(self, attr)
            if not ref.is_empty():
                refs.append((attr, ref, expected_kind))
        return refs

    @abstractmethod
    def apply(self, registry: "Registry") -> None:
        """
        Apply the resource.

        Args:
            registry: Registry used to resolve references and run commands

        Raises:
            ResolutionError: If a reference cannot be resolved
            ApplyError: If a command or filesystem operation fails
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, kind={self.kind})"
