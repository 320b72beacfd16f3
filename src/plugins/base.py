"""
Core plugin types and dataclasses.

A ResourceKind describes everything that differs between the resource kinds
the plugin manages; the generic ResourceReconciler does the rest.
"""

import logging
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Callable, Dict, Optional

from config import DEFAULT_SERVICE_NAME

logger = logging.getLogger(__name__)


class DeleteMode(Enum):
    """How the identity is sent on deletion."""

    BODY = "body"  # JSON body on the kind path
    PATH = "path"  # appended to the kind path, no body


@dataclass(frozen=True)
class ResourceKind:
    """Per-kind descriptor driving the generic reconciler."""

    name: str
    sub_path: str
    record_type: type
    id_field: str
    create_payload: Callable[[Any], Dict[str, Any]]
    listing_entry_type: type
    listing_key: Callable[[Any], str]
    observe: Callable[[Any, Any], Any]
    schema: Dict[str, Any]
    delete_mode: DeleteMode = DeleteMode.BODY
    delete_payload: Optional[Callable[[str], Dict[str, Any]]] = None
    description: str = ""

    def identity(self, record: Any) -> str:
        """Natural key of a record."""
        return getattr(record, self.id_field)

    def record_for_identity(self, identity: str) -> Any:
        """Minimal record carrying only the natural key (used on import)."""
        return self.record_type(**{self.id_field: identity})

    def record_from_attributes(self, attributes: Dict[str, Any]) -> Any:
        """Build the typed record from a flat attribute mapping."""
        names = {f.name for f in fields(self.record_type)}
        return self.record_type(
            **{k: v for k, v in attributes.items() if k in names and v is not None}
        )


@dataclass
class ResourceState:
    """Tracked state of one declared resource."""

    kind: str
    instance: str
    record: Any
    service_name: str = DEFAULT_SERVICE_NAME
    id: str = ""

    @property
    def exists(self) -> bool:
        """Whether the resource is tracked as present remotely."""
        return bool(self.id)

    @classmethod
    def from_attributes(
        cls, kind: ResourceKind, attributes: Dict[str, Any]
    ) -> "ResourceState":
        """
        Map the host framework's attribute bag to a typed state.

        Args:
            kind: The resource kind descriptor.
            attributes: Flat mapping with instance, service_name, id and the
                kind's record fields.

        Returns:
            A new ResourceState.
        """
        return cls(
            kind=kind.name,
            instance=attributes["instance"],
            service_name=attributes.get("service_name") or DEFAULT_SERVICE_NAME,
            record=kind.record_from_attributes(attributes),
            id=attributes.get("id") or "",
        )

    def to_attributes(self) -> Dict[str, Any]:
        """Flatten back into the host framework's attribute bag."""
        attributes = {
            "id": self.id,
            "instance": self.instance,
            "service_name": self.service_name,
        }
        attributes.update(asdict(self.record))
        return attributes
