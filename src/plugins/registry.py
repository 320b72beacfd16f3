"""
Resource Kind Registry - Registration and discovery of resource kinds.

This module provides the central registry mapping resource kind names
(e.g. 'hcaas_url') to their descriptors.
"""

from importlib.metadata import entry_points
from typing import Dict, Optional

from plugins.base import ResourceKind, logger
from validation import validate_kind_schema

ENTRY_POINT_GROUP = "hcaas.resource_kinds"


class ResourceRegistry:
    """
    Central registry for resource kinds.

    Holds the descriptor of every resource kind the plugin exposes.
    """

    def __init__(self):
        self._kinds: Dict[str, ResourceKind] = {}

    def register_kind(self, kind: ResourceKind) -> None:
        """
        Register a resource kind.

        Args:
            kind: The ResourceKind descriptor to register

        Raises:
            ValueError: If the kind's schema is not a valid JSON Schema
        """
        is_valid, error = validate_kind_schema(kind.schema)
        if not is_valid:
            raise ValueError(f"Resource kind '{kind.name}': {error}")

        if kind.name in self._kinds:
            logger.warning(f"Overwriting existing resource kind: {kind.name}")

        self._kinds[kind.name] = kind
        logger.info(f"Registered resource kind: {kind.name} (path: {kind.sub_path})")

    def get_kind(self, name: str) -> ResourceKind:
        """
        Get a registered resource kind.

        Args:
            name: The resource kind name

        Returns:
            The ResourceKind descriptor

        Raises:
            ValueError: If the kind is not registered
        """
        if name not in self._kinds:
            available = ", ".join(self._kinds.keys()) or "none"
            raise ValueError(
                f"Unknown resource kind: {name}. Available kinds: {available}"
            )
        return self._kinds[name]

    def list_kinds(self) -> list[str]:
        """List all registered resource kind names."""
        return list(self._kinds.keys())

    def has_kind(self, name: str) -> bool:
        """Check if a resource kind is registered."""
        return name in self._kinds


# Global registry instance
_registry: Optional[ResourceRegistry] = None


def get_registry() -> ResourceRegistry:
    """Get the global resource kind registry singleton."""
    global _registry
    if _registry is None:
        _registry = ResourceRegistry()
        register_builtin_kinds(_registry)
    return _registry


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None


def register_builtin_kinds(registry: ResourceRegistry) -> None:
    """
    Register the built-in HCaaS kinds and discover extra kinds via
    entry points.

    Entry points in the 'hcaas.resource_kinds' group must resolve to a
    ResourceKind instance.
    """
    from plugins.reconcilers.hcaas import BUILTIN_KINDS

    for kind in BUILTIN_KINDS:
        registry.register_kind(kind)

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            kind = ep.load()
            registry.register_kind(kind)
        except Exception as e:
            logger.warning(f"Could not load resource kind {ep.name}: {e}")
