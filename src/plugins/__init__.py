"""
Plugin system for the HCaaS reconciler.

This package provides the resource kind descriptors, the generic reconciler
and the registry of kinds.
"""

from plugins.base import DeleteMode, ResourceKind, ResourceState
from plugins.reconcilers.base import ResourceReconciler
from plugins.registry import ResourceRegistry, get_registry

__all__ = [
    "DeleteMode",
    "ResourceKind",
    "ResourceState",
    "ResourceReconciler",
    "ResourceRegistry",
    "get_registry",
]
