"""
Reconcilers package.

The generic ResourceReconciler and the built-in HCaaS resource kinds.
"""

from plugins.reconcilers.base import ResourceReconciler
from plugins.reconcilers.hcaas import (
    GROUP_KIND,
    URL_KIND,
    WATCHER_KIND,
    GroupRecord,
    UrlRecord,
    WatcherRecord,
)

__all__ = [
    "ResourceReconciler",
    "URL_KIND",
    "WATCHER_KIND",
    "GROUP_KIND",
    "UrlRecord",
    "WatcherRecord",
    "GroupRecord",
]
