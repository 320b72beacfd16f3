"""
HCaaS resource kinds: monitored URLs, watchers and groups.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict

from config import DEFAULT_SERVICE_NAME
from plugins.base import DeleteMode, ResourceKind


@dataclass
class UrlRecord:
    """A monitored URL."""

    url: str
    expected_string: str = ""
    comment: str = ""


@dataclass
class WatcherRecord:
    """A user notified about the instance's alerts."""

    email: str
    password: str = field(default="", repr=False)  # Never log password


@dataclass
class GroupRecord:
    """A group notified about the instance's alerts."""

    group: str


def _schema(properties: Dict[str, Any], required: list) -> Dict[str, Any]:
    return {
        "type": "object",
        "required": ["instance"] + required,
        "additionalProperties": False,
        "properties": {
            "instance": {
                "type": "string",
                "minLength": 1,
                "description": "HCaaS Instance Name",
            },
            "service_name": {
                "type": "string",
                "default": DEFAULT_SERVICE_NAME,
                "description": "HCaaS Service Name",
            },
            **properties,
        },
    }


URL_KIND = ResourceKind(
    name="hcaas_url",
    sub_path="url",
    record_type=UrlRecord,
    id_field="url",
    create_payload=lambda r: {
        "url": r.url,
        "expected_string": r.expected_string,
        "comment": r.comment,
    },
    listing_entry_type=dict,
    listing_key=lambda entry: entry.get("url", ""),
    # expected_string is not part of the listing, keep the declared one
    observe=lambda entry, current: replace(
        current, url=entry.get("url", ""), comment=entry.get("comment") or ""
    ),
    delete_mode=DeleteMode.BODY,
    delete_payload=lambda identity: {"url": identity},
    schema=_schema(
        {
            "url": {
                "type": "string",
                "minLength": 1,
                "description": "URL of monitoring",
            },
            "expected_string": {
                "type": "string",
                "description": "Expected body string",
            },
            "comment": {"type": "string", "description": "Comment of alert"},
        },
        ["url"],
    ),
    description="URL monitored by an HCaaS instance",
)

WATCHER_KIND = ResourceKind(
    name="hcaas_watcher",
    sub_path="watcher",
    record_type=WatcherRecord,
    id_field="email",
    create_payload=lambda r: {"watcher": r.email, "password": r.password},
    listing_entry_type=str,
    listing_key=lambda entry: entry,
    observe=lambda entry, current: replace(current, email=entry),
    delete_mode=DeleteMode.PATH,
    schema=_schema(
        {
            "email": {
                "type": "string",
                "minLength": 1,
                "description": "Email of watcher",
            },
            "password": {
                "type": "string",
                "writeOnly": True,
                "description": "Password of watcher",
            },
        },
        ["email"],
    ),
    description="Watcher notified by an HCaaS instance",
)

GROUP_KIND = ResourceKind(
    name="hcaas_group",
    sub_path="groups",
    record_type=GroupRecord,
    id_field="group",
    create_payload=lambda r: {"group": r.group},
    listing_entry_type=str,
    listing_key=lambda entry: entry,
    observe=lambda entry, current: replace(current, group=entry),
    delete_mode=DeleteMode.BODY,
    delete_payload=lambda identity: {"group": identity},
    schema=_schema(
        {
            "group": {
                "type": "string",
                "minLength": 1,
                "description": "Group name",
            },
        },
        ["group"],
    ),
    description="Group notified by an HCaaS instance",
)

BUILTIN_KINDS = [URL_KIND, WATCHER_KIND, GROUP_KIND]
