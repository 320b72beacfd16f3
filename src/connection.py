"""
Connection Configuration - Resolved target host and token.

A Connection is resolved once per reconciliation session and shared
read-only by every reconciler in it.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlencode

from config import DEFAULT_SERVICE_NAME
from errors import ResolutionError
from session import SessionLookup, normalize_target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connection:
    """Target platform host and authentication token."""

    host: str
    token: str = field(repr=False)

    def service_url(self, service_name: str, instance: str, path: str) -> str:
        """
        Build the proxy URL for a path on a service instance.

        The platform forwards the request to the backing service instance
        named in the proxy path, using the ``callback`` query parameter as
        the path on that instance.

        Args:
            service_name: Service kind, "healthcheck" when empty.
            instance: Service instance name.
            path: Resource path on the instance, leading slashes ignored.

        Returns:
            The full request URL.
        """
        service_name = service_name or DEFAULT_SERVICE_NAME
        query = urlencode(
            {"callback": f"/resources/{instance}/{path.lstrip('/')}"}
        )
        return f"{self.host}/services/{service_name}/proxy/{instance}?{query}"


class ConnectionResolver:
    """Resolves a Connection from explicit values or the ambient session."""

    def __init__(self, lookup: SessionLookup):
        self.lookup = lookup

    def resolve(
        self, host: Optional[str] = None, token: Optional[str] = None
    ) -> Connection:
        """
        Resolve host and token.

        Explicit values take precedence; empty values fall back to the
        session lookup.

        Raises:
            ResolutionError: If either value cannot be determined.
        """
        if host:
            host = normalize_target(host)
        else:
            host = self.lookup.get_target()
            logger.info(f"Using target from session: {host}")

        if not token:
            token = self.lookup.get_token()

        if not host:
            raise ResolutionError("target host could not be determined")
        if not token:
            raise ResolutionError("token could not be determined")

        return Connection(host=host, token=token)
