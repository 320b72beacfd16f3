"""
HCaaS Provider - Entry point used by the host framework.

The provider resolves the target connection once per session and hands out
one reconciler per resource kind. Each reconciler gets its own executor (and
HTTP session); the only thing they share is the read-only Connection.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from config import Config, get_config
from connection import Connection, ConnectionResolver
from errors import RecordValidationError
from executor import BackoffPolicy, LockedRequestExecutor
from plugins.base import ResourceState
from plugins.reconcilers.base import ResourceReconciler
from plugins.registry import ResourceRegistry, get_registry
from session import SessionLookup, TsuruSessionLookup
from validation import apply_defaults, validate_attributes

logger = logging.getLogger(__name__)


class HcaasProvider:
    """Configures the connection and builds reconcilers by kind name."""

    def __init__(
        self,
        config: Optional[Config] = None,
        lookup: Optional[SessionLookup] = None,
        registry: Optional[ResourceRegistry] = None,
        executor_factory: Optional[Callable[[], LockedRequestExecutor]] = None,
    ):
        self.config = config or get_config()
        self.resolver = ConnectionResolver(lookup or TsuruSessionLookup())
        self.registry = registry or get_registry()
        self._executor_factory = executor_factory or self._default_executor
        self._connection: Optional[Connection] = None
        self._reconcilers: Dict[str, ResourceReconciler] = {}

    def _default_executor(self) -> LockedRequestExecutor:
        retry = self.config.retry
        return LockedRequestExecutor(
            backoff=BackoffPolicy(
                base_delay=retry.backoff_base_delay,
                max_delay=retry.backoff_max_delay,
                jitter_factor=retry.backoff_jitter_factor,
            ),
            request_timeout=retry.request_timeout,
        )

    def configure(
        self, host: Optional[str] = None, token: Optional[str] = None
    ) -> Connection:
        """
        Resolve the target connection for this session.

        Precedence: explicit arguments, then HCAAS_HOST / HCAAS_TOKEN, then
        the ambient tsuru session.

        Raises:
            ResolutionError: If host or token cannot be determined.
        """
        self._connection = self.resolver.resolve(
            host=host or self.config.provider.host,
            token=token or self.config.provider.token,
        )
        self._reconcilers = {}
        logger.info(f"Provider configured for {self._connection.host}")
        return self._connection

    @property
    def connection(self) -> Connection:
        """The resolved connection, configured on first use."""
        if self._connection is None:
            self.configure()
        return self._connection

    def resource_kinds(self) -> List[str]:
        """Names of the resource kinds this provider manages."""
        return self.registry.list_kinds()

    def reconciler(self, kind_name: str) -> ResourceReconciler:
        """
        Get the reconciler for a resource kind.

        Raises:
            ValueError: If the kind is not registered.
        """
        if kind_name not in self._reconcilers:
            kind = self.registry.get_kind(kind_name)
            self._reconcilers[kind_name] = ResourceReconciler(
                kind=kind,
                connection=self.connection,
                executor=self._executor_factory(),
                retry=self.config.retry,
            )
        return self._reconcilers[kind_name]

    def state_from_attributes(
        self, kind_name: str, attributes: Dict[str, Any]
    ) -> ResourceState:
        """
        Validate declared attributes and map them to a typed state.

        A missing service_name falls back to the configured one. The 'id'
        attribute, if present, is carried over as the tracked identity and
        is not part of the validated declaration.

        Raises:
            ValueError: If the kind is not registered.
            RecordValidationError: If the attributes fail the kind's schema.
        """
        kind = self.registry.get_kind(kind_name)
        declared = {
            k: v for k, v in attributes.items() if k != "id" and v is not None
        }
        if not declared.get("service_name"):
            declared["service_name"] = self.config.provider.service_name
        declared = apply_defaults(declared, kind.schema)

        is_valid, error = validate_attributes(declared, kind.schema)
        if not is_valid:
            raise RecordValidationError(f"{kind_name}: {error}")

        if "id" in attributes:
            declared["id"] = attributes["id"]
        return ResourceState.from_attributes(kind, declared)
