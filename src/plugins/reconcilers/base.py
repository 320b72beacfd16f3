"""
Resource Reconciler - Generic create/read/delete against the HCaaS API.

One reconciler instance serves one resource kind. All kinds share the same
protocol and differ only in what their ResourceKind descriptor supplies:
payload shape, sub-path, listing comparison and delete mode.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from config import DEFAULT_SERVICE_NAME, RetryConfig
from connection import Connection
from errors import APIError, DecodeError, RecordValidationError
from executor import LockedRequestExecutor
from plugins.base import DeleteMode, ResourceKind, ResourceState

logger = logging.getLogger(__name__)


class ResourceReconciler:
    """
    Reconciles tracked resource state against the remote listing.

    Mutating calls go through the LockedRequestExecutor; reads are a single
    GET. Methods update the given state in place and return it.
    """

    def __init__(
        self,
        kind: ResourceKind,
        connection: Connection,
        executor: LockedRequestExecutor,
        retry: Optional[RetryConfig] = None,
    ):
        self.kind = kind
        self.connection = connection
        self.executor = executor
        self.retry = retry or RetryConfig()

    def _url(self, instance: str, service_name: str, path: Optional[str] = None) -> str:
        return self.connection.service_url(
            service_name, instance, path or self.kind.sub_path
        )

    def _headers(self, accept_json: bool = False) -> Dict[str, str]:
        headers = {"Authorization": self.connection.token}
        if accept_json:
            headers["Accept"] = "application/json"
        return headers

    def _deadline(self, timeout: Optional[float], default: float) -> float:
        return self.executor.deadline_from_timeout(
            timeout if timeout is not None else default,
            self.retry.safety_margin,
        )

    def create(
        self, state: ResourceState, timeout: Optional[float] = None
    ) -> ResourceState:
        """
        Create the remote object and start tracking it.

        Args:
            state: State holding the declared record. Its id is set on success.
            timeout: Operation timeout in seconds (defaults to the configured
                create timeout). The safety margin is subtracted from it.

        Raises:
            RecordValidationError: If the record has no natural key.
            APIError, TransportError, LockTimeoutError: From the executor.
        """
        identity = self.kind.identity(state.record)
        if not identity:
            raise RecordValidationError(
                f"{self.kind.name}: '{self.kind.id_field}' is required"
            )

        request = requests.Request(
            "POST",
            self._url(state.instance, state.service_name),
            headers=self._headers(),
            json=self.kind.create_payload(state.record),
        )
        deadline = self._deadline(timeout, self.retry.create_timeout)
        self.executor.execute(request, deadline)

        state.id = identity
        logger.info(
            f"Created {self.kind.name} '{identity}' on instance {state.instance}"
        )
        return state

    def list(
        self, instance: str, service_name: str = DEFAULT_SERVICE_NAME
    ) -> List[Any]:
        """
        Fetch and decode the remote listing for this kind.

        Raises:
            APIError: On a response status >= 400.
            TransportError: On a network failure.
            DecodeError: If the body is not a JSON array of listing entries.
        """
        request = requests.Request(
            "GET",
            self._url(instance, service_name),
            headers=self._headers(accept_json=True),
        )
        response = self.executor.send(request)

        if response.status_code >= 400:
            raise APIError(response.status_code, response.text)

        try:
            listing = response.json()
        except ValueError as e:
            raise DecodeError(
                f"{self.kind.name}: invalid JSON in listing response: {e}"
            ) from e

        if not isinstance(listing, list):
            raise DecodeError(
                f"{self.kind.name}: expected a JSON array, "
                f"got {type(listing).__name__}"
            )
        for entry in listing:
            if not isinstance(entry, self.kind.listing_entry_type):
                raise DecodeError(
                    f"{self.kind.name}: unexpected listing entry {json.dumps(entry)}"
                )
        return listing

    def read(self, state: ResourceState) -> ResourceState:
        """
        Refresh the state from the remote listing.

        A tracked identity missing from the listing was deleted out of band;
        the identity is cleared and no error is raised.
        """
        listing = self.list(state.instance, state.service_name)

        for entry in listing:
            if self.kind.listing_key(entry) == state.id:
                state.record = self.kind.observe(entry, state.record)
                return state

        if state.id:
            logger.info(
                f"{self.kind.name} '{state.id}' not found on instance "
                f"{state.instance}, removing from state"
            )
        state.id = ""
        return state

    def delete(
        self, state: ResourceState, timeout: Optional[float] = None
    ) -> ResourceState:
        """
        Delete the remote object and stop tracking it.

        Args:
            state: Tracked state. Its id is cleared on success.
            timeout: Operation timeout in seconds (defaults to the configured
                delete timeout).

        Raises:
            APIError, TransportError, LockTimeoutError: From the executor.
        """
        if not state.id:
            logger.debug(f"{self.kind.name} has no identity, nothing to delete")
            return state

        if self.kind.delete_mode is DeleteMode.PATH:
            request = requests.Request(
                "DELETE",
                self._url(
                    state.instance,
                    state.service_name,
                    f"{self.kind.sub_path}/{state.id}",
                ),
                headers=self._headers(),
            )
        else:
            request = requests.Request(
                "DELETE",
                self._url(state.instance, state.service_name),
                headers=self._headers(),
                json=self.kind.delete_payload(state.id),
            )

        deadline = self._deadline(timeout, self.retry.delete_timeout)
        self.executor.execute(request, deadline)

        logger.info(
            f"Deleted {self.kind.name} '{state.id}' from instance {state.instance}"
        )
        state.id = ""
        return state

    def import_state(
        self,
        instance: str,
        identity: str,
        service_name: str = DEFAULT_SERVICE_NAME,
    ) -> ResourceState:
        """
        Start tracking an existing remote object by its identity.

        The returned state only carries the identity; a following read()
        fills in the observed attributes.
        """
        return ResourceState(
            kind=self.kind.name,
            instance=instance,
            service_name=service_name or DEFAULT_SERVICE_NAME,
            record=self.kind.record_for_identity(identity),
            id=identity,
        )
