"""
Locked-Request Executor - Retries mutating requests while the remote event
lock is held.

The platform serializes mutating operations per target behind an event lock.
While the lock is held it answers with a 5xx whose body mentions
"event locked" (or the connection fails with that text). Those outcomes are
retried with exponential backoff until the deadline; any other status >= 400
is an application error and fails immediately.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from config import DEFAULT_SAFETY_MARGIN
from errors import APIError, LockConflict, LockTimeoutError, TransportError

logger = logging.getLogger(__name__)

LOCK_MARKER = "event locked"

# Shortest transport timeout given to an attempt
MIN_ATTEMPT_TIMEOUT = 1.0


@dataclass
class BackoffPolicy:
    """Exponential backoff with jitter, capped at max_delay."""

    base_delay: float = 0.5  # seconds
    max_delay: float = 10.0  # seconds
    jitter_factor: float = 0.1  # ±10% jitter

    def delay(self, retry: int) -> float:
        """Seconds to wait before the given retry (0-based)."""
        delay = min(self.base_delay * (2**retry), self.max_delay)
        # Jitter keeps concurrent reconcilers from retrying in lockstep
        return delay * (1 + random.uniform(-self.jitter_factor, self.jitter_factor))


class LockedRequestExecutor:
    """
    Sends requests to the remote API, retrying on event lock conflicts.

    Requests are given as ``requests.Request`` objects and prepared again on
    every attempt, so their bodies can be replayed. Each executor owns its
    own ``requests.Session``.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        backoff: Optional[BackoffPolicy] = None,
        request_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session or requests.Session()
        self.backoff = backoff or BackoffPolicy()
        self.request_timeout = request_timeout
        self._clock = clock
        self._sleep = sleep

    def deadline_from_timeout(
        self, timeout: float, safety_margin: float = DEFAULT_SAFETY_MARGIN
    ) -> float:
        """
        Absolute deadline for an operation with the given timeout.

        The safety margin is reserved for the plugin host's own round trips.
        """
        return self._clock() + timeout - safety_margin

    def send(
        self, request: requests.Request, timeout: Optional[float] = None
    ) -> requests.Response:
        """
        Send a request exactly once, without classifying the status.

        Args:
            request: The request to send.
            timeout: Transport timeout in seconds (default: request_timeout).

        Raises:
            TransportError: On any network-level failure.
        """
        if timeout is None:
            timeout = self.request_timeout
        prepared = self.session.prepare_request(request)
        try:
            return self.session.send(prepared, timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(f"{request.method} {request.url}: {e}") from e

    def _attempt(self, request: requests.Request, deadline: float) -> requests.Response:
        """Send one attempt within the time left and classify its outcome."""
        remaining = deadline - self._clock()
        timeout = min(self.request_timeout, max(remaining, MIN_ATTEMPT_TIMEOUT))
        try:
            response = self.send(request, timeout=timeout)
        except TransportError as e:
            if LOCK_MARKER in str(e.__cause__):
                raise LockConflict(str(e.__cause__)) from e.__cause__
            raise

        body = response.text
        if response.status_code >= 500 and LOCK_MARKER in body:
            raise LockConflict(body, status_code=response.status_code)
        if response.status_code >= 400:
            raise APIError(response.status_code, body)
        return response

    def execute(self, request: requests.Request, deadline: float) -> requests.Response:
        """
        Send a request, retrying while the event lock is held.

        At least one attempt is always made. Retries are only started while
        at least MIN_ATTEMPT_TIMEOUT is left, and each attempt's transport
        timeout is clipped to the time left, so waits and retried attempts
        both end by the deadline.

        Args:
            request: The request to send. Prepared again on every attempt.
            deadline: Absolute deadline on this executor's clock.

        Returns:
            The successful response (status < 400).

        Raises:
            APIError: Non-retryable status >= 400.
            TransportError: Network failure without the lock marker.
            LockTimeoutError: Deadline reached while the lock was still held.
        """
        attempts = 0
        while True:
            attempts += 1
            try:
                response = self._attempt(request, deadline)
            except LockConflict as conflict:
                remaining = deadline - self._clock()
                if remaining <= MIN_ATTEMPT_TIMEOUT:
                    logger.warning(
                        f"Giving up on {request.method} {request.url} after "
                        f"{attempts} attempt(s): event still locked"
                    )
                    raise LockTimeoutError(attempts, conflict) from conflict

                wait = min(
                    self.backoff.delay(attempts - 1), remaining - MIN_ATTEMPT_TIMEOUT
                )
                logger.info(
                    f"Event locked on {request.method} {request.url} "
                    f"(attempt {attempts}), retrying in {wait:.1f}s"
                )
                self._sleep(wait)
                continue

            if attempts > 1:
                logger.info(
                    f"{request.method} {request.url} succeeded after "
                    f"{attempts} attempts"
                )
            return response
