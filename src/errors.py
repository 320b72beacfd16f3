"""
Error taxonomy for the HCaaS reconciler plugin.

Every fatal condition surfaces to the caller as one of these exceptions.
LockConflict is the only transient one and is consumed by the executor's
retry loop.
"""

from typing import Optional


class HcaasError(Exception):
    """Base class for all plugin errors."""

    pass


class ResolutionError(HcaasError):
    """Raised when the target host or token cannot be determined."""

    pass


class TransportError(HcaasError):
    """Raised on a network-level failure that is not an event lock."""

    pass


class LockConflict(HcaasError):
    """The remote platform reported its event lock as held."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class APIError(HcaasError):
    """Raised when the remote API answers with a non-retryable status >= 400."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"bad status code: {status_code}, body: {body!r}")
        self.status_code = status_code
        self.body = body


class LockTimeoutError(HcaasError, TimeoutError):
    """Raised when the deadline passes while the event lock is still held."""

    def __init__(self, attempts: int, last_conflict: Optional[LockConflict] = None):
        message = f"timeout while waiting for event lock after {attempts} attempt(s)"
        if last_conflict is not None:
            message += f": {last_conflict}"
        super().__init__(message)
        self.attempts = attempts
        self.last_conflict = last_conflict


class DecodeError(HcaasError):
    """Raised when a listing response is not the JSON array we expect."""

    pass


class RecordValidationError(HcaasError, ValueError):
    """Raised when declared resource attributes fail their schema."""

    pass
