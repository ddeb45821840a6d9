"""Custom exception hierarchy for propsync."""

from __future__ import annotations


class PropSyncError(Exception):
    """Base exception for all propsync errors."""


class PropSyncConfigError(PropSyncError):
    """Invalid or missing configuration."""


class DisplayIdExhaustedError(PropSyncConfigError):
    """No unused display identifier was found within the attempt budget.

    Only reachable when the randomness source is broken or the prefix
    space is effectively full.  Fatal for the single create operation
    that asked for the identifier; the rest of the state is untouched.
    """

    def __init__(self, message: str, *, prefix: str = "", attempts: int = 0) -> None:
        self.prefix = prefix
        self.attempts = attempts
        super().__init__(message)


class CacheError(PropSyncError):
    """Local cache could not be written."""


class RemoteStoreError(PropSyncError):
    """Remote document store failure (network, permission, timeout)."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)
