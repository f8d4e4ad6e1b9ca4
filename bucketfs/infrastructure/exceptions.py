"""
Custom exceptions for the Infrastructure layer.
"""

from typing import Optional


class InfrastructureError(Exception):
    """Base class for exceptions in the infrastructure layer."""
    pass


class StorageClientError(InfrastructureError):
    """Raised by storage clients when the remote service rejects a call."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ObjectNotFoundError(StorageClientError):
    """The requested object key does not exist in the bucket."""
    pass


class InvalidListingArgument(InfrastructureError, ValueError):
    """Directory/recursive combination that no listing rule covers."""
    pass
