"""
Infrastructure Module

Object storage clients and the filesystem adapter built on top of them.
"""

from .exceptions import (
    InfrastructureError,
    StorageClientError,
    ObjectNotFoundError,
    InvalidListingArgument,
)

__all__ = [
    'InfrastructureError',
    'StorageClientError',
    'ObjectNotFoundError',
    'InvalidListingArgument',
]
