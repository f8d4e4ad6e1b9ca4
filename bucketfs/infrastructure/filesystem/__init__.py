"""
Filesystem Adapter Module

Generic filesystem contract and its object-storage-backed implementation.
"""

from .base import FilesystemAdapterInterface
from .bucket_adapter import BucketAdapter

__all__ = [
    'FilesystemAdapterInterface',
    'BucketAdapter'
]
