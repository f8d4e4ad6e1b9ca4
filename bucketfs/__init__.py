"""
bucketfs

Filesystem-style access to a single object storage bucket.
"""

from bucketfs.infrastructure.filesystem import FilesystemAdapterInterface, BucketAdapter
from bucketfs.infrastructure.storage.object_storage import (
    StorageClientInterface,
    StorageConfig,
    FileHandle,
    MinIOStorageClient,
    InMemoryStorageClient,
    StorageFactory,
)
from bucketfs.infrastructure.exceptions import (
    InfrastructureError,
    StorageClientError,
    ObjectNotFoundError,
    InvalidListingArgument,
)

__all__ = [
    'FilesystemAdapterInterface',
    'BucketAdapter',
    'StorageClientInterface',
    'StorageConfig',
    'FileHandle',
    'MinIOStorageClient',
    'InMemoryStorageClient',
    'StorageFactory',
    'InfrastructureError',
    'StorageClientError',
    'ObjectNotFoundError',
    'InvalidListingArgument',
]
