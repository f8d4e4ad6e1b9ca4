"""
Object Storage Infrastructure Module

Provides the storage client contract and its implementations.
"""

from .base import StorageClientInterface, StorageConfig, FileHandle
from .minio_adapter import MinIOStorageClient
from .memory_adapter import InMemoryStorageClient
from .factory import StorageFactory

__all__ = [
    'StorageClientInterface',
    'StorageConfig',
    'FileHandle',
    'MinIOStorageClient',
    'InMemoryStorageClient',
    'StorageFactory'
]
