"""
Object Storage Factory

Creates storage clients and bucket adapters based on configuration.
"""

from typing import Optional

from bucketfs.core.config import settings
from .base import StorageClientInterface, StorageConfig
from .minio_adapter import MinIOStorageClient
from .memory_adapter import InMemoryStorageClient


class StorageFactory:
    """Factory for creating storage clients and adapters"""

    @staticmethod
    def create_client(
        storage_type: Optional[str] = None,
        config: Optional[StorageConfig] = None
    ) -> StorageClientInterface:
        """
        Create storage client based on type

        Args:
            storage_type: Type of client ("minio", "memory"), defaults to settings
            config: Optional custom configuration

        Returns:
            StorageClientInterface implementation
        """
        storage_type = (storage_type or settings.STORAGE_TYPE).lower()
        if config is None:
            config = StorageFactory._get_default_config()

        if storage_type == "minio":
            return MinIOStorageClient(config)
        elif storage_type == "memory":
            return InMemoryStorageClient(config)
        else:
            raise ValueError(f"Unsupported storage type: {storage_type}")

    @staticmethod
    def create_adapter(
        storage_type: Optional[str] = None,
        config: Optional[StorageConfig] = None
    ):
        """
        Create a BucketAdapter bound to the configured bucket and path prefix

        Args:
            storage_type: Type of client ("minio", "memory"), defaults to settings
            config: Optional custom configuration

        Returns:
            BucketAdapter
        """
        from bucketfs.infrastructure.filesystem import BucketAdapter

        if config is None:
            config = StorageFactory._get_default_config()
        client = StorageFactory.create_client(storage_type, config)
        return BucketAdapter(
            client,
            config.bucket_name,
            path_prefix=config.path_prefix,
            max_authorization_seconds=settings.MAX_DOWNLOAD_AUTH_SECONDS
        )

    @staticmethod
    def _get_default_config() -> StorageConfig:
        """Get default configuration from settings"""
        return StorageConfig(
            endpoint=settings.STORAGE_ENDPOINT,
            access_key=settings.STORAGE_ACCESS_KEY,
            secret_key=settings.STORAGE_SECRET_KEY,
            secure=settings.STORAGE_SECURE,
            region=settings.STORAGE_REGION,
            bucket_name=settings.STORAGE_BUCKET,
            path_prefix=settings.STORAGE_PATH_PREFIX,
            download_base_url=settings.DOWNLOAD_BASE_URL
        )

    @staticmethod
    def get_default_adapter():
        """Get default adapter instance from settings"""
        return StorageFactory.create_adapter()
