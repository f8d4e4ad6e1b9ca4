import pytest

from bucketfs.infrastructure.filesystem import BucketAdapter
from bucketfs.infrastructure.storage.object_storage import InMemoryStorageClient, StorageConfig

from tests.consts import TEST_BUCKET_NAME


@pytest.fixture
def storage_client():
    return InMemoryStorageClient(StorageConfig(download_base_url="https://f004.example.com"))


@pytest.fixture
def adapter(storage_client):
    return BucketAdapter(storage_client, TEST_BUCKET_NAME)


@pytest.fixture
def docs_bucket(storage_client, adapter):
    """Bucket holding a.txt, docs/b.txt and docs/sub/c.txt"""
    for name in ("a.txt", "docs/b.txt", "docs/sub/c.txt"):
        storage_client.upload(TEST_BUCKET_NAME, name, name.encode())
    return adapter
