"""
Object Storage Abstract Base Classes

Defines the storage client contract consumed by the filesystem adapter.
Clients operate on a named bucket and flat file names; they know nothing
about directories or path prefixes.
"""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, List, Optional, Union
from dataclasses import dataclass


@dataclass
class StorageConfig:
    """Configuration for object storage services"""
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    secure: bool = True
    region: Optional[str] = None

    # Adapter binding
    bucket_name: str = "bucketfs"
    path_prefix: str = ""

    # Used by clients that build download URLs themselves
    download_base_url: str = "http://localhost:9000"


@dataclass
class FileHandle:
    """A stored file as reported by the storage service"""
    id: str
    name: str
    size: int
    upload_timestamp: int  # milliseconds since epoch
    content_type: Optional[str] = None


FileBody = Union[bytes, str, BinaryIO]


class StorageClientInterface(ABC):
    """
    Abstract interface for bucket-scoped object storage clients

    Every operation names the bucket explicitly. Failures reported by the
    remote service are raised as StorageClientError subclasses.
    """

    @abstractmethod
    def file_exists(self, bucket_name: str, file_name: str) -> bool:
        """
        Check if a file exists in the bucket

        Args:
            bucket_name: Bucket name
            file_name: Object key

        Returns:
            True if the key exists, False otherwise
        """
        pass

    @abstractmethod
    def upload(self, bucket_name: str, file_name: str, body: FileBody) -> FileHandle:
        """
        Upload a body under the given key, replacing any existing object

        Args:
            bucket_name: Target bucket name
            file_name: Object key
            body: Content as bytes, text or a readable binary stream

        Returns:
            Handle of the stored file
        """
        pass

    @abstractmethod
    def get_file(self, bucket_name: str, file_name: str) -> FileHandle:
        """
        Get file information by name

        Raises:
            ObjectNotFoundError: if the key does not exist
        """
        pass

    @abstractmethod
    def download(
        self,
        file_id: Optional[str] = None,
        bucket_name: Optional[str] = None,
        file_name: Optional[str] = None,
        save_as: Optional[BinaryIO] = None
    ) -> Union[bytes, bool]:
        """
        Download a file either by id or by bucket and name

        Args:
            file_id: File id as returned in a FileHandle
            bucket_name: Bucket name, used together with file_name
            file_name: Object key, used together with bucket_name
            save_as: Optional writable sink

        Returns:
            The file content, or True/False when save_as is given
        """
        pass

    @abstractmethod
    def delete_file(self, bucket_name: str, file_name: str) -> bool:
        """
        Delete the object stored under exactly this key

        Raises:
            ObjectNotFoundError: if the key does not exist
        """
        pass

    @abstractmethod
    def list_files(self, bucket_name: str, prefix: str = "") -> List[FileHandle]:
        """
        List every file whose name starts with prefix, at any depth

        Returns:
            File handles ordered by name
        """
        pass

    @abstractmethod
    def get_download_url(self, bucket_name: str, file_name: str) -> str:
        """Get the base download URL of a file"""
        pass

    @abstractmethod
    def get_download_authorization(
        self,
        bucket_name: str,
        file_name_prefix: str,
        valid_duration_in_seconds: int
    ) -> Dict[str, Any]:
        """
        Get a download authorization scoped to a bucket and name prefix

        Returns:
            Dict containing at least 'authorizationToken'
        """
        pass
