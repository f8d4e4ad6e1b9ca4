"""
In-Memory Object Storage Client

Keeps buckets in process memory. Used for local development and tests where
no object storage endpoint is available.
"""

import logging
import secrets
import time
import uuid
from typing import Any, BinaryIO, Dict, List, Optional, Union
from urllib.parse import quote

from bucketfs.infrastructure.exceptions import StorageClientError, ObjectNotFoundError
from .base import StorageClientInterface, StorageConfig, FileHandle, FileBody

logger = logging.getLogger(__name__)


class InMemoryStorageClient(StorageClientInterface):
    """
    In-memory implementation of StorageClientInterface

    Buckets are created on first upload. Issued download authorizations are
    kept in `authorizations` so callers can inspect their scope.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        self.config = config or StorageConfig()
        self._buckets: Dict[str, Dict[str, FileHandle]] = {}
        self._contents: Dict[str, bytes] = {}
        self.authorizations: List[Dict[str, Any]] = []

    def _bucket(self, bucket_name: str) -> Dict[str, FileHandle]:
        return self._buckets.setdefault(bucket_name, {})

    def file_exists(self, bucket_name: str, file_name: str) -> bool:
        return file_name in self._buckets.get(bucket_name, {})

    def upload(self, bucket_name: str, file_name: str, body: FileBody) -> FileHandle:
        if isinstance(body, str):
            data = body.encode('utf-8')
        elif isinstance(body, (bytes, bytearray)):
            data = bytes(body)
        elif hasattr(body, 'read'):
            data = body.read()
            if isinstance(data, str):
                data = data.encode('utf-8')
        else:
            raise StorageClientError(f"Unsupported upload body: {type(body).__name__}", "bad_request")

        bucket = self._bucket(bucket_name)
        previous = bucket.get(file_name)
        if previous is not None:
            self._contents.pop(previous.id, None)

        handle = FileHandle(
            id=uuid.uuid4().hex,
            name=file_name,
            size=len(data),
            upload_timestamp=int(time.time() * 1000)
        )
        bucket[file_name] = handle
        self._contents[handle.id] = data
        logger.debug(f"内存对象已写入: {bucket_name}/{file_name} ({len(data)}字节)")
        return handle

    def get_file(self, bucket_name: str, file_name: str) -> FileHandle:
        try:
            return self._buckets[bucket_name][file_name]
        except KeyError:
            raise ObjectNotFoundError(f"File not found: {bucket_name}/{file_name}", "not_found")

    def download(
        self,
        file_id: Optional[str] = None,
        bucket_name: Optional[str] = None,
        file_name: Optional[str] = None,
        save_as: Optional[BinaryIO] = None
    ) -> Union[bytes, bool]:
        if file_id is None:
            if bucket_name is None or file_name is None:
                raise StorageClientError("download needs a file id or a bucket and file name", "bad_request")
            file_id = self.get_file(bucket_name, file_name).id
        if file_id not in self._contents:
            raise ObjectNotFoundError(f"File id not found: {file_id}", "not_found")

        data = self._contents[file_id]
        if save_as is None:
            return data
        save_as.write(data)
        return True

    def delete_file(self, bucket_name: str, file_name: str) -> bool:
        handle = self.get_file(bucket_name, file_name)
        del self._buckets[bucket_name][file_name]
        self._contents.pop(handle.id, None)
        return True

    def list_files(self, bucket_name: str, prefix: str = "") -> List[FileHandle]:
        bucket = self._buckets.get(bucket_name, {})
        return [bucket[name] for name in sorted(bucket) if name.startswith(prefix or "")]

    def get_download_url(self, bucket_name: str, file_name: str) -> str:
        base_url = self.config.download_base_url.rstrip('/')
        return f"{base_url}/file/{bucket_name}/{quote(file_name)}"

    def get_download_authorization(
        self,
        bucket_name: str,
        file_name_prefix: str,
        valid_duration_in_seconds: int
    ) -> Dict[str, Any]:
        authorization = {
            'bucketName': bucket_name,
            'fileNamePrefix': file_name_prefix,
            'validDurationInSeconds': valid_duration_in_seconds,
            'authorizationToken': secrets.token_urlsafe(24),
        }
        self.authorizations.append(authorization)
        return authorization
