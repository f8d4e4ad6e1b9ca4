"""
Bucket Filesystem Adapter

Maps the generic filesystem contract onto a bucket-scoped storage client.
Object storage has no directories: a directory only exists as a shared
"dir/" prefix among object keys, so listings are computed client-side by
filtering the flat key list of the bucket.
"""

import logging
import re
import tempfile
from datetime import datetime
from typing import Any, BinaryIO, Dict, List, Optional, Union

from bucketfs.infrastructure.exceptions import InvalidListingArgument
from bucketfs.infrastructure.storage.object_storage.base import StorageClientInterface, FileHandle
from .base import FilesystemAdapterInterface, FileInfo, AdapterConfig

logger = logging.getLogger(__name__)

# 下载授权有效期的服务端范围 (秒)
MIN_AUTHORIZATION_SECONDS = 1
MAX_AUTHORIZATION_SECONDS = 604800

# 流式读取时内存缓冲的上限, 超出后落盘
STREAM_SPOOL_SIZE = 8 * 1024 * 1024


class BucketAdapter(FilesystemAdapterInterface):
    """
    Filesystem adapter bound to one storage client and one bucket

    The client and bucket are fixed for the adapter's lifetime. Every call is
    translated independently; nothing is cached between calls.
    """

    def __init__(
        self,
        client: StorageClientInterface,
        bucket_name: str,
        path_prefix: Optional[str] = None,
        max_authorization_seconds: int = MAX_AUTHORIZATION_SECONDS
    ):
        super().__init__(path_prefix)
        self._client = client
        self._bucket_name = bucket_name
        self._max_authorization_seconds = max_authorization_seconds

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def get_client(self) -> StorageClientInterface:
        return self._client

    def has(self, path: str) -> bool:
        return self._client.file_exists(self._bucket_name, self.apply_path_prefix(path))

    def write(self, path: str, contents: Union[bytes, str], config: AdapterConfig = None) -> FileInfo:
        return self._upload(path, contents)

    def write_stream(self, path: str, resource: BinaryIO, config: AdapterConfig = None) -> FileInfo:
        return self._upload(path, resource)

    def update(self, path: str, contents: Union[bytes, str], config: AdapterConfig = None) -> FileInfo:
        return self._upload(path, contents)

    def update_stream(self, path: str, resource: BinaryIO, config: AdapterConfig = None) -> FileInfo:
        return self._upload(path, resource)

    def _upload(self, path: str, body) -> FileInfo:
        key = self.apply_path_prefix(path)
        logger.debug(f"上传: {self._bucket_name}/{key}")
        file = self._client.upload(self._bucket_name, key, body)
        return self._get_file_info(file)

    def read(self, path: str) -> FileInfo:
        # 按内容下载需要文件 id, 先取文件信息
        file = self._client.get_file(self._bucket_name, self.apply_path_prefix(path))
        contents = self._client.download(file_id=file.id)
        return {'contents': contents}

    def read_stream(self, path: str) -> Union[FileInfo, bool]:
        key = self.apply_path_prefix(path)
        buffer = tempfile.SpooledTemporaryFile(max_size=STREAM_SPOOL_SIZE, mode='w+b')
        try:
            downloaded = self._client.download(
                bucket_name=self._bucket_name,
                file_name=key,
                save_as=buffer
            )
        except Exception:
            buffer.close()
            raise

        try:
            buffer.seek(0)
        except (OSError, ValueError) as e:
            logger.warning(f"无法为 {self._bucket_name}/{key} 构建读取流: {e}")
            buffer.close()
            return False

        if downloaded is not True:
            buffer.close()
            return False
        return {'stream': buffer}

    def rename(self, path: str, new_path: str) -> bool:
        return False

    def copy(self, path: str, new_path: str) -> FileInfo:
        source = self._client.get_file(self._bucket_name, self.apply_path_prefix(path))
        contents = self._client.download(file_id=source.id)
        return self._upload(new_path, contents)

    def delete(self, path: str) -> bool:
        return self._client.delete_file(self._bucket_name, self.apply_path_prefix(path))

    def delete_dir(self, dirname: str) -> bool:
        # 只删除与目录同名的占位对象, 子对象保留
        return self._client.delete_file(self._bucket_name, self.apply_path_prefix(dirname))

    def create_dir(self, dirname: str, config: AdapterConfig = None) -> FileInfo:
        self._client.upload(self._bucket_name, self.apply_path_prefix(dirname), b'')
        return {'type': 'dir', 'path': dirname}

    def get_metadata(self, path: str) -> bool:
        return False

    def get_mimetype(self, path: str) -> bool:
        return False

    def get_size(self, path: str) -> FileInfo:
        file = self._client.get_file(self._bucket_name, self.apply_path_prefix(path))
        return self._get_file_info(file)

    def get_timestamp(self, path: str) -> FileInfo:
        file = self._client.get_file(self._bucket_name, self.apply_path_prefix(path))
        return self._get_file_info(file)

    def list_contents(self, directory: str = "", recursive: bool = False) -> List[FileInfo]:
        """
        List files below a directory

        Args:
            directory: Directory path, "" for the root of the adapter
            recursive: Include files at any depth instead of direct children only

        Returns:
            File info of every matching object, in listing order

        Raises:
            InvalidListingArgument: if directory is not a string or recursive is not a bool
        """
        pattern = self._listing_pattern(directory, recursive)
        files = self._client.list_files(self._bucket_name, prefix=self.get_path_prefix() or "")
        listing = []
        for file in files:
            name = self.remove_path_prefix(file.name)
            # 与前缀同名的对象是挂载点本身, 不属于任何目录
            if name and pattern.fullmatch(name):
                listing.append(self._get_file_info(file))
        return listing

    @staticmethod
    def _listing_pattern(directory: str, recursive: bool) -> "re.Pattern":
        if not isinstance(directory, str):
            raise InvalidListingArgument(f"directory must be a string, got {type(directory).__name__}")
        directory = directory.strip("/")

        if recursive is True and directory == "":
            regex = r".*"
        elif recursive is True and directory != "":
            regex = re.escape(directory) + r"/.*"
        elif recursive is False and directory == "":
            regex = r"[^/]*"
        elif recursive is False and directory != "":
            regex = re.escape(directory) + r"/[^/]*"
        else:
            raise InvalidListingArgument(f"recursive must be a bool, got {recursive!r}")
        return re.compile(regex, re.DOTALL)

    def get_temporary_url(self, path: str, expiration: datetime, options: Optional[Dict[str, Any]] = None) -> str:
        """
        Get a temporary download URL

        Args:
            path: File path
            expiration: Instant the URL stops working; naive values are local time
            options: Unused

        Returns:
            Download URL carrying an Authorization query parameter
        """
        download_url = self._client.get_download_url(self._bucket_name, self.apply_path_prefix(path))

        now = datetime.now(expiration.tzinfo)
        valid_duration = int((expiration - now).total_seconds())
        valid_duration = max(MIN_AUTHORIZATION_SECONDS, min(valid_duration, self._max_authorization_seconds))

        authorization = self._client.get_download_authorization(
            self._bucket_name,
            self.get_path_prefix() or "",
            valid_duration
        )
        logger.debug(f"生成临时URL: {self._bucket_name}/{path} (有效期: {valid_duration}秒)")

        return f"{download_url}?Authorization={authorization['authorizationToken']}"

    def _get_file_info(self, file: FileHandle) -> FileInfo:
        return {
            'type': 'file',
            'path': self.remove_path_prefix(file.name),
            'timestamp': file.upload_timestamp // 1000,
            'size': file.size,
        }
