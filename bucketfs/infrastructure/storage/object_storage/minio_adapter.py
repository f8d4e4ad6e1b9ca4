"""
MinIO Object Storage Client

Implements StorageClientInterface on top of the MinIO SDK, which speaks to any
S3-compatible endpoint (MinIO, Backblaze B2's S3 API, AWS S3, ...).
"""

import functools
import io
import logging
from typing import Any, BinaryIO, Dict, List, Optional, Union
from urllib.parse import quote

from minio import Minio
from minio.error import S3Error

from bucketfs.infrastructure.exceptions import StorageClientError, ObjectNotFoundError
from .base import StorageClientInterface, StorageConfig, FileHandle, FileBody

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ("NoSuchKey", "NoSuchObject", "NoSuchBucket", "NoSuchVersion")


def wrap_s3_errors(cb):
    """Converts MinIO S3Error into StorageClientError subclasses."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except S3Error as ex:
            logger.error(f"❌ {cb.__name__} 失败: {ex.code}: {ex.message}")
            if ex.code in NOT_FOUND_CODES:
                raise ObjectNotFoundError(f"{ex.code}: {ex.message}", ex.code) from ex
            raise StorageClientError(f"{ex.code}: {ex.message}", ex.code) from ex

    return _inner


class MinIOStorageClient(StorageClientInterface):
    """
    MinIO implementation of StorageClientInterface

    File ids are "<bucket>/<object name>", since S3 addresses objects by name.
    """

    def __init__(self, config: StorageConfig, client: Optional[Minio] = None):
        self.config = config
        self.client = client or Minio(
            endpoint=config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
            region=config.region
        )

    @staticmethod
    def _file_id(bucket_name: str, object_name: str) -> str:
        return f"{bucket_name}/{object_name}"

    @staticmethod
    def _split_file_id(file_id: str):
        bucket_name, sep, object_name = file_id.partition("/")
        if not sep or not bucket_name or not object_name:
            raise StorageClientError(f"Invalid file id: {file_id}", "bad_file_id")
        return bucket_name, object_name

    def _to_handle(self, bucket_name: str, obj) -> FileHandle:
        timestamp = int(obj.last_modified.timestamp() * 1000) if obj.last_modified else 0
        return FileHandle(
            id=self._file_id(bucket_name, obj.object_name),
            name=obj.object_name,
            size=obj.size or 0,
            upload_timestamp=timestamp,
            content_type=getattr(obj, 'content_type', None)
        )

    def file_exists(self, bucket_name: str, file_name: str) -> bool:
        """Check if file exists in MinIO"""
        try:
            self.client.stat_object(bucket_name=bucket_name, object_name=file_name)
            return True
        except S3Error as e:
            if e.code in NOT_FOUND_CODES:
                return False
            logger.error(f"❌ 检查文件存在性时发生错误: {e}")
            raise StorageClientError(f"{e.code}: {e.message}", e.code) from e

    @wrap_s3_errors
    def upload(self, bucket_name: str, file_name: str, body: FileBody) -> FileHandle:
        """Upload bytes, text or a binary stream to MinIO"""
        if isinstance(body, str):
            body = body.encode('utf-8')

        if isinstance(body, (bytes, bytearray)):
            data_stream = io.BytesIO(body)
            file_size = len(body)
        else:
            data_stream = body
            try:
                current_pos = data_stream.tell()
                data_stream.seek(0, 2)
                file_size = data_stream.tell() - current_pos
                data_stream.seek(current_pos)
            except (OSError, io.UnsupportedOperation):
                # 不可寻址的流只能完整读入内存
                content = data_stream.read()
                data_stream = io.BytesIO(content)
                file_size = len(content)

        logger.debug(f"正在上传对象: {bucket_name}/{file_name} (大小: {file_size}字节)")
        self.client.put_object(
            bucket_name=bucket_name,
            object_name=file_name,
            data=data_stream,
            length=file_size
        )
        logger.info(f"✅ 文件对象上传成功: {bucket_name}/{file_name}")

        return self.get_file(bucket_name, file_name)

    @wrap_s3_errors
    def get_file(self, bucket_name: str, file_name: str) -> FileHandle:
        """Get file information via stat_object"""
        stat = self.client.stat_object(bucket_name=bucket_name, object_name=file_name)
        return self._to_handle(bucket_name, stat)

    @wrap_s3_errors
    def download(
        self,
        file_id: Optional[str] = None,
        bucket_name: Optional[str] = None,
        file_name: Optional[str] = None,
        save_as: Optional[BinaryIO] = None
    ) -> Union[bytes, bool]:
        """Download file content, optionally into a writable sink"""
        if file_id is not None:
            bucket_name, file_name = self._split_file_id(file_id)
        elif bucket_name is None or file_name is None:
            raise StorageClientError("download needs a file id or a bucket and file name", "bad_request")

        logger.debug(f"正在下载文件: {bucket_name}/{file_name}")
        response = self.client.get_object(bucket_name=bucket_name, object_name=file_name)
        try:
            if save_as is None:
                return response.read()
            for chunk in response.stream(32 * 1024):
                save_as.write(chunk)
            return True
        finally:
            response.close()
            response.release_conn()

    @wrap_s3_errors
    def delete_file(self, bucket_name: str, file_name: str) -> bool:
        """Delete file from MinIO"""
        logger.debug(f"正在删除文件: {bucket_name}/{file_name}")
        # remove_object 对不存在的对象也会成功, 先确认对象存在
        self.client.stat_object(bucket_name=bucket_name, object_name=file_name)
        self.client.remove_object(bucket_name=bucket_name, object_name=file_name)
        logger.info(f"✅ 文件删除成功: {bucket_name}/{file_name}")
        return True

    @wrap_s3_errors
    def list_files(self, bucket_name: str, prefix: str = "") -> List[FileHandle]:
        """List files in bucket with optional prefix filter"""
        objects = self.client.list_objects(
            bucket_name=bucket_name,
            prefix=prefix or None,
            recursive=True
        )
        files = [self._to_handle(bucket_name, obj) for obj in objects if not obj.is_dir]
        logger.debug(f"列出文件成功: {bucket_name}/{prefix or ''} (共{len(files)}个文件)")
        return files

    def get_download_url(self, bucket_name: str, file_name: str) -> str:
        scheme = "https" if self.config.secure else "http"
        return f"{scheme}://{self.config.endpoint}/{bucket_name}/{quote(file_name)}"

    def get_download_authorization(
        self,
        bucket_name: str,
        file_name_prefix: str,
        valid_duration_in_seconds: int
    ) -> Dict[str, Any]:
        # S3 签名只针对单个对象, 没有按前缀授权的令牌
        logger.error(f"❌ S3 兼容端点不支持按前缀下载授权: {bucket_name}/{file_name_prefix}")
        raise StorageClientError(
            "Prefix-scoped download authorization is not available on S3-compatible endpoints",
            "unsupported"
        )
