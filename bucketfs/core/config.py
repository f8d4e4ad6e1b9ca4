import os
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import field_validator

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
env_path = os.path.join(project_root, '.env')
load_dotenv(env_path)


class Settings(BaseSettings):
    # 基本设置
    PROJECT_NAME: str = "bucketfs"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # 存储客户端类型: minio (S3 兼容端点) 或 memory (本地开发/测试)
    STORAGE_TYPE: str = os.getenv("STORAGE_TYPE", "minio")

    # S3 兼容端点配置, 例如 s3.us-west-004.backblazeb2.com
    STORAGE_ENDPOINT: str = os.getenv("STORAGE_ENDPOINT", "localhost:9000")
    STORAGE_ACCESS_KEY: str = os.getenv("STORAGE_ACCESS_KEY", "minioadmin")
    STORAGE_SECRET_KEY: str = os.getenv("STORAGE_SECRET_KEY", "minioadmin")
    STORAGE_SECURE: bool = False
    STORAGE_REGION: Optional[str] = os.getenv("STORAGE_REGION", None)

    # 适配器绑定的存储桶和路径前缀
    STORAGE_BUCKET: str = os.getenv("STORAGE_BUCKET", "bucketfs")
    STORAGE_PATH_PREFIX: str = os.getenv("STORAGE_PATH_PREFIX", "")

    # 内存客户端生成下载地址时使用的基础地址
    DOWNLOAD_BASE_URL: str = os.getenv("DOWNLOAD_BASE_URL", "http://localhost:9000")

    # 临时下载授权的最长有效期 (秒), 服务端上限为 7 天
    MAX_DOWNLOAD_AUTH_SECONDS: int = int(os.getenv("MAX_DOWNLOAD_AUTH_SECONDS", 604800))

    @field_validator("STORAGE_PATH_PREFIX", mode="before")
    @classmethod
    def normalize_path_prefix(cls, v: Optional[str]) -> str:
        if v is None:
            return ""
        v = str(v).strip()
        if not v:
            return ""
        return v.rstrip("/\\") + "/"

    @field_validator("STORAGE_TYPE", mode="before")
    @classmethod
    def normalize_storage_type(cls, v: str) -> str:
        return str(v).strip().lower()

    class Config:
        case_sensitive = True
        env_file = ".env"


# 创建设置实例
settings = Settings()
