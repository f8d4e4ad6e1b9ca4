import logging
import sys
from typing import Optional

from bucketfs.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    配置根日志记录器, 输出到标准输出

    Args:
        level: 日志级别名称, 默认取 settings.LOG_LEVEL

    Returns:
        根日志记录器
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # minio 底层的 urllib3 日志过于频繁
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    return logging.getLogger()
