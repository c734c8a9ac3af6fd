# news_client/utils/logger.py
import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, Union

# 项目根目录是 news_client 包的上一级
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DEFAULT_LOG_DIR = os.path.join(project_root, 'logs')
LOG_FILE_NAME = 'news_client.log'

LOGGER_NAME = "news_client"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level(log_level: Union[int, str]) -> int:
    """接受 logging 常量或配置中的级别名称 ('DEBUG', 'info' ...)，无法识别时使用 INFO。"""
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level: Union[int, str] = logging.INFO, backup_count: int = 7, when: str = 'D',
                  interval: int = 1, log_dir: Optional[str] = None) -> logging.Logger:
    """
    配置 news_client 日志记录器: 按时间轮转的日志文件 + 标准输出。

    Args:
        log_level: 日志级别，logging 常量或级别名称。
        backup_count: 保留的轮转文件数量。
        when: 轮转间隔类型，同 TimedRotatingFileHandler，默认按天。
        interval: 轮转间隔数量。
        log_dir: 日志目录，默认为项目根目录下的 logs/。

    Returns:
        配置好的 Logger。重复调用会替换已有的 handlers。
    """
    level = _resolve_level(log_level)
    log_dir = log_dir or DEFAULT_LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, LOG_FILE_NAME)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = TimedRotatingFileHandler(log_file, when=when, interval=interval,
                                            backupCount=backup_count, encoding='utf-8')
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized: level={logging.getLevelName(level)}, file={log_file}, "
                f"rotation when='{when}' interval={interval} backupCount={backup_count}")
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)
