"""
日志配置
"""

import sys
import logging
from pathlib import Path
from loguru import logger


class InterceptHandler(logging.Handler):
    """拦截标准库日志并转发给loguru"""

    def emit(self, record):
        # 获取对应的loguru等级
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 查找调用者
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(app_settings=None, level: str = None):
    """设置应用日志"""

    if app_settings is None:
        from voicepair.config import settings as app_settings

    level = level or ("DEBUG" if app_settings.debug else "INFO")

    # 移除默认的loguru处理器
    logger.remove()

    # 日志格式
    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )
    logger.configure(extra={"name": "root"})

    # 控制台日志
    logger.add(
        sys.stdout,
        format=log_format,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=app_settings.debug
    )

    if app_settings.log_to_file:
        log_dir = Path(app_settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # 应用日志
        logger.add(
            log_dir / "voicepair.log",
            format=log_format,
            level="INFO",
            rotation="1 day",
            retention="30 days",
            compression="zip",
            backtrace=True
        )

        # 错误日志
        logger.add(
            log_dir / "voicepair_error.log",
            format=log_format,
            level="ERROR",
            rotation="1 week",
            retention="90 days",
            compression="zip",
            backtrace=True
        )

    # 拦截标准库日志
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False


def get_logger(name: str):
    """获取特定名称的日志器"""
    return logger.bind(name=name)


# 创建模块专用日志器
api_logger = get_logger("api")
service_logger = get_logger("service")
storage_logger = get_logger("storage")
