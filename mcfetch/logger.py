"""
日志模块

控制台输出使用 loguru；需要排查下载问题时可以额外写入日志文件。
"""

import os
import sys
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} | {message}"


def resolve_level(debug: bool = False) -> str:
    """--debug 或 MCFETCH_DEBUG=1 时使用 DEBUG，否则 INFO"""
    if debug or os.environ.get("MCFETCH_DEBUG", "0") == "1":
        return "DEBUG"
    return "INFO"


def setup_logger(
    level: Optional[str] = None,
    sink=sys.stdout,
    enqueue: bool = True,
    colorize: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    设置日志记录器

    Args:
        level: 日志级别，默认由 resolve_level() 决定
        sink: 控制台输出目标
        enqueue: 是否启用队列（线程安全）
        colorize: 控制台是否启用颜色
        log_file: 日志文件路径，文件始终记录 DEBUG 级别，按 10 MB 轮转
    """
    level = level or resolve_level()
    debug = level == "DEBUG"

    logger.remove()
    logger.add(
        sink=sink,
        format=CONSOLE_FORMAT,
        enqueue=enqueue,
        level=level,
        colorize=colorize,
        backtrace=debug,
        diagnose=debug,
    )

    if log_file:
        logger.add(
            log_file,
            format=FILE_FORMAT,
            enqueue=enqueue,
            level="DEBUG",
            rotation="10 MB",
            retention=3,
            encoding="utf-8",
        )

    if debug:
        logger.debug("DEBUG 模式已启用")


__all__ = ["logger", "setup_logger", "resolve_level"]
