"""
McFetch - Minecraft 版本下载工具

解析版本清单，下载客户端、依赖库、原生库与资源文件，支持并发、重试和 SHA1 校验。
"""

from mcfetch.cancellation import CancellationToken
from mcfetch.events import EventBus
from mcfetch.models import DownloaderConfig, EventType
from mcfetch.orchestrator import MinecraftDownloader

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "DownloaderConfig",
    "EventBus",
    "EventType",
    "MinecraftDownloader",
    "__version__",
]
