"""
McFetch 下载层

包含文件校验、单文件下载、任务规划与并发调度。
"""

from mcfetch.download.verifier import FileVerifier
from mcfetch.download.retry import linear_backoff, retry_async
from mcfetch.download.fetcher import FetchResult, FileFetcher
from mcfetch.download.planner import TaskPlanner, dedupe
from mcfetch.download.scheduler import DownloadScheduler, DownloadStats

__all__ = [
    "FileVerifier",
    "linear_backoff",
    "retry_async",
    "FetchResult",
    "FileFetcher",
    "TaskPlanner",
    "dedupe",
    "DownloadScheduler",
    "DownloadStats",
]
