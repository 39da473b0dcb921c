"""
并发调度器

以固定数量的工作协程消费下载队列：任意一个任务完成后立即开始下一个，
始终保持不超过并发上限的下载在进行中。第一个不可恢复的错误会停止派发
新任务，已在进行中的下载不会被强制中断。
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger

from mcfetch.cancellation import CancellationToken
from mcfetch.download.fetcher import FileFetcher
from mcfetch.events import EventBus
from mcfetch.exceptions import DownloadCancelledError
from mcfetch.models import FetchObligation, clamp_concurrency


@dataclass
class DownloadStats:
    """下载统计"""

    total: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    bytes_downloaded: int = 0
    peak_in_flight: int = 0


class DownloadScheduler:
    """下载调度器"""

    def __init__(
        self,
        fetcher: FileFetcher,
        events: Optional[EventBus] = None,
        max_concurrent: int = 10,
    ):
        self.fetcher = fetcher
        self.events = events or fetcher.events
        self._max_concurrent = clamp_concurrency(max_concurrent)

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @max_concurrent.setter
    def max_concurrent(self, value: int):
        self._max_concurrent = clamp_concurrency(value)

    async def run_all(
        self,
        obligations: Sequence[FetchObligation],
        token: Optional[CancellationToken] = None,
        version: Optional[str] = None,
    ) -> DownloadStats:
        """
        执行全部下载任务

        Returns:
            DownloadStats

        Raises:
            遇到的第一个下载错误；取消时抛出 DownloadCancelledError
        """
        stats = DownloadStats(total=len(obligations))
        if not obligations:
            return stats

        queue: asyncio.Queue = asyncio.Queue()
        for obligation in obligations:
            queue.put_nowait(obligation)

        errors: List[BaseException] = []
        in_flight = 0

        async def worker():
            nonlocal in_flight
            while not errors:
                if token is not None and token.cancelled:
                    errors.append(DownloadCancelledError("下载已取消"))
                    return
                try:
                    obligation = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return

                in_flight += 1
                stats.peak_in_flight = max(stats.peak_in_flight, in_flight)
                try:
                    result = await self.fetcher.fetch(obligation, token)
                except Exception as e:
                    stats.failed += 1
                    errors.append(e)
                    return
                finally:
                    in_flight -= 1

                stats.completed += 1
                stats.bytes_downloaded += result.bytes_downloaded
                if result.skipped:
                    stats.skipped += 1

                self.events.progress(
                    obligation.category,
                    round(stats.completed * 100 / stats.total),
                    current_file=obligation.filename,
                    total_files=stats.total,
                    completed_files=stats.completed,
                    version=version,
                )

        worker_count = min(self._max_concurrent, len(obligations))
        logger.info(
            f"[启动] 开始下载 {stats.total} 个文件，最大并发数: {worker_count}"
        )
        await asyncio.gather(
            *(
                asyncio.create_task(worker(), name=f"downloader-{i}")
                for i in range(worker_count)
            )
        )

        if errors:
            abandoned = queue.qsize()
            if abandoned:
                logger.warning(f"[中止] {abandoned} 个文件未开始下载")
            raise errors[0]

        logger.success(
            f"下载完成: {stats.completed} 成功, {stats.skipped} 跳过, "
            f"{stats.bytes_downloaded / (1024 * 1024):.2f} MB"
        )
        return stats
