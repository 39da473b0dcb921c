"""
主协调器

串联版本解析、描述落盘、任务规划与并发下载，并发布生命周期事件。
"""

import json
import os
from typing import List, Optional

import aiofiles
from loguru import logger

from mcfetch.cancellation import CancellationToken
from mcfetch.download import DownloadScheduler, DownloadStats, FileFetcher, TaskPlanner
from mcfetch.download.planner import dedupe, manifest_path
from mcfetch.events import EventBus
from mcfetch.exceptions import OrchestrationError
from mcfetch.models import DownloaderConfig, ReleaseDescriptor, VersionManifest
from mcfetch.services import ManifestCache, MojangClient, ReleaseResolver


class MinecraftDownloader:
    """
    Minecraft 版本下载器

    Examples:
        >>> downloader = MinecraftDownloader(DownloaderConfig(base_dir="./minecraft"))
        >>> downloader.events.on(EventType.STATUS, lambda e: print(e.message))
        >>> await downloader.download("1.20.1")
    """

    def __init__(
        self,
        config: Optional[DownloaderConfig] = None,
        client: Optional[MojangClient] = None,
        events: Optional[EventBus] = None,
        fetcher: Optional[FileFetcher] = None,
    ):
        self.config = config or DownloaderConfig()
        self.events = events or EventBus()
        self.client = client or MojangClient(
            manifest_url=self.config.manifest_url, timeout=self.config.timeout
        )
        self.cache = ManifestCache(
            self.client.get_version_manifest, ttl=self.config.manifest_ttl
        )
        self.resolver = ReleaseResolver(self.client, self.cache)
        self.planner = TaskPlanner(
            self.config.base_dir, self.config.resources_url, self.client
        )
        self.fetcher = fetcher or FileFetcher(
            events=self.events,
            max_attempts=self.config.max_retries,
            retry_delay=self.config.retry_delay,
            timeout=self.config.timeout,
            chunk_size=self.config.chunk_size,
        )
        self.scheduler = DownloadScheduler(
            self.fetcher, self.events, self.config.max_concurrent
        )
        os.makedirs(self.config.base_dir, exist_ok=True)

    async def download(
        self, version_id: str, token: Optional[CancellationToken] = None
    ) -> DownloadStats:
        """
        下载指定版本的客户端、依赖库、原生库和资源文件

        Raises:
            OrchestrationError: 任意阶段失败，原始异常保存在 __cause__
        """
        stage = "resolve"
        try:
            self.events.status(f"开始下载 Minecraft {version_id}")
            logger.info(f"开始下载 Minecraft {version_id}...")

            descriptor = await self.resolver.resolve(version_id)

            stage = "persist"
            self.events.status("保存版本描述")
            await self._persist_descriptor(descriptor)

            stage = "plan"
            self.events.status("规划下载任务")
            obligations = self.planner.plan(descriptor)

            if descriptor.asset_index is not None:
                stage = "plan_assets"
                self.events.status(f"获取资源索引: {descriptor.asset_index.id}")
                obligations += await self.planner.plan_assets(descriptor.asset_index)

            obligations = dedupe(obligations)

            stage = "fetch"
            self.events.status(f"下载 {len(obligations)} 个文件")
            stats = await self.scheduler.run_all(
                obligations, token=token, version=version_id
            )

            self.events.status("下载完成")
            self.events.complete(version_id)
            logger.success(f"Minecraft {version_id} 下载完成!")
            return stats

        except Exception as e:
            error = OrchestrationError(
                f"{stage} 阶段失败: {e}",
                context={"stage": stage, "version": version_id},
            )
            logger.error(f"任务执行失败: {error}")
            self.events.error(error)
            raise error from e

    async def _persist_descriptor(self, descriptor: ReleaseDescriptor) -> None:
        """保存版本描述 JSON"""
        path = manifest_path(self.config.base_dir, descriptor.id)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(descriptor.raw, indent=2, ensure_ascii=False))
        logger.debug(f"版本描述已保存: {path}")

    async def get_version_manifest(self) -> VersionManifest:
        """获取版本清单（带缓存）"""
        return await self.cache.get()

    async def get_available_versions(
        self, version_type: Optional[str] = None
    ) -> List[str]:
        """获取可用版本列表"""
        return await self.resolver.available_versions(version_type)

    async def get_latest_release(self) -> str:
        """获取最新正式版"""
        return await self.resolver.latest_release()

    async def get_latest_snapshot(self) -> str:
        """获取最新快照版"""
        return await self.resolver.latest_snapshot()

    def set_max_concurrent_downloads(self, value: int) -> int:
        """设置最大并发数，限制在 [1, 50]，返回实际生效的值"""
        self.scheduler.max_concurrent = value
        self.config.max_concurrent = self.scheduler.max_concurrent
        logger.debug(f"最大并发数: {self.scheduler.max_concurrent}")
        return self.scheduler.max_concurrent

    def clear_cache(self) -> None:
        """清空版本清单缓存"""
        self.cache.clear()

    async def close(self):
        """关闭网络连接"""
        await self.fetcher.close()
        await self.client.close()
        await self.events.drain()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()
