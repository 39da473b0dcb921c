"""
版本清单缓存

在 TTL 内复用版本清单，避免同一会话内重复请求。并发的缓存未命中
只会触发一次请求，其他调用者等待同一个结果。
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from loguru import logger

from mcfetch.models import VersionManifest

DEFAULT_TTL = 300.0


@dataclass
class ManifestCacheEntry:
    manifest: VersionManifest
    fetched_at: float


class ManifestCache:
    """版本清单缓存"""

    def __init__(
        self,
        loader: Callable[[], Awaitable[VersionManifest]],
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[ManifestCacheEntry] = None
        self._lock = asyncio.Lock()

    @property
    def age(self) -> Optional[float]:
        """缓存年龄（秒），无缓存时为 None"""
        if self._entry is None:
            return None
        return self._clock() - self._entry.fetched_at

    @property
    def is_fresh(self) -> bool:
        age = self.age
        return age is not None and age < self.ttl

    async def get(self) -> VersionManifest:
        """获取版本清单，缓存过期时重新请求"""
        if self.is_fresh:
            return self._entry.manifest

        async with self._lock:
            # 等锁期间其他调用者可能已经刷新
            if self.is_fresh:
                return self._entry.manifest

            logger.debug("版本清单缓存未命中，重新获取")
            manifest = await self._loader()
            self._entry = ManifestCacheEntry(manifest, self._clock())
            return manifest

    def clear(self) -> None:
        """清空缓存"""
        self._entry = None
        logger.debug("版本清单缓存已清空")
