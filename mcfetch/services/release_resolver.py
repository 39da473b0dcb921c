"""
版本解析服务

通过版本清单把版本 ID 解析为 ReleaseDescriptor。
"""

from typing import List, Optional

from mcfetch.exceptions import ReleaseNotFoundError
from mcfetch.models import ReleaseDescriptor
from mcfetch.services.api_client import MojangClient
from mcfetch.services.manifest_cache import ManifestCache


class ReleaseResolver:
    """版本解析器"""

    def __init__(self, client: MojangClient, cache: ManifestCache):
        self.client = client
        self.cache = cache

    async def resolve(self, version_id: str) -> ReleaseDescriptor:
        """
        解析版本

        Raises:
            ReleaseNotFoundError: 版本清单中没有该版本
        """
        manifest = await self.cache.get()
        entry = manifest.find(version_id)
        if entry is None:
            raise ReleaseNotFoundError(
                f"版本 {version_id} 不存在", context={"version": version_id}
            )

        data = await self.client.get_version_info(entry.url)
        return ReleaseDescriptor.from_mojang(data)

    async def available_versions(self, version_type: Optional[str] = None) -> List[str]:
        """获取可用版本列表"""
        manifest = await self.cache.get()
        return manifest.ids(version_type)

    async def latest_release(self) -> str:
        """获取最新正式版"""
        manifest = await self.cache.get()
        return manifest.latest.release

    async def latest_snapshot(self) -> str:
        """获取最新快照版"""
        manifest = await self.cache.get()
        return manifest.latest.snapshot
