"""
元数据接口客户端

获取版本清单、版本详情和资源索引。
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
from loguru import logger

from mcfetch.exceptions import APIError
from mcfetch.models import AssetIndex, AssetIndexRef, VersionManifest
from mcfetch.models.config import MANIFEST_URL


class MojangClient:
    """Mojang 元数据客户端"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        manifest_url: str = MANIFEST_URL,
        timeout: float = 30.0,
    ):
        self.manifest_url = manifest_url
        self.timeout = timeout
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owned_session = True
        return self._session

    async def _request(self, url: str) -> Dict[str, Any]:
        """发送请求并解析 JSON"""
        logger.debug(f"请求: {url}")
        try:
            async with self.session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status != 200:
                    raise APIError(
                        f"请求失败 (状态码: {response.status})",
                        response=response,
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise APIError(
                f"请求失败: {e.__class__.__name__}: {e}", context={"url": url}
            ) from e

    async def get_version_manifest(self) -> VersionManifest:
        """获取版本清单"""
        data = await self._request(self.manifest_url)
        try:
            return VersionManifest.from_mojang(data)
        except (KeyError, TypeError) as e:
            raise APIError(
                f"版本清单格式错误: {e}", context={"url": self.manifest_url}
            ) from e

    async def get_version_info(self, url: str) -> Dict[str, Any]:
        """获取版本详情 JSON"""
        return await self._request(url)

    async def get_asset_index(self, ref: AssetIndexRef) -> AssetIndex:
        """获取并解析资源索引"""
        data = await self._request(ref.url)
        try:
            return AssetIndex.from_mojang(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise APIError(
                f"资源索引格式错误: {e}", context={"url": ref.url}
            ) from e

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()
