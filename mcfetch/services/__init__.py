"""
McFetch 服务层

包含元数据客户端、版本清单缓存和版本解析。
"""

from mcfetch.services.api_client import MojangClient
from mcfetch.services.manifest_cache import ManifestCache
from mcfetch.services.release_resolver import ReleaseResolver

__all__ = [
    "MojangClient",
    "ManifestCache",
    "ReleaseResolver",
]
