"""
下载任务规划

将版本描述展开为下载任务列表：客户端、依赖库、原生库附属文件和资源对象。
规划阶段不下载任何文件内容，只有资源索引文档会被获取并落盘。
"""

import json
import os
import posixpath
from typing import Iterable, List, Protocol

import aiofiles
from loguru import logger

from mcfetch.exceptions import PlanningError
from mcfetch.models import (
    AssetIndex,
    AssetIndexRef,
    Category,
    CompanionKind,
    FetchObligation,
    ReleaseDescriptor,
)


class AssetIndexSource(Protocol):
    async def get_asset_index(self, ref: AssetIndexRef) -> AssetIndex: ...


def release_dir(base_dir: str, version_id: str) -> str:
    return os.path.join(base_dir, "releases", version_id)


def manifest_path(base_dir: str, version_id: str) -> str:
    """版本描述落盘路径"""
    return os.path.join(release_dir(base_dir, version_id), f"{version_id}.manifest")


def asset_index_path(base_dir: str, index_id: str) -> str:
    """资源索引落盘路径"""
    return os.path.join(base_dir, "assets", "indexes", f"{index_id}.index")


def dedupe(obligations: Iterable[FetchObligation]) -> List[FetchObligation]:
    """按目标路径去重，保留第一次出现的任务"""
    seen = set()
    result = []
    for obligation in obligations:
        key = os.path.normpath(obligation.destination)
        if key in seen:
            continue
        seen.add(key)
        result.append(obligation)
    return result


class TaskPlanner:
    """下载任务规划器"""

    def __init__(self, base_dir: str, resources_url: str, asset_source: AssetIndexSource):
        self.base_dir = base_dir
        self.resources_url = resources_url.rstrip("/")
        self.asset_source = asset_source

    def plan(self, descriptor: ReleaseDescriptor) -> List[FetchObligation]:
        """
        规划客户端与依赖库的下载任务

        Raises:
            PlanningError: 版本描述缺少客户端下载地址
        """
        if descriptor.client is None or not descriptor.client.url:
            raise PlanningError(
                f"版本 {descriptor.id} 缺少客户端下载地址",
                context={"version": descriptor.id},
            )

        obligations = [
            FetchObligation(
                url=descriptor.client.url,
                destination=os.path.join(
                    release_dir(self.base_dir, descriptor.id), f"{descriptor.id}.jar"
                ),
                category=Category.CLIENT,
                sha1=descriptor.client.sha1,
                size=descriptor.client.size,
            )
        ]

        libraries_dir = os.path.join(self.base_dir, "libraries")
        natives_dir = os.path.join(self.base_dir, "natives")

        for dep in descriptor.dependencies:
            if not dep.fetchable:
                continue

            artifact = dep.artifact
            if artifact is not None and artifact.url:
                if not artifact.path:
                    raise PlanningError(
                        f"依赖库 {dep.name} 缺少路径",
                        context={"version": descriptor.id, "library": dep.name},
                    )
                obligations.append(
                    FetchObligation(
                        url=artifact.url,
                        destination=os.path.join(libraries_dir, *artifact.path.split("/")),
                        category=Category.LIBRARY,
                        sha1=artifact.sha1,
                        size=artifact.size,
                    )
                )

            for companion in dep.companions:
                if companion.kind is not CompanionKind.NATIVES or not companion.artifact.url:
                    continue
                name = posixpath.basename(
                    companion.artifact.path or companion.artifact.url
                )
                obligations.append(
                    FetchObligation(
                        url=companion.artifact.url,
                        destination=os.path.join(natives_dir, name),
                        category=Category.NATIVE,
                        sha1=companion.artifact.sha1,
                        size=companion.artifact.size,
                    )
                )

        planned = dedupe(obligations)
        logger.debug(f"版本 {descriptor.id} 规划了 {len(planned)} 个文件")
        return planned

    async def plan_assets(self, ref: AssetIndexRef) -> List[FetchObligation]:
        """获取并保存资源索引，然后规划资源对象的下载任务"""
        index = await self.asset_source.get_asset_index(ref)

        path = asset_index_path(self.base_dir, ref.id)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(index.raw, indent=2, ensure_ascii=False))
        logger.debug(f"资源索引已保存: {path}")

        objects_dir = os.path.join(self.base_dir, "assets", "objects")
        obligations = [
            FetchObligation(
                url=f"{self.resources_url}/{entry.object_path}",
                destination=os.path.join(objects_dir, entry.prefix, entry.hash),
                category=Category.ASSET,
                sha1=entry.hash,
                size=entry.size,
            )
            for entry in index.entries.values()
        ]

        planned = dedupe(obligations)
        logger.debug(
            f"资源索引 {ref.id}: {len(index.entries)} 个条目，{len(planned)} 个唯一对象"
        )
        return planned
