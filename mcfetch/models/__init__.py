"""
McFetch 数据模型包

包含配置模型、版本模型、下载任务模型和事件模型定义。
"""

from mcfetch.models.config import DownloaderConfig, clamp_concurrency
from mcfetch.models.release import (
    CompanionKind,
    Artifact,
    CompanionArtifact,
    DependencyEntry,
    AssetIndexRef,
    AssetEntry,
    AssetIndex,
    ReleaseDescriptor,
    ManifestVersion,
    LatestVersions,
    VersionManifest,
)
from mcfetch.models.task import Category, FetchObligation
from mcfetch.models.events import (
    EventType,
    Event,
    StatusEvent,
    ProgressEvent,
    FileCompleteEvent,
    ErrorEvent,
    CompleteEvent,
)

__all__ = [
    # 配置模型
    "DownloaderConfig",
    "clamp_concurrency",
    # 版本模型
    "CompanionKind",
    "Artifact",
    "CompanionArtifact",
    "DependencyEntry",
    "AssetIndexRef",
    "AssetEntry",
    "AssetIndex",
    "ReleaseDescriptor",
    "ManifestVersion",
    "LatestVersions",
    "VersionManifest",
    # 下载任务
    "Category",
    "FetchObligation",
    # 事件
    "EventType",
    "Event",
    "StatusEvent",
    "ProgressEvent",
    "FileCompleteEvent",
    "ErrorEvent",
    "CompleteEvent",
]
