"""
版本数据模型

定义版本清单、版本描述、依赖库与资源条目等数据类。
"""

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class CompanionKind(Enum):
    """依赖库附属文件类型"""

    NATIVES = "natives"
    JAVADOC = "javadoc"
    SOURCES = "sources"
    OTHER = "other"

    @classmethod
    def from_classifier(cls, classifier: str) -> "CompanionKind":
        """
        根据分类器名称判断附属文件类型

        分类器形如 ``natives-linux``、``natives-windows-64``、``sources``，
        只看第一个片段。
        """
        head = classifier.split("-", 1)[0].lower()
        for kind in cls:
            if kind.value == head:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class Artifact:
    """远程文件"""

    url: str
    sha1: Optional[str] = None
    size: int = 0
    path: Optional[str] = None

    @classmethod
    def from_mojang(cls, data: Dict[str, Any]) -> "Artifact":
        return cls(
            url=data.get("url", ""),
            sha1=data.get("sha1") or None,
            size=int(data.get("size", 0) or 0),
            path=data.get("path"),
        )


@dataclass(frozen=True)
class CompanionArtifact:
    """依赖库的平台附属文件"""

    kind: CompanionKind
    classifier: str
    artifact: Artifact


@dataclass(frozen=True)
class DependencyEntry:
    """依赖库条目"""

    name: str
    artifact: Optional[Artifact] = None
    companions: Tuple[CompanionArtifact, ...] = ()

    @property
    def fetchable(self) -> bool:
        """是否包含可下载的文件"""
        return self.artifact is not None or bool(self.companions)

    @classmethod
    def from_mojang(cls, data: Dict[str, Any]) -> "DependencyEntry":
        downloads = data.get("downloads") or {}

        artifact = None
        if downloads.get("artifact"):
            artifact = Artifact.from_mojang(downloads["artifact"])

        companions = tuple(
            CompanionArtifact(
                kind=CompanionKind.from_classifier(classifier),
                classifier=classifier,
                artifact=Artifact.from_mojang(info),
            )
            for classifier, info in (downloads.get("classifiers") or {}).items()
        )

        return cls(
            name=data.get("name", ""),
            artifact=artifact,
            companions=companions,
        )


@dataclass(frozen=True)
class AssetIndexRef:
    """资源索引引用"""

    id: str
    url: str
    sha1: Optional[str] = None
    size: int = 0
    total_size: int = 0

    @classmethod
    def from_mojang(cls, data: Dict[str, Any]) -> "AssetIndexRef":
        return cls(
            id=data.get("id", ""),
            url=data.get("url", ""),
            sha1=data.get("sha1") or None,
            size=int(data.get("size", 0) or 0),
            total_size=int(data.get("totalSize", 0) or 0),
        )


@dataclass(frozen=True)
class AssetEntry:
    """
    内容寻址的资源条目

    远程地址和本地路径都由哈希决定：前两位作为分区目录，完整哈希作为文件名。
    """

    name: str
    hash: str
    size: int = 0

    @property
    def prefix(self) -> str:
        return self.hash[:2].lower()

    @property
    def object_path(self) -> str:
        return posixpath.join(self.prefix, self.hash)


@dataclass
class AssetIndex:
    """资源索引文档及其解析结果"""

    raw: Dict[str, Any]
    entries: Dict[str, AssetEntry]

    @classmethod
    def from_mojang(cls, data: Dict[str, Any]) -> "AssetIndex":
        entries = {
            name: AssetEntry(
                name=name,
                hash=info["hash"],
                size=int(info.get("size", 0) or 0),
            )
            for name, info in (data.get("objects") or {}).items()
        }
        return cls(raw=data, entries=entries)


@dataclass(frozen=True)
class ReleaseDescriptor:
    """
    版本描述

    解析完成后不可变，raw 保留接口返回的原始文档用于落盘。
    """

    id: str
    type: str = "release"
    client: Optional[Artifact] = None
    asset_index: Optional[AssetIndexRef] = None
    dependencies: Tuple[DependencyEntry, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mojang(cls, data: Dict[str, Any]) -> "ReleaseDescriptor":
        """将版本 JSON 转换为 ReleaseDescriptor"""
        downloads = data.get("downloads") or {}
        client = downloads.get("client")
        asset_index = data.get("assetIndex")

        return cls(
            id=data.get("id", ""),
            type=data.get("type", "release"),
            client=Artifact.from_mojang(client) if client else None,
            asset_index=AssetIndexRef.from_mojang(asset_index) if asset_index else None,
            dependencies=tuple(
                DependencyEntry.from_mojang(lib) for lib in data.get("libraries", [])
            ),
            raw=data,
        )


@dataclass(frozen=True)
class ManifestVersion:
    """版本清单中的单个版本"""

    id: str
    type: str
    url: str
    sha1: Optional[str] = None
    release_time: Optional[str] = None


@dataclass(frozen=True)
class LatestVersions:
    """最新版本指针"""

    release: str
    snapshot: str


@dataclass
class VersionManifest:
    """
    版本清单

    列出所有已知版本以及最新正式版、快照版的指针。
    """

    latest: LatestVersions
    versions: List[ManifestVersion]

    def find(self, version_id: str) -> Optional[ManifestVersion]:
        """按 ID 查找版本"""
        for version in self.versions:
            if version.id == version_id:
                return version
        return None

    def ids(self, version_type: Optional[str] = None) -> List[str]:
        """获取版本 ID 列表，可按类型过滤"""
        return [
            v.id for v in self.versions if version_type is None or v.type == version_type
        ]

    @classmethod
    def from_mojang(cls, data: Dict[str, Any]) -> "VersionManifest":
        latest = data.get("latest") or {}
        return cls(
            latest=LatestVersions(
                release=latest.get("release", ""),
                snapshot=latest.get("snapshot", ""),
            ),
            versions=[
                ManifestVersion(
                    id=v["id"],
                    type=v.get("type", "release"),
                    url=v["url"],
                    sha1=v.get("sha1"),
                    release_time=v.get("releaseTime"),
                )
                for v in data.get("versions", [])
            ],
        )
