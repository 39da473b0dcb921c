"""
配置模型

下载器配置，可从 toml/json/yaml 解析得到的字典构建。
"""

from dataclasses import dataclass, fields
from typing import Any, Dict

from mcfetch.exceptions import ConfigValidationError

MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest_v2.json"
RESOURCES_URL = "https://resources.download.minecraft.net"

MIN_CONCURRENT = 1
MAX_CONCURRENT = 50


def clamp_concurrency(value: int) -> int:
    """将并发数限制在 [1, 50]"""
    return max(MIN_CONCURRENT, min(MAX_CONCURRENT, int(value)))


@dataclass
class DownloaderConfig:
    """下载器配置"""

    base_dir: str = "./minecraft"
    max_concurrent: int = 10
    max_retries: int = 3
    retry_delay: float = 1.0
    timeout: float = 30.0
    chunk_size: int = 8192
    manifest_ttl: float = 300.0
    manifest_url: str = MANIFEST_URL
    resources_url: str = RESOURCES_URL

    def __post_init__(self):
        self.max_concurrent = clamp_concurrency(self.max_concurrent)
        if self.max_retries < 1:
            raise ConfigValidationError(
                "max_retries 必须大于等于 1", context={"max_retries": self.max_retries}
            )
        if self.retry_delay < 0 or self.timeout <= 0 or self.manifest_ttl < 0:
            raise ConfigValidationError(
                "retry_delay/manifest_ttl 不能为负数，timeout 必须为正数",
                context={
                    "retry_delay": self.retry_delay,
                    "timeout": self.timeout,
                    "manifest_ttl": self.manifest_ttl,
                },
            )
        if self.chunk_size <= 0:
            raise ConfigValidationError(
                "chunk_size 必须为正数", context={"chunk_size": self.chunk_size}
            )
        self.resources_url = self.resources_url.rstrip("/")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DownloaderConfig":
        """从字典创建配置，忽略未知字段"""
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            expected = f.type if isinstance(f.type, type) else type(f.default)
            try:
                if expected is str:
                    if not isinstance(value, str):
                        raise TypeError(f"{f.name} 应为字符串")
                elif expected is int:
                    if isinstance(value, bool):
                        raise TypeError(f"{f.name} 应为整数")
                    value = int(value)
                elif expected is float:
                    if isinstance(value, bool):
                        raise TypeError(f"{f.name} 应为数字")
                    value = float(value)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(
                    f"配置项 {f.name} 无效: {e}", context={f.name: value}
                ) from e
            kwargs[f.name] = value
        return cls(**kwargs)
