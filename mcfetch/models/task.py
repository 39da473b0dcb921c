"""
下载任务模型
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Category(Enum):
    """下载文件类别"""

    CLIENT = "client"
    LIBRARY = "library"
    NATIVE = "native"
    ASSET = "asset"


@dataclass(frozen=True)
class FetchObligation:
    """
    单个文件的下载任务

    sha1 为空表示不做校验；size 仅用于进度显示。
    """

    url: str
    destination: str
    category: Category
    sha1: Optional[str] = None
    size: int = 0

    @property
    def filename(self) -> str:
        return os.path.basename(self.destination)
