"""
事件模型

下载过程中对外发布的事件类型。
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union

from mcfetch.models.task import Category


class EventType(Enum):
    """事件类型定义"""

    STATUS = auto()  # 阶段状态
    PROGRESS = auto()  # 进度更新（单文件字节进度或整体进度）
    FILE_COMPLETE = auto()  # 单个文件完成（包括校验通过跳过的文件）
    ERROR = auto()  # 流程失败
    COMPLETE = auto()  # 整个版本下载完成


@dataclass(frozen=True)
class StatusEvent:
    message: str
    type: EventType = field(default=EventType.STATUS, init=False)


@dataclass(frozen=True)
class ProgressEvent:
    """
    进度事件

    单文件进度带 completed_bytes/total_bytes；整体进度带
    completed_files/total_files。percent 为 0-100 的整数。
    """

    category: Category
    percent: int
    current_file: Optional[str] = None
    total_files: Optional[int] = None
    completed_files: Optional[int] = None
    total_bytes: Optional[int] = None
    completed_bytes: Optional[int] = None
    version: Optional[str] = None
    type: EventType = field(default=EventType.PROGRESS, init=False)

    @property
    def is_overall(self) -> bool:
        return self.total_files is not None


@dataclass(frozen=True)
class FileCompleteEvent:
    filename: str
    category: Category
    type: EventType = field(default=EventType.FILE_COMPLETE, init=False)


@dataclass(frozen=True)
class ErrorEvent:
    error: BaseException
    type: EventType = field(default=EventType.ERROR, init=False)


@dataclass(frozen=True)
class CompleteEvent:
    version: str
    type: EventType = field(default=EventType.COMPLETE, init=False)


Event = Union[StatusEvent, ProgressEvent, FileCompleteEvent, ErrorEvent, CompleteEvent]
