"""
事件总线

按事件类型注册监听器，或通过 stream() 以异步迭代的方式消费全部事件。
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from loguru import logger

from mcfetch.models.events import (
    CompleteEvent,
    ErrorEvent,
    Event,
    EventType,
    FileCompleteEvent,
    ProgressEvent,
    StatusEvent,
)
from mcfetch.models.task import Category

Handler = Callable[[Any], Union[None, Awaitable[None]]]

_CLOSED = object()


class EventStream:
    """事件流，每个订阅者一个队列"""

    def __init__(self, bus: "EventBus"):
        self._bus = bus
        self._queue: asyncio.Queue = asyncio.Queue()
        self._done = False

    def _push(self, item: Any) -> None:
        self._queue.put_nowait(item)

    def __aiter__(self) -> "EventStream":
        return self

    async def __anext__(self) -> Event:
        if self._done:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._done = True
            self._bus._unsubscribe(self)
            raise StopAsyncIteration
        return item

    def close(self) -> None:
        """结束迭代"""
        self._push(_CLOSED)


class EventBus:
    """事件总线"""

    def __init__(self):
        self._handlers: Dict[EventType, List[Handler]] = {t: [] for t in EventType}
        self._streams: List[EventStream] = []
        self._pending: Set[asyncio.Task] = set()

    def on(self, event_type: EventType, handler: Handler) -> Handler:
        """注册监听器，支持同步和异步函数"""
        self._handlers[event_type].append(handler)
        return handler

    def off(self, event_type: EventType, handler: Handler) -> bool:
        """移除监听器"""
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def stream(self) -> EventStream:
        """订阅所有事件，返回可 async for 的事件流"""
        stream = EventStream(self)
        self._streams.append(stream)
        return stream

    def _unsubscribe(self, stream: EventStream) -> None:
        if stream in self._streams:
            self._streams.remove(stream)

    def emit(self, event: Event) -> None:
        """发布事件，监听器异常只记录日志"""
        for stream in self._streams:
            stream._push(event)

        for handler in list(self._handlers[event.type]):
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    task = asyncio.ensure_future(result)
                    self._pending.add(task)
                    task.add_done_callback(self._on_handler_done)
            except Exception as e:
                logger.error(f"事件监听器 {event.type.name} 执行失败: {e}")

    def _on_handler_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"异步事件监听器执行失败: {task.exception()}")

    async def drain(self) -> None:
        """等待所有异步监听器执行完毕"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """结束所有事件流，之后发布的事件不再进入这些流"""
        for stream in list(self._streams):
            stream.close()
            self._unsubscribe(stream)

    def status(self, message: str) -> None:
        self.emit(StatusEvent(message))

    def progress(
        self,
        category: Category,
        percent: int,
        current_file: Optional[str] = None,
        total_files: Optional[int] = None,
        completed_files: Optional[int] = None,
        total_bytes: Optional[int] = None,
        completed_bytes: Optional[int] = None,
        version: Optional[str] = None,
    ) -> None:
        self.emit(
            ProgressEvent(
                category=category,
                percent=percent,
                current_file=current_file,
                total_files=total_files,
                completed_files=completed_files,
                total_bytes=total_bytes,
                completed_bytes=completed_bytes,
                version=version,
            )
        )

    def file_complete(self, filename: str, category: Category) -> None:
        self.emit(FileCompleteEvent(filename, category))

    def error(self, error: BaseException) -> None:
        self.emit(ErrorEvent(error))

    def complete(self, version: str) -> None:
        self.emit(CompleteEvent(version))
