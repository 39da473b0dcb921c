"""
协作式取消

下载任务在读取每个数据块、启动每个任务前检查令牌状态。
"""

import asyncio

from mcfetch.exceptions import DownloadCancelledError


class CancellationToken:
    """
    取消令牌

    Examples:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.cancelled
        True
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """请求取消"""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """已取消时抛出 DownloadCancelledError"""
        if self._event.is_set():
            raise DownloadCancelledError("下载已取消")
