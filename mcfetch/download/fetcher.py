"""
单文件下载器

流式下载单个文件到本地，报告字节进度，失败时按线性退避重试，
写入后重新校验 SHA1。目标路径上要么没有文件，要么是校验通过的文件。
"""

import asyncio
import os
import shutil
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import aiofiles
import aiohttp
from loguru import logger

from mcfetch.cancellation import CancellationToken
from mcfetch.download.retry import linear_backoff, retry_async
from mcfetch.download.verifier import FileVerifier
from mcfetch.events import EventBus
from mcfetch.exceptions import (
    DownloadFileError,
    IntegrityError,
    TransferError,
)
from mcfetch.models.task import FetchObligation

PART_SUFFIX = ".part"


@dataclass
class FetchResult:
    """单个文件的下载结果"""

    obligation: FetchObligation
    skipped: bool = False
    bytes_downloaded: int = 0
    attempts: int = 0


class FileFetcher:
    """单文件下载器"""

    def __init__(
        self,
        events: Optional[EventBus] = None,
        session: Optional[aiohttp.ClientSession] = None,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        chunk_size: int = 8192,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.events = events or EventBus()
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.verifier = FileVerifier()
        self._session = session
        self._owned_session = session is None
        self._sleep = sleep

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owned_session = True
        return self._session

    async def fetch(
        self,
        obligation: FetchObligation,
        token: Optional[CancellationToken] = None,
    ) -> FetchResult:
        """
        下载单个文件

        Returns:
            FetchResult，skipped 表示本地文件已校验通过、没有发起网络请求

        Raises:
            TransferError: 网络错误或超时，重试耗尽
            IntegrityError: SHA1 不匹配，重试耗尽
            DownloadFileError: 本地文件操作失败
            DownloadCancelledError: 下载被取消
        """
        destination = obligation.destination
        filename = obligation.filename

        if await self.verifier.is_valid(destination, obligation.sha1):
            logger.debug(f"[跳过] '{filename}' 已存在且校验通过")
            self.events.file_complete(filename, obligation.category)
            return FetchResult(obligation, skipped=True)

        try:
            os.makedirs(os.path.dirname(destination) or ".", exist_ok=True)
            # 校验失败的旧文件不能留在目标路径上
            if os.path.exists(destination):
                logger.warning(f"[警告] '{filename}' 已存在但校验不匹配，将重新下载")
                os.remove(destination)
        except OSError as e:
            raise DownloadFileError(
                f"无法准备目标路径: {destination}",
                context={"file": destination, "error": str(e)},
            ) from e

        logger.debug(f"[开始] 下载: {filename}")
        attempts = 0

        async def attempt_once(attempt: int) -> int:
            nonlocal attempts
            attempts = attempt
            if token is not None:
                token.raise_if_cancelled()
            try:
                return await self._transfer(obligation, token)
            except BaseException:
                self._remove_quietly(destination + PART_SUFFIX)
                raise

        def on_retry(attempt: int, error: BaseException, wait: float) -> None:
            logger.warning(
                f"[重试] 下载 '{filename}' 失败 (第 {attempt} 次): {error}. "
                f"{wait:.1f}s 后重试..."
            )

        try:
            downloaded = await retry_async(
                attempt_once,
                max_attempts=self.max_attempts,
                delay=linear_backoff(self.retry_delay),
                retry_on=(TransferError, IntegrityError, DownloadFileError),
                on_retry=on_retry,
                sleep=self._sleep,
            )
        except (TransferError, IntegrityError, DownloadFileError) as e:
            logger.error(f"[错误] 下载 '{filename}' 最终失败: {e}")
            raise type(e)(
                f"下载 '{filename}' 失败，已尝试 {attempts} 次: {e.message}",
                context={
                    **e.context,
                    "file": destination,
                    "url": obligation.url,
                    "attempts": attempts,
                },
            ) from e

        logger.debug(f"[完成] '{filename}' 下载完成")
        self.events.file_complete(filename, obligation.category)
        return FetchResult(obligation, bytes_downloaded=downloaded, attempts=attempts)

    async def _transfer(
        self,
        obligation: FetchObligation,
        token: Optional[CancellationToken],
    ) -> int:
        """执行一次传输，成功后把临时文件移动到目标路径"""
        part_path = obligation.destination + PART_SUFFIX

        if obligation.url.startswith("file://"):
            downloaded = await self._copy_local_file(obligation.url[7:], part_path)
        else:
            downloaded = await self._download_remote_file(obligation, part_path, token)

        if obligation.sha1 and not await self.verifier.verify_sha1(
            part_path, obligation.sha1
        ):
            raise IntegrityError(
                f"SHA1 校验失败: {obligation.filename}",
                context={"file": obligation.destination, "expected": obligation.sha1},
            )

        try:
            os.replace(part_path, obligation.destination)
        except OSError as e:
            raise DownloadFileError(
                f"无法写入文件: {obligation.destination}", context={"error": str(e)}
            ) from e
        return downloaded

    async def _download_remote_file(
        self,
        obligation: FetchObligation,
        part_path: str,
        token: Optional[CancellationToken],
    ) -> int:
        """流式下载远程文件到临时路径"""
        filename = obligation.filename
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        downloaded = 0

        try:
            async with self.session.get(obligation.url, timeout=timeout) as response:
                if response.status != 200:
                    raise TransferError(
                        f"HTTP {response.status}",
                        context={"url": obligation.url, "status": response.status},
                    )

                total_size = response.content_length or obligation.size or 0
                last_percent = 0

                async with aiofiles.open(part_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        if token is not None:
                            token.raise_if_cancelled()
                        await f.write(chunk)
                        downloaded += len(chunk)

                        percent = (
                            min(100, round(downloaded * 100 / total_size))
                            if total_size > 0
                            else 0
                        )
                        self.events.progress(
                            obligation.category,
                            percent,
                            current_file=filename,
                            total_bytes=total_size or None,
                            completed_bytes=downloaded,
                        )
                        if total_size > 0 and percent - last_percent >= 5:
                            logger.debug(f"[进度] {filename}: {percent}%")
                            last_percent = percent

                if response.content_length and downloaded < response.content_length:
                    raise TransferError(
                        f"传输不完整: {downloaded}/{response.content_length} 字节",
                        context={"url": obligation.url},
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransferError(
                f"网络错误: {e.__class__.__name__}: {e}",
                context={"url": obligation.url},
            ) from e
        except OSError as e:
            raise DownloadFileError(
                f"写入文件失败: {part_path}", context={"error": str(e)}
            ) from e

        return downloaded

    async def _copy_local_file(self, src_path: str, part_path: str) -> int:
        """复制本地文件"""
        logger.debug(f"[复制] 本地文件: {os.path.basename(src_path)}")
        try:
            shutil.copyfile(src_path, part_path)
            return os.path.getsize(part_path)
        except OSError as e:
            raise DownloadFileError(
                f"复制文件失败: {src_path}", context={"error": str(e)}
            ) from e

    @staticmethod
    def _remove_quietly(path: str) -> None:
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as e:
                logger.debug(f"无法删除临时文件 {path}: {e}")

    async def close(self):
        """关闭 session"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()


__all__ = ["FetchResult", "FileFetcher"]
