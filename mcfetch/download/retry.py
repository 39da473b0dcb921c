"""
重试工具

通用的异步重试组合子，退避策略以函数形式传入，便于单独测试。
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

T = TypeVar("T")

DelayFunc = Callable[[int], float]
RetryCallback = Callable[[int, BaseException, float], None]


def linear_backoff(base: float = 1.0) -> DelayFunc:
    """第 n 次失败后等待 base * n 秒"""
    return lambda attempt: base * attempt


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    *,
    max_attempts: int = 3,
    delay: DelayFunc = linear_backoff(),
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Optional[RetryCallback] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    执行 operation，失败时按退避策略重试

    Args:
        operation: 接收当前尝试次数（从 1 开始）的协程函数
        max_attempts: 最大尝试次数
        delay: 根据已失败次数计算等待秒数
        retry_on: 需要重试的异常类型，其他异常直接抛出
        on_retry: 每次重试前的回调 (attempt, error, wait)
        sleep: 等待函数

    Returns:
        operation 的返回值

    Raises:
        最后一次尝试的异常
    """
    if max_attempts < 1:
        raise ValueError("max_attempts 必须大于等于 1")

    attempt = 1
    while True:
        try:
            return await operation(attempt)
        except retry_on as e:
            if attempt >= max_attempts:
                raise
            wait = delay(attempt)
            if on_retry is not None:
                on_retry(attempt, e, wait)
            await sleep(wait)
            attempt += 1
