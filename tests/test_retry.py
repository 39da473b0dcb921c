"""重试组合子测试"""

import pytest

from mcfetch.download import linear_backoff, retry_async
from mcfetch.exceptions import IntegrityError, TransferError


def test_linear_backoff():
    delay = linear_backoff(1.0)
    assert [delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]
    assert linear_backoff(0.5)(4) == 2.0


@pytest.mark.asyncio
async def test_retries_until_success_with_linear_delays():
    sleeps = []
    calls = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    async def operation(attempt):
        calls.append(attempt)
        if attempt < 3:
            raise TransferError("flaky")
        return "ok"

    result = await retry_async(
        operation,
        max_attempts=3,
        delay=linear_backoff(1.0),
        retry_on=(TransferError,),
        sleep=fake_sleep,
    )

    assert result == "ok"
    assert calls == [1, 2, 3]
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_raises_last_error_when_exhausted():
    retried = []

    async def operation(attempt):
        raise IntegrityError(f"bad {attempt}")

    async def fake_sleep(_):
        pass

    with pytest.raises(IntegrityError, match="bad 3"):
        await retry_async(
            operation,
            max_attempts=3,
            retry_on=(IntegrityError,),
            on_retry=lambda attempt, error, wait: retried.append(attempt),
            sleep=fake_sleep,
        )
    assert retried == [1, 2]


@pytest.mark.asyncio
async def test_other_errors_are_not_retried():
    calls = []

    async def operation(attempt):
        calls.append(attempt)
        raise KeyError("nope")

    with pytest.raises(KeyError):
        await retry_async(operation, max_attempts=3, retry_on=(TransferError,))
    assert calls == [1]
