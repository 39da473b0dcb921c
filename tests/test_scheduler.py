"""DownloadScheduler 测试"""

import asyncio

import pytest

from mcfetch.cancellation import CancellationToken
from mcfetch.download import DownloadScheduler
from mcfetch.download.fetcher import FetchResult
from mcfetch.events import EventBus
from mcfetch.exceptions import DownloadCancelledError, TransferError
from mcfetch.models import Category, EventType, FetchObligation


class FakeFetcher:
    """记录并发数的假下载器"""

    def __init__(self, delays=None, fail=(), events=None):
        self.events = events or EventBus()
        self.delays = delays or {}
        self.fail = set(fail)
        self.in_flight = 0
        self.peak = 0
        self.started = []
        self.finished = []

    async def fetch(self, obligation, token=None):
        self.started.append(obligation.destination)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(obligation.destination, 0.01))
            if obligation.destination in self.fail:
                raise TransferError(f"failed {obligation.destination}")
            self.finished.append(obligation.destination)
            return FetchResult(obligation, bytes_downloaded=10, attempts=1)
        finally:
            self.in_flight -= 1


def obligations(n, category=Category.ASSET):
    return [
        FetchObligation(url=f"http://x/{i}", destination=f"/tmp/{i}", category=category)
        for i in range(n)
    ]


@pytest.mark.parametrize("limit", [1, 3, 10])
@pytest.mark.asyncio
async def test_never_exceeds_concurrency_limit(limit):
    fetcher = FakeFetcher()
    scheduler = DownloadScheduler(fetcher, max_concurrent=limit)

    stats = await scheduler.run_all(obligations(25))

    assert fetcher.peak <= limit
    assert fetcher.peak == limit
    assert stats.peak_in_flight == limit
    assert stats.completed == 25
    assert stats.bytes_downloaded == 250


def test_concurrency_is_clamped():
    scheduler = DownloadScheduler(FakeFetcher(), max_concurrent=0)
    assert scheduler.max_concurrent == 1
    scheduler.max_concurrent = 500
    assert scheduler.max_concurrent == 50
    scheduler.max_concurrent = 15
    assert scheduler.max_concurrent == 15


@pytest.mark.asyncio
async def test_slow_file_does_not_stall_other_slots():
    # 一个慢文件占用一个槽位时，其余任务应由另一个槽位持续消费
    tasks = obligations(6)
    fetcher = FakeFetcher(delays={"/tmp/0": 0.3})
    scheduler = DownloadScheduler(fetcher, max_concurrent=2)

    await scheduler.run_all(tasks)

    assert fetcher.finished[-1] == "/tmp/0"
    assert fetcher.finished[:5] == [f"/tmp/{i}" for i in range(1, 6)]


@pytest.mark.asyncio
async def test_overall_progress_is_monotonic():
    events = EventBus()
    progress = []
    events.on(EventType.PROGRESS, progress.append)
    scheduler = DownloadScheduler(FakeFetcher(events=events), max_concurrent=4)

    await scheduler.run_all(obligations(7), version="1.20.1")

    assert [e.completed_files for e in progress] == list(range(1, 8))
    percents = [e.percent for e in progress]
    assert percents == sorted(percents)
    assert percents[-1] == 100
    assert all(e.total_files == 7 and e.version == "1.20.1" for e in progress)


@pytest.mark.asyncio
async def test_first_failure_stops_launching_new_work():
    tasks = obligations(20)
    fetcher = FakeFetcher(fail={"/tmp/1"})
    scheduler = DownloadScheduler(fetcher, max_concurrent=2)

    with pytest.raises(TransferError, match="/tmp/1"):
        await scheduler.run_all(tasks)

    assert len(fetcher.started) < 20
    assert "/tmp/19" not in fetcher.started


@pytest.mark.asyncio
async def test_in_flight_fetches_are_not_cancelled_on_failure():
    tasks = obligations(2)
    fetcher = FakeFetcher(delays={"/tmp/0": 0.1, "/tmp/1": 0.01}, fail={"/tmp/1"})
    scheduler = DownloadScheduler(fetcher, max_concurrent=2)

    with pytest.raises(TransferError):
        await scheduler.run_all(tasks)

    assert fetcher.finished == ["/tmp/0"]


@pytest.mark.asyncio
async def test_empty_list_returns_immediately():
    stats = await DownloadScheduler(FakeFetcher()).run_all([])
    assert stats.total == 0 and stats.completed == 0


@pytest.mark.asyncio
async def test_cancelled_token_aborts_run():
    token = CancellationToken()
    token.cancel()
    fetcher = FakeFetcher()

    with pytest.raises(DownloadCancelledError):
        await DownloadScheduler(fetcher).run_all(obligations(3), token=token)

    assert fetcher.started == []
