"""
测试公共夹具

用进程内的 aiohttp 测试服务器模拟版本清单接口和文件分发网络。
"""

import asyncio
import hashlib
from collections import Counter
from typing import Dict, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer


def sha1_of(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


class FakeDistribution:
    """
    可编程的文件服务器

    files 保存路径到内容的映射；failures 指定某个路径接下来要失败几次；
    overrides 让某个路径返回与预期不同的内容（模拟校验失败）。
    """

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.failures: Counter = Counter()
        self.overrides: Dict[str, bytes] = {}
        self.delays: Dict[str, float] = {}
        self.requests: Counter = Counter()
        self.server: Optional[TestServer] = None

    def add(self, path: str, body: bytes) -> str:
        self.files[path] = body
        return self.url(path)

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    @property
    def base_url(self) -> str:
        return self.url("/").rstrip("/")

    def file_requests(self, prefix: str = "/files/") -> int:
        return sum(n for path, n in self.requests.items() if path.startswith(prefix))

    async def handle(self, request: web.Request) -> web.StreamResponse:
        path = request.path
        self.requests[path] += 1

        if self.failures[path] > 0:
            self.failures[path] -= 1
            return web.Response(status=500, text="boom")

        if path in self.delays:
            await asyncio.sleep(self.delays[path])

        if path in self.overrides:
            return web.Response(body=self.overrides[path])
        if path not in self.files:
            return web.Response(status=404)
        return web.Response(body=self.files[path])


@pytest_asyncio.fixture
async def distribution():
    dist = FakeDistribution()
    app = web.Application()
    app.router.add_get("/{tail:.*}", dist.handle)
    server = TestServer(app)
    await server.start_server()
    dist.server = server
    try:
        yield dist
    finally:
        await server.close()


@pytest.fixture
def base_dir(tmp_path):
    path = tmp_path / "minecraft"
    path.mkdir()
    return str(path)


async def no_sleep(_seconds: float) -> None:
    return None
