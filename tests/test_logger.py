"""日志配置测试"""

import io

import pytest
from loguru import logger

from mcfetch.logger import resolve_level, setup_logger


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


def test_resolve_level_from_flag_and_env(monkeypatch):
    monkeypatch.delenv("MCFETCH_DEBUG", raising=False)
    assert resolve_level() == "INFO"
    assert resolve_level(debug=True) == "DEBUG"

    monkeypatch.setenv("MCFETCH_DEBUG", "1")
    assert resolve_level() == "DEBUG"


def test_console_respects_level_and_file_keeps_debug(tmp_path):
    console = io.StringIO()
    log_file = tmp_path / "logs" / "mcfetch.log"

    setup_logger(
        level="INFO",
        sink=console,
        enqueue=False,
        colorize=False,
        log_file=str(log_file),
    )
    logger.debug("[跳过] a.jar")
    logger.info("[完成] b.jar")
    logger.remove()

    assert "[跳过] a.jar" not in console.getvalue()
    assert "[完成] b.jar" in console.getvalue()
    content = log_file.read_text(encoding="utf-8")
    assert "[跳过] a.jar" in content
    assert "[完成] b.jar" in content
