"""配置与 CLI 测试"""

import json

import pytest
from click.testing import CliRunner
from loguru import logger

from mcfetch.cli import ConsoleProgress, load_config, main
from mcfetch.exceptions import ConfigParseError, ConfigValidationError
from mcfetch.models import Category, DownloaderConfig, ProgressEvent


def test_defaults():
    config = DownloaderConfig()
    assert config.max_concurrent == 10
    assert config.max_retries == 3
    assert config.retry_delay == 1.0
    assert config.timeout == 30.0
    assert config.manifest_ttl == 300.0


def test_from_dict_clamps_and_ignores_unknown_keys():
    config = DownloaderConfig.from_dict(
        {"max_concurrent": 99, "base_dir": "/tmp/mc", "unknown": True}
    )
    assert config.max_concurrent == 50
    assert config.base_dir == "/tmp/mc"


def test_from_dict_rejects_bad_values():
    with pytest.raises(ConfigValidationError):
        DownloaderConfig.from_dict({"max_concurrent": "many"})
    with pytest.raises(ConfigValidationError):
        DownloaderConfig.from_dict({"max_retries": 0})
    with pytest.raises(ConfigValidationError):
        DownloaderConfig.from_dict({"base_dir": 5})


def test_resources_url_trailing_slash_is_trimmed():
    config = DownloaderConfig(resources_url="https://mirror.example/assets/")
    assert config.resources_url == "https://mirror.example/assets"


@pytest.mark.parametrize(
    "name, content",
    [
        ("mc.toml", '[mcfetch]\nbase_dir = "/data/mc"\nmax_concurrent = 4\n'),
        ("mc.json", json.dumps({"base_dir": "/data/mc", "max_concurrent": 4})),
        ("mc.yaml", "base_dir: /data/mc\nmax_concurrent: 4\n"),
    ],
)
def test_load_config_formats(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")

    config = DownloaderConfig.from_dict(load_config(str(path)))

    assert config.base_dir == "/data/mc"
    assert config.max_concurrent == 4


def test_load_config_parse_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigParseError):
        load_config(str(path))


def test_cli_reports_missing_config(tmp_path):
    result = CliRunner().invoke(main, ["-c", str(tmp_path / "nope.toml"), "latest"])
    logger.remove()
    assert result.exit_code != 0
    assert "nope.toml" in result.output


def test_console_progress_ignores_file_level_events():
    progress = ConsoleProgress(step=10)
    progress(ProgressEvent(Category.ASSET, 40, current_file="a", total_bytes=5))
    assert progress._last == -10
    progress(ProgressEvent(Category.ASSET, 40, total_files=5, completed_files=2))
    assert progress._last == 40
