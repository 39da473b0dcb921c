"""
CLI 模块

命令行接口实现。
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import click
import toml
import yaml
from loguru import logger

from mcfetch import __version__
from mcfetch.exceptions import ConfigParseError, McFetchError
from mcfetch.logger import resolve_level, setup_logger
from mcfetch.models import DownloaderConfig, EventType, ProgressEvent
from mcfetch.orchestrator import MinecraftDownloader


def load_config(config_path: Optional[str]) -> dict:
    """加载配置文件"""
    if not config_path:
        return {}

    path = Path(config_path)
    if not path.exists():
        raise click.ClickException(f"配置文件不存在: {config_path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            data = toml.load(config_path)
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise click.ClickException(f"不支持的配置文件格式: {suffix}")
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"配置文件解析失败: {e}", context={"path": config_path}
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError("配置文件顶层必须是表", context={"path": config_path})
    # 允许把配置放在 [mcfetch] 表下
    return data.get("mcfetch", data)


class ConsoleProgress:
    """在日志中输出整体进度，每 10% 一次"""

    def __init__(self, step: int = 10):
        self.step = step
        self._last = -step

    def __call__(self, event: ProgressEvent) -> None:
        if not event.is_overall:
            return
        if event.percent - self._last >= self.step or event.percent == 100:
            self._last = event.percent
            logger.info(
                f"[进度] {event.completed_files}/{event.total_files} 个文件 ({event.percent}%)"
            )


def build_config(ctx: click.Context, **overrides) -> DownloaderConfig:
    data = dict(ctx.obj["config"])
    data.update({k: v for k, v in overrides.items() if v is not None})
    return DownloaderConfig.from_dict(data)


async def run_download(config: DownloaderConfig, version: str):
    """异步运行下载"""
    async with MinecraftDownloader(config) as downloader:
        downloader.events.on(EventType.PROGRESS, ConsoleProgress())
        downloader.events.on(
            EventType.FILE_COMPLETE,
            lambda e: logger.debug(f"[完成] {e.category.value}: {e.filename}"),
        )
        if version == "latest":
            version = await downloader.get_latest_release()
        return await downloader.download(version)


async def run_versions(config: DownloaderConfig, version_type: Optional[str]):
    async with MinecraftDownloader(config) as downloader:
        return await downloader.get_available_versions(version_type)


async def run_latest(config: DownloaderConfig, snapshot: bool):
    async with MinecraftDownloader(config) as downloader:
        if snapshot:
            return await downloader.get_latest_snapshot()
        return await downloader.get_latest_release()


@click.group()
@click.option(
    "-c", "--config", "config_path", type=click.Path(), help="配置文件 (toml/json/yaml)"
)
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.option("--log-file", type=click.Path(dir_okay=False), help="同时写入日志文件")
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: click.Context, config_path: Optional[str], debug: bool, log_file: Optional[str]
):
    """McFetch - Minecraft 版本下载工具"""
    setup_logger(level=resolve_level(debug), log_file=log_file)
    try:
        ctx.obj = {"config": load_config(config_path)}
    except McFetchError as e:
        raise click.ClickException(str(e))


@main.command()
@click.argument("version", default="latest")
@click.option("-d", "--dir", "base_dir", help="下载目录")
@click.option("-j", "--concurrency", "max_concurrent", type=int, help="最大并发数 (1-50)")
@click.pass_context
def download(ctx, version: str, base_dir: Optional[str], max_concurrent: Optional[int]):
    """下载指定版本（默认最新正式版）"""
    try:
        config = build_config(ctx, base_dir=base_dir, max_concurrent=max_concurrent)
        stats = asyncio.run(run_download(config, version))
    except McFetchError as e:
        logger.error(f"下载失败: {e}")
        raise click.ClickException(str(e))

    click.echo(
        f"完成! {stats.completed}/{stats.total} 个文件, 跳过 {stats.skipped} 个, "
        f"下载 {stats.bytes_downloaded / (1024 * 1024):.2f} MB"
    )


@main.command()
@click.option(
    "--type",
    "version_type",
    type=click.Choice(["release", "snapshot", "old_beta", "old_alpha"]),
    help="按类型过滤",
)
@click.pass_context
def versions(ctx, version_type: Optional[str]):
    """列出可用版本"""
    try:
        ids = asyncio.run(run_versions(build_config(ctx), version_type))
    except McFetchError as e:
        raise click.ClickException(str(e))
    for version_id in ids:
        click.echo(version_id)


@main.command()
@click.option("--snapshot", is_flag=True, help="显示最新快照版")
@click.pass_context
def latest(ctx, snapshot: bool):
    """显示最新版本"""
    try:
        click.echo(asyncio.run(run_latest(build_config(ctx), snapshot)))
    except McFetchError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    main()
