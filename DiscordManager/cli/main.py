"""
CLI 主入口 - 使用 Click 框架
CLI main entry - using Click framework.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import signal
import sys

import click

from DiscordManager.config.defaults import CONFIG_FILE, build_default_config
from DiscordManager.config.manager import ConfigManager
from DiscordManager.errors import ConfigurationError, DiscordManagerError
from DiscordManager.gateway.base import GatewayClient
from DiscordManager.manager import DiscordManager, LoginCredentials
from DiscordManager.plugin.sources import LibraryCollector

logger = logging.getLogger("DiscordManager")

config_option = click.option(
    "--config",
    "config_path",
    default=CONFIG_FILE,
    show_default=True,
    help="配置文件路径 / Path to the configuration file",
)


def collect_plugins(config: ConfigManager) -> LibraryCollector:
    """从配置收集插件文件 / Collect plugin files from the configuration."""
    collector = LibraryCollector()
    for directory in config.plugin_directories:
        collector.add_directory(directory)
    for path in config.plugin_files:
        collector.add_file(path)
    return collector


def build_manager(
    config: ConfigManager,
    token: str,
    gateway: GatewayClient | None = None,
) -> DiscordManager:
    """
    根据配置组装编排器
    Assemble the orchestrator from configuration.
    """
    return (
        DiscordManager(gateway)
        .with_credentials(LoginCredentials(token))
        .with_command_prefix(config.command_prefix)
        .add_service(ConfigManager, config)
        .add_plugin_collector(collect_plugins(config))
    )


async def serve(config: ConfigManager, token: str, gateway: GatewayClient | None = None) -> None:
    """
    运行直到收到关闭信号或启动失败
    Run until a shutdown signal arrives or startup fails.
    """
    from DiscordManager.kernel.logging import EventLogBridge

    manager = build_manager(config, token, gateway)
    cancel_event = asyncio.Event()

    # 注册系统信号（仅 Unix）
    signals = (signal.SIGINT, signal.SIGTERM) if sys.platform != "win32" else ()
    loop = asyncio.get_running_loop()
    for sig in signals:
        loop.add_signal_handler(sig, cancel_event.set)

    manager.with_cancel_event(cancel_event)
    bridge = EventLogBridge(manager.emitter).attach()
    try:
        await manager.start_and_wait()
    except asyncio.CancelledError:
        logger.info("收到关闭信号...")
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)
        bridge.detach()
        await manager.dispose()


@click.group()
def cli() -> None:
    """DiscordManager - 插件化 Discord 机器人编排框架"""
    pass


@cli.command()
@config_option
@click.option("--token", default=None, help="登录令牌，覆盖配置 / Login token")
@click.option("--debug", is_flag=True, help="启用调试日志 / Enable debug logging")
def run(config_path: str, token: str | None, debug: bool) -> None:
    """启动机器人 / Start the bot."""
    from DiscordManager.kernel.logging import setup_logging

    async def main() -> None:
        config = ConfigManager(defaults=build_default_config(), config_path=config_path)
        await config.load()

        setup_logging(
            "DEBUG" if debug else config.log_level,
            config.log_file,
        )

        login_token = token or config.token
        if not login_token:
            raise click.UsageError(
                "No login token: set discord.token in the config, "
                "DISCORD_MANAGER_TOKEN or pass --token"
            )

        logger.info("正在启动 DiscordManager...")
        await serve(config, login_token)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("收到键盘中断信号")
    except DiscordManagerError:
        logger.exception("致命错误")
        sys.exit(1)


@cli.command()
@config_option
def init(config_path: str) -> None:
    """初始化配置 / Initialize configuration."""
    os.makedirs(os.path.dirname(config_path) or ".", exist_ok=True)

    if os.path.exists(config_path):
        click.echo(f"配置文件已存在: {config_path}")
        if not click.confirm("是否覆盖?"):
            return

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(build_default_config(), f, ensure_ascii=False, indent=2)

    click.echo(f"配置文件已创建: {config_path}")


@cli.command()
def version() -> None:
    """显示版本信息 / Show version info."""
    from DiscordManager import __app_name__, __version__

    click.echo(f"{__app_name__} v{__version__}")


@cli.group()
def plugins() -> None:
    """插件管理 / Plugin management."""
    pass


@plugins.command("list")
@config_option
def plugins_list(config_path: str) -> None:
    """列出将被加载的插件库 / List plugin libraries that would be loaded."""
    config = ConfigManager(defaults=build_default_config(), config_path=config_path)
    try:
        asyncio.run(config.load())
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    files = collect_plugins(config).files
    if not files:
        click.echo("没有找到插件")
        return

    for path in files:
        click.echo(f"  - {path}")


@cli.group()
def conf() -> None:
    """配置管理 / Configuration management."""
    pass


@conf.command("show")
@click.argument("key", required=False)
@config_option
def conf_show(key: str | None, config_path: str) -> None:
    """显示配置 / Show configuration."""
    if not os.path.exists(config_path):
        click.echo("配置文件不存在，请先运行 init")
        return

    with open(config_path, encoding="utf-8") as f:
        config = json.load(f)

    if key:
        current = config
        for k in key.split("."):
            if not isinstance(current, dict) or k not in current:
                click.echo(f"键 '{key}' 不存在")
                return
            current = current[k]

        click.echo(json.dumps(current, ensure_ascii=False, indent=2))
    else:
        click.echo(json.dumps(config, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
