"""
配置模块 - 管理框架配置
Config module - manages framework configuration.
"""

from DiscordManager.config.defaults import CONFIG_FILE, TOKEN_ENV, build_default_config
from DiscordManager.config.manager import ConfigManager

__all__ = ["ConfigManager", "build_default_config", "CONFIG_FILE", "TOKEN_ENV"]
