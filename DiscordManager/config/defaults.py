"""
默认配置 - 框架的所有默认配置值
Default configuration - all default configuration values of the framework.
"""

from __future__ import annotations

import os
from typing import Any

CONFIG_FILE = os.path.join("data", "config", "discord_manager.json")

# 配置文件中 token 为空时读取的环境变量
TOKEN_ENV = "DISCORD_MANAGER_TOKEN"


def build_default_config() -> dict[str, Any]:
    """
    构建默认配置
    Build the default configuration.
    """
    return {
        # Discord 客户端配置
        "discord": {
            "token": "",
            "command_prefix": "!",
        },
        # 插件来源
        "plugins": {
            "directories": [os.path.join("data", "plugins")],
            "files": [],
        },
        # 日志配置
        "logging": {
            "level": "INFO",
            "file": os.path.join("data", "logs", "discord_manager.log"),
        },
    }
