"""
配置管理器 - 读取、校验并补全 JSON 配置
Config manager - reads, validates and completes the JSON configuration.

文件中缺失的键由默认值补全；只有在文件不存在或补全改变了内容时才写回。
Keys missing from the file are filled from the defaults; the file is written
back only when it did not exist or the merge changed its contents.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any

from DiscordManager.config.defaults import CONFIG_FILE, TOKEN_ENV, build_default_config
from DiscordManager.errors import ConfigurationError

logger = logging.getLogger(__name__)

_MISSING = object()


class ConfigManager:
    """
    配置管理器 - 宿主程序的配置中心
    Config manager - the configuration center of the host program.

    支持：
    - 嵌套键访问（如 "discord.token"）
    - 加载时补全默认值并校验 discord / plugins / logging 三个分区
    - 类型化访问器：token、command_prefix、插件来源、日志设置
    - token 为空时从环境变量读取（不写回文件）
    """

    def __init__(
        self,
        defaults: dict[str, Any] | None = None,
        config_path: str = CONFIG_FILE,
    ) -> None:
        self._defaults = build_default_config() if defaults is None else defaults
        self._config: dict[str, Any] = {}
        self._config_path = config_path

    @property
    def path(self) -> str:
        return self._config_path

    async def load(self) -> None:
        """
        加载配置文件，无法解析或校验失败时抛出 ConfigurationError
        Load the configuration file.

        An unreadable, malformed or invalid file raises ConfigurationError and
        is left untouched on disk.
        """
        created = not os.path.exists(self._config_path)
        if created:
            raw: dict[str, Any] = {}
            logger.info("未找到配置文件，将创建默认配置: %s", self._config_path)
        else:
            raw = self._read()

        merged = copy.deepcopy(raw)
        self._merge_defaults(merged, self._defaults)
        validate_config(merged)
        self._config = merged

        if created or merged != raw:
            await self.save()
        logger.info("配置已从 %s 加载", self._config_path)

    def _read(self) -> dict[str, Any]:
        try:
            with open(self._config_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigurationError(
                f"Cannot read configuration file {self._config_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {self._config_path} must contain a JSON object"
            )
        return data

    async def save(self) -> None:
        """
        保存配置到文件
        Save configuration to file.
        """
        os.makedirs(os.path.dirname(self._config_path) or ".", exist_ok=True)
        try:
            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, ensure_ascii=False, indent=2)
        except OSError:
            logger.exception("保存配置失败")

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置值（支持嵌套键，如 "discord.token"）
        Get config value (supports nested keys like "discord.token").
        """
        value = _lookup(self._config, key)
        return default if value is _MISSING or value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        设置配置值（支持嵌套键）
        Set config value (supports nested keys).
        """
        keys = key.split(".")
        current = self._config
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def as_dict(self) -> dict[str, Any]:
        """获取完整配置字典 / Get the full config dictionary."""
        return copy.deepcopy(self._config)

    # ------------------------------------------------------------------ #
    # 类型化访问器 / Typed accessors
    # ------------------------------------------------------------------ #

    @property
    def token(self) -> str:
        """登录令牌，文件为空时取环境变量 / Login token, falling back to the environment."""
        return self._setting("discord.token") or os.environ.get(TOKEN_ENV, "")

    @property
    def command_prefix(self) -> str:
        return self._setting("discord.command_prefix") or "!"

    @property
    def plugin_directories(self) -> list[str]:
        return list(self._setting("plugins.directories") or [])

    @property
    def plugin_files(self) -> list[str]:
        return list(self._setting("plugins.files") or [])

    @property
    def log_level(self) -> str:
        return str(self._setting("logging.level") or "INFO").upper()

    @property
    def log_file(self) -> str | None:
        return self._setting("logging.file") or None

    def _setting(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            value = _lookup(self._defaults, key)
        return None if value is _MISSING else value

    def _merge_defaults(self, config: dict[str, Any], defaults: dict[str, Any]) -> None:
        """
        递归合并默认值到配置中（不覆盖已有值）
        Recursively merge defaults into config (does not overwrite existing).
        """
        for key, default_value in defaults.items():
            if key not in config:
                config[key] = copy.deepcopy(default_value)
            elif isinstance(default_value, dict) and isinstance(config[key], dict):
                self._merge_defaults(config[key], default_value)


def _lookup(config: dict[str, Any], key: str) -> Any:
    current: Any = config
    for k in key.split("."):
        if not isinstance(current, dict) or k not in current:
            return _MISSING
        current = current[k]
    return current


def validate_config(config: dict[str, Any]) -> None:
    """
    校验已知分区的值类型，未知键保持原样
    Validate the known sections; unknown keys are left alone.
    """
    discord = _section(config, "discord")
    if discord is not None:
        if not isinstance(discord.get("token", ""), str):
            raise ConfigurationError("discord.token must be a string")
        prefix = discord.get("command_prefix", "!")
        if not isinstance(prefix, str) or not prefix:
            raise ConfigurationError("discord.command_prefix must be a non-empty string")

    plugins = _section(config, "plugins")
    if plugins is not None:
        for name in ("directories", "files"):
            paths = plugins.get(name, [])
            if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
                raise ConfigurationError(f"plugins.{name} must be a list of paths")

    log_settings = _section(config, "logging")
    if log_settings is not None:
        level = log_settings.get("level", "INFO")
        if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
            raise ConfigurationError(f"logging.level is not a log level: {level!r}")
        log_file = log_settings.get("file")
        if log_file is not None and not isinstance(log_file, str):
            raise ConfigurationError("logging.file must be a path or null")


def _section(config: dict[str, Any], name: str) -> dict[str, Any] | None:
    section = config.get(name)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be an object")
    return section
