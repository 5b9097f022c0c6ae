"""
插件清单 - 描述插件目录的元数据
Plugin manifest - describes the metadata of a plugin directory.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from DiscordManager.errors import ResolutionError

# 按顺序查找的清单文件名
MANIFEST_FILES = ("manifest.json", "plugin.yaml", "plugin.yml")


@dataclass
class PluginManifest:
    """
    插件清单 - 从 manifest.json 或 plugin.yaml 加载
    Plugin manifest - loaded from manifest.json or plugin.yaml.
    """

    # 插件名（唯一标识）
    name: str = ""
    description: str = ""
    version: str = "0.1.0"
    author: str = ""
    # 入口模块（相对于插件目录）
    entry_module: str = "main"
    # 入口类名，为空时加载模块中所有 Plugin 子类
    entry_class: str = ""
    # 插件目录路径
    directory: str = ""
    # 是否已激活
    activated: bool = True

    @staticmethod
    def find(directory: Path) -> Path | None:
        """在目录中查找清单文件 / Find the manifest file in a directory."""
        for filename in MANIFEST_FILES:
            candidate = directory / filename
            if candidate.is_file():
                return candidate
        return None

    @classmethod
    def from_file(cls, file_path: Path) -> PluginManifest:
        """
        从文件加载清单
        Load manifest from file.
        """
        try:
            with open(file_path, encoding="utf-8") as f:
                if file_path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ResolutionError(f"Cannot read plugin manifest {file_path}", file_path) from e

        if not isinstance(data, dict):
            raise ResolutionError(f"Plugin manifest {file_path} is not a mapping", file_path)

        directory = file_path.parent
        return cls(
            name=data.get("name") or directory.name,
            description=data.get("description", ""),
            version=str(data.get("version", "0.1.0")),
            author=data.get("author", ""),
            entry_module=data.get("entry_module", data.get("entry", "main")),
            entry_class=data.get("entry_class", ""),
            directory=str(directory),
            activated=bool(data.get("activated", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        """转为字典 / Convert to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "author": self.author,
            "entry_module": self.entry_module,
            "entry_class": self.entry_class,
            "activated": self.activated,
        }
