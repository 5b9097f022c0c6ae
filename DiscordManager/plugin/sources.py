"""
插件来源 - 实例、类型或磁盘上的库文件
Plugin sources - an instance, a type reference, or an on-disk library file.

类型和库文件在加载时才被解析。
Type references and library files resolve lazily at load time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from DiscordManager.plugin.manifest import PluginManifest


@dataclass(frozen=True, eq=False)
class InstanceSource:
    """预先构造的插件实例 / A pre-built plugin instance."""

    plugin: Any
    kind = "instance"


@dataclass(frozen=True)
class TypeSource:
    """由解析器实例化的插件类 / A plugin class instantiated by the resolver."""

    plugin_type: Any
    kind = "type"


@dataclass(frozen=True)
class LibrarySource:
    """磁盘上的插件文件或目录 / A plugin file or directory on disk."""

    path: Path
    kind = "library"


PluginSource = Union[InstanceSource, TypeSource, LibrarySource]


def to_source(value: Any) -> PluginSource:
    """
    把 add_plugin 的参数转换成插件来源
    Convert an add_plugin argument into a plugin source.
    """
    if isinstance(value, (InstanceSource, TypeSource, LibrarySource)):
        return value
    if isinstance(value, type):
        return TypeSource(value)
    if isinstance(value, (str, os.PathLike)):
        return LibrarySource(Path(value))
    return InstanceSource(value)


class LibraryCollector:
    """
    库收集器 - 批量收集插件文件
    Library collector - gathers plugin files in bulk.
    """

    def __init__(self) -> None:
        self._files: list[Path] = []

    @property
    def files(self) -> list[Path]:
        """已收集的文件（有序、去重） / Collected files, ordered and unique."""
        return list(self._files)

    def add_file(self, path: str | os.PathLike[str]) -> LibraryCollector:
        resolved = Path(path).resolve()
        if resolved not in self._files:
            self._files.append(resolved)
        return self

    def add_directory(
        self,
        directory: str | os.PathLike[str],
        pattern: str = "*.py",
        recursive: bool = False,
    ) -> LibraryCollector:
        """
        收集目录中的插件文件和带清单的插件子目录
        Collect plugin files and manifest-bearing plugin sub-directories.
        """
        root = Path(directory)
        if not root.is_dir():
            return self

        matches = root.rglob(pattern) if recursive else root.glob(pattern)
        for path in sorted(matches):
            if path.is_file() and not path.name.startswith("_"):
                self.add_file(path)

        for child in sorted(root.iterdir()):
            if child.is_dir() and PluginManifest.find(child) is not None:
                self.add_file(child)

        return self

    def __len__(self) -> int:
        return len(self._files)
