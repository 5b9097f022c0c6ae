"""
模块加载器 - 从磁盘路径发现插件类型
Module loader - discovers plugin types from an on-disk path.

给定路径，返回零个或多个插件工厂；工厂接收冻结后的解析器并产出插件实例。
Given a path, returns zero or more plugin factories; a factory takes the
finalized resolver and produces a plugin instance.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Protocol, runtime_checkable

from DiscordManager.errors import ResolutionError
from DiscordManager.kernel.container import ServiceResolver
from DiscordManager.plugin.base import Plugin
from DiscordManager.plugin.manifest import PluginManifest

logger = logging.getLogger(__name__)


class PluginFactory:
    """
    插件工厂 - 通过解析器构造某个插件类型
    Plugin factory - builds one plugin type through the resolver.
    """

    __slots__ = ("plugin_type", "origin")

    def __init__(self, plugin_type: type[Plugin], origin: str) -> None:
        self.plugin_type = plugin_type
        self.origin = origin

    async def __call__(self, resolver: ServiceResolver) -> Plugin:
        return await resolver.create(self.plugin_type)

    def __repr__(self) -> str:
        return f"PluginFactory({self.plugin_type.__name__!r}, {self.origin!r})"


@runtime_checkable
class ModuleLoader(Protocol):
    """模块加载能力 / The module-loading capability."""

    def load(self, path: Path) -> list[PluginFactory]:
        ...


class PythonModuleLoader:
    """
    Python 模块加载器 - 支持 .py 文件和带清单的插件目录
    Python module loader - handles .py files and manifest-bearing directories.
    """

    def load(self, path: Path) -> list[PluginFactory]:
        path = Path(path)
        if not path.exists():
            raise ResolutionError(f"Plugin library not found: {path}", path)

        if path.is_dir():
            return self._load_directory(path)

        if path.suffix != ".py":
            raise ResolutionError(f"Unsupported plugin library: {path}", path)

        module = self._import(path, self._module_name(path.stem, path))
        return self._collect(module, path, entry_class="")

    def _load_directory(self, directory: Path) -> list[PluginFactory]:
        manifest_path = PluginManifest.find(directory)
        if manifest_path is None:
            raise ResolutionError(f"No plugin manifest in {directory}", directory)

        manifest = PluginManifest.from_file(manifest_path)
        if not manifest.activated:
            logger.info("插件 %s 已停用，跳过加载", manifest.name)
            return []

        # 动态加载模块
        module_path = directory / f"{manifest.entry_module}.py"
        if not module_path.is_file():
            # 尝试 __init__.py
            module_path = directory / manifest.entry_module / "__init__.py"
        if not module_path.is_file():
            raise ResolutionError(
                f"Plugin {manifest.name} has no entry module '{manifest.entry_module}'",
                directory,
            )

        # 将插件目录加入 sys.path，使其可以导入同目录模块
        if str(directory) not in sys.path:
            sys.path.insert(0, str(directory))

        module = self._import(module_path, self._module_name(manifest.name, directory))
        return self._collect(module, directory, entry_class=manifest.entry_class)

    @staticmethod
    def _module_name(name: str, path: Path) -> str:
        digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:8]
        return f"discord_manager_plugin_{name}_{digest}"

    @staticmethod
    def _import(module_path: Path, module_name: str) -> ModuleType:
        if module_name in sys.modules:
            return sys.modules[module_name]

        spec = importlib.util.spec_from_file_location(module_name, module_path)
        if spec is None or spec.loader is None:
            raise ResolutionError(f"Cannot import plugin library {module_path}", module_path)

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ResolutionError(f"Failed to load plugin library {module_path}", module_path) from e
        return module

    @staticmethod
    def _collect(module: ModuleType, origin: Path, entry_class: str) -> list[PluginFactory]:
        """查找 Plugin 子类 / Find Plugin subclasses."""
        if entry_class:
            plugin_cls = getattr(module, entry_class, None)
            if not (isinstance(plugin_cls, type) and issubclass(plugin_cls, Plugin)):
                raise ResolutionError(
                    f"Entry class '{entry_class}' in {origin} is not a Plugin", origin
                )
            return [PluginFactory(plugin_cls, str(origin))]

        factories = []
        # 按定义顺序，只取本模块定义的类
        for attr in list(vars(module).values()):
            if (
                isinstance(attr, type)
                and issubclass(attr, Plugin)
                and attr is not Plugin
                and attr.__module__ == module.__name__
                and not inspect.isabstract(attr)
            ):
                factories.append(PluginFactory(attr, str(origin)))

        if not factories:
            logger.warning("%s 中未找到 Plugin 子类", origin)
        return factories
