"""
插件系统 - 运行时发现和加载的可选功能模块
Plugin system - optional feature modules discovered and loaded at runtime.
"""

from DiscordManager.plugin.base import Plugin, PluginCatalog, PluginMetadata
from DiscordManager.plugin.loader import ModuleLoader, PluginFactory, PythonModuleLoader
from DiscordManager.plugin.manager import PluginManager
from DiscordManager.plugin.manifest import PluginManifest
from DiscordManager.plugin.sources import (
    InstanceSource,
    LibraryCollector,
    LibrarySource,
    PluginSource,
    TypeSource,
)

__all__ = [
    "Plugin",
    "PluginCatalog",
    "PluginMetadata",
    "PluginManager",
    "PluginManifest",
    "ModuleLoader",
    "PluginFactory",
    "PythonModuleLoader",
    "PluginSource",
    "InstanceSource",
    "TypeSource",
    "LibrarySource",
    "LibraryCollector",
]
