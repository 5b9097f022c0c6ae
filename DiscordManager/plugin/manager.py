"""
插件管理器 - 解析插件来源并按顺序调用生命周期钩子
Plugin manager - resolves plugin sources and invokes lifecycle hooks in order.

钩子按加载顺序逐个等待、从不并发，第一个失败会中止其余钩子。
Hooks are awaited one at a time in load order, never concurrently; the first
failure aborts the remaining hooks.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence

from DiscordManager.errors import ConfigurationError, LifecycleError, ResolutionError
from DiscordManager.events.logging import LogEvent
from DiscordManager.kernel.container import ServiceResolver
from DiscordManager.kernel.event_emitter import EventEmitter
from DiscordManager.plugin.base import Plugin, PluginCatalog, PluginMetadata
from DiscordManager.plugin.loader import ModuleLoader, PythonModuleLoader
from DiscordManager.plugin.sources import (
    InstanceSource,
    LibrarySource,
    PluginSource,
    TypeSource,
)

logger = logging.getLogger(__name__)


class PluginManager:
    """
    插件管理器 - 拥有所有已加载的插件实例
    Plugin manager - owns every materialized plugin instance.
    """

    def __init__(
        self,
        emitter: EventEmitter,
        sources: Sequence[PluginSource],
        loader: ModuleLoader | None = None,
    ) -> None:
        self._emitter = emitter
        # 与编排器共享的来源列表
        self._sources = sources
        self._loader = loader or PythonModuleLoader()
        self._plugins: list[Plugin] = []
        self._catalog = PluginCatalog()
        self._loaded = False

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return tuple(self._plugins)

    @property
    def catalog(self) -> PluginCatalog:
        return self._catalog

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def load_all(self, resolver: ServiceResolver) -> None:
        """
        按声明顺序解析所有来源（任何失败都会中止启动）
        Resolve every source in declaration order; any failure aborts startup.
        """
        if self._loaded:
            raise ConfigurationError("Plugins are already loaded")
        self._loaded = True

        for source in list(self._sources):
            if isinstance(source, InstanceSource):
                self._add(self._check_instance(source.plugin, source), source.kind, "")
            elif isinstance(source, TypeSource):
                plugin_type = source.plugin_type
                if not (isinstance(plugin_type, type) and issubclass(plugin_type, Plugin)):
                    raise ResolutionError(f"{plugin_type!r} is not a Plugin type", source)
                self._add(await resolver.create(plugin_type), source.kind, "")
            elif isinstance(source, LibrarySource):
                await self._load_library(source, resolver)
            else:
                raise ResolutionError(f"Unknown plugin source: {source!r}", source)

        logger.info("已加载 %d 个插件", len(self._plugins))
        self._emitter.emit(LogEvent("All plugins loaded."))

    async def _load_library(self, source: LibrarySource, resolver: ServiceResolver) -> None:
        try:
            factories = self._loader.load(source.path)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"Failed to load plugin library {source.path}", source) from e

        for factory in factories:
            plugin = self._check_instance(await factory(resolver), source)
            self._add(plugin, source.kind, str(source.path))

    @staticmethod
    def _check_instance(plugin: object, source: PluginSource) -> Plugin:
        if not isinstance(plugin, Plugin):
            raise ResolutionError(f"{plugin!r} is not a Plugin", source)
        return plugin

    def _add(self, plugin: Plugin, source_kind: str, origin: str) -> None:
        self._plugins.append(plugin)
        self._catalog._append(PluginMetadata.describe(plugin, source_kind, origin))
        logger.debug("已加载插件: %s", plugin.plugin_name)

    async def invoke_initialize(self) -> None:
        """依次调用 initialize 钩子 / Invoke every initialize hook in load order."""
        await self._invoke("initialize")

    async def invoke_start(self) -> None:
        """依次调用 start 钩子 / Invoke every start hook in load order."""
        await self._invoke("start")

    async def _invoke(self, hook_name: str) -> None:
        for plugin in list(self._plugins):
            hook = getattr(plugin, hook_name, None)
            if not callable(hook):
                continue

            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("插件 %s 的 %s 钩子出错", plugin.plugin_name, hook_name)
                raise LifecycleError(plugin.plugin_name, hook_name) from e
