"""
插件基类 - 所有插件的父类
Plugin base - parent of all plugins.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import ClassVar, overload


class Plugin:
    """
    插件基类 - 用户插件继承此类
    Plugin base - user plugins inherit from this.

    生命周期钩子（都是可选的，可以是普通方法或协程函数）：
    1. initialize() - 连接建立前调用，适合注册监听器，不能发送消息
    2. start() - 连接就绪后调用，可以安全地使用客户端

    Lifecycle hooks (both optional, plain methods or coroutine functions):
    1. initialize() - runs before the connection exists; register intent here
    2. start() - runs once the connection is ready; client calls are safe

    构造函数的参数通过类型注解注入，例如 DiscordManager、EventEmitter、
    PluginCatalog 或宿主注册的任何服务。
    Constructor parameters are injected by annotation: DiscordManager,
    EventEmitter, PluginCatalog or any service the host registered.
    """

    # 插件名，为空时使用类名
    name: ClassVar[str] = ""
    version: ClassVar[str] = "0.1.0"
    description: ClassVar[str] = ""

    @property
    def plugin_name(self) -> str:
        """插件名 / Plugin name."""
        return type(self).name or type(self).__name__


@dataclass(frozen=True)
class PluginMetadata:
    """
    插件元数据 - 描述一个已加载的插件
    Plugin metadata - describes one loaded plugin.
    """

    name: str
    version: str
    description: str
    # instance / type / library
    source_kind: str
    # 模块路径或文件路径
    origin: str

    @classmethod
    def describe(cls, plugin: Plugin, source_kind: str, origin: str = "") -> PluginMetadata:
        plugin_type = type(plugin)
        return cls(
            name=plugin.plugin_name,
            version=plugin_type.version,
            description=plugin_type.description,
            source_kind=source_kind,
            origin=origin or f"{plugin_type.__module__}.{plugin_type.__qualname__}",
        )


class PluginCatalog(Sequence[PluginMetadata]):
    """
    已加载插件的只读列表，随加载进度增长
    Read-only list of loaded plugin metadata; grows as plugins load.
    """

    def __init__(self) -> None:
        self._entries: list[PluginMetadata] = []

    def _append(self, metadata: PluginMetadata) -> None:
        self._entries.append(metadata)

    @overload
    def __getitem__(self, index: int) -> PluginMetadata: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[PluginMetadata]: ...

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PluginMetadata]:
        return iter(tuple(self._entries))

    def names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    def __repr__(self) -> str:
        return f"PluginCatalog({self.names()!r})"
