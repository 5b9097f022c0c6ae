"""
DiscordManager - 插件化 Discord 机器人编排框架
DiscordManager - a plugin-driven Discord bot orchestration framework.
"""

from DiscordManager.errors import (
    ConfigurationError,
    DiscordManagerError,
    GatewayConnectionError,
    InvalidStateError,
    LifecycleError,
    ResolutionError,
)
from DiscordManager.kernel.container import ServiceCollection
from DiscordManager.kernel.event_emitter import EventEmitter
from DiscordManager.kernel.lifecycle import ManagerState
from DiscordManager.manager import DiscordManager, LoginCredentials
from DiscordManager.plugin.base import Plugin, PluginCatalog, PluginMetadata
from DiscordManager.plugin.sources import LibraryCollector

__app_name__ = "DiscordManager"
__version__ = "1.0.0"

__all__ = [
    "DiscordManager",
    "LoginCredentials",
    "ManagerState",
    "EventEmitter",
    "ServiceCollection",
    "Plugin",
    "PluginCatalog",
    "PluginMetadata",
    "LibraryCollector",
    "DiscordManagerError",
    "ConfigurationError",
    "InvalidStateError",
    "ResolutionError",
    "LifecycleError",
    "GatewayConnectionError",
]
