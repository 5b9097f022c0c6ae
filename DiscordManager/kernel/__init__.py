"""
微内核模块 - 框架的最小化核心
Microkernel module - the minimal core of the framework.

包含依赖注入容器、事件发射器、生命周期状态和日志。
Contains the DI container, event emitter, lifecycle states and logging.
"""

from DiscordManager.kernel.container import (
    Lifecycle,
    ServiceCollection,
    ServiceResolver,
)
from DiscordManager.kernel.event_emitter import EventEmitter
from DiscordManager.kernel.lifecycle import ManagerState

__all__ = [
    "EventEmitter",
    "Lifecycle",
    "ManagerState",
    "ServiceCollection",
    "ServiceResolver",
]
