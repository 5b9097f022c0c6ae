"""
网关基类 - 被包装的实时消息客户端的抽象边界
Gateway base - the abstract boundary around the wrapped real-time client.

框架只调用这些操作，不实现任何网关协议语义。
The framework only calls these operations; it implements no gateway semantics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum, auto
from typing import Any

from DiscordManager.errors import ConfigurationError

logger = logging.getLogger(__name__)

RawHandler = Callable[..., None]


class GatewayStatus(Enum):
    """网关状态枚举 / Gateway status enum."""

    IDLE = auto()
    CONNECTING = auto()
    READY = auto()
    CLOSED = auto()
    ERROR = auto()


class GatewayClient(ABC):
    """
    网关抽象基类 - 暴露命名原始事件、连接和释放
    Gateway abstract base - exposes named raw events, connect and disposal.

    设计要求：
    1. event_names 列出所有可订阅的原始事件
    2. connect 在连接就绪后才返回
    3. wait_closed 在连接结束前一直挂起
    4. 原始事件处理器在触发事件的同一控制流中同步调用
    """

    def __init__(self) -> None:
        self._status = GatewayStatus.IDLE
        # 原始事件名 -> 处理器列表
        self._handlers: dict[str, list[RawHandler]] = {}

    @property
    def status(self) -> GatewayStatus:
        """获取当前状态 / Get current status."""
        return self._status

    @property
    @abstractmethod
    def event_names(self) -> tuple[str, ...]:
        """所有可订阅的原始事件名 / Every raw event name that can be subscribed."""
        ...

    @property
    def raw_client(self) -> Any:
        """被包装的原生客户端 / The wrapped native client, if any."""
        return None

    def subscribe(self, event_name: str, handler: RawHandler) -> None:
        """
        订阅原始事件
        Subscribe to a raw event.
        """
        if event_name not in self.event_names:
            raise ConfigurationError(f"Unknown raw gateway event: {event_name}")
        self._handlers.setdefault(event_name, []).append(handler)

    def dispatch(self, event_name: str, *args: Any) -> None:
        """
        把原始事件同步分发给处理器
        Dispatch a raw event synchronously to its handlers.
        """
        for handler in tuple(self._handlers.get(event_name, ())):
            try:
                handler(*args)
            except Exception:
                logger.exception("原始事件 %s 的处理器出错", event_name)

    @abstractmethod
    async def connect(self, token: str) -> None:
        """
        使用凭据连接，连接就绪后返回
        Connect with the token; returns once the connection is ready.
        """
        ...

    @abstractmethod
    async def wait_closed(self) -> None:
        """
        挂起直到连接结束
        Suspend until the connection ends.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        释放客户端资源
        Release client resources.
        """
        ...
