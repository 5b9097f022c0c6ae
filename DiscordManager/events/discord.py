"""
网关事件 - 由 EventMapper 从原始客户端事件翻译而来
Gateway events - translated from raw client events by the EventMapper.

负载对象保持为原生客户端对象（如 discord.Message），框架不解释其内容。
Payload objects stay native client objects (e.g. discord.Message); the
framework does not interpret them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Image:
    """图片附件 / An image attachment."""

    url: str


@dataclass(frozen=True)
class ReadyEvent:
    """连接已就绪 / The gateway connection is ready."""


@dataclass(frozen=True)
class ResumedEvent:
    """会话已恢复 / The gateway session was resumed."""


@dataclass(frozen=True)
class DisconnectedEvent:
    """连接已断开 / The gateway connection dropped."""


@dataclass(frozen=True)
class MessageReceivedEvent:
    message: Any
    content: str = ""
    author_id: str = ""
    channel_id: str = ""


@dataclass(frozen=True)
class ImageReceivedEvent:
    """
    图片消息 - 每个图片附件一个事件
    Image received - one event per image attachment of a message.
    """

    message: Any
    image: Image


@dataclass(frozen=True)
class MessageUpdatedEvent:
    before: Any
    after: Any


@dataclass(frozen=True)
class MessageDeletedEvent:
    message: Any


@dataclass(frozen=True)
class ReactionAddedEvent:
    reaction: Any
    user: Any


@dataclass(frozen=True)
class ReactionRemovedEvent:
    reaction: Any
    user: Any


@dataclass(frozen=True)
class MemberJoinedEvent:
    member: Any


@dataclass(frozen=True)
class MemberLeftEvent:
    member: Any


@dataclass(frozen=True)
class GuildJoinedEvent:
    guild: Any


@dataclass(frozen=True)
class GuildLeftEvent:
    guild: Any


@dataclass(frozen=True)
class GatewayEvent:
    """
    通用网关事件 - 没有专用翻译器的原始事件
    Generic gateway event - raw events without a dedicated translator.
    """

    name: str
    args: tuple[Any, ...] = field(default_factory=tuple)
