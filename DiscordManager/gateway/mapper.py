"""
事件映射器 - 把客户端原始事件翻译为类型化的应用事件
Event mapper - translates raw client events into typed application events.

必须在连接打开前恰好运行一次，否则事件可能先于映射到达，
或被重复发布。
Must run exactly once, before the connection opens; otherwise events could
race ahead of the mapping or be published twice.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from DiscordManager.errors import ConfigurationError
from DiscordManager.events.discord import (
    DisconnectedEvent,
    GatewayEvent,
    GuildJoinedEvent,
    GuildLeftEvent,
    Image,
    ImageReceivedEvent,
    MemberJoinedEvent,
    MemberLeftEvent,
    MessageDeletedEvent,
    MessageReceivedEvent,
    MessageUpdatedEvent,
    ReactionAddedEvent,
    ReactionRemovedEvent,
    ReadyEvent,
    ResumedEvent,
)
from DiscordManager.gateway.base import GatewayClient
from DiscordManager.kernel.event_emitter import EventEmitter

logger = logging.getLogger(__name__)

# 原始负载 -> 零个或多个应用事件
Translator = Callable[..., Iterable[Any]]


def _translate_message(message: Any) -> list[Any]:
    author = getattr(message, "author", None)
    channel = getattr(message, "channel", None)
    events: list[Any] = [
        MessageReceivedEvent(
            message=message,
            content=getattr(message, "content", "") or "",
            author_id=str(getattr(author, "id", "")),
            channel_id=str(getattr(channel, "id", "")),
        )
    ]

    for attachment in getattr(message, "attachments", None) or ():
        content_type = getattr(attachment, "content_type", None) or ""
        if content_type.startswith("image"):
            events.append(ImageReceivedEvent(message, Image(url=attachment.url)))

    return events


DEFAULT_TRANSLATORS: dict[str, Translator] = {
    "ready": lambda: [ReadyEvent()],
    "resumed": lambda: [ResumedEvent()],
    "disconnect": lambda: [DisconnectedEvent()],
    "message": _translate_message,
    "message_edit": lambda before, after: [MessageUpdatedEvent(before, after)],
    "message_delete": lambda message: [MessageDeletedEvent(message)],
    "reaction_add": lambda reaction, user: [ReactionAddedEvent(reaction, user)],
    "reaction_remove": lambda reaction, user: [ReactionRemovedEvent(reaction, user)],
    "member_join": lambda member: [MemberJoinedEvent(member)],
    "member_remove": lambda member: [MemberLeftEvent(member)],
    "guild_join": lambda guild: [GuildJoinedEvent(guild)],
    "guild_remove": lambda guild: [GuildLeftEvent(guild)],
}


class EventMapper:
    """
    事件映射器 - 订阅客户端的全部原始事件并在总线上重新发布
    Event mapper - subscribes to every raw client event and republishes it.
    """

    def __init__(
        self,
        gateway: GatewayClient,
        emitter: EventEmitter,
        translators: Mapping[str, Translator] | None = None,
    ) -> None:
        self._gateway = gateway
        self._emitter = emitter
        self._translators = dict(DEFAULT_TRANSLATORS)
        if translators:
            self._translators.update(translators)
        self._mapped = False

    @property
    def is_mapped(self) -> bool:
        return self._mapped

    def map_all_events(self) -> None:
        """
        为每个原始事件注册翻译器（只能调用一次）
        Register a translator for every raw event (only once).
        """
        if self._mapped:
            raise ConfigurationError("Gateway events are already mapped")

        for name in self._gateway.event_names:
            translator = self._translators.get(name)
            if translator is None:
                translator = self._generic_translator(name)
            self._gateway.subscribe(name, self._make_handler(translator))

        self._mapped = True
        logger.debug("已映射 %d 个网关事件", len(self._gateway.event_names))

    def _make_handler(self, translator: Translator) -> Callable[..., None]:
        def handler(*args: Any) -> None:
            for event in translator(*args):
                self._emitter.emit(event)

        return handler

    @staticmethod
    def _generic_translator(name: str) -> Translator:
        return lambda *args: [GatewayEvent(name, args)]
