"""
事件模块 - 在事件总线上传递的应用事件
Events module - application events carried on the event bus.
"""

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
from DiscordManager.events.logging import LogEvent, TraceEvent

__all__ = [
    "LogEvent",
    "TraceEvent",
    "ReadyEvent",
    "ResumedEvent",
    "DisconnectedEvent",
    "MessageReceivedEvent",
    "ImageReceivedEvent",
    "MessageUpdatedEvent",
    "MessageDeletedEvent",
    "ReactionAddedEvent",
    "ReactionRemovedEvent",
    "MemberJoinedEvent",
    "MemberLeftEvent",
    "GuildJoinedEvent",
    "GuildLeftEvent",
    "GatewayEvent",
    "Image",
]
