"""
网关模块 - 消息平台客户端边界与事件映射
Gateway module - the messaging client boundary and event mapping.

DiscordGateway 依赖 py-cord，按需从 DiscordManager.gateway.discord_gateway 导入。
DiscordGateway needs py-cord; import it from DiscordManager.gateway.discord_gateway.
"""

from DiscordManager.gateway.base import GatewayClient, GatewayStatus
from DiscordManager.gateway.mapper import DEFAULT_TRANSLATORS, EventMapper

__all__ = ["GatewayClient", "GatewayStatus", "EventMapper", "DEFAULT_TRANSLATORS"]
