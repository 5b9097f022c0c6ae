"""
Discord 网关 - 通过 py-cord 库连接
Discord gateway - connects via the py-cord library.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import discord

from DiscordManager.errors import GatewayConnectionError
from DiscordManager.gateway.base import GatewayClient, GatewayStatus

logger = logging.getLogger(__name__)

# py-cord 分发的原始事件（去掉 on_ 前缀）
RAW_EVENTS: tuple[str, ...] = (
    "ready",
    "resumed",
    "disconnect",
    "message",
    "message_edit",
    "message_delete",
    "reaction_add",
    "reaction_remove",
    "member_join",
    "member_remove",
    "guild_join",
    "guild_remove",
)


class DiscordGateway(GatewayClient):
    """
    Discord 网关 - 把 py-cord 的 on_<event> 回调转成原始事件分发
    Discord gateway - turns py-cord's on_<event> callbacks into raw dispatch.
    """

    def __init__(self, intents: discord.Intents | None = None) -> None:
        super().__init__()
        if intents is None:
            intents = discord.Intents.default()
            intents.message_content = True
        self._client = discord.Client(intents=intents)
        self._runner: asyncio.Task[Any] | None = None
        self._bound = False

    @property
    def event_names(self) -> tuple[str, ...]:
        return RAW_EVENTS

    @property
    def raw_client(self) -> discord.Client:
        return self._client

    def _bind_events(self) -> None:
        """把每个原始事件挂到客户端上 / Attach every raw event to the client."""
        if self._bound:
            return
        for name in RAW_EVENTS:
            setattr(self._client, f"on_{name}", self._make_dispatcher(name))
        self._bound = True

    def _make_dispatcher(self, name: str) -> Any:
        async def dispatcher(*args: Any) -> None:
            self.dispatch(name, *args)

        dispatcher.__name__ = f"on_{name}"
        return dispatcher

    async def connect(self, token: str) -> None:
        """登录并等待就绪 / Log in and wait for the ready signal."""
        self._bind_events()
        self._status = GatewayStatus.CONNECTING

        try:
            await self._client.login(token)
        except discord.LoginFailure as e:
            self._status = GatewayStatus.ERROR
            raise GatewayConnectionError("Discord rejected the login token") from e
        except discord.HTTPException as e:
            self._status = GatewayStatus.ERROR
            raise GatewayConnectionError(f"Discord login failed: {e}") from e

        self._runner = asyncio.create_task(self._client.connect(reconnect=True))
        ready = asyncio.create_task(self._client.wait_until_ready())
        try:
            await asyncio.wait(
                {self._runner, ready}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if not ready.done():
                ready.cancel()

        if not ready.done() or ready.cancelled():
            self._status = GatewayStatus.ERROR
            error = None if self._runner.cancelled() else self._runner.exception()
            raise GatewayConnectionError(
                "Discord connection closed before it became ready"
            ) from error

        self._status = GatewayStatus.READY
        logger.info("Discord 机器人已登录: %s", self._client.user)

    async def wait_closed(self) -> None:
        """挂起直到连接结束 / Suspend until the connection ends."""
        if self._runner is None:
            raise GatewayConnectionError("Discord client is not connected")
        try:
            await asyncio.shield(self._runner)
        except asyncio.CancelledError:
            if self._runner.done():
                raise GatewayConnectionError("Discord connection was cancelled")
            raise
        except Exception as e:
            self._status = GatewayStatus.ERROR
            raise GatewayConnectionError(f"Discord connection dropped: {e}") from e
        finally:
            if self._runner.done() and self._status != GatewayStatus.ERROR:
                self._status = GatewayStatus.CLOSED

    async def close(self) -> None:
        """关闭客户端 / Close the client."""
        if not self._client.is_closed():
            await self._client.close()
        if self._runner is not None and not self._runner.done():
            self._runner.cancel()
            await asyncio.gather(self._runner, return_exceptions=True)
        self._status = GatewayStatus.CLOSED
