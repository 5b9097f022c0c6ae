"""
事件发射器 - 基于精确类型匹配的同步发布/订阅
Event emitter - synchronous publish/subscribe keyed on the exact event type.

与信号中枢不同，发射是同步的：emit 返回时所有订阅者都已被调用。
Emission is synchronous: when emit returns every subscriber has been called.
订阅者列表在发射前被快照，发射过程中的增删不会破坏当前发射。
The subscriber list is snapshotted before invocation, so listeners added or
removed while an emission is in flight cannot corrupt it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")

Listener = Callable[[Any], Any]


class _Subscription:
    """单个订阅 / A single subscription."""

    __slots__ = ("callback", "active")

    def __init__(self, callback: Listener) -> None:
        self.callback = callback
        self.active = True


class EventEmitter:
    """
    事件发射器 - 进程内的类型化事件总线
    Event emitter - the in-process typed event bus.

    规则：
    - 只按 type(event) 精确分发，不考虑继承
    - 重复注册同一回调会被调用两次
    - 移除不存在的回调是空操作
    - 在发射中被移除且尚未执行的回调不会再被调用
    """

    def __init__(self) -> None:
        # 事件类型 -> 订阅列表（插入顺序即调用顺序）
        self._listeners: dict[type, list[_Subscription]] = {}
        # 异步订阅者返回的未完成任务
        self._pending: set[asyncio.Future[Any]] = set()

    def add_listener(self, event_type: type[E], callback: Callable[[E], Any]) -> None:
        """
        注册监听器
        Register a listener for an exact event type.
        """
        self._listeners.setdefault(event_type, []).append(_Subscription(callback))
        logger.debug("已注册监听器 %r -> %s", callback, event_type.__name__)

    def remove_listener(
        self, event_type: type[E], callback: Callable[[E], Any]
    ) -> None:
        """
        移除最早注册的匹配监听器
        Remove the earliest matching registration; absent callbacks are ignored.
        """
        subscriptions = self._listeners.get(event_type)
        if not subscriptions:
            return

        for index, subscription in enumerate(subscriptions):
            if subscription.callback == callback:
                subscription.active = False
                del subscriptions[index]
                break

        if not subscriptions:
            del self._listeners[event_type]

    def emit(self, event: Any) -> None:
        """
        发射事件，同步调用所有匹配的监听器
        Emit an event, synchronously invoking every matching listener.
        """
        event_type = type(event)
        snapshot = tuple(self._listeners.get(event_type, ()))

        for subscription in snapshot:
            if not subscription.active:
                continue

            try:
                result = subscription.callback(event)
            except Exception:
                logger.exception(
                    "监听器 %r 处理 %s 时出错",
                    subscription.callback,
                    event_type.__name__,
                )
                continue

            if inspect.isawaitable(result):
                self._schedule(result, event_type)

    def _schedule(self, awaitable: Any, event_type: type) -> None:
        """把异步监听器的结果交给事件循环 / Hand an async result to the loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # 没有运行中的事件循环
            logger.warning(
                "异步监听器无法调度（没有运行中的事件循环）: %s", event_type.__name__
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)
        future.add_done_callback(self._on_pending_done)

    def _on_pending_done(self, future: asyncio.Future[Any]) -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("异步监听器出错", exc_info=error)

    def listener_count(self, event_type: type | None = None) -> int:
        """获取监听器数量 / Get the number of registered listeners."""
        if event_type is None:
            return sum(len(subs) for subs in self._listeners.values())
        return len(self._listeners.get(event_type, ()))

    def clear(self) -> None:
        """清除所有监听器 / Clear all listeners."""
        for subscriptions in self._listeners.values():
            for subscription in subscriptions:
                subscription.active = False
        self._listeners.clear()
