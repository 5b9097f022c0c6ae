"""
编排器 - 组合依赖注册、插件管理、事件映射和分阶段启动
Orchestrator - composes dependency registration, plugin management, event
mapping and the phased startup protocol.

启动顺序（严格有序，任何失败都是致命的）：
1. 冻结注册表并加载插件
2. 映射网关事件
3. 调用 initialize 钩子
4. 连接网关
5. 调用 start 钩子
6. 无限期挂起，直到连接结束或被取消

Startup phases, strictly ordered, each failure fatal:
load plugins, map events, initialize hooks, connect, start hooks, then block.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from DiscordManager.errors import (
    ConfigurationError,
    DiscordManagerError,
    GatewayConnectionError,
    InvalidStateError,
)
from DiscordManager.events.discord import ReadyEvent
from DiscordManager.events.logging import LogEvent, TraceEvent
from DiscordManager.gateway.base import GatewayClient
from DiscordManager.gateway.mapper import EventMapper
from DiscordManager.kernel.container import Lifecycle, ServiceCollection, ServiceResolver
from DiscordManager.kernel.event_emitter import EventEmitter
from DiscordManager.kernel.lifecycle import (
    ACTIVE_STATES,
    CONFIGURABLE_STATES,
    ManagerState,
    check_transition,
)
from DiscordManager.plugin.base import Plugin, PluginCatalog
from DiscordManager.plugin.loader import ModuleLoader
from DiscordManager.plugin.manager import PluginManager
from DiscordManager.plugin.sources import (
    LibraryCollector,
    LibrarySource,
    PluginSource,
    to_source,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginCredentials:
    """登录凭据 / Login credentials."""

    login_token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.login_token, str) or not self.login_token.strip():
            raise ConfigurationError("The login token must be a non-empty string")


class DiscordManager:
    """
    编排器 - 管理插件生命周期并驱动启动状态机
    Orchestrator - manages the plugin lifecycle and drives the startup state
    machine.

    配置方法都返回自身以便链式调用，且只能在启动前调用。
    Configuration methods return ``self`` so calls compose, and are only
    valid before start.

    Example:
        manager = (
            DiscordManager()
            .with_credentials(LoginCredentials(token))
            .add_plugin(GreeterPlugin)
        )
        await manager.start_and_wait()
    """

    def __init__(
        self,
        gateway: GatewayClient | None = None,
        *,
        loader: ModuleLoader | None = None,
    ) -> None:
        if gateway is None:
            from DiscordManager.gateway.discord_gateway import DiscordGateway

            gateway = DiscordGateway()

        self._gateway = gateway
        self._emitter = EventEmitter()
        self._sources: list[PluginSource] = []
        self._services = ServiceCollection()
        self._plugin_manager = PluginManager(self._emitter, self._sources, loader)
        self._event_mapper = EventMapper(gateway, self._emitter)
        self._resolver: ServiceResolver | None = None

        self._credentials: LoginCredentials | None = None
        self._command_prefix: str | None = None
        self._cancel_event: asyncio.Event | None = None

        self._state = ManagerState.UNCONFIGURED
        self._phase = ""
        self._task: asyncio.Task[None] | None = None
        self._cancel_watcher: asyncio.Task[None] | None = None
        self._error: BaseException | None = None

    # ------------------------------------------------------------------ #
    # 属性 / Properties
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def emitter(self) -> EventEmitter:
        """共享的事件总线 / The shared event bus."""
        return self._emitter

    @property
    def gateway(self) -> GatewayClient:
        return self._gateway

    @property
    def client(self) -> Any:
        """被包装的原生客户端 / The wrapped native client."""
        return self._gateway.raw_client

    @property
    def command_prefix(self) -> str | None:
        return self._command_prefix

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return self._plugin_manager.plugins

    @property
    def catalog(self) -> PluginCatalog:
        return self._plugin_manager.catalog

    @property
    def sources(self) -> tuple[PluginSource, ...]:
        return tuple(self._sources)

    @property
    def task(self) -> asyncio.Task[None] | None:
        """后台启动任务 / The background startup task."""
        return self._task

    @property
    def error(self) -> BaseException | None:
        """导致 FAULTED 的第一个错误 / The first error that faulted startup."""
        return self._error

    # ------------------------------------------------------------------ #
    # 链式配置 / Fluent configuration
    # ------------------------------------------------------------------ #

    def _ensure_configurable(self, operation: str) -> None:
        if self._state not in CONFIGURABLE_STATES:
            raise InvalidStateError(
                f"'{operation}' is only valid before start (state: {self._state.name})",
                self._state,
            )

    def _refresh_configured(self) -> None:
        if self._credentials is not None and self._sources:
            self._set_state(ManagerState.CONFIGURED)
        else:
            self._set_state(ManagerState.UNCONFIGURED)

    def with_command_prefix(self, prefix: str) -> DiscordManager:
        self._ensure_configurable("with_command_prefix")
        self._command_prefix = prefix
        return self

    def with_credentials(self, credentials: LoginCredentials) -> DiscordManager:
        self._ensure_configurable("with_credentials")
        if credentials is None:
            raise ConfigurationError("credentials must not be None")
        self._credentials = credentials
        self._refresh_configured()
        return self

    def with_cancel_event(self, cancel_event: asyncio.Event) -> DiscordManager:
        """
        设置取消信号，置位后中止后台任务
        Set the cancellation signal; setting it aborts the background task.
        """
        self._ensure_configurable("with_cancel_event")
        if cancel_event is None:
            raise ConfigurationError("cancel_event must not be None")
        self._cancel_event = cancel_event
        return self

    def with_services(self, services: ServiceCollection) -> DiscordManager:
        """
        替换宿主的服务注册面
        Replace the host's service registration surface.
        """
        self._ensure_configurable("with_services")
        if services is None:
            raise ConfigurationError("services must not be None")
        if services.is_finalized:
            raise ConfigurationError("The service collection is already finalized")
        self._services = services
        return self

    def add_service(
        self,
        service_type: type,
        instance: Any = None,
        *,
        factory: Callable[..., Any] | None = None,
        lifecycle: Lifecycle = Lifecycle.SINGLETON,
    ) -> DiscordManager:
        """
        注册一个可注入服务
        Register an injectable service.
        """
        self._ensure_configurable("add_service")
        if instance is not None:
            self._services.register_instance(service_type, instance)
        else:
            self._services.register(service_type, factory, lifecycle)
        return self

    def add_plugin(self, plugin: Any) -> DiscordManager:
        """
        添加插件：实例、插件类或磁盘路径
        Add a plugin: an instance, a plugin class, or an on-disk path.
        """
        self._ensure_configurable("add_plugin")
        self._sources.append(to_source(plugin))
        self._refresh_configured()
        return self

    def add_plugins(self, plugins: Iterable[Any]) -> DiscordManager:
        for plugin in plugins:
            self.add_plugin(plugin)
        return self

    def add_plugin_collector(self, collector: LibraryCollector) -> DiscordManager:
        self._ensure_configurable("add_plugin_collector")
        self._sources.extend(LibrarySource(path) for path in collector.files)
        self._refresh_configured()
        return self

    # ------------------------------------------------------------------ #
    # 启动 / Startup
    # ------------------------------------------------------------------ #

    def start(self) -> DiscordManager:
        """
        在后台任务中启动分阶段协议（必须在运行中的事件循环里调用）
        Launch the phased protocol on a background task. Must be called from
        a running event loop.
        """
        self._launch()
        return self

    def start_and_wait(self) -> asyncio.Task[None]:
        """
        启动并返回永不成功完成的后台任务
        Start and return the background task. It never completes successfully:
        awaiting it only ever surfaces a failure or a cancellation.
        """
        return self._launch()

    def _launch(self) -> asyncio.Task[None]:
        if self._credentials is None:
            raise ConfigurationError(
                "Please add the login credentials with 'with_credentials'."
            )
        if self._state in ACTIVE_STATES:
            raise InvalidStateError("The Discord client is already running.", self._state)
        if self._state not in CONFIGURABLE_STATES:
            raise InvalidStateError(
                f"The manager cannot be restarted (state: {self._state.name})",
                self._state,
            )

        loop = asyncio.get_running_loop()
        self._set_state(ManagerState.STARTING)
        task = loop.create_task(self._run(self._credentials))
        task.add_done_callback(self._on_task_done)
        self._task = task

        if self._cancel_event is not None:
            self._cancel_watcher = loop.create_task(self._watch_cancel(self._cancel_event))

        return task

    async def start_async(self) -> DiscordManager:
        """
        启动并在收到 ReadyEvent 后返回，此时状态已是 RUNNING
        Start and return once ReadyEvent is observed; the state is RUNNING by
        then.

        如果任何阶段在就绪前失败，这里永远不会返回；请另行观察 task。
        If a phase fails before ready this never returns; observe ``task``.
        """
        ready: asyncio.Future[DiscordManager] = asyncio.get_running_loop().create_future()

        def on_ready(event: ReadyEvent) -> None:
            self._emitter.remove_listener(ReadyEvent, on_ready)
            if not ready.done():
                ready.set_result(self)

        self._emitter.add_listener(ReadyEvent, on_ready)
        try:
            self.start()
        except Exception:
            self._emitter.remove_listener(ReadyEvent, on_ready)
            raise

        return await ready

    def _build_resolver(self) -> ServiceResolver:
        """注册框架服务并冻结注册表 / Register framework services and finalize."""
        services = self._services
        services.register_instance(DiscordManager, self)
        services.register_instance(EventEmitter, self._emitter)
        services.register_instance(PluginCatalog, self._plugin_manager.catalog)
        services.register_instance(GatewayClient, self._gateway)
        services.register_instance(type(self._gateway), self._gateway)
        return services.build()

    async def _run(self, credentials: LoginCredentials) -> None:
        try:
            self._phase = "load"
            self._resolver = self._build_resolver()
            await self._plugin_manager.load_all(self._resolver)

            self._phase = "map"
            self._event_mapper.map_all_events()

            self._phase = "initialize"
            await self._plugin_manager.invoke_initialize()
            self._emitter.emit(
                TraceEvent("Successfully executed all initialization methods.")
            )

            self._phase = "connect"
            # 网关在 connect 返回前就可能发出 ready
            self._emitter.add_listener(ReadyEvent, self._on_connection_ready)
            try:
                await self._connect(credentials)
            finally:
                self._emitter.remove_listener(ReadyEvent, self._on_connection_ready)
            if self._state == ManagerState.STARTING:
                self._set_state(ManagerState.RUNNING)
            self._emitter.emit(LogEvent("Discord client ready."))

            self._phase = "start"
            await self._plugin_manager.invoke_start()
            self._emitter.emit(TraceEvent("Successfully executed all start methods."))

            self._phase = "running"
            await self._gateway.wait_closed()
            raise GatewayConnectionError("The gateway connection closed")
        except asyncio.CancelledError:
            if self._state != ManagerState.DISPOSED:
                logger.warning("启动在 %s 阶段被取消", self._phase)
                self._set_state(ManagerState.FAULTED)
            raise
        except Exception as e:
            if self._state != ManagerState.DISPOSED:
                if self._error is None:
                    self._error = e
                logger.error("启动在 %s 阶段失败: %s", self._phase, e)
                self._set_state(ManagerState.FAULTED)
            raise

    async def _connect(self, credentials: LoginCredentials) -> None:
        try:
            await self._gateway.connect(credentials.login_token)
        except DiscordManagerError:
            raise
        except Exception as e:
            raise GatewayConnectionError(f"Gateway connection failed: {e}") from e

    def _on_connection_ready(self, event: ReadyEvent) -> None:
        """连接就绪即进入 RUNNING / Enter RUNNING as soon as the connection is ready."""
        if self._state == ManagerState.STARTING:
            self._set_state(ManagerState.RUNNING)

    async def _watch_cancel(self, cancel_event: asyncio.Event) -> None:
        await cancel_event.wait()
        if self._task is not None and not self._task.done():
            logger.info("收到取消信号，正在中止后台任务")
            self._task.cancel()

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        if self._cancel_watcher is not None and not self._cancel_watcher.done():
            self._cancel_watcher.cancel()

        if task.cancelled():
            if self._state != ManagerState.DISPOSED:
                self._set_state(ManagerState.FAULTED)
            return

        # 取出异常，避免 "Task exception was never retrieved"
        error = task.exception()
        if error is not None and self._error is None and self._state != ManagerState.DISPOSED:
            self._error = error

    def _set_state(self, state: ManagerState) -> None:
        if state == self._state:
            return
        check_transition(self._state, state)
        logger.debug("状态变更: %s -> %s", self._state.name, state.name)
        self._state = state

    # ------------------------------------------------------------------ #
    # 释放 / Teardown
    # ------------------------------------------------------------------ #

    async def dispose(self) -> None:
        """
        取消后台任务、释放客户端资源并进入 DISPOSED（可重复调用）
        Cancel the background task, release client resources and transition
        to DISPOSED. Safe from any state and idempotent.
        """
        if self._state == ManagerState.DISPOSED:
            return
        self._set_state(ManagerState.DISPOSED)

        if self._cancel_watcher is not None and not self._cancel_watcher.done():
            self._cancel_watcher.cancel()

        task = self._task
        if task is not None and task is asyncio.current_task():
            # 在后台任务内部释放（例如插件钩子）：先关闭客户端，再取消自身
            await self._gateway.close()
            task.cancel()
            logger.info("DiscordManager 已释放")
            return

        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        await self._gateway.close()
        logger.info("DiscordManager 已释放")

    async def __aenter__(self) -> DiscordManager:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.dispose()
