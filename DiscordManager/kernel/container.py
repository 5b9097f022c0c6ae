"""
依赖注入容器 - 可变注册面 + 冻结后的解析器
Dependency injection container - a mutable registration surface that is
finalized into an immutable resolver.

两阶段设计：ServiceCollection 在插件加载前接受注册，build() 之后
任何注册都会抛出 ConfigurationError；ServiceResolver 只能解析。
Two phases: ServiceCollection accepts registrations until build(); after that
every registration raises ConfigurationError and only ServiceResolver resolves.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import typing
from collections.abc import Callable
from enum import Enum, auto
from typing import Any, TypeVar

from DiscordManager.errors import ConfigurationError, ResolutionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Lifecycle(Enum):
    """服务生命周期类型 / Service lifecycle type."""

    # 单例：全局唯一实例
    SINGLETON = auto()
    # 瞬态：每次获取创建新实例
    TRANSIENT = auto()


class ServiceDescriptor:
    """
    服务描述符 - 记录如何创建和管理一个服务
    Service descriptor - records how to create and manage a service.
    """

    __slots__ = ("factory", "lifecycle", "instance", "has_instance")

    def __init__(
        self,
        factory: Callable[..., Any] | None,
        lifecycle: Lifecycle = Lifecycle.SINGLETON,
    ) -> None:
        self.factory = factory
        self.lifecycle = lifecycle
        self.instance: Any = None
        self.has_instance = False


class ServiceCollection:
    """
    服务集合 - 启动前的可变注册面
    Service collection - the mutable registration surface used before start.
    """

    def __init__(self) -> None:
        self._descriptors: dict[type, ServiceDescriptor] = {}
        self._resolver: ServiceResolver | None = None

    @property
    def is_finalized(self) -> bool:
        """是否已冻结 / Whether build() has been called."""
        return self._resolver is not None

    def _ensure_mutable(self, service_type: type) -> None:
        if self._resolver is not None:
            raise ConfigurationError(
                f"Cannot register {service_type.__name__}: "
                "the service collection is already finalized"
            )

    def register(
        self,
        service_type: type,
        factory: Callable[..., Any] | None = None,
        lifecycle: Lifecycle = Lifecycle.SINGLETON,
    ) -> ServiceCollection:
        """
        注册一个服务。未给出工厂时通过构造函数注入创建。
        Register a service. Without a factory the type itself is constructed
        through constructor injection.
        """
        self._ensure_mutable(service_type)
        self._descriptors[service_type] = ServiceDescriptor(factory, lifecycle)
        logger.debug(
            "已注册服务: 类型=%s, 生命周期=%s", service_type.__name__, lifecycle.name
        )
        return self

    def register_instance(self, service_type: type, instance: Any) -> ServiceCollection:
        """
        直接注册一个已有实例（单例）
        Register an existing instance directly (singleton).
        """
        self._ensure_mutable(service_type)
        descriptor = ServiceDescriptor(None, Lifecycle.SINGLETON)
        descriptor.instance = instance
        descriptor.has_instance = True
        self._descriptors[service_type] = descriptor
        return self

    def has(self, service_type: type) -> bool:
        """检查是否注册了指定类型 / Check if a service type is registered."""
        return service_type in self._descriptors

    def all_registered_types(self) -> list[type]:
        """获取所有注册的服务类型 / Get all registered service types."""
        return list(self._descriptors)

    def build(self) -> ServiceResolver:
        """
        冻结集合并返回解析器（只能调用一次）
        Finalize the collection and return its resolver (only once).
        """
        if self._resolver is not None:
            raise ConfigurationError("The service collection is already finalized")
        self._resolver = ServiceResolver(dict(self._descriptors))
        logger.debug("服务集合已冻结，共 %d 个服务", len(self._descriptors))
        return self._resolver


class ServiceResolver:
    """
    服务解析器 - 冻结后的只读容器
    Service resolver - the read-only container produced by build().

    支持：
    - 按类型解析服务（工厂可以是协程函数）
    - 通过构造函数参数注解自动注入依赖
    """

    def __init__(self, descriptors: dict[type, ServiceDescriptor]) -> None:
        self._descriptors = descriptors
        # 服务类型 -> 创建锁
        self._locks: dict[type, asyncio.Lock] = {}

    def has(self, service_type: type) -> bool:
        return service_type in self._descriptors

    async def resolve(self, service_type: type[T]) -> T:
        """
        按类型解析服务
        Resolve a service by type.
        """
        descriptor = self._descriptors.get(service_type)
        if descriptor is None:
            raise ResolutionError(
                f"Service not registered: {service_type.__name__}", service_type
            )

        if descriptor.has_instance:
            return descriptor.instance

        lock = self._locks.setdefault(service_type, asyncio.Lock())
        async with lock:
            # 双重检查（防止并发重复创建）
            if descriptor.has_instance:
                return descriptor.instance

            if descriptor.factory is None:
                instance = await self.create(service_type)
            else:
                instance = descriptor.factory()
                # 如果工厂返回协程，则等待
                if inspect.isawaitable(instance):
                    instance = await instance

            if descriptor.lifecycle == Lifecycle.SINGLETON:
                descriptor.instance = instance
                descriptor.has_instance = True

            return instance

    async def create(self, cls: type[T]) -> T:
        """
        通过构造函数注入创建实例（不缓存）
        Create an instance through constructor injection (never cached).
        """
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError) as e:
            raise ResolutionError(f"Cannot inspect constructor of {cls!r}", cls) from e

        try:
            hints = typing.get_type_hints(cls.__init__)
        except Exception:
            hints = {}

        kwargs: dict[str, Any] = {}
        for name, param in signature.parameters.items():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            annotation = hints.get(name, param.annotation)
            if isinstance(annotation, type) and annotation in self._descriptors:
                kwargs[name] = await self.resolve(annotation)
            elif param.default is not param.empty:
                continue
            else:
                raise ResolutionError(
                    f"Cannot resolve parameter '{name}' of {cls.__name__}", cls
                )

        try:
            return cls(**kwargs)
        except Exception as e:
            raise ResolutionError(f"Constructor of {cls.__name__} raised", cls) from e
