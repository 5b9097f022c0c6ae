"""
错误类型 - 启动流程中所有致命错误的层级
Error types - the hierarchy of every fatal error in the startup protocol.

所有错误都不会在内部重试，第一个错误会使后台任务失败。
None of these is retried internally; the first one faults the background task.
"""

from __future__ import annotations


class DiscordManagerError(Exception):
    """所有框架错误的基类 / Base class of all framework errors."""


class ConfigurationError(DiscordManagerError):
    """
    配置错误 - 缺少凭据、注册表冻结后注册、重复映射等
    Configuration error - missing credentials, registration after the registry
    was finalized, mapping events twice and similar caller mistakes.
    """


class InvalidStateError(ConfigurationError):
    """
    状态错误 - 在当前状态下不允许的操作
    State error - the operation is not allowed in the current state.
    """

    def __init__(self, message: str, state: object = None) -> None:
        super().__init__(message)
        self.state = state


class ResolutionError(DiscordManagerError):
    """
    解析错误 - 插件无法被实例化
    Resolution error - a plugin could not be instantiated.
    """

    def __init__(self, message: str, source: object = None) -> None:
        super().__init__(message)
        self.source = source


class LifecycleError(DiscordManagerError):
    """
    生命周期错误 - 插件钩子抛出异常
    Lifecycle error - a plugin hook raised.
    """

    def __init__(self, plugin_name: str, hook_name: str) -> None:
        super().__init__(f"Plugin '{plugin_name}' failed in '{hook_name}'")
        self.plugin_name = plugin_name
        self.hook_name = hook_name


class GatewayConnectionError(DiscordManagerError):
    """
    连接错误 - 网关拒绝凭据或连接中断
    Connection error - the gateway rejected the credentials or dropped.
    """
