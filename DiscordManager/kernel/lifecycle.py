"""
生命周期 - 编排器状态管理
Lifecycle - orchestrator state management.

未配置 -> 已配置 -> 启动中 -> 运行中，故障和已释放是终止状态。
Unconfigured -> Configured -> Starting -> Running, with Faulted and Disposed
as the terminal states.
"""

from __future__ import annotations

from enum import Enum, auto

from DiscordManager.errors import InvalidStateError


class ManagerState(Enum):
    """编排器的当前状态 / The current state of the orchestrator."""

    UNCONFIGURED = auto()  # 缺少凭据或插件来源
    CONFIGURED = auto()    # 已有凭据和至少一个插件来源
    STARTING = auto()      # 后台任务已启动
    RUNNING = auto()       # 已观察到连接就绪
    FAULTED = auto()       # 某阶段失败或取消信号触发
    DISPOSED = auto()      # 已显式释放


# 允许的状态转换，其余转换都是编程错误
_TRANSITIONS: dict[ManagerState, frozenset[ManagerState]] = {
    ManagerState.UNCONFIGURED: frozenset(
        {ManagerState.CONFIGURED, ManagerState.STARTING, ManagerState.DISPOSED}
    ),
    ManagerState.CONFIGURED: frozenset(
        {ManagerState.UNCONFIGURED, ManagerState.STARTING, ManagerState.DISPOSED}
    ),
    ManagerState.STARTING: frozenset(
        {ManagerState.RUNNING, ManagerState.FAULTED, ManagerState.DISPOSED}
    ),
    ManagerState.RUNNING: frozenset({ManagerState.FAULTED, ManagerState.DISPOSED}),
    ManagerState.FAULTED: frozenset({ManagerState.DISPOSED}),
    ManagerState.DISPOSED: frozenset(),
}

ACTIVE_STATES = frozenset({ManagerState.STARTING, ManagerState.RUNNING})
CONFIGURABLE_STATES = frozenset({ManagerState.UNCONFIGURED, ManagerState.CONFIGURED})


def can_transition(current: ManagerState, target: ManagerState) -> bool:
    """判断转换是否合法 / Return whether ``current -> target`` is a legal transition."""
    return target == current or target in _TRANSITIONS[current]


def check_transition(current: ManagerState, target: ManagerState) -> None:
    """
    检查状态转换，非法时抛出 InvalidStateError
    Raise InvalidStateError for an illegal transition.
    """
    if not can_transition(current, target):
        raise InvalidStateError(
            f"Invalid state transition {current.name} -> {target.name}", current
        )
