"""
诊断事件 - 日志与追踪
Diagnostic events - log and trace.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LogEvent:
    """普通进度日志 / Ordinary progress message."""

    message: str


@dataclass(frozen=True)
class TraceEvent:
    """
    追踪事件 - 阶段完成的诊断标记
    Trace event - diagnostic marker emitted when a startup phase completes.
    """

    message: str
