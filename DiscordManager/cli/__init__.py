"""
命令行模块
Command-line module.
"""

from DiscordManager.cli.main import cli

__all__ = ["cli"]
