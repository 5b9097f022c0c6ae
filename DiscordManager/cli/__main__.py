"""`python -m DiscordManager.cli` 的命令行启动入口。"""

from DiscordManager.cli.main import cli

if __name__ == "__main__":
    cli()
