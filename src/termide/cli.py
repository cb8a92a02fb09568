"""命令行入口

python -m termide [path]

无界面的行模式外壳：从 stdin 逐行读取命令行输入（":e README.md"、":tabn"、
":theme dracula" ...），执行后打印状态摘要。EOF 或 :q 退出。
"""

import argparse
import asyncio
import sys

from rich.console import Console
from rich.markup import escape

from . import config
from .errors import CommandFailedError
from .render.summary import print_summary
from .runtime.bootstrap import bootstrap
from .telemetry import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=config.APP_NAME, description="Terminal editor shell")
    parser.add_argument("path", nargs="?", help="project folder to open")
    parser.add_argument("--log-level", default=None, help="logging level (default: %(default)s)")
    parser.add_argument("--files", action="store_true", help="include the explorer tree in summaries")
    return parser


async def run(path: str | None, show_files: bool = False, console: Console | None = None) -> int:
    """运行行模式外壳

    Returns:
        退出码
    """
    console = console or Console()
    app = bootstrap()
    try:
        await app.start(path)
    except CommandFailedError as e:
        console.print(f"[red]{escape(str(e))}[/red]")

    print_summary(app.store.get_state(), console, show_files=show_files)

    try:
        while not app.quit_requested:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            if not line.strip():
                continue
            try:
                await app.submit_command_line(line)
            except CommandFailedError as e:
                console.print(f"[red]{escape(str(e))}[/red]")
            print_summary(app.store.get_state(), console, show_files=show_files)
    finally:
        await app.shutdown()
    return 0


def main(argv: list[str] | None = None) -> int:
    """入口函数"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(run(args.path, show_files=args.files))
    except KeyboardInterrupt:
        print("\nStopped")
        return 130
