"""CommandRegistry - 命令注册与执行

命令来自三个入口（快捷键、命令行、palette），最终都落到 execute(id, args)。

- register: 按 id 添加/覆盖（幂等）
- execute: await 执行；未知 id 记录日志后返回 False；命令体抛出的异常
  以 CommandFailedError 交给调用方
- run: fire-and-forget，不阻塞输入处理；失败只记录日志
- execute_command_line: 解析命令行文本后执行；未知别名记录日志后返回 False

同一 id 的并发调用互不干扰，registry 不做去重或互斥。
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import CommandFailedError, UnknownCommandError
from ..telemetry import get_logger, metrics
from .parser import parse_command_line

if TYPE_CHECKING:
    from ..adapters.base import ClipboardPort, FileSystemPort, SettingsPort
    from ..adapters.process import ProcessManager
    from ..runtime.terminals import TerminalSessions
    from ..state.store import Store

logger = get_logger(__name__)

# 命令体：(ctx, args) -> None | Awaitable
CommandHandler = Callable[["CommandContext", list[str]], Awaitable[Any] | Any]


@dataclass
class CommandContext:
    """命令执行时可访问的依赖

    Attributes:
        store: 状态容器（唯一的状态修改入口）
        fs: 文件系统端口
        clipboard: 剪贴板端口
        settings: 设置端口
        processes: 进程管理器
        terminals: 终端会话表
        registry: 命令注册表（命令之间顺序 await 调用）
        quit_event: app.quit 时设置
    """

    store: "Store"
    fs: "FileSystemPort"
    clipboard: "ClipboardPort"
    settings: "SettingsPort"
    processes: "ProcessManager"
    terminals: "TerminalSessions"
    registry: "CommandRegistry"
    quit_event: asyncio.Event


@dataclass(frozen=True)
class Command:
    """命令定义

    Attributes:
        id: 稳定的点分标识（如 "file.save"），外部快捷键配置按此引用
        label: 显示名称
        handler: 命令体
        category: 分类（palette 分组）
        description: 可选描述
    """

    id: str
    label: str
    handler: CommandHandler
    category: str = "General"
    description: str | None = None


class CommandRegistry:
    """命令注册表

    使用示例:
        registry = CommandRegistry()
        register_builtin_commands(registry)
        registry.set_context(ctx)

        await registry.execute("file.open", ["/tmp/a.py"])
        registry.run("tab.next")
        await registry.execute_command_line(":w")
    """

    def __init__(self, context: CommandContext | None = None):
        self._commands: dict[str, Command] = {}
        self._context = context
        self._tasks: set[asyncio.Task] = set()

    # === 配置 ===

    def set_context(self, context: CommandContext) -> None:
        self._context = context

    @property
    def context(self) -> CommandContext | None:
        return self._context

    # === 注册 ===

    def register(self, command: Command) -> None:
        """添加命令，同 id 覆盖"""
        if command.id in self._commands:
            logger.debug(f"[Commands] Overwriting {command.id}")
        self._commands[command.id] = command

    def get(self, command_id: str) -> Command | None:
        return self._commands.get(command_id)

    def get_all(self) -> list[Command]:
        return list(self._commands.values())

    def __contains__(self, command_id: str) -> bool:
        return command_id in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    # === 执行 ===

    async def execute(self, command_id: str, args: Sequence[str] | None = None) -> bool:
        """执行命令

        Args:
            command_id: 命令 id
            args: 参数列表

        Returns:
            是否找到并执行了命令（未知 id 返回 False）

        Raises:
            CommandFailedError: 命令体抛出异常
        """
        command = self._commands.get(command_id)
        if command is None:
            logger.warning(f"[Commands] Command not found: {command_id}")
            metrics.inc("command.unknown")
            return False

        logger.debug(f"[Commands] Execute {command_id} {list(args or [])}")
        try:
            result = command.handler(self._context, list(args or []))
            if inspect.isawaitable(result):
                await result
        except CommandFailedError:
            metrics.inc("command.error", {"id": command_id})
            raise
        except Exception as e:
            logger.error(f"[Commands] {command_id} failed: {e}")
            metrics.inc("command.error", {"id": command_id})
            raise CommandFailedError(command_id, str(e)) from e

        metrics.inc("command.ok", {"id": command_id})
        return True

    def run(self, command_id: str, args: Sequence[str] | None = None) -> asyncio.Task:
        """后台执行命令，不等待结果

        Returns:
            执行任务（失败已记录日志，调用方无需处理）
        """
        task = asyncio.get_running_loop().create_task(self.execute(command_id, args))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[Commands] Background command failed: {error}")

    async def execute_command_line(self, text: str) -> bool:
        """解析并执行命令行输入

        Returns:
            是否执行了命令（空输入/未知别名返回 False）

        Raises:
            CommandFailedError: 命令体抛出异常
        """
        try:
            parsed = parse_command_line(text)
        except UnknownCommandError as e:
            logger.warning(f"[Commands] {e}")
            metrics.inc("commandline.unknown")
            return False

        if parsed is None:
            return False
        return await self.execute(parsed.command_id, parsed.args)

    async def drain(self) -> None:
        """等待所有后台命令结束"""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._tasks)
