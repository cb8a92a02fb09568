"""Bootstrap - 集中构造应用组件

职责：
- 创建 Store、各端口、ProcessManager、TerminalSessions
- 创建 CommandRegistry 并注册内置命令
- 返回 Application 供调用方使用

Application 负责生命周期：
- start: 加载 settings、应用主题和快捷键、打开 workspace
- submit_command_line: 关闭命令行后执行解析出的命令
- shutdown: kill 存活进程、关闭文件监听
"""

import asyncio
from dataclasses import dataclass, field

from ..adapters.base import ClipboardPort, FileSystemPort, SettingsPort
from ..adapters.clipboard import SystemClipboard
from ..adapters.filesystem import LocalFileSystem
from ..adapters.process import ProcessManager
from ..adapters.settings import JsonSettings, Settings
from ..commands.builtin import register_builtin_commands
from ..commands.keybindings import KeyEvent, KeyMap
from ..commands.registry import CommandContext, CommandRegistry
from ..domain.themes import get_theme
from ..state import actions
from ..state.store import Store
from ..telemetry import get_logger
from .terminals import TerminalSessions

logger = get_logger(__name__)


@dataclass
class Application:
    """Bootstrap 返回的应用组件集合"""

    store: Store
    fs: FileSystemPort
    clipboard: ClipboardPort
    settings: SettingsPort
    processes: ProcessManager
    terminals: TerminalSessions
    registry: CommandRegistry
    quit_event: asyncio.Event
    keymap: KeyMap = field(default_factory=KeyMap)

    @property
    def quit_requested(self) -> bool:
        return self.quit_event.is_set()

    async def start(self, workspace: str | None = None) -> Settings:
        """加载 settings 并打开 workspace

        Args:
            workspace: 项目目录，None 不打开

        Returns:
            加载后的 Settings
        """
        settings = await self.settings.load()

        if get_theme(settings.theme) is None:
            logger.warning(f"[Bootstrap] Unknown theme in settings: {settings.theme}")
        else:
            self.store.dispatch(actions.SetTheme(theme_id=settings.theme))

        self.keymap = KeyMap.from_settings(settings.keybindings)

        if workspace:
            await self.registry.execute("project.open", [workspace])

        logger.info("[Bootstrap] Application started")
        return settings

    async def submit_command_line(self, text: str | None = None) -> bool:
        """提交命令行

        先关闭命令行（focus → editor），再执行命令。未知命令只记录日志。

        Args:
            text: 输入文本，None 使用当前命令行的值

        Returns:
            是否执行了命令

        Raises:
            CommandFailedError: 命令执行失败
        """
        if text is None:
            text = self.store.get_state().command_line.value
        self.store.dispatch(actions.ExecuteCommand(command=text))
        return await self.registry.execute_command_line(text)

    def handle_key(self, event: KeyEvent) -> str | None:
        """按键 → 后台执行命令

        Returns:
            命令 id，无匹配返回 None
        """
        return self.keymap.handle(event, self.store.get_state(), self.registry)

    async def shutdown(self) -> None:
        """等待后台命令结束，kill 所有进程，关闭文件监听"""
        await self.registry.drain()
        terminals = self.terminals.close_all()
        others = self.processes.kill_all()
        watchers = self.fs.close_watchers()
        logger.info(
            f"[Bootstrap] Shutdown: {terminals} terminals, {others} processes, "
            f"{watchers} watchers"
        )


def bootstrap(
    fs: FileSystemPort | None = None,
    clipboard: ClipboardPort | None = None,
    settings: SettingsPort | None = None,
    processes: ProcessManager | None = None,
    store: Store | None = None,
) -> Application:
    """构造应用组件

    所有参数可选，便于测试注入替身。

    Returns:
        Application
    """
    # 1. 状态与端口
    store = store or Store()
    fs = fs or LocalFileSystem()
    clipboard = clipboard or SystemClipboard()
    settings = settings or JsonSettings()
    processes = processes or ProcessManager()

    # 2. 终端会话
    terminals = TerminalSessions(store, processes)

    # 3. 命令
    registry = CommandRegistry()
    count = register_builtin_commands(registry)
    quit_event = asyncio.Event()
    registry.set_context(
        CommandContext(
            store=store,
            fs=fs,
            clipboard=clipboard,
            settings=settings,
            processes=processes,
            terminals=terminals,
            registry=registry,
            quit_event=quit_event,
        )
    )

    logger.info(f"[Bootstrap] Components created ({count} commands)")

    return Application(
        store=store,
        fs=fs,
        clipboard=clipboard,
        settings=settings,
        processes=processes,
        terminals=terminals,
        registry=registry,
        quit_event=quit_event,
    )
