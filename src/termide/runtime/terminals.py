"""TerminalSessions - terminal id → 存活的 PTY 句柄

状态表（AppState.terminals）只保存终端的元数据；PTY 句柄属于运行时，
放在这里，按 terminal id 对应。

生命周期：
- open: 先启动 PTY，成功后才 dispatch OpenTerminal（启动失败不产生记录）
- PTY 退出: dispatch TerminalExited，句柄移除，记录保留（显示退出码）
- close: kill 进程并 dispatch CloseTerminal

切换焦点/关闭 overlay 不影响进程。
"""

from .. import config
from ..adapters.process import ProcessManager, PtyProcess
from ..state import actions
from ..state.store import Store
from ..telemetry import get_logger

logger = get_logger(__name__)


class TerminalSessions:
    """终端会话表

    Attributes:
        store: 状态容器
        processes: 进程管理器
    """

    def __init__(self, store: Store, processes: ProcessManager):
        self.store = store
        self.processes = processes
        self._sessions: dict[str, PtyProcess] = {}

    def get(self, terminal_id: str) -> PtyProcess | None:
        return self._sessions.get(terminal_id)

    @property
    def terminal_ids(self) -> list[str]:
        return list(self._sessions)

    async def open(
        self,
        cwd: str,
        shell: str | None = None,
        args: list[str] | None = None,
        title: str = config.DEFAULT_TERMINAL_TITLE,
    ) -> str:
        """启动 shell 并登记终端

        Args:
            cwd: 工作目录
            shell: 可执行文件，None 使用 config.DEFAULT_SHELL
            args: shell 参数
            title: 终端标题

        Returns:
            terminal id

        Raises:
            ProcessSpawnError: 启动失败（不 dispatch）
        """
        command = shell or config.DEFAULT_SHELL
        pty_process = await self.processes.spawn_pty(command, args or [], cwd=cwd)

        action = actions.OpenTerminal(cwd=cwd, title=title, pid=pty_process.pid)
        terminal_id = action.terminal_id
        self._sessions[terminal_id] = pty_process
        pty_process.on_exit(lambda code: self._on_exit(terminal_id, code))

        self.store.dispatch(action)
        logger.info(f"[Terminals] {terminal_id} opened: {command} (pid={pty_process.pid})")
        return terminal_id

    def close(self, terminal_id: str) -> bool:
        """kill 进程并移除终端记录

        Returns:
            是否存在该终端
        """
        pty_process = self._sessions.pop(terminal_id, None)
        if pty_process is not None:
            pty_process.kill()
        known = terminal_id in self.store.get_state().terminals
        self.store.dispatch(actions.CloseTerminal(terminal_id=terminal_id))
        if known:
            logger.info(f"[Terminals] {terminal_id} closed")
        return known or pty_process is not None

    def write(self, terminal_id: str, text: str) -> bool:
        pty_process = self._sessions.get(terminal_id)
        if pty_process is None:
            return False
        pty_process.write(text)
        return True

    def resize(self, terminal_id: str, cols: int, rows: int) -> bool:
        pty_process = self._sessions.get(terminal_id)
        if pty_process is None:
            return False
        return pty_process.resize(cols, rows)

    def close_all(self) -> int:
        """kill 所有终端进程（关闭时调用，不修改状态）

        Returns:
            kill 的数量
        """
        count = 0
        for pty_process in self._sessions.values():
            if pty_process.kill():
                count += 1
        self._sessions.clear()
        return count

    def _on_exit(self, terminal_id: str, exit_code: int) -> None:
        self._sessions.pop(terminal_id, None)
        logger.info(f"[Terminals] {terminal_id} exited with code {exit_code}")
        self.store.dispatch(actions.TerminalExited(terminal_id=terminal_id, exit_code=exit_code))
