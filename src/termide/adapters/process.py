"""进程 / PTY 生命周期管理

- ProcessManager.spawn: 管道方式启动子进程 → ChildProcess
- ProcessManager.spawn_pty: 伪终端方式启动交互会话 → PtyProcess

PtyProcess 是发布/订阅模型：
- on_data(cb) / on_exit(cb) 可注册任意多个监听器，返回取消订阅函数
- stream() 返回事件流：订阅之后的每个输出块按顺序产出，最后恰好一个 exit 事件
- 订阅之前已投递的输出不重放
- 输出按 UTF-8 增量解码，多字节字符不会被拆开

失败语义：
- 启动失败抛出 ProcessSpawnError，不返回空句柄
- resize 无法生效时安全 no-op
- 非零退出码作为数据投递，不抛异常
"""

import asyncio
import codecs
import fcntl
import inspect
import os
import pty
import signal
import struct
import termios
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .. import config
from ..errors import ProcessSpawnError
from ..telemetry import get_logger, metrics

logger = get_logger(__name__)

DataCallback = Callable[[str], Any]
ExitCallback = Callable[[int], Any]
Unsubscribe = Callable[[], None]

# 进程退出后等待 PTY 剩余输出的最长时间（秒）
_EOF_GRACE_SECONDS = 0.5


@dataclass(frozen=True)
class PtyEvent:
    """PTY 事件流中的一个事件

    Attributes:
        kind: "data" 或 "exit"
        data: 输出文本（kind == "data"）
        exit_code: 退出码（kind == "exit"）
    """

    kind: str
    data: str = ""
    exit_code: int | None = None

    @property
    def is_exit(self) -> bool:
        return self.kind == "exit"


def _build_env(env: dict[str, str] | None, extra: dict[str, str] | None = None) -> dict[str, str]:
    merged = dict(os.environ)
    if env:
        merged.update(env)
    if extra:
        merged.update(extra)
    return merged


def _winsize(cols: int, rows: int) -> bytes:
    return struct.pack("HHHH", rows, cols, 0, 0)


def _signal_process(process: asyncio.subprocess.Process, sig: int) -> bool:
    if process.returncode is not None:
        return False
    try:
        process.send_signal(sig)
    except ProcessLookupError:
        return False
    return True


class ChildProcess:
    """管道方式启动的子进程

    Attributes:
        pid: 进程 id
        command: 启动命令
        stdin: 可写输入流
        stdout: 输出流
        stderr: 错误流
    """

    def __init__(self, command: str, process: asyncio.subprocess.Process):
        self.command = command
        self._process = process

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def stdin(self) -> asyncio.StreamWriter | None:
        return self._process.stdin

    @property
    def stdout(self) -> asyncio.StreamReader | None:
        return self._process.stdout

    @property
    def stderr(self) -> asyncio.StreamReader | None:
        return self._process.stderr

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def wait(self) -> int:
        """等待退出，返回退出码"""
        return await self._process.wait()

    def kill(self, sig: int = signal.SIGTERM) -> bool:
        """发送信号

        Returns:
            是否发送成功（已退出返回 False）
        """
        return _signal_process(self._process, sig)


class PtyProcess:
    """伪终端会话

    Attributes:
        pid: 进程 id
        command: 启动命令
        cols, rows: 当前尺寸
    """

    def __init__(
        self,
        command: str,
        process: asyncio.subprocess.Process,
        master_fd: int,
        cols: int,
        rows: int,
    ):
        self.command = command
        self.cols = cols
        self.rows = rows
        self._process = process
        self._master_fd: int | None = master_fd
        self._loop = asyncio.get_running_loop()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        self._data_callbacks: list[DataCallback] = []
        self._exit_callbacks: list[ExitCallback] = []

        self._eof = asyncio.Event()
        self._exit_code: int | None = None

        self._loop.add_reader(master_fd, self._on_readable)
        self._exit_task = self._loop.create_task(self._watch_exit())

    # === 属性 ===

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    @property
    def has_exited(self) -> bool:
        return self._exit_code is not None

    # === 订阅 ===

    def on_data(self, callback: DataCallback) -> Unsubscribe:
        """注册输出监听器（只接收订阅之后的输出）"""
        self._data_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._data_callbacks:
                self._data_callbacks.remove(callback)

        return unsubscribe

    def on_exit(self, callback: ExitCallback) -> Unsubscribe:
        """注册退出监听器（每个监听器恰好调用一次）

        进程已退出时，回调在下一轮事件循环中以已知退出码调用。
        """
        if self._exit_code is not None:
            handle = self._loop.call_soon(self._invoke, callback, self._exit_code)
            return handle.cancel

        self._exit_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._exit_callbacks:
                self._exit_callbacks.remove(callback)

        return unsubscribe

    async def stream(self) -> AsyncIterator[PtyEvent]:
        """事件流：订阅之后的输出块，最后是一个 exit 事件

        使用示例:
            async for event in pty_process.stream():
                if event.is_exit:
                    print(event.exit_code)
                else:
                    print(event.data, end="")
        """
        if self._exit_code is not None:
            yield PtyEvent(kind="exit", exit_code=self._exit_code)
            return

        queue: asyncio.Queue[PtyEvent] = asyncio.Queue()
        unsubscribe_data = self.on_data(lambda text: queue.put_nowait(PtyEvent(kind="data", data=text)))
        unsubscribe_exit = self.on_exit(
            lambda code: queue.put_nowait(PtyEvent(kind="exit", exit_code=code))
        )
        try:
            while True:
                event = await queue.get()
                yield event
                if event.is_exit:
                    return
        finally:
            unsubscribe_data()
            unsubscribe_exit()

    # === 操作 ===

    def write(self, text: str) -> None:
        if self._master_fd is None:
            logger.debug(f"[Process] write after close ignored (pid={self.pid})")
            return
        os.write(self._master_fd, text.encode("utf-8"))

    def resize(self, cols: int, rows: int) -> bool:
        """调整终端尺寸（尽力而为）

        Returns:
            是否生效；无法生效时为 no-op，不抛异常
        """
        if self._master_fd is None:
            return False
        try:
            fcntl.ioctl(self._master_fd, termios.TIOCSWINSZ, _winsize(cols, rows))
        except OSError as e:
            logger.debug(f"[Process] resize not supported (pid={self.pid}): {e}")
            return False
        self.cols, self.rows = cols, rows
        return True

    def kill(self, sig: int = signal.SIGTERM) -> bool:
        """发送信号

        Returns:
            是否发送成功（已退出返回 False）
        """
        return _signal_process(self._process, sig)

    async def wait(self) -> int:
        """等待 exit 事件投递完成，返回退出码"""
        await asyncio.shield(self._exit_task)
        assert self._exit_code is not None
        return self._exit_code

    # === 内部 ===

    def _invoke(self, callback: Callable[[Any], Any], value: Any) -> None:
        try:
            result = callback(value)
            if inspect.iscoroutine(result):
                self._loop.create_task(result)
        except Exception as e:
            logger.error(f"[Process] PTY listener error (pid={self.pid}): {e}")

    def _emit_data(self, text: str) -> None:
        if not text:
            return
        for callback in tuple(self._data_callbacks):
            self._invoke(callback, text)

    def _on_readable(self) -> None:
        assert self._master_fd is not None
        try:
            chunk = os.read(self._master_fd, config.PTY_READ_SIZE)
        except OSError:
            # Linux: 所有 slave 端关闭后读 master 返回 EIO
            chunk = b""
        if not chunk:
            self._stop_reading()
            return
        self._emit_data(self._decoder.decode(chunk))

    def _stop_reading(self) -> None:
        if self._eof.is_set():
            return
        if self._master_fd is not None:
            self._loop.remove_reader(self._master_fd)
        self._emit_data(self._decoder.decode(b"", final=True))
        self._eof.set()

    async def _watch_exit(self) -> None:
        code = await self._process.wait()
        try:
            await asyncio.wait_for(self._eof.wait(), timeout=_EOF_GRACE_SECONDS)
        except TimeoutError:
            # 子进程的后代仍持有 slave 端
            self._stop_reading()

        if self._master_fd is not None:
            os.close(self._master_fd)
            self._master_fd = None

        self._exit_code = code
        callbacks = tuple(self._exit_callbacks)
        self._exit_callbacks.clear()
        self._data_callbacks.clear()
        logger.debug(f"[Process] PTY {self.command} exited (pid={self.pid}, code={code})")
        for callback in callbacks:
            self._invoke(callback, code)


class ProcessManager:
    """进程管理器

    跟踪所有存活的子进程/PTY，关闭时统一 kill。

    使用示例:
        manager = ProcessManager()
        child = await manager.spawn("git", ["status"], cwd="/repo")
        out = await child.stdout.read()

        term = await manager.spawn_pty("/bin/zsh", cwd="/repo")
        term.on_data(print)
        term.write("ls\\n")
    """

    def __init__(self):
        self._live: dict[int, ChildProcess | PtyProcess] = {}
        self._watch_tasks: set[asyncio.Task] = set()

    @property
    def live_processes(self) -> list[ChildProcess | PtyProcess]:
        return list(self._live.values())

    async def spawn(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> ChildProcess:
        """启动子进程（stdin/stdout/stderr 均为管道）

        Raises:
            ProcessSpawnError: 启动失败
        """
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=cwd,
                env=_build_env(env),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"[Process] Failed to spawn {command}: {e}")
            metrics.inc("process.spawn_error")
            raise ProcessSpawnError(command, str(e)) from e

        child = ChildProcess(command, process)
        self._track(child)
        metrics.inc("process.spawn")
        logger.debug(f"[Process] Spawned {command} (pid={child.pid})")
        return child

    async def spawn_pty(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        cols: int = config.DEFAULT_PTY_COLS,
        rows: int = config.DEFAULT_PTY_ROWS,
    ) -> PtyProcess:
        """在伪终端中启动交互会话

        Raises:
            ProcessSpawnError: 启动失败
        """
        master_fd, slave_fd = pty.openpty()
        try:
            try:
                fcntl.ioctl(slave_fd, termios.TIOCSWINSZ, _winsize(cols, rows))
            except OSError as e:
                logger.debug(f"[Process] initial winsize not applied: {e}")
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=cwd,
                env=_build_env(
                    env,
                    {"TERM": config.PTY_TERM, "COLUMNS": str(cols), "LINES": str(rows)},
                ),
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                start_new_session=True,
            )
        except OSError as e:
            os.close(master_fd)
            logger.error(f"[Process] Failed to spawn PTY {command}: {e}")
            metrics.inc("process.spawn_error")
            raise ProcessSpawnError(command, str(e)) from e
        finally:
            os.close(slave_fd)

        pty_process = PtyProcess(command, process, master_fd, cols, rows)
        self._track(pty_process)
        metrics.inc("process.spawn")
        logger.info(f"[Process] PTY {command} started (pid={pty_process.pid})")
        return pty_process

    def kill_all(self, sig: int = signal.SIGTERM) -> int:
        """向所有存活进程发送信号

        Returns:
            成功发送的数量
        """
        count = sum(1 for proc in list(self._live.values()) if proc.kill(sig))
        if count:
            logger.info(f"[Process] Killed {count} processes")
        return count

    def _track(self, proc: ChildProcess | PtyProcess) -> None:
        pid = proc.pid
        self._live[pid] = proc
        metrics.gauge("process.live", len(self._live))

        async def untrack() -> None:
            await proc.wait()
            self._live.pop(pid, None)
            metrics.gauge("process.live", len(self._live))
            logger.debug(f"[Process] pid={pid} untracked")

        task = asyncio.get_running_loop().create_task(untrack())
        self._watch_tasks.add(task)
        task.add_done_callback(self._watch_tasks.discard)
