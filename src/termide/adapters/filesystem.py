"""本地文件系统适配器

- LocalFileSystem: FileSystemPort 的本地实现，阻塞 IO 放到线程里执行
- PollingWatcher: 基于 stat 签名轮询的路径监听

错误不做包装，直接以 OSError 子类（FileNotFoundError / IsADirectoryError 等）
抛给调用方。
"""

import asyncio
import inspect
import shutil
from pathlib import Path

from .. import config
from ..domain.types import DirectoryTree, FileEntry
from ..telemetry import get_logger
from .base import FileSystemPort, WatchCallback, Watcher

logger = get_logger(__name__)

# 路径签名：name -> (mtime_ns, size, mode)
Signature = dict[str, tuple[int, int, int]]


def _entry_for(path: Path) -> FileEntry:
    st = path.stat()
    return FileEntry(
        name=path.name or str(path),
        path=str(path),
        is_directory=path.is_dir(),
        size=st.st_size,
        modified_at=st.st_mtime,
    )


def _sort_key(entry: FileEntry) -> tuple[bool, str]:
    """目录在前，同类按名称排序"""
    return (not entry.is_directory, entry.name)


def _list_sync(path: str) -> list[FileEntry]:
    entries = []
    for child in Path(path).iterdir():
        try:
            entries.append(_entry_for(child))
        except OSError as e:
            # 悬空链接等：保留条目，不带元数据
            logger.debug(f"[FS] stat failed for {child}: {e}")
            entries.append(FileEntry(name=child.name, path=str(child), is_directory=False))
    return sorted(entries, key=_sort_key)


def _build_tree_sync(entry: FileEntry, depth: int) -> DirectoryTree:
    if not entry.is_directory or depth <= 0:
        return DirectoryTree(entry=entry)

    children = tuple(_build_tree_sync(child, depth - 1) for child in _list_sync(entry.path))
    return DirectoryTree(entry=entry, children=children, is_expanded=True)


def _signature(path: Path) -> Signature:
    """路径签名：文件取自身 stat，目录取所有直接子项的 stat"""
    try:
        st = path.stat()
    except FileNotFoundError:
        return {}
    own = {"": (st.st_mtime_ns, st.st_size, st.st_mode)}
    if not path.is_dir():
        return own
    try:
        for child in path.iterdir():
            try:
                cst = child.stat()
            except OSError:
                continue
            own[child.name] = (cst.st_mtime_ns, cst.st_size, cst.st_mode)
    except OSError as e:
        logger.debug(f"[FS] listing failed for {path}: {e}")
    return own


class PollingWatcher(Watcher):
    """轮询监听器

    每 interval 秒比较一次路径签名：
    - 子项集合变化（新增/删除/改名）→ "rename"
    - 同名子项 mtime/size 变化 → "change"

    Attributes:
        path: 监听的路径
        interval: 轮询间隔（秒）
    """

    def __init__(
        self,
        path: str,
        callback: WatchCallback,
        interval: float = config.WATCH_POLL_INTERVAL,
    ):
        self.path = path
        self.interval = interval
        self._callback = callback
        self._last = _signature(Path(path))
        self._task: asyncio.Task | None = asyncio.get_running_loop().create_task(self._run())

    @property
    def closed(self) -> bool:
        return self._task is None

    def close(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.debug(f"[FS] Watcher closed: {self.path}")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            current = await asyncio.to_thread(_signature, Path(self.path))
            event = self._diff(self._last, current)
            self._last = current
            if event is None:
                continue
            try:
                result = self._callback(event, self.path)
                if inspect.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"[FS] Watch callback error for {self.path}: {e}")

    @staticmethod
    def _diff(old: Signature, new: Signature) -> str | None:
        if old.keys() != new.keys():
            return "rename"
        if old != new:
            return "change"
        return None


class LocalFileSystem(FileSystemPort):
    """本地文件系统

    使用示例:
        fs = LocalFileSystem()
        tree = await fs.build_tree("/project", depth=2)
        text = await fs.read_file("/project/README.md")
    """

    def __init__(self, poll_interval: float = config.WATCH_POLL_INTERVAL):
        self._poll_interval = poll_interval
        self._watchers: list[PollingWatcher] = []

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def write_file(self, path: str, content: str) -> None:
        await asyncio.to_thread(Path(path).write_text, content, encoding="utf-8")
        logger.debug(f"[FS] Wrote {len(content)} chars to {path}")

    async def list_directory(self, path: str) -> list[FileEntry]:
        return await asyncio.to_thread(_list_sync, path)

    async def build_tree(self, path: str, depth: int = config.DEFAULT_TREE_DEPTH) -> DirectoryTree:
        def build() -> DirectoryTree:
            return _build_tree_sync(_entry_for(Path(path)), depth)

        return await asyncio.to_thread(build)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    async def is_directory(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).is_dir)

    async def stat(self, path: str) -> FileEntry:
        return await asyncio.to_thread(_entry_for, Path(path))

    async def mkdir(self, path: str) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def remove(self, path: str) -> None:
        def remove_sync() -> None:
            target = Path(path)
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()

        await asyncio.to_thread(remove_sync)

    async def rename(self, old_path: str, new_path: str) -> None:
        await asyncio.to_thread(Path(old_path).rename, new_path)

    def watch(self, path: str, callback: WatchCallback) -> PollingWatcher:
        """监听路径（需要在运行中的事件循环内调用）"""
        watcher = PollingWatcher(path, callback, interval=self._poll_interval)
        self._watchers.append(watcher)
        logger.debug(f"[FS] Watching {path}")
        return watcher

    def close_watchers(self) -> int:
        """关闭所有监听器

        Returns:
            关闭的数量
        """
        count = 0
        for watcher in self._watchers:
            if not watcher.closed:
                watcher.close()
                count += 1
        self._watchers.clear()
        return count
