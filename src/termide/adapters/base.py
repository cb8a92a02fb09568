"""外部端口抽象接口

命令层通过这些端口访问外部世界，reducer 不接触它们：
- FileSystemPort: 文件读写、目录列举、目录树、监听
- ClipboardPort: 系统剪贴板
- SettingsPort: 用户设置（JSON 持久化 + 内存缓存）

进程端口见 adapters/process.py（ProcessManager）。

设计原则：
1. 最小接口：只定义命令层需要的操作
2. 异步优先：所有 IO 操作都是 async
3. 失败即异常：文件系统错误以 OSError 子类抛给调用方
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from ..domain.types import DirectoryTree, FileEntry

# 监听回调：(event, path)，event 为 "change" 或 "rename"
WatchCallback = Callable[[str, str], Any]


class Watcher(ABC):
    """可关闭的监听句柄"""

    @abstractmethod
    def close(self) -> None:
        """停止监听（重复调用无副作用）"""
        pass


class FileSystemPort(ABC):
    """文件系统端口"""

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """读取 UTF-8 文本"""
        pass

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        """写入 UTF-8 文本（覆盖）"""
        pass

    @abstractmethod
    async def list_directory(self, path: str) -> list[FileEntry]:
        """列举目录

        Returns:
            条目列表：目录在前，同类按名称排序
        """
        pass

    @abstractmethod
    async def build_tree(self, path: str, depth: int) -> DirectoryTree:
        """递归构建目录树

        Args:
            path: 根路径
            depth: 递归深度；0 表示只包含根节点

        Returns:
            目录树；读取了子项的目录节点（含根）标记为展开，depth 用尽的节点为折叠
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    async def is_directory(self, path: str) -> bool:
        pass

    @abstractmethod
    async def stat(self, path: str) -> FileEntry:
        pass

    @abstractmethod
    async def mkdir(self, path: str) -> None:
        pass

    @abstractmethod
    async def remove(self, path: str) -> None:
        pass

    @abstractmethod
    async def rename(self, old_path: str, new_path: str) -> None:
        pass

    @abstractmethod
    def watch(self, path: str, callback: WatchCallback) -> Watcher:
        """监听路径变化

        Returns:
            Watcher，调用 close() 停止
        """
        pass

    @abstractmethod
    def close_watchers(self) -> int:
        """关闭 watch() 创建的所有监听器

        Returns:
            关闭的数量
        """
        pass


class ClipboardPort(ABC):
    """剪贴板端口"""

    @abstractmethod
    async def read_text(self) -> str:
        """读取文本，不可用时返回空字符串"""
        pass

    @abstractmethod
    async def write_text(self, text: str) -> None:
        pass


class SettingsPort(ABC):
    """设置端口

    set() 必须立即持久化，并与内存缓存原子地一起更新。
    """

    @abstractmethod
    async def load(self) -> Any:
        pass

    @abstractmethod
    async def save(self, settings: Any) -> None:
        pass

    @abstractmethod
    async def get(self, key: str) -> Any:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        pass
