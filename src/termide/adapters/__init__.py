"""Adapters 模块

外部端口及其本地实现：
- base: FileSystemPort / ClipboardPort / SettingsPort 抽象接口
- filesystem: LocalFileSystem + PollingWatcher
- clipboard: SystemClipboard（OSC 52 + pbcopy/xclip/xsel）
- settings: Settings 模型 + JsonSettings
- process: ProcessManager / ChildProcess / PtyProcess
"""

from .base import ClipboardPort, FileSystemPort, SettingsPort, Watcher
from .clipboard import SystemClipboard
from .filesystem import LocalFileSystem, PollingWatcher
from .process import ChildProcess, ProcessManager, PtyEvent, PtyProcess
from .settings import JsonSettings, KeybindingOverride, LspServerConfig, Settings

__all__ = [
    # Ports
    "ClipboardPort",
    "FileSystemPort",
    "SettingsPort",
    "Watcher",
    # Implementations
    "LocalFileSystem",
    "PollingWatcher",
    "SystemClipboard",
    "JsonSettings",
    "Settings",
    "KeybindingOverride",
    "LspServerConfig",
    "ProcessManager",
    "ChildProcess",
    "PtyProcess",
    "PtyEvent",
]
