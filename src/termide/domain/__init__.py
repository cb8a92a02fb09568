"""Domain 模块

纯数据类型，无基础设施依赖：
- types: Buffer / Tab / Pane / Workspace / Terminal / AppState
- themes: 内置主题
- languages: 扩展名 → 语言
- text: offset 与行列换算
"""

from .languages import basename, detect_language
from .themes import DEFAULT_THEME, THEMES, Theme, ThemeColors, get_theme, next_theme
from .types import (
    AppState,
    BufferState,
    CommandLineState,
    CursorPosition,
    Diagnostic,
    DirectoryTree,
    FileEntry,
    FilePickerState,
    FocusTarget,
    PaletteItem,
    PaletteState,
    Pane,
    PaneDirection,
    PaneKind,
    PaneLeaf,
    PaneNode,
    PaneSplit,
    Selection,
    Tab,
    TerminalState,
    ThemePickerState,
    Workspace,
)

__all__ = [
    "AppState",
    "BufferState",
    "CommandLineState",
    "CursorPosition",
    "Diagnostic",
    "DirectoryTree",
    "FileEntry",
    "FilePickerState",
    "FocusTarget",
    "PaletteItem",
    "PaletteState",
    "Pane",
    "PaneDirection",
    "PaneKind",
    "PaneLeaf",
    "PaneNode",
    "PaneSplit",
    "Selection",
    "Tab",
    "TerminalState",
    "ThemePickerState",
    "Workspace",
    "Theme",
    "ThemeColors",
    "THEMES",
    "DEFAULT_THEME",
    "get_theme",
    "next_theme",
    "detect_language",
    "basename",
]
