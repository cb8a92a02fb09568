"""Action 定义

每种状态转换对应一个 frozen dataclass，kind 为稳定的字符串标识。
需要新建 buffer/tab/pane/terminal 的 action 在构造时分配 id，
这样 reducer 对同一个 (state, action) 总是得到相同结果。
"""

from dataclasses import dataclass, field
from typing import ClassVar

from .. import config
from ..core.ids import new_buffer_id, new_pane_id, new_tab_id, new_terminal_id
from ..domain.types import (
    CursorPosition,
    Diagnostic,
    DirectoryTree,
    FocusTarget,
    PaletteItem,
    PaneDirection,
    Selection,
)


@dataclass(frozen=True)
class Action:
    """所有 action 的基类"""

    kind: ClassVar[str] = ""


# === File ===


@dataclass(frozen=True)
class OpenFile(Action):
    kind: ClassVar[str] = "OPEN_FILE"
    path: str
    content: str | None = None
    buffer_id: str = field(default_factory=new_buffer_id)
    tab_id: str = field(default_factory=new_tab_id)


@dataclass(frozen=True)
class NewFile(Action):
    kind: ClassVar[str] = "NEW_FILE"
    buffer_id: str = field(default_factory=new_buffer_id)
    tab_id: str = field(default_factory=new_tab_id)


@dataclass(frozen=True)
class SaveFile(Action):
    kind: ClassVar[str] = "SAVE_FILE"
    buffer_id: str
    # 实际写入磁盘的内容；None 表示当前 buffer 内容
    content: str | None = None


@dataclass(frozen=True)
class CloseTab(Action):
    kind: ClassVar[str] = "CLOSE_TAB"
    tab_id: str


# === Editor ===


@dataclass(frozen=True)
class SetBufferContent(Action):
    kind: ClassVar[str] = "SET_BUFFER_CONTENT"
    buffer_id: str
    content: str


@dataclass(frozen=True)
class SetCursor(Action):
    kind: ClassVar[str] = "SET_CURSOR"
    buffer_id: str
    position: CursorPosition


@dataclass(frozen=True)
class SetSelection(Action):
    kind: ClassVar[str] = "SET_SELECTION"
    buffer_id: str
    selection: Selection | None


@dataclass(frozen=True)
class SetBufferPath(Action):
    kind: ClassVar[str] = "SET_BUFFER_PATH"
    buffer_id: str
    path: str


@dataclass(frozen=True)
class SetDiagnostics(Action):
    kind: ClassVar[str] = "SET_DIAGNOSTICS"
    buffer_id: str
    diagnostics: tuple[Diagnostic, ...] = ()


# === Navigation ===


@dataclass(frozen=True)
class SetFocus(Action):
    kind: ClassVar[str] = "SET_FOCUS"
    target: FocusTarget


@dataclass(frozen=True)
class SwitchTab(Action):
    kind: ClassVar[str] = "SWITCH_TAB"
    tab_id: str


@dataclass(frozen=True)
class NextTab(Action):
    kind: ClassVar[str] = "NEXT_TAB"


@dataclass(frozen=True)
class PrevTab(Action):
    kind: ClassVar[str] = "PREV_TAB"


# === Command line ===


@dataclass(frozen=True)
class OpenCommandLine(Action):
    kind: ClassVar[str] = "OPEN_COMMAND_LINE"


@dataclass(frozen=True)
class CloseCommandLine(Action):
    kind: ClassVar[str] = "CLOSE_COMMAND_LINE"


@dataclass(frozen=True)
class SetCommandLineValue(Action):
    kind: ClassVar[str] = "SET_COMMAND_LINE_VALUE"
    value: str


@dataclass(frozen=True)
class ExecuteCommand(Action):
    """命令行提交；命令本身由 CommandRegistry 执行，这里只关闭命令行"""

    kind: ClassVar[str] = "EXECUTE_COMMAND"
    command: str


# === Palette ===


@dataclass(frozen=True)
class OpenPalette(Action):
    kind: ClassVar[str] = "OPEN_PALETTE"


@dataclass(frozen=True)
class ClosePalette(Action):
    kind: ClassVar[str] = "CLOSE_PALETTE"


@dataclass(frozen=True)
class SetPaletteQuery(Action):
    kind: ClassVar[str] = "SET_PALETTE_QUERY"
    query: str


@dataclass(frozen=True)
class SetPaletteItems(Action):
    kind: ClassVar[str] = "SET_PALETTE_ITEMS"
    items: tuple[PaletteItem, ...]


# === Pickers ===


@dataclass(frozen=True)
class OpenFilePicker(Action):
    kind: ClassVar[str] = "OPEN_FILE_PICKER"
    mode: str = "file"  # file | project


@dataclass(frozen=True)
class CloseFilePicker(Action):
    kind: ClassVar[str] = "CLOSE_FILE_PICKER"


@dataclass(frozen=True)
class OpenThemePicker(Action):
    kind: ClassVar[str] = "OPEN_THEME_PICKER"


@dataclass(frozen=True)
class CloseThemePicker(Action):
    kind: ClassVar[str] = "CLOSE_THEME_PICKER"


# === Theme ===


@dataclass(frozen=True)
class SetTheme(Action):
    kind: ClassVar[str] = "SET_THEME"
    theme_id: str


@dataclass(frozen=True)
class ToggleTheme(Action):
    kind: ClassVar[str] = "TOGGLE_THEME"


# === Terminal ===


@dataclass(frozen=True)
class OpenTerminal(Action):
    kind: ClassVar[str] = "OPEN_TERMINAL"
    cwd: str | None = None  # None: workspace root
    title: str = config.DEFAULT_TERMINAL_TITLE
    pid: int | None = None
    terminal_id: str = field(default_factory=new_terminal_id)


@dataclass(frozen=True)
class CloseTerminal(Action):
    kind: ClassVar[str] = "CLOSE_TERMINAL"
    terminal_id: str


@dataclass(frozen=True)
class FocusTerminal(Action):
    kind: ClassVar[str] = "FOCUS_TERMINAL"
    terminal_id: str


@dataclass(frozen=True)
class TerminalExited(Action):
    kind: ClassVar[str] = "TERMINAL_EXITED"
    terminal_id: str
    exit_code: int


# === Workspace ===


@dataclass(frozen=True)
class SetWorkspace(Action):
    kind: ClassVar[str] = "SET_WORKSPACE"
    path: str


@dataclass(frozen=True)
class SetDirectoryTree(Action):
    kind: ClassVar[str] = "SET_DIRECTORY_TREE"
    tree: DirectoryTree


@dataclass(frozen=True)
class LoadDirectoryChildren(Action):
    kind: ClassVar[str] = "LOAD_DIRECTORY_CHILDREN"
    path: str
    children: tuple[DirectoryTree, ...]


@dataclass(frozen=True)
class RefreshTree(Action):
    kind: ClassVar[str] = "REFRESH_TREE"


@dataclass(frozen=True)
class ToggleDirectory(Action):
    kind: ClassVar[str] = "TOGGLE_DIRECTORY"
    path: str


# === Panes ===


@dataclass(frozen=True)
class SplitPane(Action):
    kind: ClassVar[str] = "SPLIT_PANE"
    direction: PaneDirection
    pane_id: str = field(default_factory=new_pane_id)
    tab_id: str = field(default_factory=new_tab_id)


@dataclass(frozen=True)
class ClosePane(Action):
    kind: ClassVar[str] = "CLOSE_PANE"
    pane_id: str


@dataclass(frozen=True)
class ResizePane(Action):
    kind: ClassVar[str] = "RESIZE_PANE"
    pane_id: str
    size: float
