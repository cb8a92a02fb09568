"""Domain 数据类型定义

包含：
- Buffer: BufferState / CursorPosition / Selection
- Tab & Pane: Tab / Pane / PaneLeaf / PaneSplit（PaneNode 递归结构）
- Workspace: FileEntry / DirectoryTree / Workspace
- Terminal: TerminalState
- Overlay: CommandLineState / PaletteState / FilePickerState / ThemePickerState
- AppState: 根状态

所有类型都是 frozen dataclass，状态更新通过 dataclasses.replace 产生新对象，
未修改的部分按引用复用（structural sharing）。dict 字段按 copy-on-write 使用，
任何代码都不能原地修改它们。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .themes import DEFAULT_THEME, Theme


class FocusTarget(Enum):
    """输入焦点目标"""

    EDITOR = "editor"
    COMMAND_LINE = "commandLine"
    EXPLORER = "explorer"
    TERMINAL = "terminal"
    PALETTE = "palette"
    FILE_PICKER = "filePicker"
    THEME_PICKER = "themePicker"


class PaneKind(Enum):
    """Pane 类型（目前只有 EDITOR 会被填充）"""

    EDITOR = "editor"
    TERMINAL = "terminal"
    EXPLORER = "explorer"
    OUTPUT = "output"


class PaneDirection(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


# === Buffer ===


@dataclass(frozen=True)
class CursorPosition:
    line: int = 0
    column: int = 0
    offset: int = 0


@dataclass(frozen=True)
class Selection:
    anchor: CursorPosition
    focus: CursorPosition

    @property
    def start(self) -> int:
        return min(self.anchor.offset, self.focus.offset)

    @property
    def end(self) -> int:
        return max(self.anchor.offset, self.focus.offset)


@dataclass(frozen=True)
class BufferState:
    """Buffer 状态

    Attributes:
        id: 唯一标识
        file_path: 文件路径，None 表示 untitled
        content: 内存中的内容
        is_dirty: content 与最近一次加载/保存的内容不同
        language: 语言标识
        cursor: 光标位置
        selection: 选区
        saved_content: 最近一次加载/保存的内容（dirty 基线）
    """

    id: str
    file_path: str | None
    content: str = ""
    is_dirty: bool = False
    language: str | None = None
    cursor: CursorPosition = field(default_factory=CursorPosition)
    selection: Selection | None = None
    saved_content: str = ""

    @property
    def is_untitled(self) -> bool:
        return self.file_path is None


# === Tabs & Panes ===


@dataclass(frozen=True)
class Tab:
    id: str
    buffer_id: str
    label: str
    is_active: bool = False
    is_pinned: bool = False


@dataclass(frozen=True)
class Pane:
    """编辑区域

    不变量：active_tab_id 为 None 或是 tabs 中某个 tab 的 id，
    且恰好该 tab 的 is_active 为 True。
    """

    id: str
    kind: PaneKind = PaneKind.EDITOR
    tabs: tuple[Tab, ...] = ()
    active_tab_id: str | None = None
    size: float = 100.0

    def tab_index(self, tab_id: str) -> int:
        """tab 在列表中的位置，不存在返回 -1"""
        for index, tab in enumerate(self.tabs):
            if tab.id == tab_id:
                return index
        return -1

    @property
    def active_tab(self) -> Tab | None:
        if self.active_tab_id is None:
            return None
        index = self.tab_index(self.active_tab_id)
        return self.tabs[index] if index >= 0 else None


@dataclass(frozen=True)
class PaneLeaf:
    pane: Pane


@dataclass(frozen=True)
class PaneSplit:
    """分割节点，sizes 与 children 一一对应"""

    direction: PaneDirection
    children: tuple["PaneNode", ...]
    sizes: tuple[float, ...]


PaneNode = Union[PaneLeaf, PaneSplit]


# === Workspace ===


@dataclass(frozen=True)
class FileEntry:
    name: str
    path: str
    is_directory: bool
    size: int | None = None
    modified_at: float | None = None


@dataclass(frozen=True)
class DirectoryTree:
    """目录树快照节点，expanded 标志显式保存，不在每次渲染时重新计算"""

    entry: FileEntry
    children: tuple["DirectoryTree", ...] = ()
    is_expanded: bool = False


@dataclass(frozen=True)
class Workspace:
    root_path: str | None = None
    directory_tree: DirectoryTree | None = None


# === Terminal ===


@dataclass(frozen=True)
class TerminalState:
    id: str
    title: str
    cwd: str
    is_active: bool = False
    pid: int | None = None
    exit_code: int | None = None

    @property
    def has_exited(self) -> bool:
        return self.exit_code is not None


# === Diagnostics ===


@dataclass(frozen=True)
class Diagnostic:
    start: CursorPosition
    end: CursorPosition
    severity: str  # error | warning | info | hint
    message: str
    source: str | None = None
    code: str | int | None = None


# === Overlays ===


@dataclass(frozen=True)
class CommandLineState:
    is_open: bool = False
    value: str = ""


@dataclass(frozen=True)
class PaletteItem:
    id: str
    label: str
    description: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class PaletteState:
    is_open: bool = False
    query: str = ""
    items: tuple[PaletteItem, ...] = ()


@dataclass(frozen=True)
class FilePickerState:
    is_open: bool = False
    mode: str = "file"  # file | project


@dataclass(frozen=True)
class ThemePickerState:
    is_open: bool = False


# === Root ===


@dataclass(frozen=True)
class AppState:
    """根状态快照

    每次 dispatch 产生一个新快照；未修改的字段与上一个快照共享引用。
    """

    layout: PaneNode
    workspace: Workspace = field(default_factory=Workspace)
    buffers: dict[str, BufferState] = field(default_factory=dict)
    theme: Theme = DEFAULT_THEME
    focus: FocusTarget = FocusTarget.EDITOR
    command_line: CommandLineState = field(default_factory=CommandLineState)
    palette: PaletteState = field(default_factory=PaletteState)
    file_picker: FilePickerState = field(default_factory=FilePickerState)
    theme_picker: ThemePickerState = field(default_factory=ThemePickerState)
    terminals: dict[str, TerminalState] = field(default_factory=dict)
    diagnostics: dict[str, tuple[Diagnostic, ...]] = field(default_factory=dict)
