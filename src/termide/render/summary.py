"""AppState 摘要渲染（Rich）

把一个状态快照渲染成终端里可读的摘要：
- 头部：workspace、主题、焦点、打开的 overlay
- pane 树：split 方向/比例，每个 pane 的 tab（活动 tab、dirty 标记）
- 终端表
- 目录树（只展开 is_expanded 的节点）
"""

from rich.console import Console, Group, RenderableType
from rich.style import Style
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from ..domain.types import AppState, DirectoryTree, PaneNode, PaneSplit

DIRTY_MARK = "●"


def _open_overlays(state: AppState) -> list[str]:
    overlays = []
    if state.command_line.is_open:
        overlays.append(f"commandLine({state.command_line.value!r})")
    if state.palette.is_open:
        overlays.append(f"palette({len(state.palette.items)} items)")
    if state.file_picker.is_open:
        overlays.append(f"filePicker({state.file_picker.mode})")
    if state.theme_picker.is_open:
        overlays.append("themePicker")
    return overlays


def _header(state: AppState) -> Text:
    colors = state.theme.colors
    text = Text()
    text.append("workspace ", style=Style(color=colors.comment))
    text.append(state.workspace.root_path or "-", style=Style(color=colors.primary, bold=True))
    text.append("  theme ", style=Style(color=colors.comment))
    text.append(state.theme.id, style=Style(color=colors.accent))
    text.append("  focus ", style=Style(color=colors.comment))
    text.append(state.focus.value, style=Style(color=colors.info))
    overlays = _open_overlays(state)
    if overlays:
        text.append("  overlays ", style=Style(color=colors.comment))
        text.append(", ".join(overlays), style=Style(color=colors.warning))
    return text


def _add_pane_node(parent: Tree, node: PaneNode, state: AppState, size: float | None) -> None:
    colors = state.theme.colors
    suffix = f" {size:.0f}%" if size is not None else ""

    if isinstance(node, PaneSplit):
        branch = parent.add(Text(f"split {node.direction.value}{suffix}", style=colors.secondary))
        for child, child_size in zip(node.children, node.sizes):
            _add_pane_node(branch, child, state, child_size)
        return

    pane = node.pane
    branch = parent.add(Text(f"pane {pane.id} ({pane.kind.value}){suffix}", style=colors.primary))
    if not pane.tabs:
        branch.add(Text("(no tabs)", style=colors.comment))
    for tab in pane.tabs:
        buffer = state.buffers.get(tab.buffer_id)
        label = Text()
        label.append("▶ " if tab.is_active else "  ")
        label.append(tab.label, style=Style(bold=tab.is_active, color=colors.foreground))
        if buffer is not None and buffer.is_dirty:
            label.append(f" {DIRTY_MARK}", style=colors.warning)
        if buffer is not None and buffer.language:
            label.append(f"  {buffer.language}", style=colors.comment)
        branch.add(label)


def _pane_tree(state: AppState) -> Tree:
    tree = Tree(Text("layout", style=Style(bold=True)))
    _add_pane_node(tree, state.layout, state, None)
    return tree


def _terminals_table(state: AppState) -> Table:
    colors = state.theme.colors
    table = Table(title="terminals", title_justify="left", expand=False)
    table.add_column("id")
    table.add_column("title")
    table.add_column("cwd")
    table.add_column("pid", justify="right")
    table.add_column("status")
    for terminal in state.terminals.values():
        if terminal.has_exited:
            status = Text(f"exited {terminal.exit_code}", style=colors.error)
        else:
            status = Text("running", style=colors.success)
        table.add_row(
            Text(terminal.id, style=Style(bold=terminal.is_active)),
            terminal.title,
            terminal.cwd,
            str(terminal.pid) if terminal.pid is not None else "-",
            status,
        )
    return table


def _add_directory(parent: Tree, node: DirectoryTree, state: AppState) -> None:
    colors = state.theme.colors
    if node.entry.is_directory:
        marker = "▾ " if node.is_expanded else "▸ "
        branch = parent.add(Text(marker + node.entry.name + "/", style=colors.function))
        if node.is_expanded:
            for child in node.children:
                _add_directory(branch, child, state)
    else:
        parent.add(Text(node.entry.name, style=colors.foreground))


def _directory_tree(state: AppState) -> Tree | None:
    root = state.workspace.directory_tree
    if root is None:
        return None
    tree = Tree(Text(root.entry.path, style=Style(bold=True)))
    for child in root.children:
        _add_directory(tree, child, state)
    return tree


def render_summary(state: AppState, show_files: bool = False) -> RenderableType:
    """渲染状态摘要

    Args:
        state: 状态快照
        show_files: 是否包含目录树

    Returns:
        Rich renderable
    """
    parts: list[RenderableType] = [_header(state), _pane_tree(state)]
    if state.terminals:
        parts.append(_terminals_table(state))
    if show_files:
        directory = _directory_tree(state)
        if directory is not None:
            parts.append(directory)
    return Group(*parts)


def print_summary(state: AppState, console: Console | None = None, show_files: bool = False) -> None:
    (console or Console()).print(render_summary(state, show_files=show_files))
