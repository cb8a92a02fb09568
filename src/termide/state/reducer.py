"""Reducer - 纯状态转换函数

reduce(state, action) -> state

- 纯函数：不访问文件系统/剪贴板/进程/settings，相同输入得到相同输出
- 全函数：未知 action 原样返回 state
- 结构共享：未修改的部分按引用复用，无变化时返回原 state 对象
- 悬空引用（已不存在的 buffer/tab/pane/terminal id）视为 no-op

转换表：
| kind | 效果 |
|------|------|
| OPEN_FILE | 已打开则切换到已有 tab，否则新建 buffer + tab；focus → editor |
| NEW_FILE | 新建 untitled buffer + tab；focus → editor |
| SAVE_FILE | 清除 dirty，更新保存基线 |
| CLOSE_TAB | 移除 tab；最后一个引用消失时同时移除 buffer；相邻 tab 接替 |
| SET_BUFFER_CONTENT | dirty = content != 保存基线 |
| SWITCH_TAB / NEXT_TAB / PREV_TAB | 切换活动 tab（NEXT/PREV 通过 SWITCH 实现） |
| OPEN_* / CLOSE_* overlay | 打开时 focus → overlay，关闭时 focus → editor |
| OPEN_TERMINAL / CLOSE_TERMINAL / FOCUS_TERMINAL | 终端表维护 |
| TOGGLE_DIRECTORY / LOAD_DIRECTORY_CHILDREN | 目录树按路径改写 |
| SPLIT_PANE / CLOSE_PANE / RESIZE_PANE | pane 树改写 |
"""

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from .. import config
from ..domain.languages import basename, detect_language
from ..domain.themes import get_theme, next_theme
from ..domain.types import (
    AppState,
    BufferState,
    CommandLineState,
    DirectoryTree,
    FilePickerState,
    FocusTarget,
    PaletteState,
    Pane,
    PaneLeaf,
    Tab,
    TerminalState,
    ThemePickerState,
    Workspace,
)
from . import actions as a
from . import pane_tree

Handler = Callable[[AppState, Any], AppState]

_HANDLERS: dict[str, Handler] = {}


def _handles(action_type: type[a.Action]) -> Callable[[Handler], Handler]:
    """把 handler 注册到转换表"""

    def decorator(fn: Handler) -> Handler:
        _HANDLERS[action_type.kind] = fn
        return fn

    return decorator


def create_initial_state() -> AppState:
    """初始状态：单个空的 editor pane"""
    return AppState(layout=PaneLeaf(Pane(id=config.MAIN_PANE_ID)))


def reduce(state: AppState, action: object) -> AppState:
    """应用 action，返回新状态

    Args:
        state: 当前状态
        action: 任意 action；未知 kind 原样返回 state

    Returns:
        新状态（无变化时为原对象）
    """
    handler = _HANDLERS.get(getattr(action, "kind", None) or "")
    if handler is None:
        return state
    return handler(state, action)


def handled_kinds() -> set[str]:
    """转换表中已注册的 action kind"""
    return set(_HANDLERS)


# === 内部辅助 ===


def _with_buffer(state: AppState, buffer: BufferState) -> AppState:
    buffers = dict(state.buffers)
    buffers[buffer.id] = buffer
    return replace(state, buffers=buffers)


def _drop_unreferenced_buffers(state: AppState) -> AppState:
    """移除不再被任何 tab 引用的 buffer（连同其 diagnostics）"""
    referenced = pane_tree.referenced_buffer_ids(state.layout)
    orphaned = [buffer_id for buffer_id in state.buffers if buffer_id not in referenced]
    if not orphaned:
        return state
    buffers = {k: v for k, v in state.buffers.items() if k in referenced}
    diagnostics = state.diagnostics
    if any(buffer_id in diagnostics for buffer_id in orphaned):
        diagnostics = {k: v for k, v in diagnostics.items() if k in referenced}
    return replace(state, buffers=buffers, diagnostics=diagnostics)


def _open_tab(state: AppState, tab: Tab) -> AppState:
    """在活动 pane 末尾追加 tab 并激活，focus → editor"""
    pane = pane_tree.get_active_pane(state.layout)
    if pane is None:
        return state
    layout = pane_tree.update_pane(state.layout, pane.id, lambda p: pane_tree.append_tab(p, tab))
    return replace(state, layout=layout, focus=FocusTarget.EDITOR)


def _update_buffer(state: AppState, buffer_id: str, **changes) -> AppState:
    buffer = state.buffers.get(buffer_id)
    if buffer is None:
        return state
    if all(getattr(buffer, key) == value for key, value in changes.items()):
        return state
    return _with_buffer(state, replace(buffer, **changes))


# === File ===


@_handles(a.OpenFile)
def _open_file(state: AppState, action: a.OpenFile) -> AppState:
    label = basename(action.path)
    existing = next(
        (buffer for buffer in state.buffers.values() if buffer.file_path == action.path),
        None,
    )
    if existing is not None:
        pane = pane_tree.get_active_pane(state.layout)
        if pane is None:
            return state
        tab = next((t for t in pane.tabs if t.buffer_id == existing.id), None)
        if tab is not None:
            layout = pane_tree.update_pane(
                state.layout, pane.id, lambda p: pane_tree.activate_tab(p, tab.id)
            )
            if layout is state.layout and state.focus == FocusTarget.EDITOR:
                return state
            return replace(state, layout=layout, focus=FocusTarget.EDITOR)
        # buffer 只在其他 pane 中打开：新 tab 引用同一个 buffer
        return _open_tab(state, Tab(id=action.tab_id, buffer_id=existing.id, label=label))

    if action.buffer_id in state.buffers:
        return state

    content = action.content or ""
    buffer = BufferState(
        id=action.buffer_id,
        file_path=action.path,
        content=content,
        language=detect_language(action.path),
        saved_content=content,
    )
    opened = _open_tab(state, Tab(id=action.tab_id, buffer_id=buffer.id, label=label))
    if opened is state:
        return state
    return _with_buffer(opened, buffer)


@_handles(a.NewFile)
def _new_file(state: AppState, action: a.NewFile) -> AppState:
    if action.buffer_id in state.buffers:
        return state
    buffer = BufferState(id=action.buffer_id, file_path=None)
    opened = _open_tab(
        state, Tab(id=action.tab_id, buffer_id=buffer.id, label=config.UNTITLED_LABEL)
    )
    if opened is state:
        return state
    return _with_buffer(opened, buffer)


@_handles(a.SaveFile)
def _save_file(state: AppState, action: a.SaveFile) -> AppState:
    buffer = state.buffers.get(action.buffer_id)
    if buffer is None:
        return state
    saved = buffer.content if action.content is None else action.content
    return _update_buffer(
        state, buffer.id, is_dirty=buffer.content != saved, saved_content=saved
    )


@_handles(a.CloseTab)
def _close_tab(state: AppState, action: a.CloseTab) -> AppState:
    found = pane_tree.find_tab(state.layout, action.tab_id)
    if found is None:
        return state
    pane, index = found
    closing = pane.tabs[index]
    remaining = pane.tabs[:index] + pane.tabs[index + 1 :]

    if not remaining:
        active_id = None
    elif closing.id == pane.active_tab_id:
        active_id = remaining[min(index, len(remaining) - 1)].id
    else:
        active_id = pane.active_tab_id

    def close(p: Pane) -> Pane:
        return pane_tree.activate_tab(replace(p, tabs=remaining), active_id)

    state = replace(state, layout=pane_tree.update_pane(state.layout, pane.id, close))
    return _drop_unreferenced_buffers(state)


# === Editor ===


@_handles(a.SetBufferContent)
def _set_buffer_content(state: AppState, action: a.SetBufferContent) -> AppState:
    buffer = state.buffers.get(action.buffer_id)
    if buffer is None or buffer.content == action.content:
        return state
    return _with_buffer(
        state,
        replace(
            buffer,
            content=action.content,
            is_dirty=action.content != buffer.saved_content,
        ),
    )


@_handles(a.SetCursor)
def _set_cursor(state: AppState, action: a.SetCursor) -> AppState:
    return _update_buffer(state, action.buffer_id, cursor=action.position)


@_handles(a.SetSelection)
def _set_selection(state: AppState, action: a.SetSelection) -> AppState:
    return _update_buffer(state, action.buffer_id, selection=action.selection)


@_handles(a.SetBufferPath)
def _set_buffer_path(state: AppState, action: a.SetBufferPath) -> AppState:
    buffer = state.buffers.get(action.buffer_id)
    if buffer is None:
        return state
    state = _update_buffer(
        state, buffer.id, file_path=action.path, language=detect_language(action.path)
    )
    label = basename(action.path)

    def relabel(pane: Pane) -> Pane:
        if not any(t.buffer_id == buffer.id and t.label != label for t in pane.tabs):
            return pane
        return replace(
            pane,
            tabs=tuple(
                replace(t, label=label) if t.buffer_id == buffer.id else t for t in pane.tabs
            ),
        )

    layout = pane_tree.map_panes(state.layout, relabel)
    return state if layout is state.layout else replace(state, layout=layout)


@_handles(a.SetDiagnostics)
def _set_diagnostics(state: AppState, action: a.SetDiagnostics) -> AppState:
    if action.buffer_id not in state.buffers:
        return state
    diagnostics = dict(state.diagnostics)
    diagnostics[action.buffer_id] = tuple(action.diagnostics)
    return replace(state, diagnostics=diagnostics)


# === Navigation ===


@_handles(a.SetFocus)
def _set_focus(state: AppState, action: a.SetFocus) -> AppState:
    if state.focus == action.target:
        return state
    return replace(state, focus=action.target)


@_handles(a.SwitchTab)
def _switch_tab(state: AppState, action: a.SwitchTab) -> AppState:
    found = pane_tree.find_tab(state.layout, action.tab_id)
    if found is None:
        return state
    pane, _ = found
    layout = pane_tree.update_pane(
        state.layout, pane.id, lambda p: pane_tree.activate_tab(p, action.tab_id)
    )
    return state if layout is state.layout else replace(state, layout=layout)


def _step_tab(state: AppState, step: int) -> AppState:
    pane = pane_tree.get_active_pane(state.layout)
    if pane is None or not pane.tabs:
        return state
    count = len(pane.tabs)
    current = pane.tab_index(pane.active_tab_id) if pane.active_tab_id else -1
    if current < 0:
        target = 0 if step > 0 else count - 1
    else:
        target = (current + step + count) % count
    return reduce(state, a.SwitchTab(tab_id=pane.tabs[target].id))


@_handles(a.NextTab)
def _next_tab(state: AppState, action: a.NextTab) -> AppState:
    return _step_tab(state, 1)


@_handles(a.PrevTab)
def _prev_tab(state: AppState, action: a.PrevTab) -> AppState:
    return _step_tab(state, -1)


# === Overlays ===


@_handles(a.OpenCommandLine)
def _open_command_line(state: AppState, action: a.OpenCommandLine) -> AppState:
    return replace(
        state, command_line=CommandLineState(is_open=True), focus=FocusTarget.COMMAND_LINE
    )


@_handles(a.CloseCommandLine)
@_handles(a.ExecuteCommand)
def _close_command_line(state: AppState, action: a.Action) -> AppState:
    return replace(state, command_line=CommandLineState(), focus=FocusTarget.EDITOR)


@_handles(a.SetCommandLineValue)
def _set_command_line_value(state: AppState, action: a.SetCommandLineValue) -> AppState:
    return replace(state, command_line=replace(state.command_line, value=action.value))


@_handles(a.OpenPalette)
def _open_palette(state: AppState, action: a.OpenPalette) -> AppState:
    return replace(state, palette=PaletteState(is_open=True), focus=FocusTarget.PALETTE)


@_handles(a.ClosePalette)
def _close_palette(state: AppState, action: a.ClosePalette) -> AppState:
    return replace(state, palette=PaletteState(), focus=FocusTarget.EDITOR)


@_handles(a.SetPaletteQuery)
def _set_palette_query(state: AppState, action: a.SetPaletteQuery) -> AppState:
    return replace(state, palette=replace(state.palette, query=action.query))


@_handles(a.SetPaletteItems)
def _set_palette_items(state: AppState, action: a.SetPaletteItems) -> AppState:
    return replace(state, palette=replace(state.palette, items=tuple(action.items)))


@_handles(a.OpenFilePicker)
def _open_file_picker(state: AppState, action: a.OpenFilePicker) -> AppState:
    return replace(
        state,
        file_picker=FilePickerState(is_open=True, mode=action.mode),
        focus=FocusTarget.FILE_PICKER,
    )


@_handles(a.CloseFilePicker)
def _close_file_picker(state: AppState, action: a.CloseFilePicker) -> AppState:
    return replace(state, file_picker=FilePickerState(), focus=FocusTarget.EDITOR)


@_handles(a.OpenThemePicker)
def _open_theme_picker(state: AppState, action: a.OpenThemePicker) -> AppState:
    return replace(
        state, theme_picker=ThemePickerState(is_open=True), focus=FocusTarget.THEME_PICKER
    )


@_handles(a.CloseThemePicker)
def _close_theme_picker(state: AppState, action: a.CloseThemePicker) -> AppState:
    return replace(state, theme_picker=ThemePickerState(), focus=FocusTarget.EDITOR)


# === Theme ===


@_handles(a.SetTheme)
def _set_theme(state: AppState, action: a.SetTheme) -> AppState:
    theme = get_theme(action.theme_id)
    if theme is None or theme is state.theme:
        return state
    return replace(state, theme=theme)


@_handles(a.ToggleTheme)
def _toggle_theme(state: AppState, action: a.ToggleTheme) -> AppState:
    return replace(state, theme=next_theme(state.theme))


# === Terminal ===


@_handles(a.OpenTerminal)
def _open_terminal(state: AppState, action: a.OpenTerminal) -> AppState:
    if action.terminal_id in state.terminals:
        return state
    terminals = {
        tid: replace(term, is_active=False) if term.is_active else term
        for tid, term in state.terminals.items()
    }
    terminals[action.terminal_id] = TerminalState(
        id=action.terminal_id,
        title=action.title,
        cwd=action.cwd or state.workspace.root_path or ".",
        is_active=True,
        pid=action.pid,
    )
    return replace(state, terminals=terminals, focus=FocusTarget.TERMINAL)


@_handles(a.CloseTerminal)
def _close_terminal(state: AppState, action: a.CloseTerminal) -> AppState:
    closing = state.terminals.get(action.terminal_id)
    if closing is None:
        return state
    terminals = {tid: t for tid, t in state.terminals.items() if tid != action.terminal_id}
    focus = state.focus
    if closing.is_active and terminals:
        first_id = next(iter(terminals))
        terminals[first_id] = replace(terminals[first_id], is_active=True)
    elif not terminals:
        focus = FocusTarget.EDITOR
    return replace(state, terminals=terminals, focus=focus)


@_handles(a.FocusTerminal)
def _focus_terminal(state: AppState, action: a.FocusTerminal) -> AppState:
    if action.terminal_id not in state.terminals:
        return state
    terminals = {}
    for tid, term in state.terminals.items():
        active = tid == action.terminal_id
        terminals[tid] = term if term.is_active == active else replace(term, is_active=active)
    return replace(state, terminals=terminals, focus=FocusTarget.TERMINAL)


@_handles(a.TerminalExited)
def _terminal_exited(state: AppState, action: a.TerminalExited) -> AppState:
    terminal = state.terminals.get(action.terminal_id)
    if terminal is None or terminal.exit_code == action.exit_code:
        return state
    terminals = dict(state.terminals)
    terminals[terminal.id] = replace(terminal, exit_code=action.exit_code)
    return replace(state, terminals=terminals)


# === Workspace ===


def _rewrite_tree(
    node: DirectoryTree, path: str, fn: Callable[[DirectoryTree], DirectoryTree]
) -> DirectoryTree:
    """只重建目标路径上的节点，其余分支按引用返回"""
    if node.entry.path == path:
        return fn(node)
    if not node.children:
        return node
    children = tuple(_rewrite_tree(child, path, fn) for child in node.children)
    if all(new is old for new, old in zip(children, node.children)):
        return node
    return replace(node, children=children)


def _with_tree(state: AppState, tree: DirectoryTree | None) -> AppState:
    if tree is state.workspace.directory_tree:
        return state
    return replace(state, workspace=replace(state.workspace, directory_tree=tree))


@_handles(a.SetWorkspace)
def _set_workspace(state: AppState, action: a.SetWorkspace) -> AppState:
    return replace(state, workspace=Workspace(root_path=action.path))


@_handles(a.SetDirectoryTree)
def _set_directory_tree(state: AppState, action: a.SetDirectoryTree) -> AppState:
    return _with_tree(state, action.tree)


@_handles(a.LoadDirectoryChildren)
def _load_directory_children(state: AppState, action: a.LoadDirectoryChildren) -> AppState:
    tree = state.workspace.directory_tree
    if tree is None:
        return state
    return _with_tree(
        state,
        _rewrite_tree(
            tree,
            action.path,
            lambda node: replace(node, children=tuple(action.children), is_expanded=True),
        ),
    )


@_handles(a.RefreshTree)
def _refresh_tree(state: AppState, action: a.RefreshTree) -> AppState:
    # 由 workspace.refresh 命令异步重建
    return state


@_handles(a.ToggleDirectory)
def _toggle_directory(state: AppState, action: a.ToggleDirectory) -> AppState:
    tree = state.workspace.directory_tree
    if tree is None:
        return state
    return _with_tree(
        state,
        _rewrite_tree(tree, action.path, lambda node: replace(node, is_expanded=not node.is_expanded)),
    )


# === Panes ===


@_handles(a.SplitPane)
def _split_pane(state: AppState, action: a.SplitPane) -> AppState:
    pane = pane_tree.get_active_pane(state.layout)
    if pane is None or pane_tree.find_pane(state.layout, action.pane_id) is not None:
        return state
    new_pane = Pane(id=action.pane_id, kind=pane.kind)
    source = pane.active_tab
    if source is not None:
        new_pane = pane_tree.append_tab(
            new_pane, Tab(id=action.tab_id, buffer_id=source.buffer_id, label=source.label)
        )
    layout = pane_tree.split_pane(state.layout, pane.id, action.direction, new_pane)
    return replace(state, layout=layout)


@_handles(a.ClosePane)
def _close_pane(state: AppState, action: a.ClosePane) -> AppState:
    if pane_tree.find_pane(state.layout, action.pane_id) is None:
        return state
    layout = pane_tree.remove_pane(state.layout, action.pane_id)
    if layout is None:
        # 最后一个 pane 不能关闭
        return state
    return _drop_unreferenced_buffers(replace(state, layout=layout))


@_handles(a.ResizePane)
def _resize_pane(state: AppState, action: a.ResizePane) -> AppState:
    if not 0 < action.size < pane_tree.FULL_SIZE:
        return state
    layout = pane_tree.resize_pane(state.layout, action.pane_id, action.size)
    return state if layout is state.layout else replace(state, layout=layout)
