"""内置命令

每个命令是 (ctx, args) -> None 的函数，通过 @command 登记到 BUILTIN_COMMANDS，
再由 register_builtin_commands 注册到 CommandRegistry。

命令体约定：
- 只通过 ctx.store.dispatch 修改状态
- 外部操作失败（文件不存在、进程启动失败等）直接抛出，由 registry 包装成
  CommandFailedError；失败前不 dispatch 任何半成品状态
- 多个相关 dispatch 按顺序排列，使每个中间状态都有效
"""

import os
from collections.abc import Callable

from .. import config
from ..domain.text import cursor_at, end_cursor, splice
from ..domain.themes import get_theme
from ..domain.types import (
    CursorPosition,
    DirectoryTree,
    FocusTarget,
    PaneDirection,
    Selection,
)
from ..state import actions
from ..state.selectors import (
    dirty_buffers,
    find_buffer_by_path,
    get_active_buffer,
    get_active_pane,
    get_active_tab,
    get_active_terminal,
)
from ..telemetry import get_logger
from .palette import build_palette_items
from .registry import Command, CommandContext, CommandHandler, CommandRegistry

logger = get_logger(__name__)

BUILTIN_COMMANDS: list[Command] = []


def command(
    command_id: str,
    label: str,
    category: str,
    description: str | None = None,
) -> Callable[[CommandHandler], CommandHandler]:
    """登记内置命令"""

    def decorator(fn: CommandHandler) -> CommandHandler:
        BUILTIN_COMMANDS.append(
            Command(
                id=command_id,
                label=label,
                handler=fn,
                category=category,
                description=description,
            )
        )
        return fn

    return decorator


def register_builtin_commands(registry: CommandRegistry) -> int:
    """注册所有内置命令

    Returns:
        注册数量
    """
    for cmd in BUILTIN_COMMANDS:
        registry.register(cmd)
    return len(BUILTIN_COMMANDS)


def resolve_path(ctx: CommandContext, path: str) -> str:
    """展开 ~，相对路径基于 workspace 根目录（无 workspace 时基于当前目录）"""
    path = os.path.expanduser(path)
    if not os.path.isabs(path):
        root = ctx.store.get_state().workspace.root_path or os.getcwd()
        path = os.path.join(root, path)
    return os.path.normpath(path)


def _workspace_cwd(ctx: CommandContext) -> str:
    return ctx.store.get_state().workspace.root_path or os.getcwd()


# === File ===


@command("file.save", "Save File", "File", "Save the active buffer (:w <path> saves as)")
async def save_file(ctx: CommandContext, args: list[str]) -> None:
    buffer = get_active_buffer(ctx.store.get_state())
    if buffer is None:
        logger.info("[Commands] No active buffer to save")
        return

    if args:
        path = resolve_path(ctx, args[0])
    elif buffer.file_path is not None:
        path = buffer.file_path
    else:
        logger.warning("[Commands] Cannot save untitled buffer without a path (use :w <path>)")
        return

    content = buffer.content
    await ctx.fs.write_file(path, content)
    if path != buffer.file_path:
        ctx.store.dispatch(actions.SetBufferPath(buffer_id=buffer.id, path=path))
    ctx.store.dispatch(actions.SaveFile(buffer_id=buffer.id, content=content))
    logger.info(f"[Commands] Saved {path}")


@command("file.open", "Open File", "File", "Open a file (no path opens the file picker)")
async def open_file(ctx: CommandContext, args: list[str]) -> None:
    if not args:
        ctx.store.dispatch(actions.OpenFilePicker(mode="file"))
        return

    path = resolve_path(ctx, args[0])
    if find_buffer_by_path(ctx.store.get_state(), path) is not None:
        ctx.store.dispatch(actions.OpenFile(path=path))
        return

    if await ctx.fs.is_directory(path):
        raise IsADirectoryError(f"Is a directory: {path}")
    content = await ctx.fs.read_file(path)
    ctx.store.dispatch(actions.OpenFile(path=path, content=content))


@command("file.new", "New File", "File")
def new_file(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.NewFile())


@command("file.saveAndQuit", "Save and Quit", "File")
async def save_and_quit(ctx: CommandContext, args: list[str]) -> None:
    await ctx.registry.execute("file.save", args)
    await ctx.registry.execute("app.quit")


# === Tabs ===


@command("tab.close", "Close Tab", "Tab")
def close_tab(ctx: CommandContext, args: list[str]) -> None:
    tab = get_active_tab(ctx.store.get_state())
    if tab is not None:
        ctx.store.dispatch(actions.CloseTab(tab_id=tab.id))


@command("tab.next", "Next Tab", "Tab")
def next_tab(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.NextTab())


@command("tab.prev", "Previous Tab", "Tab")
def prev_tab(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.PrevTab())


# === Panes ===


@command("pane.split", "Split Pane", "Layout", "Split the active pane (horizontal|vertical)")
def split_pane(ctx: CommandContext, args: list[str]) -> None:
    direction = PaneDirection.HORIZONTAL
    if args:
        direction = PaneDirection(args[0].lower())
    ctx.store.dispatch(actions.SplitPane(direction=direction))


@command("pane.close", "Close Pane", "Layout")
def close_pane(ctx: CommandContext, args: list[str]) -> None:
    pane = get_active_pane(ctx.store.get_state())
    if pane is not None:
        ctx.store.dispatch(actions.ClosePane(pane_id=args[0] if args else pane.id))


# === Theme ===


@command("theme.set", "Set Theme", "Theme", "Switch theme (no name opens the theme picker)")
async def set_theme(ctx: CommandContext, args: list[str]) -> None:
    if not args:
        ctx.store.dispatch(actions.OpenThemePicker())
        return

    theme = get_theme(args[0].lower())
    if theme is None:
        logger.warning(f"[Commands] Unknown theme: {args[0]}")
        return
    ctx.store.dispatch(actions.SetTheme(theme_id=theme.id))
    await ctx.settings.set("theme", theme.id)


@command("theme.toggle", "Toggle Theme", "Theme")
def toggle_theme(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.ToggleTheme())


# === Terminal ===


@command("terminal.open", "Open Terminal", "Terminal")
async def open_terminal(ctx: CommandContext, args: list[str]) -> None:
    await ctx.terminals.open(cwd=_workspace_cwd(ctx))


@command("terminal.close", "Close Terminal", "Terminal")
def close_terminal(ctx: CommandContext, args: list[str]) -> None:
    terminal = get_active_terminal(ctx.store.get_state())
    if terminal is None:
        logger.info("[Commands] No active terminal")
        return
    ctx.terminals.close(terminal.id)


# === Application ===


def _request_quit(ctx: CommandContext) -> None:
    dirty = dirty_buffers(ctx.store.get_state())
    if dirty:
        names = ", ".join(b.file_path or config.UNTITLED_LABEL for b in dirty)
        logger.warning(f"[Commands] Quitting with unsaved changes: {names}")
    ctx.quit_event.set()


@command("app.quit", "Quit", "Application")
def quit_app(ctx: CommandContext, args: list[str]) -> None:
    _request_quit(ctx)


@command("app.quitAll", "Quit All", "Application")
def quit_all(ctx: CommandContext, args: list[str]) -> None:
    _request_quit(ctx)


# === Focus ===


@command("focus.editor", "Focus Editor", "Navigation")
def focus_editor(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.SetFocus(target=FocusTarget.EDITOR))


@command("focus.explorer", "Focus Explorer", "Navigation")
def focus_explorer(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.SetFocus(target=FocusTarget.EXPLORER))


@command("focus.terminal", "Focus Terminal", "Navigation")
def focus_terminal(ctx: CommandContext, args: list[str]) -> None:
    terminal = get_active_terminal(ctx.store.get_state())
    if terminal is not None:
        ctx.store.dispatch(actions.FocusTerminal(terminal_id=terminal.id))
    else:
        ctx.store.dispatch(actions.SetFocus(target=FocusTarget.TERMINAL))


# === Overlays ===


@command("commandLine.open", "Open Command Line", "UI")
def open_command_line(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.OpenCommandLine())


@command("commandLine.close", "Close Command Line", "UI")
def close_command_line(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.CloseCommandLine())


@command("palette.open", "Open Command Palette", "UI")
def open_palette(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.OpenPalette())
    ctx.store.dispatch(actions.SetPaletteItems(items=build_palette_items(ctx.registry)))


@command("palette.close", "Close Command Palette", "UI")
def close_palette(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.ClosePalette())


@command("filePicker.open", "Open File Picker", "UI", "Open the file browser dialog")
def open_file_picker(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.OpenFilePicker(mode="file"))


@command("filePicker.close", "Close File Picker", "UI")
def close_file_picker(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.CloseFilePicker())


@command("themePicker.open", "Open Theme Picker", "UI", "Open the theme selection dialog")
def open_theme_picker(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.OpenThemePicker())


@command("themePicker.close", "Close Theme Picker", "UI")
def close_theme_picker(ctx: CommandContext, args: list[str]) -> None:
    ctx.store.dispatch(actions.CloseThemePicker())


# === Workspace ===


@command("project.open", "Open Project", "File", "Open a project folder")
async def open_project(ctx: CommandContext, args: list[str]) -> None:
    if not args:
        ctx.store.dispatch(actions.OpenFilePicker(mode="project"))
        return

    path = resolve_path(ctx, args[0])
    if not await ctx.fs.is_directory(path):
        raise NotADirectoryError(f"Not a directory: {path}")

    tree = await ctx.fs.build_tree(path, config.DEFAULT_TREE_DEPTH)
    ctx.store.dispatch(actions.SetWorkspace(path=path))
    ctx.store.dispatch(actions.SetDirectoryTree(tree=tree))
    logger.info(f"[Commands] Opened project {path}")

    recent = list(await ctx.settings.get("recentWorkspaces"))
    recent = [path] + [p for p in recent if p != path]
    await ctx.settings.set("recentWorkspaces", recent[: config.MAX_RECENT_WORKSPACES])


@command("workspace.refresh", "Refresh Explorer", "File")
async def refresh_workspace(ctx: CommandContext, args: list[str]) -> None:
    root = ctx.store.get_state().workspace.root_path
    if root is None:
        logger.info("[Commands] No workspace to refresh")
        return
    ctx.store.dispatch(actions.RefreshTree())
    tree = await ctx.fs.build_tree(root, config.DEFAULT_TREE_DEPTH)
    ctx.store.dispatch(actions.SetDirectoryTree(tree=tree))


def _find_node(node: DirectoryTree | None, path: str) -> DirectoryTree | None:
    if node is None:
        return None
    if node.entry.path == path:
        return node
    for child in node.children:
        found = _find_node(child, path)
        if found is not None:
            return found
    return None


@command("explorer.toggle", "Toggle Directory", "File", "Expand or collapse a directory")
async def toggle_directory(ctx: CommandContext, args: list[str]) -> None:
    if not args:
        logger.info("[Commands] explorer.toggle needs a directory path")
        return

    path = resolve_path(ctx, args[0])
    node = _find_node(ctx.store.get_state().workspace.directory_tree, path)
    if node is None or not node.entry.is_directory:
        logger.info(f"[Commands] Not a directory in the explorer: {path}")
        return

    if not node.is_expanded and not node.children:
        entries = await ctx.fs.list_directory(path)
        children = tuple(DirectoryTree(entry=entry) for entry in entries)
        ctx.store.dispatch(actions.LoadDirectoryChildren(path=path, children=children))
    else:
        ctx.store.dispatch(actions.ToggleDirectory(path=path))


# === Clipboard / Edit ===


@command("clipboard.copy", "Copy", "Edit")
async def copy(ctx: CommandContext, args: list[str]) -> None:
    buffer = get_active_buffer(ctx.store.get_state())
    if buffer is None or buffer.selection is None:
        return
    selection = buffer.selection
    await ctx.clipboard.write_text(buffer.content[selection.start : selection.end])


@command("clipboard.paste", "Paste", "Edit")
async def paste(ctx: CommandContext, args: list[str]) -> None:
    text = await ctx.clipboard.read_text()
    buffer = get_active_buffer(ctx.store.get_state())
    if not text or buffer is None:
        return

    if buffer.selection is not None:
        start, end = buffer.selection.start, buffer.selection.end
        ctx.store.dispatch(actions.SetSelection(buffer_id=buffer.id, selection=None))
    else:
        start = end = min(buffer.cursor.offset, len(buffer.content))

    content = splice(buffer.content, start, end, text)
    ctx.store.dispatch(actions.SetBufferContent(buffer_id=buffer.id, content=content))
    ctx.store.dispatch(
        actions.SetCursor(buffer_id=buffer.id, position=cursor_at(content, start + len(text)))
    )


@command("clipboard.cut", "Cut", "Edit")
async def cut(ctx: CommandContext, args: list[str]) -> None:
    buffer = get_active_buffer(ctx.store.get_state())
    if buffer is None or buffer.selection is None:
        return

    start, end = buffer.selection.start, buffer.selection.end
    await ctx.clipboard.write_text(buffer.content[start:end])

    current = ctx.store.get_state().buffers.get(buffer.id)
    if current is None or (current.content, current.selection) != (buffer.content, buffer.selection):
        logger.info("[Commands] Buffer changed during cut, keeping text in place")
        return

    content = splice(current.content, start, end, "")
    ctx.store.dispatch(actions.SetSelection(buffer_id=buffer.id, selection=None))
    ctx.store.dispatch(actions.SetBufferContent(buffer_id=buffer.id, content=content))
    ctx.store.dispatch(actions.SetCursor(buffer_id=buffer.id, position=cursor_at(content, start)))


@command("edit.selectAll", "Select All", "Edit")
def select_all(ctx: CommandContext, args: list[str]) -> None:
    buffer = get_active_buffer(ctx.store.get_state())
    if buffer is None:
        return
    selection = Selection(anchor=CursorPosition(), focus=end_cursor(buffer.content))
    ctx.store.dispatch(actions.SetSelection(buffer_id=buffer.id, selection=selection))


# === Integrations ===


@command("opencode.open", "Open OpenCode AI", "AI", "Open an OpenCode AI chat instance")
def open_opencode(ctx: CommandContext, args: list[str]) -> None:
    logger.info("[Commands] OpenCode integration is not available yet")
