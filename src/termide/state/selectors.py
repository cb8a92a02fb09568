"""Read-only queries over an AppState snapshot."""

from ..domain.types import AppState, BufferState, Pane, Tab, TerminalState
from . import pane_tree


def get_active_pane(state: AppState) -> Pane | None:
    return pane_tree.get_active_pane(state.layout)


def get_active_tab(state: AppState) -> Tab | None:
    pane = get_active_pane(state)
    return pane.active_tab if pane else None


def get_active_buffer(state: AppState) -> BufferState | None:
    """Buffer shown by the active pane's active tab."""
    tab = get_active_tab(state)
    if tab is None:
        return None
    return state.buffers.get(tab.buffer_id)


def get_active_terminal(state: AppState) -> TerminalState | None:
    for terminal in state.terminals.values():
        if terminal.is_active:
            return terminal
    return None


def find_buffer_by_path(state: AppState, path: str) -> BufferState | None:
    for buffer in state.buffers.values():
        if buffer.file_path == path:
            return buffer
    return None


def buffer_ref_count(state: AppState, buffer_id: str) -> int:
    """Number of tabs, across every pane, that reference the buffer."""
    return sum(1 for tab in pane_tree.iter_tabs(state.layout) if tab.buffer_id == buffer_id)


def all_tabs(state: AppState) -> list[Tab]:
    return list(pane_tree.iter_tabs(state.layout))


def dirty_buffers(state: AppState) -> list[BufferState]:
    return [buffer for buffer in state.buffers.values() if buffer.is_dirty]
