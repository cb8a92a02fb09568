"""Core module - identity utilities"""

from .ids import new_buffer_id, new_pane_id, new_tab_id, new_terminal_id, next_id

__all__ = [
    "next_id",
    "new_buffer_id",
    "new_tab_id",
    "new_pane_id",
    "new_terminal_id",
]
