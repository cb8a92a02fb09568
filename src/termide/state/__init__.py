"""State 模块

提供状态管理的核心组件：
- actions: Action 定义
- pane_tree: pane 树遍历/改写
- reducer: 纯状态转换函数
- selectors: 只读查询
- store: Store（快照 + 订阅）
"""

from . import actions
from .reducer import create_initial_state, handled_kinds, reduce
from .selectors import (
    buffer_ref_count,
    dirty_buffers,
    find_buffer_by_path,
    get_active_buffer,
    get_active_pane,
    get_active_tab,
    get_active_terminal,
)
from .store import Store

__all__ = [
    "actions",
    # Reducer
    "create_initial_state",
    "handled_kinds",
    "reduce",
    # Selectors
    "buffer_ref_count",
    "dirty_buffers",
    "find_buffer_by_path",
    "get_active_buffer",
    "get_active_pane",
    "get_active_tab",
    "get_active_terminal",
    # Store
    "Store",
]
