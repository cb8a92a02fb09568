"""Pane 树辅助函数

PaneNode 是 {PaneLeaf, PaneSplit} 的递归结构，没有父指针。
所有查找都从根开始遍历；所有更新都返回新树，未改变的子树按引用复用
（没有任何改变时返回原节点本身）。

"活动 pane" 固定为前序遍历的第一个叶子。
"""

from collections.abc import Callable, Iterator
from dataclasses import replace

from ..domain.types import Pane, PaneDirection, PaneLeaf, PaneNode, PaneSplit, Tab

PaneUpdater = Callable[[Pane], Pane]

FULL_SIZE = 100.0


def iter_panes(node: PaneNode) -> Iterator[Pane]:
    """前序遍历所有叶子 pane"""
    if isinstance(node, PaneLeaf):
        yield node.pane
        return
    for child in node.children:
        yield from iter_panes(child)


def get_active_pane(node: PaneNode) -> Pane | None:
    """活动 pane：前序遍历的第一个叶子"""
    return next(iter_panes(node), None)


def find_pane(node: PaneNode, pane_id: str) -> Pane | None:
    for pane in iter_panes(node):
        if pane.id == pane_id:
            return pane
    return None


def find_tab(node: PaneNode, tab_id: str) -> tuple[Pane, int] | None:
    """查找 tab 所在 pane 及其下标"""
    for pane in iter_panes(node):
        index = pane.tab_index(tab_id)
        if index >= 0:
            return pane, index
    return None


def iter_tabs(node: PaneNode) -> Iterator[Tab]:
    for pane in iter_panes(node):
        yield from pane.tabs


def referenced_buffer_ids(node: PaneNode) -> set[str]:
    """所有 tab 引用的 buffer id"""
    return {tab.buffer_id for tab in iter_tabs(node)}


def count_panes(node: PaneNode) -> int:
    return sum(1 for _ in iter_panes(node))


def update_pane(node: PaneNode, pane_id: str, updater: PaneUpdater) -> PaneNode:
    """对指定 pane 应用 updater，返回新树"""
    return map_panes(node, lambda pane: updater(pane) if pane.id == pane_id else pane)


def map_panes(node: PaneNode, fn: PaneUpdater) -> PaneNode:
    """对每个叶子 pane 应用 fn；fn 返回原对象时该子树不重建"""
    if isinstance(node, PaneLeaf):
        new_pane = fn(node.pane)
        return node if new_pane is node.pane else PaneLeaf(new_pane)

    children = tuple(map_panes(child, fn) for child in node.children)
    if all(new is old for new, old in zip(children, node.children)):
        return node
    return replace(node, children=children)


def activate_tab(pane: Pane, tab_id: str | None) -> Pane:
    """设置活动 tab，同步每个 tab 的 is_active 标志"""
    tabs = tuple(
        tab if tab.is_active == (tab.id == tab_id) else replace(tab, is_active=tab.id == tab_id)
        for tab in pane.tabs
    )
    if pane.active_tab_id == tab_id and all(new is old for new, old in zip(tabs, pane.tabs)):
        return pane
    return replace(pane, tabs=tabs, active_tab_id=tab_id)


def append_tab(pane: Pane, tab: Tab) -> Pane:
    """追加 tab 并设为活动"""
    return activate_tab(replace(pane, tabs=pane.tabs + (tab,)), tab.id)


def split_pane(
    node: PaneNode, pane_id: str, direction: PaneDirection, new_pane: Pane
) -> PaneNode:
    """把 pane_id 所在叶子替换成 split(原 pane, new_pane)，尺寸均分"""
    if isinstance(node, PaneLeaf):
        if node.pane.id != pane_id:
            return node
        half = FULL_SIZE / 2
        return PaneSplit(
            direction=direction,
            children=(
                PaneLeaf(replace(node.pane, size=half)),
                PaneLeaf(replace(new_pane, size=half)),
            ),
            sizes=(half, half),
        )

    children = tuple(split_pane(child, pane_id, direction, new_pane) for child in node.children)
    if all(new is old for new, old in zip(children, node.children)):
        return node
    return replace(node, children=children)


def remove_pane(node: PaneNode, pane_id: str) -> PaneNode | None:
    """删除叶子；返回 None 表示整个子树被删除

    只剩一个子节点的 split 折叠成该子节点，剩余 sizes 按比例归一化。
    """
    if isinstance(node, PaneLeaf):
        return None if node.pane.id == pane_id else node

    kept: list[PaneNode] = []
    kept_sizes: list[float] = []
    changed = False
    for child, size in zip(node.children, node.sizes):
        new_child = remove_pane(child, pane_id)
        if new_child is not child:
            changed = True
        if new_child is not None:
            kept.append(new_child)
            kept_sizes.append(size)

    if not changed:
        return node
    if not kept:
        return None
    if len(kept) == 1:
        return kept[0]
    return replace(node, children=tuple(kept), sizes=_normalize(kept_sizes))


def resize_pane(node: PaneNode, pane_id: str, size: float) -> PaneNode:
    """调整 pane 在父 split 中的比例，兄弟节点按原比例填满剩余空间"""
    if isinstance(node, PaneLeaf):
        return node

    for index, child in enumerate(node.children):
        if isinstance(child, PaneLeaf) and child.pane.id == pane_id:
            rest = FULL_SIZE - size
            others = sum(s for i, s in enumerate(node.sizes) if i != index)
            sizes = []
            for i, old in enumerate(node.sizes):
                if i == index:
                    sizes.append(size)
                elif others > 0:
                    sizes.append(old / others * rest)
                else:
                    sizes.append(rest / (len(node.sizes) - 1))
            children = tuple(
                PaneLeaf(replace(c.pane, size=s)) if isinstance(c, PaneLeaf) else c
                for c, s in zip(node.children, sizes)
            )
            return replace(node, children=children, sizes=tuple(sizes))

    children = tuple(resize_pane(child, pane_id, size) for child in node.children)
    if all(new is old for new, old in zip(children, node.children)):
        return node
    return replace(node, children=children)


def _normalize(sizes: list[float]) -> tuple[float, ...]:
    total = sum(sizes)
    if total <= 0:
        return tuple(FULL_SIZE / len(sizes) for _ in sizes)
    return tuple(s / total * FULL_SIZE for s in sizes)
