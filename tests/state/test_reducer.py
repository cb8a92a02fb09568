"""Reducer 测试

覆盖：
- 文件打开/关闭/保存与 tab 激活规则
- tab 导航（NEXT/PREV 环绕）
- overlay 打开关闭与焦点
- 终端表
- 目录树改写与结构共享
- pane 分割/关闭/调整大小
"""

import random

import pytest

from termide import config
from termide.domain.themes import DRACULA, ONE_LIGHT, TOKYO_NIGHT
from termide.domain.types import (
    CursorPosition,
    Diagnostic,
    DirectoryTree,
    FileEntry,
    FocusTarget,
    PaletteItem,
    PaneDirection,
    PaneLeaf,
    PaneSplit,
)
from termide.state import actions as a
from termide.state import pane_tree
from termide.state.reducer import create_initial_state, handled_kinds, reduce
from termide.state.selectors import (
    all_tabs,
    buffer_ref_count,
    get_active_buffer,
    get_active_pane,
    get_active_tab,
    get_active_terminal,
)


def apply(state, *actions):
    for action in actions:
        state = reduce(state, action)
    return state


def open_three():
    """打开 A/B/C 三个文件，C 为活动 tab"""
    return apply(
        create_initial_state(),
        a.OpenFile(path="/w/A.py", content="a"),
        a.OpenFile(path="/w/B.py", content="b"),
        a.OpenFile(path="/w/C.py", content="c"),
    )


def labels(state):
    return [tab.label for tab in get_active_pane(state).tabs]


def assert_tab_invariants(state):
    """每个 pane：active_tab_id 为空或指向唯一 is_active 的 tab；tab 引用的 buffer 都存在"""
    for pane in pane_tree.iter_panes(state.layout):
        active = [tab for tab in pane.tabs if tab.is_active]
        if pane.active_tab_id is None:
            assert active == []
        else:
            assert [tab.id for tab in active] == [pane.active_tab_id]
        for tab in pane.tabs:
            assert tab.buffer_id in state.buffers


class TestInitialState:
    def test_single_empty_pane(self):
        state = create_initial_state()
        assert isinstance(state.layout, PaneLeaf)
        assert state.layout.pane.id == config.MAIN_PANE_ID
        assert state.layout.pane.tabs == ()
        assert state.buffers == {}
        assert state.focus == FocusTarget.EDITOR
        assert state.theme is TOKYO_NIGHT

    def test_every_action_kind_is_handled(self):
        """所有 action 类都在转换表中"""
        kinds = {
            cls.kind
            for cls in vars(a).values()
            if isinstance(cls, type) and issubclass(cls, a.Action) and cls is not a.Action
        }
        assert kinds <= handled_kinds()

    def test_unknown_action_returns_same_state(self):
        state = create_initial_state()
        assert reduce(state, object()) is state
        assert reduce(state, a.Action()) is state


class TestOpenFile:
    def test_open_new_file(self):
        """打开新文件：1 个 buffer、1 个 tab、语言识别、标签为文件名"""
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts"))

        assert len(state.buffers) == 1
        assert len(all_tabs(state)) == 1
        buffer = get_active_buffer(state)
        assert buffer.file_path == "/a.ts"
        assert buffer.language == "typescript"
        assert buffer.is_dirty is False
        assert get_active_tab(state).label == "a.ts"
        assert state.focus == FocusTarget.EDITOR

    def test_open_same_path_twice_reuses_buffer(self):
        """同一路径再次打开只激活已有 tab"""
        state = apply(create_initial_state(), a.OpenFile(path="/a.ts"), a.OpenFile(path="/b.ts"))
        first_tab = get_active_pane(state).tabs[0]

        state = reduce(state, a.OpenFile(path="/a.ts"))

        assert len(state.buffers) == 2
        assert len(all_tabs(state)) == 2
        assert get_active_tab(state).id == first_tab.id

    def test_reopen_does_not_touch_dirty_content(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts", content="x"))
        buffer = get_active_buffer(state)
        state = reduce(state, a.SetBufferContent(buffer_id=buffer.id, content="edited"))

        state = reduce(state, a.OpenFile(path="/a.ts", content="from disk"))

        assert state.buffers[buffer.id].content == "edited"
        assert state.buffers[buffer.id].is_dirty

    def test_reopen_active_file_is_noop(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts"))
        assert reduce(state, a.OpenFile(path="/a.ts")) is state

    def test_content_is_saved_baseline(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.md", content="# hi"))
        buffer = get_active_buffer(state)
        assert buffer.content == "# hi"
        assert buffer.saved_content == "# hi"
        assert buffer.language == "markdown"

    def test_unknown_extension_has_no_language(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/w/Makefile"))
        assert get_active_buffer(state).language is None

    def test_open_moves_focus_to_editor(self):
        state = apply(create_initial_state(), a.OpenFilePicker(), a.OpenFile(path="/a.ts"))
        assert state.focus == FocusTarget.EDITOR

    def test_new_file_is_untitled(self):
        state = apply(create_initial_state(), a.NewFile(), a.NewFile())
        assert len(state.buffers) == 2
        assert labels(state) == [config.UNTITLED_LABEL, config.UNTITLED_LABEL]
        buffer = get_active_buffer(state)
        assert buffer.is_untitled
        assert buffer.content == ""


class TestCloseTab:
    def test_close_only_tab_removes_buffer(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts"))
        tab = get_active_tab(state)

        state = reduce(state, a.CloseTab(tab_id=tab.id))

        assert state.buffers == {}
        assert get_active_pane(state).tabs == ()
        assert get_active_pane(state).active_tab_id is None

    def test_close_active_activates_next_neighbor(self):
        state = open_three()
        a_tab, b_tab, _ = get_active_pane(state).tabs
        state = reduce(state, a.SwitchTab(tab_id=b_tab.id))

        state = reduce(state, a.CloseTab(tab_id=b_tab.id))

        assert labels(state) == ["A.py", "C.py"]
        assert get_active_tab(state).label == "C.py"
        assert_tab_invariants(state)

    def test_close_last_active_activates_previous(self):
        state = open_three()
        c_tab = get_active_tab(state)

        state = reduce(state, a.CloseTab(tab_id=c_tab.id))

        assert get_active_tab(state).label == "B.py"
        assert_tab_invariants(state)

    def test_close_inactive_keeps_active(self):
        state = open_three()
        a_tab = get_active_pane(state).tabs[0]

        state = reduce(state, a.CloseTab(tab_id=a_tab.id))

        assert get_active_tab(state).label == "C.py"
        assert len(state.buffers) == 2

    def test_close_unknown_tab_is_noop(self):
        state = open_three()
        assert reduce(state, a.CloseTab(tab_id="tab-missing")) is state

    def test_close_drops_diagnostics_of_removed_buffer(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.py"))
        buffer = get_active_buffer(state)
        diagnostic = Diagnostic(
            start=CursorPosition(), end=CursorPosition(column=1), severity="error", message="boom"
        )
        state = reduce(state, a.SetDiagnostics(buffer_id=buffer.id, diagnostics=(diagnostic,)))
        assert state.diagnostics[buffer.id] == (diagnostic,)

        state = reduce(state, a.CloseTab(tab_id=get_active_tab(state).id))

        assert buffer.id not in state.diagnostics


class TestBufferEditing:
    def test_dirty_tracks_saved_baseline(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts", content="one"))
        buffer_id = get_active_buffer(state).id

        state = reduce(state, a.SetBufferContent(buffer_id=buffer_id, content="two"))
        assert state.buffers[buffer_id].is_dirty

        state = reduce(state, a.SetBufferContent(buffer_id=buffer_id, content="one"))
        assert not state.buffers[buffer_id].is_dirty

    def test_save_clears_dirty_and_moves_baseline(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts", content="one"))
        buffer_id = get_active_buffer(state).id
        state = apply(
            state,
            a.SetBufferContent(buffer_id=buffer_id, content="two"),
            a.SaveFile(buffer_id=buffer_id),
        )

        buffer = state.buffers[buffer_id]
        assert not buffer.is_dirty
        assert buffer.saved_content == "two"

        state = reduce(state, a.SetBufferContent(buffer_id=buffer_id, content="one"))
        assert state.buffers[buffer_id].is_dirty

    def test_save_baseline_is_written_content(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts", content="one"))
        buffer_id = get_active_buffer(state).id
        state = apply(
            state,
            a.SetBufferContent(buffer_id=buffer_id, content="three"),
            a.SaveFile(buffer_id=buffer_id, content="two"),
        )

        buffer = state.buffers[buffer_id]
        assert buffer.saved_content == "two"
        assert buffer.is_dirty

    def test_same_content_returns_same_state(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts", content="one"))
        buffer_id = get_active_buffer(state).id
        assert reduce(state, a.SetBufferContent(buffer_id=buffer_id, content="one")) is state

    def test_unknown_buffer_is_noop(self):
        state = create_initial_state()
        assert reduce(state, a.SetBufferContent(buffer_id="buf-x", content="y")) is state
        assert reduce(state, a.SaveFile(buffer_id="buf-x")) is state
        assert reduce(state, a.SetCursor(buffer_id="buf-x", position=CursorPosition())) is state
        assert reduce(state, a.SetDiagnostics(buffer_id="buf-x")) is state

    def test_set_cursor(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts", content="abc\ndef"))
        buffer_id = get_active_buffer(state).id
        position = CursorPosition(line=1, column=2, offset=6)

        state = reduce(state, a.SetCursor(buffer_id=buffer_id, position=position))

        assert state.buffers[buffer_id].cursor == position

    def test_set_buffer_path_relabels_tabs(self):
        state = reduce(create_initial_state(), a.NewFile())
        buffer_id = get_active_buffer(state).id

        state = reduce(state, a.SetBufferPath(buffer_id=buffer_id, path="/w/notes.md"))

        assert state.buffers[buffer_id].file_path == "/w/notes.md"
        assert state.buffers[buffer_id].language == "markdown"
        assert get_active_tab(state).label == "notes.md"


class TestTabNavigation:
    def test_prev_tab(self):
        """A,B,C 且 C 活动：PREV → B"""
        state = reduce(open_three(), a.PrevTab())
        assert get_active_tab(state).label == "B.py"

    def test_next_tab_wraps(self):
        state = reduce(open_three(), a.NextTab())
        assert get_active_tab(state).label == "A.py"

    def test_prev_tab_wraps(self):
        state = open_three()
        state = reduce(state, a.SwitchTab(tab_id=get_active_pane(state).tabs[0].id))
        state = reduce(state, a.PrevTab())
        assert get_active_tab(state).label == "C.py"

    @pytest.mark.parametrize("start", [0, 1, 2])
    def test_next_then_prev_round_trip(self, start):
        state = open_three()
        state = reduce(state, a.SwitchTab(tab_id=get_active_pane(state).tabs[start].id))
        before = get_active_tab(state).id

        state = apply(state, a.NextTab(), a.PrevTab())

        assert get_active_tab(state).id == before
        assert_tab_invariants(state)

    def test_navigation_without_tabs_is_noop(self):
        state = create_initial_state()
        assert reduce(state, a.NextTab()) is state
        assert reduce(state, a.PrevTab()) is state

    def test_switch_to_missing_tab_is_noop(self):
        state = open_three()
        assert reduce(state, a.SwitchTab(tab_id="tab-missing")) is state

    def test_switch_to_active_tab_returns_same_state(self):
        state = open_three()
        assert reduce(state, a.SwitchTab(tab_id=get_active_tab(state).id)) is state


class TestOverlays:
    @pytest.mark.parametrize(
        "open_action, close_action, focus, attr",
        [
            (a.OpenCommandLine(), a.CloseCommandLine(), FocusTarget.COMMAND_LINE, "command_line"),
            (a.OpenPalette(), a.ClosePalette(), FocusTarget.PALETTE, "palette"),
            (a.OpenFilePicker(), a.CloseFilePicker(), FocusTarget.FILE_PICKER, "file_picker"),
            (a.OpenThemePicker(), a.CloseThemePicker(), FocusTarget.THEME_PICKER, "theme_picker"),
        ],
    )
    def test_open_and_close(self, open_action, close_action, focus, attr):
        state = reduce(create_initial_state(), a.SetFocus(target=FocusTarget.EXPLORER))

        opened = reduce(state, open_action)
        assert getattr(opened, attr).is_open
        assert opened.focus == focus

        closed = reduce(opened, close_action)
        assert not getattr(closed, attr).is_open
        assert closed.focus == FocusTarget.EDITOR

    def test_command_line_value_reset_on_execute(self):
        state = apply(
            create_initial_state(),
            a.OpenCommandLine(),
            a.SetCommandLineValue(value="w"),
        )
        assert state.command_line.value == "w"

        state = reduce(state, a.ExecuteCommand(command="w"))

        assert not state.command_line.is_open
        assert state.command_line.value == ""
        assert state.focus == FocusTarget.EDITOR

    def test_palette_query_and_items(self):
        items = (PaletteItem(id="file.save", label="Save"),)
        state = apply(
            create_initial_state(),
            a.OpenPalette(),
            a.SetPaletteItems(items=items),
            a.SetPaletteQuery(query="sa"),
        )
        assert state.palette.items == items
        assert state.palette.query == "sa"

        state = reduce(state, a.ClosePalette())
        assert state.palette.items == ()
        assert state.palette.query == ""

    def test_file_picker_mode(self):
        state = reduce(create_initial_state(), a.OpenFilePicker(mode="project"))
        assert state.file_picker.mode == "project"

    def test_set_focus_same_target_returns_same_state(self):
        state = create_initial_state()
        assert reduce(state, a.SetFocus(target=FocusTarget.EDITOR)) is state


class TestTheme:
    def test_set_theme(self):
        state = reduce(create_initial_state(), a.SetTheme(theme_id="dracula"))
        assert state.theme is DRACULA

    def test_unknown_theme_is_noop(self):
        state = create_initial_state()
        assert reduce(state, a.SetTheme(theme_id="nope")) is state

    def test_toggle_cycles_and_wraps(self):
        state = reduce(create_initial_state(), a.SetTheme(theme_id="one-light"))
        assert state.theme is ONE_LIGHT
        state = reduce(state, a.ToggleTheme())
        assert state.theme is TOKYO_NIGHT


class TestTerminals:
    def test_open_terminal_activates_and_focuses(self):
        state = apply(create_initial_state(), a.SetWorkspace(path="/w"))
        first = a.OpenTerminal(pid=10)
        second = a.OpenTerminal(cwd="/tmp", title="build")
        state = apply(state, first, second)

        assert len(state.terminals) == 2
        assert state.terminals[first.terminal_id].cwd == "/w"
        assert state.terminals[first.terminal_id].pid == 10
        assert not state.terminals[first.terminal_id].is_active
        assert get_active_terminal(state).id == second.terminal_id
        assert get_active_terminal(state).title == "build"
        assert state.focus == FocusTarget.TERMINAL

    def test_close_active_terminal_activates_first_remaining(self):
        first, second, third = a.OpenTerminal(), a.OpenTerminal(), a.OpenTerminal()
        state = apply(create_initial_state(), first, second, third)

        state = reduce(state, a.CloseTerminal(terminal_id=third.terminal_id))

        assert get_active_terminal(state).id == first.terminal_id
        assert state.focus == FocusTarget.TERMINAL

    def test_close_last_terminal_returns_focus_to_editor(self):
        opened = a.OpenTerminal()
        state = apply(create_initial_state(), opened, a.CloseTerminal(terminal_id=opened.terminal_id))
        assert state.terminals == {}
        assert state.focus == FocusTarget.EDITOR

    def test_focus_terminal(self):
        first, second = a.OpenTerminal(), a.OpenTerminal()
        state = apply(
            create_initial_state(), first, second, a.SetFocus(target=FocusTarget.EDITOR)
        )

        state = reduce(state, a.FocusTerminal(terminal_id=first.terminal_id))

        assert get_active_terminal(state).id == first.terminal_id
        assert sum(1 for t in state.terminals.values() if t.is_active) == 1
        assert state.focus == FocusTarget.TERMINAL

    def test_terminal_exited_records_code(self):
        opened = a.OpenTerminal()
        state = apply(
            create_initial_state(),
            opened,
            a.TerminalExited(terminal_id=opened.terminal_id, exit_code=3),
        )
        assert state.terminals[opened.terminal_id].exit_code == 3
        assert state.terminals[opened.terminal_id].has_exited

    def test_unknown_terminal_is_noop(self):
        state = create_initial_state()
        assert reduce(state, a.CloseTerminal(terminal_id="term-x")) is state
        assert reduce(state, a.FocusTerminal(terminal_id="term-x")) is state
        assert reduce(state, a.TerminalExited(terminal_id="term-x", exit_code=0)) is state


def dir_node(path, children=(), expanded=False):
    name = path.rsplit("/", 1)[-1] or path
    return DirectoryTree(
        entry=FileEntry(name=name, path=path, is_directory=True),
        children=tuple(children),
        is_expanded=expanded,
    )


def file_node(path):
    return DirectoryTree(entry=FileEntry(name=path.rsplit("/", 1)[-1], path=path, is_directory=False))


class TestWorkspace:
    def make_state(self):
        tree = dir_node(
            "/w",
            [
                dir_node("/w/src", [file_node("/w/src/main.py")]),
                dir_node("/w/docs", [file_node("/w/docs/index.md")]),
                file_node("/w/README.md"),
            ],
            expanded=True,
        )
        return apply(create_initial_state(), a.SetWorkspace(path="/w"), a.SetDirectoryTree(tree=tree))

    def test_set_workspace_resets_tree(self):
        state = self.make_state()
        state = reduce(state, a.SetWorkspace(path="/other"))
        assert state.workspace.root_path == "/other"
        assert state.workspace.directory_tree is None

    def test_toggle_directory_shares_untouched_branches(self):
        state = self.make_state()
        before = state.workspace.directory_tree

        state = reduce(state, a.ToggleDirectory(path="/w/src"))

        after = state.workspace.directory_tree
        assert after is not before
        assert after.children[0].is_expanded
        assert after.children[1] is before.children[1]
        assert after.children[2] is before.children[2]

    def test_toggle_twice_restores_flag(self):
        state = apply(
            self.make_state(),
            a.ToggleDirectory(path="/w/src"),
            a.ToggleDirectory(path="/w/src"),
        )
        assert not state.workspace.directory_tree.children[0].is_expanded

    def test_toggle_unknown_path_returns_same_state(self):
        state = self.make_state()
        assert reduce(state, a.ToggleDirectory(path="/w/missing")) is state

    def test_toggle_without_tree_is_noop(self):
        state = create_initial_state()
        assert reduce(state, a.ToggleDirectory(path="/w")) is state

    def test_load_directory_children_expands(self):
        state = self.make_state()
        children = (file_node("/w/docs/guide.md"),)

        state = reduce(state, a.LoadDirectoryChildren(path="/w/docs", children=children))

        docs = state.workspace.directory_tree.children[1]
        assert docs.children == children
        assert docs.is_expanded

    def test_refresh_tree_is_noop(self):
        state = self.make_state()
        assert reduce(state, a.RefreshTree()) is state


class TestPanes:
    def test_split_copies_active_buffer(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts"))
        split = a.SplitPane(direction=PaneDirection.VERTICAL)

        state = reduce(state, split)

        assert isinstance(state.layout, PaneSplit)
        assert state.layout.direction == PaneDirection.VERTICAL
        assert state.layout.sizes == (50.0, 50.0)
        new_pane = pane_tree.find_pane(state.layout, split.pane_id)
        assert new_pane.active_tab.label == "a.ts"
        buffer_id = get_active_buffer(state).id
        assert buffer_ref_count(state, buffer_id) == 2
        assert len(state.buffers) == 1
        assert_tab_invariants(state)

    def test_split_empty_pane(self):
        split = a.SplitPane(direction=PaneDirection.HORIZONTAL)
        state = reduce(create_initial_state(), split)
        assert pane_tree.count_panes(state.layout) == 2
        assert pane_tree.find_pane(state.layout, split.pane_id).tabs == ()

    def test_buffer_survives_until_last_reference_closes(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts"))
        buffer_id = get_active_buffer(state).id
        split = a.SplitPane(direction=PaneDirection.VERTICAL)
        state = reduce(state, split)
        first_tab = get_active_tab(state)
        second_tab = pane_tree.find_pane(state.layout, split.pane_id).active_tab

        state = reduce(state, a.CloseTab(tab_id=first_tab.id))
        assert buffer_id in state.buffers

        state = reduce(state, a.CloseTab(tab_id=second_tab.id))
        assert buffer_id not in state.buffers

    def test_close_pane_collapses_split(self):
        split = a.SplitPane(direction=PaneDirection.VERTICAL)
        state = apply(create_initial_state(), split, a.ClosePane(pane_id=split.pane_id))

        assert isinstance(state.layout, PaneLeaf)
        assert state.layout.pane.id == config.MAIN_PANE_ID

    def test_close_pane_drops_orphaned_buffers(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/a.ts"))
        split = a.SplitPane(direction=PaneDirection.VERTICAL)
        state = apply(
            state,
            split,
            a.CloseTab(tab_id=get_active_tab(state).id),
        )
        assert len(state.buffers) == 1

        state = reduce(state, a.ClosePane(pane_id=split.pane_id))

        assert state.buffers == {}

    def test_close_last_pane_is_noop(self):
        state = create_initial_state()
        assert reduce(state, a.ClosePane(pane_id=config.MAIN_PANE_ID)) is state

    def test_close_unknown_pane_is_noop(self):
        state = create_initial_state()
        assert reduce(state, a.ClosePane(pane_id="pane-x")) is state

    def test_resize_pane_rebalances_siblings(self):
        split = a.SplitPane(direction=PaneDirection.HORIZONTAL)
        state = apply(create_initial_state(), split, a.ResizePane(pane_id=split.pane_id, size=30))

        assert state.layout.sizes == (70.0, 30.0)
        assert pane_tree.find_pane(state.layout, split.pane_id).size == 30

    @pytest.mark.parametrize("size", [0, 100, -5, 150])
    def test_resize_out_of_range_is_noop(self, size):
        split = a.SplitPane(direction=PaneDirection.HORIZONTAL)
        state = reduce(create_initial_state(), split)
        assert reduce(state, a.ResizePane(pane_id=split.pane_id, size=size)) is state

    def test_nested_split_keeps_first_leaf_active(self):
        first = a.SplitPane(direction=PaneDirection.VERTICAL)
        second = a.SplitPane(direction=PaneDirection.HORIZONTAL)
        state = apply(create_initial_state(), first, second)

        assert pane_tree.count_panes(state.layout) == 3
        assert get_active_pane(state).id == config.MAIN_PANE_ID


RANDOM_PATHS = ["/w/a.py", "/w/b.md", "/w/c.ts", "/w/d.json"]


def random_action(rng, state):
    """从 OPEN/NEW/CLOSE_TAB/NEXT/PREV/SPLIT/CLOSE_PANE 中随机挑一个"""
    kind = rng.choice(["open", "new", "close_tab", "next", "prev", "split", "close_pane"])
    if kind == "open":
        return a.OpenFile(path=rng.choice(RANDOM_PATHS), content="x")
    if kind == "new":
        return a.NewFile()
    if kind == "close_tab":
        tabs = all_tabs(state)
        return a.CloseTab(tab_id=rng.choice(tabs).id if tabs else "tab-missing")
    if kind == "next":
        return a.NextTab()
    if kind == "prev":
        return a.PrevTab()
    if kind == "split":
        return a.SplitPane(direction=rng.choice(list(PaneDirection)))
    panes = list(pane_tree.iter_panes(state.layout))
    return a.ClosePane(pane_id=rng.choice(panes).id)


class TestRandomSequences:
    """随机 action 序列：每次转换后检查 tab 与 buffer 不变量"""

    @pytest.mark.parametrize("seed", range(20))
    def test_invariants_hold_after_every_dispatch(self, seed):
        rng = random.Random(seed)
        state = create_initial_state()

        for _ in range(200):
            state = reduce(state, random_action(rng, state))

            assert_tab_invariants(state)
            # buffer 与引用它的最后一个 tab 在同一次转换中移除
            assert set(state.buffers) == pane_tree.referenced_buffer_ids(state.layout)
