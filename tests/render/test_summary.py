"""状态摘要渲染测试"""

import io

from rich.console import Console

from termide.domain.types import DirectoryTree, FileEntry, PaneDirection
from termide.render.summary import DIRTY_MARK, print_summary
from termide.state import actions as a
from termide.state.reducer import create_initial_state, reduce
from termide.state.selectors import get_active_buffer


def render(state, show_files=False):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    print_summary(state, console, show_files=show_files)
    return console.file.getvalue()


class TestRenderSummary:
    def test_empty_state(self):
        text = render(create_initial_state())
        assert "workspace -" in text
        assert "tokyo-night" in text
        assert "(no tabs)" in text

    def test_tabs_and_dirty_mark(self):
        state = reduce(create_initial_state(), a.OpenFile(path="/w/a.ts", content="x"))
        buffer = get_active_buffer(state)
        state = reduce(state, a.SetBufferContent(buffer_id=buffer.id, content="y"))

        text = render(state)

        assert "▶ a.ts" in text
        assert DIRTY_MARK in text
        assert "typescript" in text

    def test_split_and_overlays(self):
        state = reduce(create_initial_state(), a.SplitPane(direction=PaneDirection.VERTICAL))
        state = reduce(state, a.OpenPalette())

        text = render(state)

        assert "split vertical" in text
        assert "50%" in text
        assert "palette(0 items)" in text

    def test_terminals_table(self):
        opened = a.OpenTerminal(cwd="/w", pid=42)
        state = reduce(create_initial_state(), opened)
        state = reduce(state, a.TerminalExited(terminal_id=opened.terminal_id, exit_code=1))

        text = render(state)

        assert opened.terminal_id in text
        assert "42" in text
        assert "exited 1" in text

    def test_directory_tree_only_when_requested(self):
        tree = DirectoryTree(
            entry=FileEntry(name="w", path="/w", is_directory=True),
            children=(
                DirectoryTree(
                    entry=FileEntry(name="src", path="/w/src", is_directory=True),
                    children=(
                        DirectoryTree(
                            entry=FileEntry(name="hidden.py", path="/w/src/hidden.py", is_directory=False)
                        ),
                    ),
                ),
                DirectoryTree(entry=FileEntry(name="README.md", path="/w/README.md", is_directory=False)),
            ),
        )
        state = reduce(create_initial_state(), a.SetWorkspace(path="/w"))
        state = reduce(state, a.SetDirectoryTree(tree=tree))

        assert "README.md" not in render(state)
        text = render(state, show_files=True)
        assert "▸ src/" in text
        assert "README.md" in text
        assert "hidden.py" not in text
