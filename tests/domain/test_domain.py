"""Domain 辅助函数测试：语言识别、主题、文本偏移"""

import pytest

from termide.domain.languages import basename, detect_language
from termide.domain.text import cursor_at, end_cursor, splice
from termide.domain.themes import THEMES, TOKYO_NIGHT, get_theme, next_theme
from termide.domain.types import CursorPosition, Selection


class TestDetectLanguage:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/a.ts", "typescript"),
            ("/a.tsx", "typescriptreact"),
            ("src/main.PY", "python"),
            ("README.md", "markdown"),
            ("conf.yml", "yaml"),
            ("run.zsh", "shellscript"),
        ],
    )
    def test_known_extensions(self, path, expected):
        assert detect_language(path) == expected

    @pytest.mark.parametrize("path", ["Makefile", "/w/archive.tar.xyz", "/w/.d/noext"])
    def test_unknown(self, path):
        assert detect_language(path) is None

    def test_basename(self):
        assert basename("/w/src/main.py") == "main.py"
        assert basename("/w/src/") == "src"
        assert basename("/") == "/"


class TestThemes:
    def test_lookup(self):
        assert get_theme("tokyo-night") is TOKYO_NIGHT
        assert get_theme("missing") is None

    def test_next_theme_cycles_through_all(self):
        theme = TOKYO_NIGHT
        seen = []
        for _ in THEMES:
            seen.append(theme.id)
            theme = next_theme(theme)
        assert theme is TOKYO_NIGHT
        assert seen == [t.id for t in THEMES]

    def test_kind(self):
        assert TOKYO_NIGHT.is_dark
        assert not get_theme("one-light").is_dark


class TestText:
    def test_cursor_at(self):
        assert cursor_at("ab\ncd", 4) == CursorPosition(line=1, column=1, offset=4)
        assert cursor_at("ab\ncd", 0) == CursorPosition()

    def test_cursor_at_clamps(self):
        assert cursor_at("abc", 10).offset == 3
        assert cursor_at("abc", -1).offset == 0

    def test_end_cursor(self):
        assert end_cursor("x\ny\n") == CursorPosition(line=2, column=0, offset=4)

    def test_splice(self):
        assert splice("hello world", 6, 11, "there") == "hello there"
        assert splice("abc", 1, 1, "X") == "aXbc"

    def test_selection_bounds(self):
        selection = Selection(anchor=CursorPosition(offset=5), focus=CursorPosition(offset=2))
        assert (selection.start, selection.end) == (2, 5)
