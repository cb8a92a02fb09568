"""Built-in color themes

Themes are static value objects selected by id; nothing mutates them.
"""

from dataclasses import dataclass
from enum import Enum


class ThemeKind(Enum):
    DARK = "dark"
    LIGHT = "light"


@dataclass(frozen=True)
class ThemeColors:
    """Fixed palette every theme provides."""

    background: str
    foreground: str
    primary: str
    secondary: str
    accent: str
    error: str
    warning: str
    success: str
    info: str
    border: str
    selection: str
    line_highlight: str
    comment: str
    keyword: str
    string: str
    number: str
    function: str
    variable: str
    type: str
    operator: str


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    kind: ThemeKind
    colors: ThemeColors

    @property
    def is_dark(self) -> bool:
        return self.kind == ThemeKind.DARK


TOKYO_NIGHT = Theme(
    id="tokyo-night",
    name="Tokyo Night",
    kind=ThemeKind.DARK,
    colors=ThemeColors(
        background="#1a1b26",
        foreground="#c0caf5",
        primary="#7aa2f7",
        secondary="#bb9af7",
        accent="#7dcfff",
        error="#f7768e",
        warning="#e0af68",
        success="#9ece6a",
        info="#7dcfff",
        border="#3b4261",
        selection="#33467c",
        line_highlight="#292e42",
        comment="#565f89",
        keyword="#bb9af7",
        string="#9ece6a",
        number="#ff9e64",
        function="#7aa2f7",
        variable="#c0caf5",
        type="#2ac3de",
        operator="#89ddff",
    ),
)

CATPPUCCIN_MOCHA = Theme(
    id="catppuccin-mocha",
    name="Catppuccin Mocha",
    kind=ThemeKind.DARK,
    colors=ThemeColors(
        background="#1e1e2e",
        foreground="#cdd6f4",
        primary="#89b4fa",
        secondary="#cba6f7",
        accent="#94e2d5",
        error="#f38ba8",
        warning="#fab387",
        success="#a6e3a1",
        info="#89dceb",
        border="#45475a",
        selection="#45475a",
        line_highlight="#313244",
        comment="#6c7086",
        keyword="#cba6f7",
        string="#a6e3a1",
        number="#fab387",
        function="#89b4fa",
        variable="#cdd6f4",
        type="#94e2d5",
        operator="#89dceb",
    ),
)

DRACULA = Theme(
    id="dracula",
    name="Dracula",
    kind=ThemeKind.DARK,
    colors=ThemeColors(
        background="#282a36",
        foreground="#f8f8f2",
        primary="#bd93f9",
        secondary="#ff79c6",
        accent="#8be9fd",
        error="#ff5555",
        warning="#ffb86c",
        success="#50fa7b",
        info="#8be9fd",
        border="#44475a",
        selection="#44475a",
        line_highlight="#44475a",
        comment="#6272a4",
        keyword="#ff79c6",
        string="#f1fa8c",
        number="#bd93f9",
        function="#50fa7b",
        variable="#f8f8f2",
        type="#8be9fd",
        operator="#ff79c6",
    ),
)

ONE_LIGHT = Theme(
    id="one-light",
    name="One Light",
    kind=ThemeKind.LIGHT,
    colors=ThemeColors(
        background="#fafafa",
        foreground="#383a42",
        primary="#4078f2",
        secondary="#a626a4",
        accent="#0184bc",
        error="#e45649",
        warning="#c18401",
        success="#50a14f",
        info="#0184bc",
        border="#d3d3d3",
        selection="#e5e5e6",
        line_highlight="#f0f0f0",
        comment="#a0a1a7",
        keyword="#a626a4",
        string="#50a14f",
        number="#986801",
        function="#4078f2",
        variable="#383a42",
        type="#0184bc",
        operator="#383a42",
    ),
)

THEMES: tuple[Theme, ...] = (TOKYO_NIGHT, CATPPUCCIN_MOCHA, DRACULA, ONE_LIGHT)
DEFAULT_THEME = TOKYO_NIGHT


def get_theme(theme_id: str) -> Theme | None:
    """Look up a built-in theme by id."""
    for theme in THEMES:
        if theme.id == theme_id:
            return theme
    return None


def next_theme(current: Theme) -> Theme:
    """Theme after ``current`` in the built-in list, wrapping around."""
    ids = [theme.id for theme in THEMES]
    index = ids.index(current.id) if current.id in ids else -1
    return THEMES[(index + 1) % len(THEMES)]
