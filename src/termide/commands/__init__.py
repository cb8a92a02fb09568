"""Commands 模块

用户意图 → 命令 id → 外部操作 + dispatch：
- parser: 命令行别名解析
- registry: Command / CommandContext / CommandRegistry
- builtin: 内置命令
- keybindings: 按键解析
- palette: palette 条目与过滤
"""

from .builtin import BUILTIN_COMMANDS, register_builtin_commands
from .keybindings import DEFAULT_KEYBINDINGS, KeyEvent, Keybinding, KeyMap, parse_keybinding
from .palette import build_palette_items, execute_palette_selection, filter_palette_items
from .parser import ALIASES, ParsedCommand, parse_command_line
from .registry import Command, CommandContext, CommandRegistry

__all__ = [
    # Parser
    "ALIASES",
    "ParsedCommand",
    "parse_command_line",
    # Registry
    "Command",
    "CommandContext",
    "CommandRegistry",
    # Builtin
    "BUILTIN_COMMANDS",
    "register_builtin_commands",
    # Keybindings
    "DEFAULT_KEYBINDINGS",
    "KeyEvent",
    "Keybinding",
    "KeyMap",
    "parse_keybinding",
    # Palette
    "build_palette_items",
    "execute_palette_selection",
    "filter_palette_items",
]
