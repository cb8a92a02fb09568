"""Keybindings - 按键 → 命令 id

解析顺序：
1. Escape 关闭当前打开的 overlay（命令行 → palette → 文件选择器 → 主题选择器）
2. ":" 打开命令行（命令行/palette 已获得焦点时除外）
3. 用户快捷键（settings.keybindings）
4. 默认快捷键

组合键写法: "ctrl+shift+t"、"ctrl+tab"、"ctrl+`"
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ..domain.types import AppState, FocusTarget
from ..telemetry import get_logger
from .registry import CommandRegistry

logger = get_logger(__name__)

_MODIFIERS = {"ctrl", "shift", "alt", "meta"}


@dataclass(frozen=True)
class KeyEvent:
    """按键事件

    Attributes:
        name: 键名（"s", "tab", "escape", "`" ...）
        ctrl, shift, alt, meta: 修饰键
        sequence: 原始输入序列（可打印字符）
    """

    name: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False
    sequence: str | None = None


@dataclass(frozen=True)
class Keybinding:
    """快捷键定义

    Attributes:
        key: 键名（小写）
        command: 命令 id
        when: 只在该焦点下生效，None 表示任意焦点
    """

    key: str
    command: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    when: FocusTarget | None = None

    def matches(self, event: KeyEvent, focus: FocusTarget) -> bool:
        if self.when is not None and self.when != focus:
            return False
        return (
            event.name.lower() == self.key
            and event.ctrl == self.ctrl
            and event.shift == self.shift
            and (event.alt or event.meta) == self.alt
        )


def parse_keybinding(spec: str, command: str, when: str | None = None) -> Keybinding:
    """解析 "ctrl+shift+t" 形式的组合键

    Raises:
        ValueError: 缺少键名或 when 不是合法的焦点
    """
    parts = [part.strip().lower() for part in spec.split("+")]
    # "ctrl++" 表示加号键
    if spec.endswith("++"):
        parts = parts[:-2] + ["+"]
    modifiers = set(parts[:-1])
    key = parts[-1] if parts else ""
    if not key or key in _MODIFIERS:
        raise ValueError(f"Keybinding has no key: {spec!r}")
    unknown = modifiers - _MODIFIERS
    if unknown:
        raise ValueError(f"Unknown modifiers in {spec!r}: {sorted(unknown)}")

    return Keybinding(
        key=key,
        command=command,
        ctrl="ctrl" in modifiers,
        shift="shift" in modifiers,
        alt="alt" in modifiers or "meta" in modifiers,
        when=FocusTarget(when) if when else None,
    )


DEFAULT_KEYBINDINGS: tuple[Keybinding, ...] = tuple(
    parse_keybinding(spec, command)
    for spec, command in [
        # File
        ("ctrl+s", "file.save"),
        ("ctrl+n", "file.new"),
        ("ctrl+o", "filePicker.open"),
        ("ctrl+w", "tab.close"),
        # Navigation
        ("ctrl+p", "palette.open"),
        ("ctrl+tab", "tab.next"),
        ("ctrl+shift+tab", "tab.prev"),
        # Edit
        ("ctrl+c", "clipboard.copy"),
        ("ctrl+v", "clipboard.paste"),
        ("ctrl+x", "clipboard.cut"),
        ("ctrl+a", "edit.selectAll"),
        # Theme
        ("ctrl+shift+t", "theme.toggle"),
        ("ctrl+k", "themePicker.open"),
        # Focus
        ("ctrl+shift+e", "focus.explorer"),
        ("ctrl+`", "terminal.open"),
    ]
)


class KeyMap:
    """快捷键表：用户快捷键优先于默认快捷键

    使用示例:
        keymap = KeyMap.from_settings(settings.keybindings)
        command_id = keymap.resolve(KeyEvent("s", ctrl=True), store.get_state())
    """

    def __init__(self, overrides: Iterable[Keybinding] = ()):
        self._bindings: list[Keybinding] = [*overrides, *DEFAULT_KEYBINDINGS]

    @classmethod
    def from_settings(cls, overrides: Iterable) -> "KeyMap":
        """从 settings.keybindings（key/command/when）构建，非法条目跳过"""
        bindings = []
        for item in overrides:
            try:
                bindings.append(parse_keybinding(item.key, item.command, item.when))
            except ValueError as e:
                logger.warning(f"[Commands] Ignoring keybinding {item.key!r}: {e}")
        return cls(bindings)

    @property
    def bindings(self) -> list[Keybinding]:
        return list(self._bindings)

    def resolve(self, event: KeyEvent, state: AppState) -> str | None:
        """按键 → 命令 id，无匹配返回 None"""
        if event.name.lower() == "escape":
            return _overlay_close_command(state)

        if event.sequence == ":" and state.focus not in (
            FocusTarget.COMMAND_LINE,
            FocusTarget.PALETTE,
        ):
            return "commandLine.open"

        for binding in self._bindings:
            if binding.matches(event, state.focus):
                return binding.command
        return None

    def handle(self, event: KeyEvent, state: AppState, registry: CommandRegistry) -> str | None:
        """解析并在后台执行命令（不阻塞输入处理）

        Returns:
            命令 id，无匹配返回 None
        """
        command_id = self.resolve(event, state)
        if command_id is not None:
            registry.run(command_id)
        return command_id


def _overlay_close_command(state: AppState) -> str | None:
    if state.command_line.is_open:
        return "commandLine.close"
    if state.palette.is_open:
        return "palette.close"
    if state.file_picker.is_open:
        return "filePicker.close"
    if state.theme_picker.is_open:
        return "themePicker.close"
    return None
