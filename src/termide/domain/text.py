"""Offset <-> (line, column) conversion for cursor metadata.

Lines and columns are zero-based; ``offset`` indexes into the content string.
"""

from .types import CursorPosition


def cursor_at(content: str, offset: int) -> CursorPosition:
    """Build a consistent cursor for ``offset`` (clamped to the content)."""
    offset = max(0, min(offset, len(content)))
    before = content[:offset]
    line = before.count("\n")
    column = offset - (before.rfind("\n") + 1)
    return CursorPosition(line=line, column=column, offset=offset)


def end_cursor(content: str) -> CursorPosition:
    return cursor_at(content, len(content))


def splice(content: str, start: int, end: int, text: str) -> str:
    """Replace ``content[start:end]`` with ``text``."""
    return content[:start] + text + content[end:]
