"""Command-line parsing.

``" :w foo.txt "`` → ``ParsedCommand("file.save", ["foo.txt"])``

Input is trimmed, one leading ``:`` is stripped, the rest is split on
whitespace. The first word is looked up case-insensitively in ``ALIASES``;
there is no fuzzy or prefix matching.
"""

from dataclasses import dataclass, field

from .. import config
from ..errors import UnknownCommandError

ALIASES: dict[str, str] = {
    "save": "file.save",
    "w": "file.save",
    "write": "file.save",
    "open": "file.open",
    "e": "file.open",
    "edit": "file.open",
    "new": "file.new",
    "close": "tab.close",
    "q": "app.quit",
    "quit": "app.quit",
    "qa": "app.quitAll",
    "wq": "file.saveAndQuit",
    "tabnext": "tab.next",
    "tabn": "tab.next",
    "tabprev": "tab.prev",
    "tabp": "tab.prev",
    "theme": "theme.set",
    "colorscheme": "theme.set",
    "terminal": "terminal.open",
    "term": "terminal.open",
    "opencode": "opencode.open",
    "project": "project.open",
    "cd": "project.open",
}


@dataclass(frozen=True)
class ParsedCommand:
    command_id: str
    args: list[str] = field(default_factory=list)


def parse_command_line(text: str) -> ParsedCommand | None:
    """Parse one command-line submission.

    Args:
        text: Raw input, with or without the leading sentinel

    Returns:
        ParsedCommand, or None for blank input

    Raises:
        UnknownCommandError: The command word is not in the alias table
    """
    text = text.strip()
    if text.startswith(config.COMMAND_LINE_SENTINEL):
        text = text[len(config.COMMAND_LINE_SENTINEL) :]

    words = text.split()
    if not words:
        return None

    name, *args = words
    command_id = ALIASES.get(name.lower())
    if command_id is None:
        raise UnknownCommandError(name)
    return ParsedCommand(command_id=command_id, args=args)
