"""Clipboard adapter using OSC 52 escape sequences plus system clipboard tools."""

import asyncio
import base64
import shutil
import sys
from typing import TextIO

from ..telemetry import get_logger
from .base import ClipboardPort

logger = get_logger(__name__)

# (read command, write command) candidates, tried in order
_MAC_COMMANDS = [(["pbpaste"], ["pbcopy"])]
_LINUX_COMMANDS = [
    (["xclip", "-selection", "clipboard", "-o"], ["xclip", "-selection", "clipboard"]),
    (["xsel", "--clipboard", "--output"], ["xsel", "--clipboard", "--input"]),
]


def osc52_sequence(text: str) -> str:
    """OSC 52 "set clipboard" escape sequence for ``text``."""
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"\x1b]52;c;{payload}\x07"


class SystemClipboard(ClipboardPort):
    """Clipboard backed by the terminal (OSC 52) and pbcopy/xclip/xsel.

    Writes always emit OSC 52 to the output stream first, then try the
    platform tools. Reads only use the platform tools.
    """

    def __init__(
        self,
        platform: str | None = None,
        output: TextIO | None = None,
        use_osc52: bool = True,
    ):
        """Initialize SystemClipboard.

        Args:
            platform: sys.platform override (tests)
            output: Stream OSC 52 is written to, default stdout
            use_osc52: Whether to emit OSC 52 on write
        """
        self._platform = platform or sys.platform
        self._output = output
        self._use_osc52 = use_osc52

    def _candidates(self) -> list[tuple[list[str], list[str]]]:
        if self._platform == "darwin":
            commands = _MAC_COMMANDS
        elif self._platform.startswith("linux"):
            commands = _LINUX_COMMANDS
        else:
            commands = []
        return [pair for pair in commands if shutil.which(pair[0][0])]

    async def _run(self, cmd: list[str], stdin: bytes | None = None) -> bytes | None:
        """Run a clipboard tool.

        Returns:
            stdout on success, None on failure.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate(stdin)
        except OSError as e:
            logger.debug(f"[Clipboard] Command {cmd[0]} unavailable: {e}")
            return None

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip()
            logger.debug(f"[Clipboard] Command failed: {' '.join(cmd)}: {detail}")
            return None
        return stdout

    async def read_text(self) -> str:
        for read_cmd, _ in self._candidates():
            output = await self._run(read_cmd)
            if output is not None:
                return output.decode("utf-8", errors="replace")
        return ""

    async def write_text(self, text: str) -> None:
        if self._use_osc52:
            stream = self._output or sys.stdout
            stream.write(osc52_sequence(text))
            stream.flush()

        data = text.encode("utf-8")
        for _, write_cmd in self._candidates():
            if await self._run(write_cmd, stdin=data) is not None:
                return
