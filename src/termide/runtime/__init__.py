"""Runtime module - Bootstrap, terminal sessions and lifecycle management"""

from .bootstrap import Application, bootstrap
from .terminals import TerminalSessions

__all__ = [
    "bootstrap",
    "Application",
    "TerminalSessions",
]
