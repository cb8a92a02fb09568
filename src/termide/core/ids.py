"""Identifier allocation

All buffer/tab/pane/terminal identities come from one monotonic counter per
kind. State mutation is single-threaded (see ``state.store``), so plain
``itertools.count`` is enough to keep identities unique for the life of the
process.

Format: ``<kind>-<n>`` e.g. ``buffer-3``, ``tab-7``.
"""

import itertools
from collections import defaultdict

_counters: defaultdict[str, itertools.count] = defaultdict(lambda: itertools.count(1))


def next_id(kind: str) -> str:
    """Allocate the next identity for ``kind``.

    Args:
        kind: Identity namespace ("buffer", "tab", "pane", "terminal")

    Returns:
        Identifier like "buffer-1"
    """
    return f"{kind}-{next(_counters[kind])}"


def new_buffer_id() -> str:
    return next_id("buffer")


def new_tab_id() -> str:
    return next_id("tab")


def new_pane_id() -> str:
    return next_id("pane")


def new_terminal_id() -> str:
    return next_id("terminal")

