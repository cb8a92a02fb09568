"""State summary rendering module."""

from .summary import print_summary, render_summary

__all__ = [
    "render_summary",
    "print_summary",
]
