"""Command palette items and filtering."""

from collections.abc import Iterable

from ..domain.types import PaletteItem
from ..state import actions
from .registry import CommandRegistry


def build_palette_items(registry: CommandRegistry) -> tuple[PaletteItem, ...]:
    """One palette item per registered command, in registration order."""
    return tuple(
        PaletteItem(
            id=cmd.id,
            label=cmd.label,
            description=cmd.description,
            category=cmd.category,
        )
        for cmd in registry.get_all()
    )


def filter_palette_items(items: Iterable[PaletteItem], query: str) -> list[PaletteItem]:
    """Case-insensitive substring match on label or id; empty query keeps all."""
    items = list(items)
    query = query.strip().lower()
    if not query:
        return items
    return [item for item in items if query in item.label.lower() or query in item.id.lower()]


async def execute_palette_selection(
    registry: CommandRegistry, items: Iterable[PaletteItem], query: str, index: int = 0
) -> str | None:
    """Close the palette and run the ``index``-th filtered item.

    Returns:
        Executed command id, or None when nothing matched
    """
    matches = filter_palette_items(items, query)
    context = registry.context
    if context is not None:
        context.store.dispatch(actions.ClosePalette())
    if not 0 <= index < len(matches):
        return None

    command_id = matches[index].id
    await registry.execute(command_id)
    return command_id
