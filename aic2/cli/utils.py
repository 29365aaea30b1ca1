"""CLI Utility Functions"""

from typing import AsyncIterator

from aic2.llm.models import DisplayItem
from aic2.output import bold, colorize_badge, dim, error, info, CROSS


async def collect_items(stream: AsyncIterator[DisplayItem]) -> list[DisplayItem]:
    """Drain an item stream produced by an adapter."""
    return [item async for item in stream]


def format_item(item: DisplayItem, number: int) -> str:
    """Format a single item: numbered badge line, then the indented body."""
    if item.is_error:
        return f"{error(CROSS)} {colorize_badge(item.name, is_error=True)}"

    parts = [f"{info(f'[{number}]')} {bold(colorize_badge(item.name))}"]

    body_lines = item.description.split('\n')
    # The commit value repeats the title on its first line
    if body_lines and body_lines[0].strip() == item.short:
        body_lines = body_lines[1:]
    body_lines = [line for line in body_lines if line.strip()]
    if body_lines:
        parts.append("")
        for line in body_lines:
            if line.strip().startswith('-'):
                line = line.replace('-', dim('-'), 1)
            parts.append(f"    {line}")

    return '\n'.join(parts)


def display_items(items: list[DisplayItem]) -> None:
    """Print every item, separating candidates with a dim rule."""
    print()
    number = 0
    for i, item in enumerate(items):
        if not item.is_error:
            number += 1
        print(format_item(item, number))
        if i < len(items) - 1:
            print()
            print(dim("    · · ·"))
            print()
    print()
