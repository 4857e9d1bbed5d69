"""Selection of the output batch from filtered items."""

from typing import List, Sequence, TypeVar

from ..logger import get_logger


T = TypeVar("T")


def select(items: Sequence[T], max_items: int) -> List[T]:
    """
    Keep the first max_items items.

    Items arrive sorted by relevance from the filter, so selection is a
    stable prefix and never re-sorts.

    Args:
        items: Filtered items, best first
        max_items: Output size limit; zero or negative selects nothing

    Returns:
        New list of at most max_items items in input order
    """
    if max_items <= 0:
        return []

    selected = list(items[:max_items])
    if len(items) > len(selected):
        get_logger().info(f"Selected {len(selected)}/{len(items)} items (limit: {max_items})")
    return selected
