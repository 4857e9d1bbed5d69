"""Delivery channel interface."""

from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Dict, List

from ..models import CuratedItem


class Notifier(ABC):
    """Delivers a curated batch to readers."""

    name = "notifier"

    def select_payload(self, items: List[CuratedItem]) -> List[CuratedItem]:
        """
        Items that will actually be contained in the delivered message.

        Only these may be marked delivered after a successful `deliver`.
        """
        return list(items)

    @abstractmethod
    async def deliver(self, items: List[CuratedItem]) -> bool:
        """
        Send every given item in one best-effort attempt.

        Returns:
            True only if the whole payload was accepted by the channel.
            An empty batch is a success with nothing sent.
        """
        pass


class NullNotifier(Notifier):
    """Channel "none": accepts every batch without sending anything."""

    name = "none"

    async def deliver(self, items: List[CuratedItem]) -> bool:
        return True


def group_by_category(items: List[CuratedItem]) -> Dict[str, List[CuratedItem]]:
    """Group items by category, keeping first-appearance order."""
    grouped: Dict[str, List[CuratedItem]] = OrderedDict()
    for item in items:
        grouped.setdefault(item.category or "tech", []).append(item)
    return grouped
