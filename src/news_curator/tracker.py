"""Notification-state tracking: which curated items were actually delivered."""

from typing import Iterable

from .history import HistoryStore
from .models import CuratedItem
from .logger import get_logger


class NotificationTracker:
    """
    Marks items delivered in the history store.

    Call only after the notifier confirmed delivery, and only with the items
    that were in the delivered payload.
    """

    def __init__(self, history: HistoryStore):
        self.history = history
        self.logger = get_logger()

    def confirm_delivered(self, items: Iterable[CuratedItem]) -> int:
        """
        Record delivery of exactly the given items.

        Args:
            items: Items contained in the confirmed payload

        Returns:
            Number of records newly marked delivered
        """
        identifiers = list(dict.fromkeys(item.identifier for item in items))
        if not identifiers:
            return 0

        changed = self.history.mark_delivered(identifiers)
        self.logger.info(f"Marked {changed}/{len(identifiers)} items as delivered")
        return changed
