"""Tests for the notification-state tracker."""

from news_curator.models import CuratedItem, HistoryRecord
from news_curator.tracker import NotificationTracker

from conftest import make_scored


def curated(n) -> CuratedItem:
    return CuratedItem(scored=make_scored(n), gloss=f"Gloss {n}")


class TestNotificationTracker:
    """Test delivery confirmation."""

    def test_marks_exactly_given_items(self, history):
        items = [curated(n) for n in range(3)]
        for item in items:
            history.record_seen(HistoryRecord.from_candidate(item.scored.candidate))

        changed = NotificationTracker(history).confirm_delivered(items[:2])

        assert changed == 2
        assert history.get_record(items[0].identifier).delivered is True
        assert history.get_record(items[1].identifier).delivered is True
        assert history.get_record(items[2].identifier).delivered is False

    def test_idempotent(self, history):
        item = curated(1)
        history.record_seen(HistoryRecord.from_candidate(item.scored.candidate))
        tracker = NotificationTracker(history)

        assert tracker.confirm_delivered([item]) == 1
        assert tracker.confirm_delivered([item]) == 0
        assert history.get_record(item.identifier).delivered is True

    def test_duplicates_and_empty(self, history):
        item = curated(1)
        history.record_seen(HistoryRecord.from_candidate(item.scored.candidate))
        tracker = NotificationTracker(history)

        assert tracker.confirm_delivered([]) == 0
        assert tracker.confirm_delivered([item, item]) == 1
