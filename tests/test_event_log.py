"""In-memory event log queries and edits."""

import pytest

from worldline.errors import InvalidIntervalError
from worldline.models import AttributeEvent, NumberValue, TimelineEvent
from worldline.services.event_log import EventLog


def change(event_id, t, object_id="hero", attribute_id="hp"):
    return AttributeEvent(id=event_id, timestamp=t, object_id=object_id,
                          attribute_id=attribute_id, new_value=NumberValue(value=t))


@pytest.fixture
def log():
    return EventLog(
        changes=[change("c3", 30), change("c1", 10), change("c2", 10, attribute_id="status"),
                 change("c4", 20, object_id="villain")],
        timeline=[
            TimelineEvent(id="war", title="War", start_time=0, end_time=100, participants=["hero", "villain"]),
            TimelineEvent(id="duel", title="Duel", start_time=40, end_time=45, participants=["hero"]),
            TimelineEvent(id="feast", title="Feast", start_time=120, participants=["villain"]),
        ],
    )


class TestChanges:

    def test_changes_are_totally_ordered(self, log):
        assert [c.id for c in log.changes] == ["c1", "c2", "c4", "c3"]

    def test_changes_for(self, log):
        assert [c.id for c in log.changes_for("hero")] == ["c1", "c2", "c3"]
        assert [c.id for c in log.changes_for("hero", "hp")] == ["c1", "c3"]

    def test_changes_in_range_is_inclusive(self, log):
        assert [c.id for c in log.changes_in_range(10, 20)] == ["c1", "c2", "c4"]

    def test_add_get_remove(self, log):
        log.add_change(change("c5", 5))
        assert log.get_change("c5").timestamp == 5
        assert log.remove_change("c5")
        assert not log.remove_change("c5")
        assert log.get_change("c5") is None
        assert len(log) == 7


class TestTimeline:

    def test_ordered_by_start(self, log):
        assert [e.id for e in log.timeline_events()] == ["war", "duel", "feast"]
        assert [e.id for e in log.timeline_events(descending=True)] == ["feast", "duel", "war"]

    def test_range_keeps_running_events(self, log):
        assert [e.id for e in log.timeline_events(start=50, end=110)] == ["war"]
        assert [e.id for e in log.timeline_events(start=101)] == ["feast"]

    def test_for_object(self, log):
        assert [e.id for e in log.timeline_events_for_object("hero")] == ["war", "duel"]
        assert [e.id for e in log.timeline_events_for_object("villain", start=101)] == ["feast"]

    def test_retime_keeps_identity_and_fields(self, log):
        updated = log.retime("duel", 60, 65)
        assert updated.id == "duel"
        assert updated.title == "Duel"
        assert updated.participants == ["hero"]
        assert (log.get_timeline_event("duel").start_time, log.get_timeline_event("duel").end_time) == (60, 65)

    def test_retime_unknown(self, log):
        assert log.retime("nope", 1, 2) is None

    def test_retime_rejects_reversed(self, log):
        with pytest.raises(InvalidIntervalError):
            log.retime("duel", 60, 50)
        assert log.get_timeline_event("duel").start_time == 40

    def test_intervals(self, log):
        intervals = log.intervals()
        assert [(iv.id, iv.start, iv.end) for iv in intervals] == [
            ("war", 0, 100), ("duel", 40, 45), ("feast", 120, None),
        ]


class TestRemoveObject:

    def test_without_cascade_drops_participant(self, log):
        log.remove_object("hero")
        assert log.changes_for("hero") == []
        assert log.get_timeline_event("duel").participants == []
        assert log.get_timeline_event("war").participants == ["villain"]

    def test_cascade_drops_orphaned_events(self, log):
        log.remove_object("hero", cascade=True)
        assert log.get_timeline_event("duel") is None
        assert log.get_timeline_event("war").participants == ["villain"]
        assert len(log.changes) == 1
