"""In-memory event log: attribute changes plus timeline intervals for one project."""

from typing import Iterable, Optional

from worldline.logging import get_logger
from worldline.models import AttributeEvent, Interval, TimelineEvent, ensure_interval

logger = get_logger('services.event_log')


class EventLog:
    """
    Ordered collection of attribute-change events and timeline events.

    Pure data: insertion, removal, retiming and range queries. Iteration is
    always in a total order (time, then id) so callers never depend on
    insertion order.
    """

    def __init__(
        self,
        changes: Iterable[AttributeEvent] = (),
        timeline: Iterable[TimelineEvent] = (),
    ):
        self._changes: dict[str, AttributeEvent] = {}
        self._timeline: dict[str, TimelineEvent] = {}
        for change in changes:
            self.add_change(change)
        for event in timeline:
            self.add_timeline_event(event)

    # --- attribute changes ---

    def add_change(self, change: AttributeEvent) -> AttributeEvent:
        self._changes[change.id] = change
        return change

    def remove_change(self, change_id: str) -> bool:
        return self._changes.pop(change_id, None) is not None

    def get_change(self, change_id: str) -> AttributeEvent | None:
        return self._changes.get(change_id)

    @property
    def changes(self) -> list[AttributeEvent]:
        return sorted(self._changes.values(), key=lambda e: e.order_key())

    def changes_for(self, object_id: str, attribute_id: Optional[str] = None) -> list[AttributeEvent]:
        return [
            e for e in self.changes
            if e.object_id == object_id and (attribute_id is None or e.attribute_id == attribute_id)
        ]

    def changes_in_range(self, start: float, end: float) -> list[AttributeEvent]:
        """Changes with ``start <= timestamp <= end``."""
        return [e for e in self.changes if start <= e.timestamp <= end]

    # --- timeline events ---

    def add_timeline_event(self, event: TimelineEvent) -> TimelineEvent:
        ensure_interval(event.start_time, event.end_time, event.id)
        self._timeline[event.id] = event
        return event

    def remove_timeline_event(self, event_id: str) -> bool:
        return self._timeline.pop(event_id, None) is not None

    def get_timeline_event(self, event_id: str) -> TimelineEvent | None:
        return self._timeline.get(event_id)

    def retime(self, event_id: str, start: float, end: Optional[float]) -> TimelineEvent | None:
        """
        Rewrite an event's times, keeping its id.

        :return: The updated event, or None if the id is unknown
        :raises InvalidIntervalError: If ``end < start``
        """
        existing = self._timeline.get(event_id)
        if existing is None:
            logger.debug(f"Retime ignored for unknown timeline event {event_id}")
            return None
        ensure_interval(start, end, event_id)
        updated = existing.model_copy(update={"start_time": start, "end_time": end})
        self._timeline[event_id] = updated
        return updated

    def timeline_events(
        self,
        start: Optional[float] = None,
        end: Optional[float] = None,
        descending: bool = False,
    ) -> list[TimelineEvent]:
        """
        Timeline events ordered by (start_time, id).

        With ``start`` set, events that begin earlier but are still running at
        ``start`` are kept. With ``end`` set, events beginning after ``end``
        are dropped.
        """
        events = sorted(self._timeline.values(), key=lambda e: (e.start_time, e.id))
        if start is not None:
            events = [
                e for e in events
                if e.start_time >= start or (e.end_time is not None and e.end_time >= start)
            ]
        if end is not None:
            events = [e for e in events if e.start_time <= end]
        if descending:
            events.reverse()
        return events

    def timeline_events_for_object(self, object_id: str, **query) -> list[TimelineEvent]:
        return [e for e in self.timeline_events(**query) if object_id in e.participants]

    def intervals(self) -> list[Interval]:
        return [e.interval() for e in self.timeline_events()]

    # --- objects ---

    def remove_object(self, object_id: str, cascade: bool = False) -> None:
        """
        Drop an object's attribute changes.

        With ``cascade`` the timeline events whose sole participant is the
        object are dropped too; other events just lose it as a participant.
        """
        self._changes = {k: e for k, e in self._changes.items() if e.object_id != object_id}
        for event_id, event in list(self._timeline.items()):
            if object_id not in event.participants:
                continue
            remaining = [p for p in event.participants if p != object_id]
            if cascade and not remaining:
                del self._timeline[event_id]
            else:
                self._timeline[event_id] = event.model_copy(update={"participants": remaining})

    def __len__(self) -> int:
        return len(self._changes) + len(self._timeline)
