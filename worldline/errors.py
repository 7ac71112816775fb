"""Domain error types raised at construction and edit boundaries."""


class WorldlineError(Exception):
    """Base class for timeline domain errors."""


class InvalidIntervalError(WorldlineError, ValueError):
    """A timeline event whose end_time precedes its start_time."""

    def __init__(self, start: float, end: float, event_id: str | None = None):
        self.start = start
        self.end = end
        self.event_id = event_id
        label = f" {event_id}" if event_id else ""
        super().__init__(f"Timeline event{label} ends before it starts ({end} < {start})")


class InvalidAttributeValueError(WorldlineError, ValueError):
    """A value that does not fit its attribute's declared type."""
