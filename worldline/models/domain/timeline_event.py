"""Timeline event (narrative interval) domain models."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from worldline.errors import InvalidIntervalError


def ensure_interval(start: float, end: Optional[float], event_id: Optional[str] = None) -> None:
    """
    Reject an interval whose end precedes its start.

    :raises InvalidIntervalError: If ``end < start``
    """
    if end is not None and end < start:
        raise InvalidIntervalError(start, end, event_id)


class Interval(BaseModel):
    """Half-open time span used for track assignment. A missing end means zero width."""
    model_config = ConfigDict(frozen=True)

    id: str
    start: float = Field(allow_inf_nan=False)
    end: Optional[float] = Field(default=None, allow_inf_nan=False)

    @model_validator(mode="after")
    def end_not_before_start(self):
        ensure_interval(self.start, self.end, self.id)
        return self

    @property
    def stop(self) -> float:
        return self.start if self.end is None else self.end

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.stop and self.stop > other.start


class TimelineEventCreate(BaseModel):
    """Payload for creating a timeline event."""
    title: str = Field(min_length=1)
    start_time: float = Field(allow_inf_nan=False)
    end_time: Optional[float] = Field(
        default=None,
        allow_inf_nan=False,
        description="Omit for an instantaneous event.",
    )
    category: str = "default"
    participants: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    location: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def end_not_before_start(self):
        ensure_interval(self.start_time, self.end_time)
        return self


class TimelineEventUpdate(BaseModel):
    """Payload for editing a timeline event. All fields optional."""
    title: Optional[str] = None
    start_time: Optional[float] = Field(default=None, allow_inf_nan=False)
    end_time: Optional[float] = Field(default=None, allow_inf_nan=False)
    clear_end_time: bool = False
    category: Optional[str] = None
    participants: Optional[list[str]] = None
    description: Optional[str] = None
    location: Optional[str] = None
    tags: Optional[list[str]] = None


class TimelineEvent(BaseModel):
    """A narrative interval drawn on the timeline."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: Optional[str] = None
    title: str
    start_time: float = Field(allow_inf_nan=False)
    end_time: Optional[float] = Field(default=None, allow_inf_nan=False)
    category: str = "default"
    participants: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    location: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def end_not_before_start(self):
        ensure_interval(self.start_time, self.end_time, self.id)
        return self

    @property
    def duration(self) -> float:
        return 0.0 if self.end_time is None else self.end_time - self.start_time

    def interval(self) -> Interval:
        return Interval(id=self.id, start=self.start_time, end=self.end_time)
