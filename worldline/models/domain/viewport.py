"""Viewport, drag and layout value models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from worldline.models.enums import DragPhase


class ViewportWindow(BaseModel):
    """
    Visible time window.

    Immutable: the mapper swaps whole windows so readers never observe a
    half-applied update. ``center_time`` is derived, never stored.
    """
    model_config = ConfigDict(frozen=True)

    start_time: float
    end_time: float

    @computed_field
    @property
    def center_time(self) -> float:
        return (self.start_time + self.end_time) / 2

    @property
    def span(self) -> float:
        return self.end_time - self.start_time

    def shifted(self, delta: float) -> "ViewportWindow":
        return ViewportWindow(start_time=self.start_time + delta, end_time=self.end_time + delta)


class ViewportArea(BaseModel):
    """Pixel region the window is drawn into."""
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    width: float = Field(gt=0)


class ViewportSnapshot(BaseModel):
    """Serializable view of a mapper for API responses."""
    start_time: float
    end_time: float
    center_time: float
    span: float
    area_x: float
    area_width: float
    min_span: float


class WindowUpdate(BaseModel):
    """Partial window update; see ViewportMapper.set_window for precedence."""
    start: Optional[float] = None
    end: Optional[float] = None
    center: Optional[float] = None


class ZoomRequest(BaseModel):
    pixel: float
    factor: float = Field(gt=0)


class PanRequest(BaseModel):
    pixel_delta: float


class ResizeRequest(BaseModel):
    area_x: float = 0.0
    area_width: float = Field(gt=0)


class WheelRequest(BaseModel):
    pixel: float
    delta_y: float


class DragBeginRequest(BaseModel):
    event_id: str
    pixel: float


class DragUpdateRequest(BaseModel):
    pixel: float


class DragResult(BaseModel):
    """Committed outcome of a drag. ``new_end`` is None for instantaneous events."""
    event_id: str
    new_start: float
    new_end: Optional[float] = None


class DragPreview(BaseModel):
    """Live candidate while a drag is in progress."""
    phase: DragPhase
    event_id: Optional[str] = None
    origin_pixel: Optional[float] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None


class TimeTick(BaseModel):
    time: float
    x: float
    label: str


class TrackLayout(BaseModel):
    """Track assignment plus per-track membership, in sorted order."""
    assignments: dict[str, int] = Field(default_factory=dict)
    tracks: list[list[str]] = Field(default_factory=list)

    @computed_field
    @property
    def track_count(self) -> int:
        # Renderers always draw at least one lane.
        return max(1, len(self.tracks))
