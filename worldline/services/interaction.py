"""
Pointer interaction: drag-to-retime, background pan and wheel zoom.

State machine::

    IDLE --begin_drag--> DRAGGING --end_drag/cancel_drag--> IDLE
    IDLE --begin_pan---> PANNING  --end_pan--------------> IDLE

Calls that do not fit the current state are ignored and return None.
"""

import math
from dataclasses import dataclass
from typing import Optional

from worldline.config import settings
from worldline.logging import get_logger
from worldline.models import DragPhase, DragPreview, DragResult
from worldline.services.event_log import EventLog
from worldline.services.viewport import ViewportMapper

logger = get_logger('services.interaction')


@dataclass
class _DragContext:
    event_id: str
    origin_pixel: float
    grab_offset: float
    original_start: float
    original_end: Optional[float]
    start: float
    end: Optional[float]

    @property
    def duration(self) -> float:
        return 0.0 if self.original_end is None else self.original_end - self.original_start


class InteractionController:
    """Turns pointer input into viewport changes and event retimes."""

    def __init__(
        self,
        viewport: ViewportMapper,
        log: EventLog,
        min_time: float | None = None,
        snap_to_integer: bool | None = None,
        auto_pan: bool | None = None,
        leading_fraction: float | None = None,
        trailing_fraction: float | None = None,
    ):
        self.viewport = viewport
        self.log = log
        self.min_time = settings.DRAG_MIN_TIME if min_time is None else min_time
        self.snap_to_integer = settings.DRAG_SNAP_TO_INTEGER if snap_to_integer is None else snap_to_integer
        self.auto_pan = settings.AUTO_PAN_ENABLED if auto_pan is None else auto_pan
        self.leading_fraction = (
            settings.AUTO_PAN_LEADING_FRACTION if leading_fraction is None else leading_fraction
        )
        self.trailing_fraction = (
            settings.AUTO_PAN_TRAILING_FRACTION if trailing_fraction is None else trailing_fraction
        )
        self._drag: Optional[_DragContext] = None
        self._pan_pixel: Optional[float] = None

    @property
    def phase(self) -> DragPhase:
        if self._drag is not None:
            return DragPhase.DRAGGING
        if self._pan_pixel is not None:
            return DragPhase.PANNING
        return DragPhase.IDLE

    def preview(self) -> DragPreview:
        drag = self._drag
        if drag is None:
            return DragPreview(phase=self.phase)
        return DragPreview(
            phase=DragPhase.DRAGGING,
            event_id=drag.event_id,
            origin_pixel=drag.origin_pixel,
            start_time=drag.start,
            end_time=drag.end,
        )

    # --- event drag ---

    def begin_drag(self, event_id: str, pixel: float) -> DragPreview | None:
        if self.phase != DragPhase.IDLE:
            logger.debug(f"begin_drag({event_id}) ignored while {self.phase.value}")
            return None
        if not math.isfinite(pixel):
            return None
        event = self.log.get_timeline_event(event_id)
        if event is None:
            logger.debug(f"begin_drag ignored for unknown timeline event {event_id}")
            return None

        self._drag = _DragContext(
            event_id=event_id,
            origin_pixel=pixel,
            grab_offset=pixel - self.viewport.time_to_pixel(event.start_time),
            original_start=event.start_time,
            original_end=event.end_time,
            start=event.start_time,
            end=event.end_time,
        )
        return self.preview()

    def update_drag(self, pixel: float) -> DragPreview | None:
        drag = self._drag
        if drag is None:
            logger.debug("update_drag ignored without an active drag")
            return None
        if not math.isfinite(pixel):
            return self.preview()

        start = self.viewport.pixel_to_time(pixel - drag.grab_offset)
        if self.snap_to_integer:
            start = math.floor(start + 0.5)
        start = max(self.min_time, start)
        drag.start = start
        drag.end = None if drag.original_end is None else start + drag.duration

        if self.auto_pan:
            self._keep_visible(drag)
        return self.preview()

    def end_drag(self) -> DragResult | None:
        """
        Commit the candidate times to the event log and return to IDLE.

        :return: The committed times, or None without an active drag
        """
        drag = self._drag
        if drag is None:
            logger.debug("end_drag ignored without an active drag")
            return None
        self._drag = None

        updated = self.log.retime(drag.event_id, drag.start, drag.end)
        if updated is None:
            return None
        logger.info(
            f"Retimed timeline event {drag.event_id}: "
            f"{drag.original_start} -> {drag.start}"
        )
        return DragResult(event_id=drag.event_id, new_start=drag.start, new_end=drag.end)

    def cancel_drag(self) -> None:
        self._drag = None

    def _keep_visible(self, drag: _DragContext) -> None:
        area = self.viewport.area
        left, right = area.x, area.x + area.width
        end = drag.start if drag.end is None else drag.end

        if self.viewport.time_to_pixel(drag.start) > right:
            target = left + area.width * self.leading_fraction
            self.viewport.shift_time(drag.start - self.viewport.pixel_to_time(target))
        elif self.viewport.time_to_pixel(end) < left:
            target = left + area.width * self.trailing_fraction
            self.viewport.shift_time(end - self.viewport.pixel_to_time(target))

    # --- background pan ---

    def begin_pan(self, pixel: float) -> bool:
        if self.phase != DragPhase.IDLE or not math.isfinite(pixel):
            return False
        self._pan_pixel = pixel
        return True

    def update_pan(self, pixel: float) -> bool:
        if self._pan_pixel is None or not math.isfinite(pixel):
            return False
        # Content follows the pointer, so the window moves the other way.
        self.viewport.pan_by(-(pixel - self._pan_pixel))
        self._pan_pixel = pixel
        return True

    def end_pan(self) -> None:
        self._pan_pixel = None

    # --- wheel ---

    def wheel(self, pixel: float, delta_y: float, step: float | None = None) -> bool:
        """Zoom anchored at the pointer; scrolling up zooms in."""
        area = self.viewport.area
        if delta_y == 0 or not (area.x <= pixel <= area.x + area.width):
            return False
        step = step or settings.WHEEL_ZOOM_STEP
        factor = 1 / step if delta_y < 0 else step
        self.viewport.zoom_at(pixel, factor)
        return True
