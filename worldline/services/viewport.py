"""
Viewport mapping between story time and pixels.

``time_to_pixel(t) = area_x + (t - start) * area_width / (end - start)`` and
``pixel_to_time`` is its inverse. The window span never drops below the
configured minimum, so the inverse is always defined. Every mutation
computes a new immutable window and swaps it in with a single assignment.
"""

import math
from typing import Iterable, Optional

from worldline.config import settings
from worldline.logging import get_logger
from worldline.models import (
    Interval,
    TimeTick,
    ViewportArea,
    ViewportSnapshot,
    ViewportWindow,
)

logger = get_logger('services.viewport')


def _finite(*values: Optional[float]) -> bool:
    return all(v is None or math.isfinite(v) for v in values)


class ViewportMapper:
    """Visible time window plus the pixel area it is drawn into."""

    def __init__(
        self,
        start: float | None = None,
        end: float | None = None,
        area_x: float | None = None,
        area_width: float | None = None,
        min_span: float | None = None,
        max_span: float | None = None,
    ):
        self.min_span = min_span if min_span is not None else settings.VIEWPORT_MIN_SPAN
        self.max_span = max_span if max_span is not None else settings.VIEWPORT_MAX_SPAN
        if self.min_span <= 0:
            raise ValueError("min_span must be positive")
        self._defaults = (
            settings.VIEWPORT_DEFAULT_START if start is None else start,
            settings.VIEWPORT_DEFAULT_END if end is None else end,
        )
        self._area = ViewportArea(
            x=settings.VIEWPORT_AREA_X if area_x is None else area_x,
            width=settings.VIEWPORT_AREA_WIDTH if area_width is None else area_width,
        )
        window = self._settled(self._clamped(*self._defaults))
        if window is None:
            raise ValueError("default window must be finite")
        self._window = window

    # --- state ---

    @property
    def window(self) -> ViewportWindow:
        return self._window

    @property
    def area(self) -> ViewportArea:
        return self._area

    @property
    def start(self) -> float:
        return self._window.start_time

    @property
    def end(self) -> float:
        return self._window.end_time

    @property
    def center(self) -> float:
        return self._window.center_time

    @property
    def span(self) -> float:
        return self._window.span

    @property
    def scale(self) -> float:
        """Pixels per story-time unit."""
        return self._area.width / self._window.span

    def snapshot(self) -> ViewportSnapshot:
        return ViewportSnapshot(
            start_time=self.start,
            end_time=self.end,
            center_time=self.center,
            span=self.span,
            area_x=self._area.x,
            area_width=self._area.width,
            min_span=self.min_span,
        )

    def _clamped(self, start: float, end: float) -> ViewportWindow:
        span = end - start
        if span < self.min_span:
            logger.debug(f"Clamping degenerate window [{start}, {end}] to span {self.min_span}")
            span = self.min_span
        elif self.max_span is not None and span > self.max_span:
            span = self.max_span
        else:
            return ViewportWindow(start_time=start, end_time=end)
        middle = (start + end) / 2
        return ViewportWindow(start_time=middle - span / 2, end_time=middle + span / 2)

    @staticmethod
    def _settled(window: ViewportWindow) -> ViewportWindow | None:
        """
        Keep the span positive after float rounding.

        Far from zero, midpoint arithmetic can collapse both edges onto one
        float. The end is then moved to the next representable value.
        Windows whose edges overflowed are refused with None.
        """
        if not _finite(window.start_time, window.end_time):
            return None
        if window.end_time > window.start_time:
            return window
        logger.debug(f"Window at {window.start_time} collapsed by rounding; widening by one ulp")
        return ViewportWindow(
            start_time=window.start_time,
            end_time=math.nextafter(window.start_time, math.inf),
        )

    def _commit(self, window: ViewportWindow) -> ViewportWindow:
        settled = self._settled(window)
        if settled is None:
            logger.warning(f"Ignoring window update with non-finite edges [{window.start_time}, {window.end_time}]")
            return self._window
        self._window = settled
        return settled

    # --- transforms ---

    def time_to_pixel(self, t: float) -> float:
        window = self._window
        return self._area.x + (t - window.start_time) * (self._area.width / window.span)

    def pixel_to_time(self, p: float) -> float:
        window = self._window
        return window.start_time + (p - self._area.x) * (window.span / self._area.width)

    def is_visible(self, t: float) -> bool:
        return self.start <= t < self.end

    # --- mutations ---

    def set_window(
        self,
        start: float | None = None,
        end: float | None = None,
        center: float | None = None,
    ) -> ViewportWindow:
        """
        Apply a partial window update.

        A lone ``center`` recenters and keeps the span. ``center`` with one
        edge mirrors the other edge around it. Otherwise the given edges
        replace the current ones. Results narrower than the minimum span are
        widened about their midpoint; non-finite input leaves the window as is.
        """
        if not _finite(start, end, center):
            logger.warning(f"Ignoring non-finite window update start={start} end={end} center={center}")
            return self._window

        current = self._window
        if center is not None and start is None and end is None:
            half = current.span / 2
            new_start, new_end = center - half, center + half
        elif center is not None and start is not None and end is None:
            new_start, new_end = start, 2 * center - start
        elif center is not None and end is not None and start is None:
            new_start, new_end = 2 * center - end, end
        else:
            new_start = current.start_time if start is None else start
            new_end = current.end_time if end is None else end

        return self._commit(self._clamped(new_start, new_end))

    def zoom_at(self, pixel: float, factor: float) -> ViewportWindow:
        """
        Multiply the span by ``factor`` keeping the time under ``pixel`` fixed.

        ``factor < 1`` zooms in. Invalid factors are ignored.
        """
        if not _finite(pixel, factor) or factor <= 0:
            logger.debug(f"Ignoring zoom with pixel={pixel} factor={factor}")
            return self._window

        anchor = self.pixel_to_time(pixel)
        ratio = (pixel - self._area.x) / self._area.width
        new_span = self.span * factor
        if new_span < self.min_span:
            new_span = self.min_span
        elif self.max_span is not None and new_span > self.max_span:
            new_span = self.max_span

        new_start = anchor - ratio * new_span
        return self._commit(ViewportWindow(start_time=new_start, end_time=new_start + new_span))

    def pan_by(self, pixel_delta: float) -> ViewportWindow:
        """Shift the window by ``pixel_delta`` pixels worth of time at the current scale."""
        if not _finite(pixel_delta):
            return self._window
        delta = pixel_delta * (self.span / self._area.width)
        return self._commit(self._window.shifted(delta))

    def shift_time(self, delta: float) -> ViewportWindow:
        if not _finite(delta):
            return self._window
        return self._commit(self._window.shifted(delta))

    def zoom_in(self, step: float | None = None) -> ViewportWindow:
        step = step or settings.ZOOM_STEP
        return self._zoom_about_center(1 / step)

    def zoom_out(self, step: float | None = None) -> ViewportWindow:
        step = step or settings.ZOOM_STEP
        return self._zoom_about_center(step)

    def _zoom_about_center(self, factor: float) -> ViewportWindow:
        center_pixel = self._area.x + self._area.width / 2
        return self.zoom_at(center_pixel, factor)

    def center_on(self, t: float) -> ViewportWindow:
        return self.set_window(center=t)

    def fit_to(self, intervals: Iterable[Interval], padding_ratio: float | None = None) -> ViewportWindow:
        """Frame every interval with proportional padding; reset when there are none."""
        intervals = list(intervals)
        if not intervals:
            return self.reset()
        ratio = settings.FIT_PADDING_RATIO if padding_ratio is None else padding_ratio
        low = min(iv.start for iv in intervals)
        high = max(iv.stop for iv in intervals)
        padding = (high - low) * ratio
        return self.set_window(start=low - padding, end=high + padding)

    def reset(self) -> ViewportWindow:
        return self._commit(self._clamped(*self._defaults))

    def resize(self, area_x: float, area_width: float) -> ViewportArea:
        """Change the pixel area; the time window is untouched."""
        self._area = ViewportArea(x=area_x, width=area_width)
        return self._area

    # --- axis ---

    def ticks(
        self,
        target_count: int | None = None,
        step_multiple: float | None = None,
    ) -> list[TimeTick]:
        """Axis ticks at round multiples, positioned inside the pixel area."""
        target_count = target_count or settings.TICK_TARGET_COUNT
        step_multiple = step_multiple or settings.TICK_STEP_MULTIPLE
        step = math.ceil(self.span / target_count / step_multiple) * step_multiple
        if step <= 0:
            return []

        ticks: list[TimeTick] = []
        left, right = self._area.x, self._area.x + self._area.width
        t = math.ceil(self.start / step) * step
        while t <= self.end:
            x = self.time_to_pixel(t)
            if left <= x <= right:
                label = str(int(t)) if float(t).is_integer() else f"{t:g}"
                ticks.append(TimeTick(time=t, x=x, label=label))
            t += step
        return ticks
