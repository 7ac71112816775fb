"""Drag-to-retime, background pan and wheel zoom."""

import pytest

from worldline.models import DragPhase, DragResult, TimelineEvent
from worldline.services.event_log import EventLog
from worldline.services.interaction import InteractionController
from worldline.services.viewport import ViewportMapper


def make_log() -> EventLog:
    return EventLog(timeline=[
        TimelineEvent(id="siege", title="Siege", start_time=10, end_time=30, participants=["hero"]),
        TimelineEvent(id="coronation", title="Coronation", start_time=50),
    ])


def make_controller(start=0, end=100, **options):
    viewport = ViewportMapper(start=start, end=end, area_x=0, area_width=1000, min_span=1)
    options.setdefault("min_time", 0)
    options.setdefault("snap_to_integer", True)
    options.setdefault("auto_pan", False)
    return InteractionController(viewport, make_log(), **options)


class TestDrag:

    def test_drag_moves_event_and_keeps_duration(self):
        controller = make_controller()
        preview = controller.begin_drag("siege", 100)
        assert preview.phase == DragPhase.DRAGGING
        assert preview.start_time == 10

        preview = controller.update_drag(250)
        assert (preview.start_time, preview.end_time) == (25, 45)

        result = controller.end_drag()
        assert result == DragResult(event_id="siege", new_start=25, new_end=45)
        assert controller.phase == DragPhase.IDLE

        event = controller.log.get_timeline_event("siege")
        assert (event.start_time, event.end_time) == (25, 45)
        assert event.title == "Siege"
        assert event.participants == ["hero"]

    def test_grab_offset_prevents_jump(self):
        controller = make_controller()
        controller.begin_drag("siege", 150)
        preview = controller.update_drag(150)
        assert preview.start_time == 10
        preview = controller.update_drag(250)
        assert (preview.start_time, preview.end_time) == (20, 40)

    def test_snaps_to_integer(self):
        controller = make_controller()
        controller.begin_drag("siege", 100)
        assert controller.update_drag(253).start_time == 25
        assert controller.update_drag(256).start_time == 26

    def test_snapping_can_be_disabled(self):
        controller = make_controller(snap_to_integer=False)
        controller.begin_drag("siege", 100)
        assert controller.update_drag(253).start_time == pytest.approx(25.3)

    def test_clamped_to_min_time(self):
        controller = make_controller()
        controller.begin_drag("siege", 100)
        preview = controller.update_drag(-500)
        assert (preview.start_time, preview.end_time) == (0, 20)

    def test_instantaneous_event_stays_instantaneous(self):
        controller = make_controller()
        controller.begin_drag("coronation", 500)
        controller.update_drag(700)
        result = controller.end_drag()
        assert result == DragResult(event_id="coronation", new_start=70, new_end=None)

    def test_calls_without_drag_are_ignored(self):
        controller = make_controller()
        assert controller.update_drag(100) is None
        assert controller.end_drag() is None
        assert controller.phase == DragPhase.IDLE

    def test_unknown_event_is_ignored(self):
        controller = make_controller()
        assert controller.begin_drag("nope", 100) is None
        assert controller.phase == DragPhase.IDLE

    def test_second_begin_is_ignored(self):
        controller = make_controller()
        controller.begin_drag("siege", 100)
        assert controller.begin_drag("coronation", 500) is None
        assert controller.preview().event_id == "siege"

    def test_cancel_leaves_log_untouched(self):
        controller = make_controller()
        controller.begin_drag("siege", 100)
        controller.update_drag(400)
        controller.cancel_drag()
        assert controller.phase == DragPhase.IDLE
        assert controller.log.get_timeline_event("siege").start_time == 10
        assert controller.end_drag() is None

    def test_event_removed_mid_drag(self):
        controller = make_controller()
        controller.begin_drag("siege", 100)
        controller.update_drag(200)
        controller.log.remove_timeline_event("siege")
        assert controller.end_drag() is None
        assert controller.phase == DragPhase.IDLE


class TestAutoPan:

    def test_leaving_right_puts_start_at_leading_fraction(self):
        controller = make_controller(auto_pan=True)
        controller.begin_drag("siege", 100)
        preview = controller.update_drag(1500)
        assert preview.start_time == 150
        assert controller.viewport.time_to_pixel(150) == pytest.approx(200)

    def test_leaving_left_puts_end_at_trailing_fraction(self):
        controller = make_controller(start=100, end=200, auto_pan=True)
        controller.log.retime("siege", 110, 130)
        controller.begin_drag("siege", 100)
        preview = controller.update_drag(-400)
        assert (preview.start_time, preview.end_time) == (60, 80)
        assert controller.viewport.time_to_pixel(80) == pytest.approx(800)

    def test_visible_candidate_does_not_pan(self):
        controller = make_controller(auto_pan=True)
        controller.begin_drag("siege", 100)
        controller.update_drag(600)
        assert (controller.viewport.start, controller.viewport.end) == (0, 100)


class TestPanAndWheel:

    def test_pan_gesture_moves_content_with_pointer(self):
        controller = make_controller()
        assert controller.begin_pan(500)
        assert controller.phase == DragPhase.PANNING
        controller.update_pan(600)
        assert controller.viewport.start == pytest.approx(-10)
        assert controller.viewport.end == pytest.approx(90)
        controller.end_pan()
        assert controller.phase == DragPhase.IDLE

    def test_pan_blocked_while_dragging(self):
        controller = make_controller()
        controller.begin_drag("siege", 100)
        assert not controller.begin_pan(500)
        assert not controller.update_pan(600)

    def test_drag_blocked_while_panning(self):
        controller = make_controller()
        controller.begin_pan(500)
        assert controller.begin_drag("siege", 100) is None

    def test_wheel_up_zooms_in_at_pointer(self):
        controller = make_controller()
        assert controller.wheel(250, -1, step=2)
        assert controller.viewport.span == pytest.approx(50)
        assert controller.viewport.pixel_to_time(250) == pytest.approx(25)

    def test_wheel_down_zooms_out(self):
        controller = make_controller()
        controller.wheel(500, 3, step=2)
        assert controller.viewport.span == pytest.approx(200)

    def test_wheel_outside_area_ignored(self):
        controller = make_controller()
        assert not controller.wheel(1200, -1)
        assert not controller.wheel(500, 0)
        assert controller.viewport.span == 100
