"""Timeline API routes: interval events, track layout, viewport and drag interaction."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from worldline.dependencies import ProjectServiceDep, SessionRegistryDep
from worldline.logging import get_logger
from worldline.models import (
    DragBeginRequest,
    DragPhase,
    DragPreview,
    DragResult,
    DragUpdateRequest,
    PanRequest,
    ResizeRequest,
    TimeTick,
    TimelineEvent,
    TimelineEventCreate,
    TimelineEventUpdate,
    TrackLayout,
    ViewportSnapshot,
    WheelRequest,
    WindowUpdate,
    ZoomRequest,
)
from worldline.realtime import notify_timeline_event
from worldline.services.project import ProjectService
from worldline.services.session import SessionRegistry, TimelineSession
from worldline.services.tracks import layout_tracks

logger = get_logger('routers.timeline')

router = APIRouter()


async def _open_session(
    project_id: str,
    service: ProjectService,
    sessions: SessionRegistry,
) -> TimelineSession:
    if not await service.get_project(project_id):
        raise HTTPException(404, "Project not found")
    return sessions.get(project_id)


# --- timeline events ---

@router.get("/{project_id}/events", response_model=list[TimelineEvent])
async def list_timeline_events(
    project_id: str,
    service: ProjectServiceDep,
    start: Optional[float] = Query(default=None),
    end: Optional[float] = Query(default=None),
    object_id: Optional[str] = Query(default=None),
    descending: bool = Query(default=False),
):
    return await service.list_timeline_events(
        project_id,
        start=start,
        end=end,
        object_id=object_id,
        descending=descending,
    )


@router.post("/{project_id}/events", response_model=TimelineEvent, status_code=201)
async def create_timeline_event(
    project_id: str,
    body: TimelineEventCreate,
    service: ProjectServiceDep,
):
    try:
        event = await service.create_timeline_event(project_id, body)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not event:
        raise HTTPException(404, "Project not found")
    return event


@router.get("/{project_id}/events/{event_id}", response_model=TimelineEvent)
async def get_timeline_event(project_id: str, event_id: str, service: ProjectServiceDep):
    event = await service.get_timeline_event(project_id, event_id)
    if not event:
        raise HTTPException(404, "Timeline event not found")
    return event


@router.put("/{project_id}/events/{event_id}", response_model=TimelineEvent)
async def update_timeline_event(
    project_id: str,
    event_id: str,
    body: TimelineEventUpdate,
    service: ProjectServiceDep,
):
    try:
        event = await service.update_timeline_event(project_id, event_id, body)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not event:
        raise HTTPException(404, "Timeline event not found")
    await notify_timeline_event(project_id, event.model_dump(mode="json"))
    return event


@router.delete("/{project_id}/events/{event_id}")
async def delete_timeline_event(project_id: str, event_id: str, service: ProjectServiceDep):
    deleted = await service.delete_timeline_event(project_id, event_id)
    if not deleted:
        raise HTTPException(404, "Timeline event not found")
    return {"status": "deleted", "event_id": event_id}


@router.get("/{project_id}/layout", response_model=TrackLayout)
async def get_layout(
    project_id: str,
    service: ProjectServiceDep,
    start: Optional[float] = Query(default=None),
    end: Optional[float] = Query(default=None),
):
    events = await service.list_timeline_events(project_id, start=start, end=end)
    return layout_tracks(events)


# --- viewport ---

@router.get("/{project_id}/viewport", response_model=ViewportSnapshot)
async def get_viewport(project_id: str, service: ProjectServiceDep, sessions: SessionRegistryDep):
    session = await _open_session(project_id, service, sessions)
    return session.viewport.snapshot()


@router.put("/{project_id}/viewport/window", response_model=ViewportSnapshot)
async def set_viewport_window(
    project_id: str,
    body: WindowUpdate,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    viewport = (await _open_session(project_id, service, sessions)).viewport
    viewport.set_window(start=body.start, end=body.end, center=body.center)
    return viewport.snapshot()


@router.post("/{project_id}/viewport/zoom", response_model=ViewportSnapshot)
async def zoom_viewport(
    project_id: str,
    body: ZoomRequest,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    viewport = (await _open_session(project_id, service, sessions)).viewport
    viewport.zoom_at(body.pixel, body.factor)
    return viewport.snapshot()


@router.post("/{project_id}/viewport/pan", response_model=ViewportSnapshot)
async def pan_viewport(
    project_id: str,
    body: PanRequest,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    viewport = (await _open_session(project_id, service, sessions)).viewport
    viewport.pan_by(body.pixel_delta)
    return viewport.snapshot()


@router.post("/{project_id}/viewport/zoom-in", response_model=ViewportSnapshot)
async def zoom_in(
    project_id: str,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
    step: Optional[float] = Query(default=None, gt=1),
):
    viewport = (await _open_session(project_id, service, sessions)).viewport
    viewport.zoom_in(step)
    return viewport.snapshot()


@router.post("/{project_id}/viewport/zoom-out", response_model=ViewportSnapshot)
async def zoom_out(
    project_id: str,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
    step: Optional[float] = Query(default=None, gt=1),
):
    viewport = (await _open_session(project_id, service, sessions)).viewport
    viewport.zoom_out(step)
    return viewport.snapshot()


@router.post("/{project_id}/viewport/wheel", response_model=ViewportSnapshot)
async def wheel_viewport(
    project_id: str,
    body: WheelRequest,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    session = await _open_session(project_id, service, sessions)
    session.controller.wheel(body.pixel, body.delta_y)
    return session.viewport.snapshot()


@router.post("/{project_id}/viewport/fit", response_model=ViewportSnapshot)
async def fit_viewport(
    project_id: str,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
    padding: Optional[float] = Query(default=None, ge=0),
):
    session = await _open_session(project_id, service, sessions)
    log = await service.load_event_log(project_id, include_changes=False)
    session.viewport.fit_to(log.intervals(), padding)
    return session.viewport.snapshot()


@router.post("/{project_id}/viewport/reset", response_model=ViewportSnapshot)
async def reset_viewport(project_id: str, service: ProjectServiceDep, sessions: SessionRegistryDep):
    viewport = (await _open_session(project_id, service, sessions)).viewport
    viewport.reset()
    return viewport.snapshot()


@router.post("/{project_id}/viewport/resize", response_model=ViewportSnapshot)
async def resize_viewport(
    project_id: str,
    body: ResizeRequest,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    viewport = (await _open_session(project_id, service, sessions)).viewport
    viewport.resize(body.area_x, body.area_width)
    return viewport.snapshot()


@router.get("/{project_id}/viewport/ticks", response_model=list[TimeTick])
async def get_ticks(
    project_id: str,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
    count: Optional[int] = Query(default=None, gt=0),
):
    session = await _open_session(project_id, service, sessions)
    return session.viewport.ticks(target_count=count)


# --- drag ---

@router.post("/{project_id}/drag/begin", response_model=DragPreview)
async def begin_drag(
    project_id: str,
    body: DragBeginRequest,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    session = await _open_session(project_id, service, sessions)
    if session.controller.phase != DragPhase.IDLE:
        raise HTTPException(409, f"Interaction already in progress ({session.controller.phase.value})")

    session.replace_log(await service.load_event_log(project_id, include_changes=False))
    preview = session.controller.begin_drag(body.event_id, body.pixel)
    if not preview:
        raise HTTPException(404, "Timeline event not found")
    return preview


@router.post("/{project_id}/drag/update", response_model=DragPreview)
async def update_drag(
    project_id: str,
    body: DragUpdateRequest,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    session = await _open_session(project_id, service, sessions)
    preview = session.controller.update_drag(body.pixel)
    if not preview:
        raise HTTPException(409, "No drag in progress")
    return preview


@router.post("/{project_id}/drag/end", response_model=DragResult)
async def end_drag(
    project_id: str,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    session = await _open_session(project_id, service, sessions)
    result = session.controller.end_drag()
    if not result:
        raise HTTPException(409, "No drag in progress")

    event = await service.retime_timeline_event(project_id, result.event_id, result.new_start, result.new_end)
    if not event:
        # Deleted by another client while the drag was in flight.
        logger.warning(f"Dragged timeline event {result.event_id} no longer exists")
        raise HTTPException(404, "Timeline event not found")
    await notify_timeline_event(project_id, event.model_dump(mode="json"))
    return result


@router.post("/{project_id}/drag/cancel", response_model=DragPreview)
async def cancel_drag(project_id: str, service: ProjectServiceDep, sessions: SessionRegistryDep):
    controller = (await _open_session(project_id, service, sessions)).controller
    controller.cancel_drag()
    return controller.preview()
