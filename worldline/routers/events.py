"""Attribute-change event endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from worldline.dependencies import ProjectServiceDep
from worldline.models import (
    AttributeEvent,
    AttributeEventCreate,
    AttributeEventUpdate,
    ConflictReport,
)

router = APIRouter()


@router.get("/{project_id}", response_model=list[AttributeEvent])
async def list_events(
    project_id: str,
    service: ProjectServiceDep,
    object_id: Optional[str] = Query(default=None),
    attribute_id: Optional[str] = Query(default=None),
    start: Optional[float] = Query(default=None),
    end: Optional[float] = Query(default=None),
):
    return await service.list_attribute_events(
        project_id,
        object_id=object_id,
        attribute_id=attribute_id,
        start=start,
        end=end,
    )


@router.post("/{project_id}", response_model=AttributeEvent, status_code=201)
async def create_event(project_id: str, body: AttributeEventCreate, service: ProjectServiceDep):
    try:
        event = await service.create_attribute_event(project_id, body)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not event:
        raise HTTPException(404, "Project not found")
    return event


@router.get("/{project_id}/conflicts", response_model=ConflictReport)
async def detect_conflicts(project_id: str, service: ProjectServiceDep):
    return await service.detect_conflicts(project_id)


@router.get("/{project_id}/{event_id}", response_model=AttributeEvent)
async def get_event(project_id: str, event_id: str, service: ProjectServiceDep):
    event = await service.get_attribute_event(project_id, event_id)
    if not event:
        raise HTTPException(404, "Event not found")
    return event


@router.put("/{project_id}/{event_id}", response_model=AttributeEvent)
async def update_event(
    project_id: str,
    event_id: str,
    body: AttributeEventUpdate,
    service: ProjectServiceDep,
):
    try:
        event = await service.update_attribute_event(project_id, event_id, body)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not event:
        raise HTTPException(404, "Event not found")
    return event


@router.delete("/{project_id}/{event_id}")
async def delete_event(project_id: str, event_id: str, service: ProjectServiceDep):
    deleted = await service.delete_attribute_event(project_id, event_id)
    if not deleted:
        raise HTTPException(404, "Event not found")
    return {"status": "deleted", "event_id": event_id}
