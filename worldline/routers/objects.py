"""World object, attribute and resolved-state endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from worldline.dependencies import ProjectServiceDep, SessionRegistryDep
from worldline.models import (
    Attribute,
    AttributeCreate,
    AttributeUpdate,
    ObjectExistence,
    ObjectState,
    WorldObject,
    WorldObjectCreate,
    WorldObjectUpdate,
)

router = APIRouter()


@router.get("/{project_id}", response_model=list[WorldObject])
async def list_objects(project_id: str, service: ProjectServiceDep):
    return await service.list_objects(project_id)


@router.post("/{project_id}", response_model=WorldObject, status_code=201)
async def create_object(project_id: str, body: WorldObjectCreate, service: ProjectServiceDep):
    try:
        world_object = await service.create_object(project_id, body)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not world_object:
        raise HTTPException(404, "Project not found")
    return world_object


@router.get("/{project_id}/states", response_model=dict[str, ObjectState])
async def get_object_states(
    project_id: str,
    service: ProjectServiceDep,
    t: float = Query(..., allow_inf_nan=False),
    ids: Optional[list[str]] = Query(default=None),
):
    return await service.get_object_states(project_id, t, ids)


@router.get("/{project_id}/{object_id}", response_model=WorldObject)
async def get_object(project_id: str, object_id: str, service: ProjectServiceDep):
    world_object = await service.get_object(project_id, object_id)
    if not world_object:
        raise HTTPException(404, "Object not found")
    return world_object


@router.put("/{project_id}/{object_id}", response_model=WorldObject)
async def update_object(
    project_id: str,
    object_id: str,
    body: WorldObjectUpdate,
    service: ProjectServiceDep,
):
    world_object = await service.update_object(project_id, object_id, body)
    if not world_object:
        raise HTTPException(404, "Object not found")
    return world_object


@router.delete("/{project_id}/{object_id}")
async def delete_object(
    project_id: str,
    object_id: str,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
    cascade: bool = Query(default=False),
):
    deleted = await service.remove_object(project_id, object_id, cascade=cascade)
    if not deleted:
        raise HTTPException(404, "Object not found")
    if project_id in sessions:
        sessions.get(project_id).log.remove_object(object_id, cascade=cascade)
    return {"status": "deleted", "object_id": object_id}


@router.post("/{project_id}/{object_id}/attributes", response_model=Attribute, status_code=201)
async def add_attribute(
    project_id: str,
    object_id: str,
    body: AttributeCreate,
    service: ProjectServiceDep,
):
    try:
        attribute = await service.add_attribute(project_id, object_id, body)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not attribute:
        raise HTTPException(404, "Object not found")
    return attribute


@router.put("/{project_id}/{object_id}/attributes/{attribute_id}", response_model=Attribute)
async def update_attribute(
    project_id: str,
    object_id: str,
    attribute_id: str,
    body: AttributeUpdate,
    service: ProjectServiceDep,
):
    try:
        attribute = await service.update_attribute(project_id, object_id, attribute_id, body)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not attribute:
        raise HTTPException(404, "Attribute not found")
    return attribute


@router.delete("/{project_id}/{object_id}/attributes/{attribute_id}")
async def delete_attribute(
    project_id: str,
    object_id: str,
    attribute_id: str,
    service: ProjectServiceDep,
):
    deleted = await service.delete_attribute(project_id, object_id, attribute_id)
    if not deleted:
        raise HTTPException(404, "Attribute not found")
    return {"status": "deleted", "attribute_id": attribute_id}


@router.get("/{project_id}/{object_id}/state", response_model=ObjectState)
async def get_object_state(
    project_id: str,
    object_id: str,
    service: ProjectServiceDep,
    t: float = Query(..., allow_inf_nan=False),
):
    state = await service.get_object_state(project_id, object_id, t)
    if not state:
        raise HTTPException(404, "Object not found")
    return state


@router.get("/{project_id}/{object_id}/history", response_model=list[ObjectState])
async def get_object_history(
    project_id: str,
    object_id: str,
    service: ProjectServiceDep,
    start: float = Query(..., allow_inf_nan=False),
    end: float = Query(..., allow_inf_nan=False),
    step: float = Query(..., gt=0, allow_inf_nan=False),
):
    try:
        history = await service.get_object_history(project_id, object_id, start, end, step)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if history is None:
        raise HTTPException(404, "Object not found")
    return history


@router.get("/{project_id}/{object_id}/exists", response_model=ObjectExistence)
async def object_exists(
    project_id: str,
    object_id: str,
    service: ProjectServiceDep,
    t: float = Query(..., allow_inf_nan=False),
):
    exists = await service.object_exists_at(project_id, object_id, t)
    if exists is None:
        raise HTTPException(404, "Object not found")
    return ObjectExistence(object_id=object_id, timestamp=t, exists=exists)


@router.get("/{project_id}/{object_id}/changes/count")
async def count_attribute_changes(
    project_id: str,
    object_id: str,
    service: ProjectServiceDep,
    attribute_id: str = Query(...),
    start: float = Query(default=float("-inf")),
    end: float = Query(default=float("inf")),
):
    count = await service.count_attribute_changes(project_id, object_id, attribute_id, start, end)
    if count is None:
        raise HTTPException(404, "Object not found")
    return {"object_id": object_id, "attribute_id": attribute_id, "count": count}
