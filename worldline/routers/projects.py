"""Project management endpoints."""

from fastapi import APIRouter, HTTPException

from worldline.dependencies import ProjectServiceDep, SessionRegistryDep
from worldline.models import Project, ProjectCreate, ProjectUpdate

router = APIRouter()


@router.get("/", response_model=list[Project])
async def list_projects(service: ProjectServiceDep):
    return await service.list_projects()


@router.post("/", response_model=Project, status_code=201)
async def create_project(body: ProjectCreate, service: ProjectServiceDep):
    return await service.create_project(body)


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: str, service: ProjectServiceDep):
    project = await service.get_project(project_id)
    if not project:
        raise HTTPException(404, "Project not found")
    return project


@router.put("/{project_id}", response_model=Project)
async def update_project(project_id: str, body: ProjectUpdate, service: ProjectServiceDep):
    project = await service.update_project(project_id, body)
    if not project:
        raise HTTPException(404, "Project not found")
    return project


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    service: ProjectServiceDep,
    sessions: SessionRegistryDep,
):
    deleted = await service.delete_project(project_id)
    if not deleted:
        raise HTTPException(404, "Project not found")
    sessions.drop(project_id)
    return {"status": "deleted", "project_id": project_id}
