"""
Dependency injection for FastAPI routes.

Provides typed service dependencies that enable IDE navigation (Ctrl+Click).
"""

from typing import Annotated
from fastapi import Request, Depends

from worldline.services.project import ProjectService
from worldline.services.session import SessionRegistry


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.project_service


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
SessionRegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
