"""Project domain model."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4


class ProjectCreate(BaseModel):
    """Payload for creating a project."""
    name: str = Field(min_length=1)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    """Payload for updating a project."""
    name: Optional[str] = None
    description: Optional[str] = None


class Project(BaseModel):
    """A single story world with its own objects and timeline."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
