"""World object domain model."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4

from worldline.models.domain.attribute import Attribute, AttributeCreate


class WorldObjectCreate(BaseModel):
    """Payload for creating a world object, optionally with its attributes."""
    name: str = Field(min_length=1)
    category: str = "custom"
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    introduced_at: Optional[float] = Field(
        default=None,
        allow_inf_nan=False,
        description="Story time at which the object enters the world.",
    )
    attributes: list[AttributeCreate] = Field(default_factory=list)


class WorldObjectUpdate(BaseModel):
    """Payload for updating a world object. All fields optional."""
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    introduced_at: Optional[float] = Field(default=None, allow_inf_nan=False)


class WorldObject(BaseModel):
    """A person, place, project or other entity with time-varying attributes."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: str
    name: str
    category: str = "custom"
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    introduced_at: Optional[float] = None
    attributes: list[Attribute] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def attribute(self, attribute_id: str) -> Attribute | None:
        for attr in self.attributes:
            if attr.id == attribute_id:
                return attr
        return None

    def base_values(self) -> dict:
        """Declared values, i.e. the state at time minus infinity."""
        return {attr.id: attr.value for attr in self.attributes}
