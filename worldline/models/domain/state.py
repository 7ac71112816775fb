"""Derived point-in-time projections. Never persisted."""

from typing import Optional

from pydantic import BaseModel, Field

from worldline.models.domain.attribute import AttributeValue


class ObjectState(BaseModel):
    """Resolved attribute values of one object at one story time."""
    object_id: str
    timestamp: float
    attribute_values: dict[str, Optional[AttributeValue]] = Field(default_factory=dict)

    def value_of(self, attribute_id: str):
        value = self.attribute_values.get(attribute_id)
        return value.plain() if value is not None else None


class ObjectExistence(BaseModel):
    object_id: str
    timestamp: float
    exists: bool
