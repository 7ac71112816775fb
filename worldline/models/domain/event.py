"""Attribute-change event domain model."""

import time
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from worldline.models.domain.attribute import AttributeValue


def new_event_id() -> str:
    """
    Event ids sort lexicographically in creation order.

    Same-timestamp ties resolve to the greatest id, so later inserts win.
    """
    return f"{time.time_ns():016x}-{uuid4().hex[:12]}"


class AttributeEventCreate(BaseModel):
    """Payload for recording an attribute change."""
    timestamp: float = Field(allow_inf_nan=False)
    object_id: str
    attribute_id: str
    new_value: Optional[AttributeValue] = None
    old_value: Optional[AttributeValue] = None
    description: Optional[str] = None


class AttributeEventUpdate(BaseModel):
    """Payload for editing an attribute change. The id never changes."""
    timestamp: Optional[float] = Field(default=None, allow_inf_nan=False)
    new_value: Optional[AttributeValue] = None
    clear_value: bool = False
    description: Optional[str] = None


class AttributeEvent(BaseModel):
    """A single write of ``attribute_id`` on ``object_id`` effective at ``timestamp``."""
    id: str = Field(default_factory=new_event_id)
    project_id: Optional[str] = None
    timestamp: float = Field(allow_inf_nan=False)
    object_id: str
    attribute_id: str
    new_value: Optional[AttributeValue] = None
    old_value: Optional[AttributeValue] = None
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def order_key(self) -> tuple[float, str]:
        """Total order used by the resolver: timestamp, then id."""
        return (self.timestamp, self.id)
