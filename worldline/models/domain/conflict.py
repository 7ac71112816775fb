"""Conflict detection result models."""

from typing import Optional

from pydantic import BaseModel, Field

from worldline.models.domain.event import AttributeEvent
from worldline.models.enums import ConflictSeverity, ConflictType


class ConflictResult(BaseModel):
    """A logical inconsistency found in the attribute-change log."""
    id: str
    type: ConflictType
    severity: ConflictSeverity
    title: str
    description: str
    events: list[AttributeEvent] = Field(default_factory=list)
    object_id: str
    attribute_id: Optional[str] = None
    suggestions: list[str] = Field(default_factory=list)
    timestamp: float


class ConflictRuleInfo(BaseModel):
    id: str
    name: str
    description: str
    enabled: bool
    severity: ConflictSeverity


class ConflictStatistics(BaseModel):
    total: int = 0
    by_severity: dict[ConflictSeverity, int] = Field(default_factory=dict)
    by_type: dict[ConflictType, int] = Field(default_factory=dict)


class ConflictReport(BaseModel):
    conflicts: list[ConflictResult] = Field(default_factory=list)
    statistics: ConflictStatistics = Field(default_factory=ConflictStatistics)
