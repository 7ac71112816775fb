"""
Worldline models.

Usage:
    from worldline.models import WorldObject, Attribute, AttributeEvent, TimelineEvent
    from worldline.models import AttributeType, ConflictSeverity, normalize_type
    from worldline.models import ViewportWindow, DragResult, TrackLayout
"""

# --- Enums & utilities ---
from worldline.models.enums import (
    AttributeType,
    ConflictType,
    ConflictSeverity,
    DragPhase,
    normalize_type,
)

# --- Domain models ---
from worldline.models.domain import (
    Project, ProjectCreate, ProjectUpdate,
    Attribute, AttributeCreate, AttributeUpdate, AttributeValue,
    TextValue, NumberValue, BooleanValue, EnumValue, ListValue, DateValue,
    make_value, check_value,
    WorldObject, WorldObjectCreate, WorldObjectUpdate,
    AttributeEvent, AttributeEventCreate, AttributeEventUpdate, new_event_id,
    Interval, TimelineEvent, TimelineEventCreate, TimelineEventUpdate, ensure_interval,
    ObjectState, ObjectExistence,
    ViewportWindow, ViewportArea, ViewportSnapshot, WindowUpdate,
    ZoomRequest, PanRequest, ResizeRequest, WheelRequest,
    DragBeginRequest, DragUpdateRequest, DragResult, DragPreview,
    TimeTick, TrackLayout,
    ConflictResult, ConflictRuleInfo, ConflictStatistics, ConflictReport,
)

__all__ = [
    # Enums
    "AttributeType", "ConflictType", "ConflictSeverity", "DragPhase", "normalize_type",
    # Domain
    "Project", "ProjectCreate", "ProjectUpdate",
    "Attribute", "AttributeCreate", "AttributeUpdate", "AttributeValue",
    "TextValue", "NumberValue", "BooleanValue", "EnumValue", "ListValue", "DateValue",
    "make_value", "check_value",
    "WorldObject", "WorldObjectCreate", "WorldObjectUpdate",
    "AttributeEvent", "AttributeEventCreate", "AttributeEventUpdate", "new_event_id",
    "Interval", "TimelineEvent", "TimelineEventCreate", "TimelineEventUpdate", "ensure_interval",
    "ObjectState", "ObjectExistence",
    "ViewportWindow", "ViewportArea", "ViewportSnapshot", "WindowUpdate",
    "ZoomRequest", "PanRequest", "ResizeRequest", "WheelRequest",
    "DragBeginRequest", "DragUpdateRequest", "DragResult", "DragPreview",
    "TimeTick", "TrackLayout",
    "ConflictResult", "ConflictRuleInfo", "ConflictStatistics", "ConflictReport",
]
