"""Domain models: the core data structures of the timeline."""

from worldline.models.domain.project import Project, ProjectCreate, ProjectUpdate
from worldline.models.domain.attribute import (
    Attribute,
    AttributeCreate,
    AttributeUpdate,
    AttributeValue,
    TextValue,
    NumberValue,
    BooleanValue,
    EnumValue,
    ListValue,
    DateValue,
    make_value,
    check_value,
)
from worldline.models.domain.world_object import WorldObject, WorldObjectCreate, WorldObjectUpdate
from worldline.models.domain.event import (
    AttributeEvent,
    AttributeEventCreate,
    AttributeEventUpdate,
    new_event_id,
)
from worldline.models.domain.timeline_event import (
    Interval,
    TimelineEvent,
    TimelineEventCreate,
    TimelineEventUpdate,
    ensure_interval,
)
from worldline.models.domain.state import ObjectState, ObjectExistence
from worldline.models.domain.viewport import (
    ViewportWindow,
    ViewportArea,
    ViewportSnapshot,
    WindowUpdate,
    ZoomRequest,
    PanRequest,
    ResizeRequest,
    WheelRequest,
    DragBeginRequest,
    DragUpdateRequest,
    DragResult,
    DragPreview,
    TimeTick,
    TrackLayout,
)
from worldline.models.domain.conflict import (
    ConflictResult,
    ConflictRuleInfo,
    ConflictStatistics,
    ConflictReport,
)

__all__ = [
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
