"""
Worldline services.

Usage:
    from worldline.services import resolve_attribute_at, assign_tracks
    from worldline.services import ViewportMapper, InteractionController, EventLog
"""

from worldline.services.conflicts import ConflictDetector, ConflictRule
from worldline.services.event_log import EventLog
from worldline.services.interaction import InteractionController
from worldline.services.project import ProjectService
from worldline.services.session import SessionRegistry, TimelineSession
from worldline.services.temporal import (
    TemporalEngine,
    last_event_for_attribute,
    resolve_attribute_at,
    resolve_state,
)
from worldline.services.tracks import assign_tracks, layout_tracks
from worldline.services.viewport import ViewportMapper

__all__ = [
    "ConflictDetector", "ConflictRule",
    "EventLog",
    "InteractionController",
    "ProjectService",
    "SessionRegistry", "TimelineSession",
    "TemporalEngine", "last_event_for_attribute", "resolve_attribute_at", "resolve_state",
    "assign_tracks", "layout_tracks",
    "ViewportMapper",
]
