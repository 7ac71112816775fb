"""
Enum definitions for the Worldline API.

Object categories are free-form strings; only closed vocabularies live here.
"""
from enum import Enum


class AttributeType(str, Enum):
    """Declared type of an attribute; doubles as the value variant tag."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    LIST = "list"
    DATE = "date"


class ConflictType(str, Enum):
    LOGICAL_INCONSISTENCY = "logical_inconsistency"
    TEMPORAL_PARADOX = "temporal_paradox"
    STATE_VIOLATION = "state_violation"
    DEPENDENCY_VIOLATION = "dependency_violation"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"


class ConflictSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DragPhase(str, Enum):
    """Interaction controller state."""
    IDLE = "idle"
    DRAGGING = "dragging"
    PANNING = "panning"


def normalize_type(type_str: str) -> str:
    """
    Normalize a type or name string for consistency.

    - Lowercase
    - Strip whitespace
    - Replace spaces with underscores

    Examples:
        "Person" -> "person"
        "Hit Points" -> "hit_points"
        " status " -> "status"
    """
    return type_str.lower().strip().replace(" ", "_")
