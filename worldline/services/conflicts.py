"""Rule-based consistency checks over the attribute-change log."""

from dataclasses import dataclass
from typing import Callable, Iterable

from worldline.config import settings
from worldline.logging import get_logger
from worldline.models import (
    AttributeEvent,
    ConflictResult,
    ConflictRuleInfo,
    ConflictSeverity,
    ConflictStatistics,
    ConflictType,
    WorldObject,
    normalize_type,
)

logger = get_logger('services.conflicts')

DEATH_VALUES = {"dead", "died"}
INVALID_TRANSITIONS = {
    "dead": {"healthy", "injured"},
    "deleted": {"active", "inactive"},
}
ATTRIBUTE_DEPENDENCIES = {
    "level": ("status", "alive", "A character must be alive to have a level"),
    "experience": ("status", "alive", "A dead character cannot gain experience"),
}

RuleCheck = Callable[[list[AttributeEvent], dict[str, WorldObject]], list[ConflictResult]]


@dataclass
class ConflictRule:
    id: str
    name: str
    description: str
    severity: ConflictSeverity
    check: RuleCheck
    enabled: bool = True

    def info(self) -> ConflictRuleInfo:
        return ConflictRuleInfo(
            id=self.id,
            name=self.name,
            description=self.description,
            enabled=self.enabled,
            severity=self.severity,
        )


def _plain(event: AttributeEvent):
    return event.new_value.plain() if event.new_value is not None else None


def _is_death(event: AttributeEvent) -> bool:
    value = _plain(event)
    return isinstance(value, str) and value in DEATH_VALUES


class ConflictDetector:
    """Runs enabled rules and returns de-duplicated conflicts, newest first."""

    def __init__(self, age_window: float | None = None):
        self.age_window = settings.CONFLICT_AGE_WINDOW if age_window is None else age_window
        self._rules: dict[str, ConflictRule] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self.add_rule(ConflictRule(
            "death-resurrection", "Activity after death",
            "An object keeps changing after it died.",
            ConflictSeverity.HIGH, self._check_death_resurrection,
        ))
        self.add_rule(ConflictRule(
            "age-decrease", "Age decrease",
            "Age drops by more than one within the configured window.",
            ConflictSeverity.MEDIUM, self._check_age_decrease,
        ))
        self.add_rule(ConflictRule(
            "invalid-state-transition", "Invalid state transition",
            "Status moves directly between incompatible states.",
            ConflictSeverity.MEDIUM, self._check_invalid_transition,
        ))
        self.add_rule(ConflictRule(
            "temporal-order", "Change before introduction",
            "A change happens before the object enters the world.",
            ConflictSeverity.LOW, self._check_temporal_order,
        ))
        self.add_rule(ConflictRule(
            "attribute-dependency", "Attribute dependency",
            "A dependent attribute changes while its prerequisite does not hold.",
            ConflictSeverity.MEDIUM, self._check_attribute_dependency,
        ))

    # --- registry ---

    def add_rule(self, rule: ConflictRule) -> None:
        self._rules[rule.id] = rule

    def remove_rule(self, rule_id: str) -> bool:
        return self._rules.pop(rule_id, None) is not None

    def toggle_rule(self, rule_id: str, enabled: bool) -> bool:
        rule = self._rules.get(rule_id)
        if rule is None:
            return False
        rule.enabled = enabled
        return True

    def rules(self) -> list[ConflictRuleInfo]:
        return [rule.info() for rule in self._rules.values()]

    # --- detection ---

    def detect(
        self,
        events: Iterable[AttributeEvent],
        objects: Iterable[WorldObject],
    ) -> list[ConflictResult]:
        ordered = sorted(events, key=lambda e: e.order_key())
        index = {obj.id: obj for obj in objects}

        conflicts: list[ConflictResult] = []
        for rule in self._rules.values():
            if not rule.enabled:
                continue
            try:
                conflicts.extend(rule.check(ordered, index))
            except Exception as exc:
                logger.warning(f"Conflict rule {rule.id} failed: {exc}")

        seen: set[tuple] = set()
        unique: list[ConflictResult] = []
        for conflict in conflicts:
            key = (conflict.type, conflict.object_id, conflict.attribute_id, conflict.timestamp)
            if key in seen:
                continue
            seen.add(key)
            unique.append(conflict)
        return sorted(unique, key=lambda c: c.timestamp, reverse=True)

    def check_event(
        self,
        new_event: AttributeEvent,
        existing: Iterable[AttributeEvent],
        objects: Iterable[WorldObject],
    ) -> list[ConflictResult]:
        """Conflicts the log would have if ``new_event`` were added."""
        return self.detect([*existing, new_event], objects)

    @staticmethod
    def statistics(conflicts: Iterable[ConflictResult]) -> ConflictStatistics:
        stats = ConflictStatistics(
            by_severity={severity: 0 for severity in ConflictSeverity},
            by_type={kind: 0 for kind in ConflictType},
        )
        for conflict in conflicts:
            stats.total += 1
            stats.by_severity[conflict.severity] += 1
            stats.by_type[conflict.type] += 1
        return stats

    # --- rules ---

    @staticmethod
    def _attribute_key(event: AttributeEvent, objects: dict[str, WorldObject]) -> str:
        world_object = objects.get(event.object_id)
        attribute = world_object.attribute(event.attribute_id) if world_object else None
        return normalize_type(attribute.name) if attribute else normalize_type(event.attribute_id)

    def _check_death_resurrection(self, events, objects):
        conflicts = []
        deaths: dict[str, AttributeEvent] = {}
        for event in events:
            if _is_death(event):
                deaths.setdefault(event.object_id, event)
                continue
            death = deaths.get(event.object_id)
            if death is not None and event.timestamp > death.timestamp:
                conflicts.append(ConflictResult(
                    id=f"death-resurrection-{event.id}",
                    type=ConflictType.LOGICAL_INCONSISTENCY,
                    severity=ConflictSeverity.HIGH,
                    title="Activity after death",
                    description=f"Object {event.object_id} changes after its death at {death.timestamp}",
                    events=[death, event],
                    object_id=event.object_id,
                    attribute_id=event.attribute_id,
                    suggestions=[
                        "Check that the death time is correct",
                        "Add a resurrection event",
                        "Move the later change before the death",
                    ],
                    timestamp=event.timestamp,
                ))
        return conflicts

    def _check_age_decrease(self, events, objects):
        conflicts = []
        last_age: dict[str, AttributeEvent] = {}
        for event in events:
            if self._attribute_key(event, objects) != "age" or event.new_value is None:
                continue
            if event.new_value.type != "number":
                continue
            previous = last_age.get(event.object_id)
            if previous is not None:
                drop = previous.new_value.value - event.new_value.value
                elapsed = event.timestamp - previous.timestamp
                if drop > 1 and elapsed < self.age_window:
                    conflicts.append(ConflictResult(
                        id=f"age-decrease-{event.id}",
                        type=ConflictType.LOGICAL_INCONSISTENCY,
                        severity=ConflictSeverity.MEDIUM,
                        title="Age decrease",
                        description=(
                            f"Age of {event.object_id} drops from "
                            f"{previous.new_value.value:g} to {event.new_value.value:g}"
                        ),
                        events=[previous, event],
                        object_id=event.object_id,
                        attribute_id=event.attribute_id,
                        suggestions=[
                            "Check the age values",
                            "Document the special circumstance",
                            "Verify the timestamps",
                        ],
                        timestamp=event.timestamp,
                    ))
            last_age[event.object_id] = event
        return conflicts

    def _check_invalid_transition(self, events, objects):
        conflicts = []
        last_status: dict[str, AttributeEvent] = {}
        for event in events:
            if self._attribute_key(event, objects) != "status" or not isinstance(_plain(event), str):
                continue
            previous = last_status.get(event.object_id)
            if previous is not None and _plain(event) in INVALID_TRANSITIONS.get(_plain(previous), ()):
                conflicts.append(ConflictResult(
                    id=f"invalid-transition-{event.id}",
                    type=ConflictType.STATE_VIOLATION,
                    severity=ConflictSeverity.MEDIUM,
                    title="Invalid state transition",
                    description=(
                        f"Object {event.object_id} moves from '{_plain(previous)}' "
                        f"directly to '{_plain(event)}'"
                    ),
                    events=[previous, event],
                    object_id=event.object_id,
                    attribute_id=event.attribute_id,
                    suggestions=[
                        "Add an intermediate state",
                        "Review the transition",
                        "Document the reason with an event",
                    ],
                    timestamp=event.timestamp,
                ))
            last_status[event.object_id] = event
        return conflicts

    def _check_temporal_order(self, events, objects):
        conflicts = []
        for event in events:
            world_object = objects.get(event.object_id)
            if world_object is None or world_object.introduced_at is None:
                continue
            if event.timestamp < world_object.introduced_at:
                conflicts.append(ConflictResult(
                    id=f"temporal-order-{event.id}",
                    type=ConflictType.TEMPORAL_PARADOX,
                    severity=ConflictSeverity.LOW,
                    title="Change before introduction",
                    description=(
                        f"Change at {event.timestamp} precedes the introduction of "
                        f"{world_object.name} at {world_object.introduced_at}"
                    ),
                    events=[event],
                    object_id=event.object_id,
                    attribute_id=event.attribute_id,
                    suggestions=[
                        "Check the introduction time",
                        "Fix the change timestamp",
                    ],
                    timestamp=event.timestamp,
                ))
        return conflicts

    def _check_attribute_dependency(self, events, objects):
        conflicts = []
        latest: dict[str, dict[str, object]] = {}
        for event in events:
            key = self._attribute_key(event, objects)
            values = latest.setdefault(event.object_id, {})
            values[key] = _plain(event)

            dependency = ATTRIBUTE_DEPENDENCIES.get(key)
            if dependency is None:
                continue
            required_key, required_value, message = dependency
            current = values.get(required_key)
            if current is not None and current != required_value:
                conflicts.append(ConflictResult(
                    id=f"dependency-{event.id}",
                    type=ConflictType.DEPENDENCY_VIOLATION,
                    severity=ConflictSeverity.MEDIUM,
                    title="Attribute dependency",
                    description=message,
                    events=[event],
                    object_id=event.object_id,
                    attribute_id=event.attribute_id,
                    suggestions=[
                        "Check the prerequisite",
                        "Reorder the changes",
                        "Change the value",
                    ],
                    timestamp=event.timestamp,
                ))
        return conflicts
