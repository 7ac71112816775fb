"""
Temporal attribute-state resolver.

Answers "what was attribute A of object O worth at time T?" from an unordered
attribute-change log. Resolution starts from the object's declared values
(time minus infinity). For each attribute the change with the greatest
``timestamp <= T`` wins. Ties at one timestamp go to the lexicographically
greatest event id, never to insertion order. Changes after T are ignored.
"""

from collections import OrderedDict
from typing import Hashable, Iterable, Mapping, Optional, Union

from worldline.config import settings
from worldline.logging import get_logger
from worldline.models import AttributeEvent, ObjectState, WorldObject

logger = get_logger('services.temporal')

TERMINAL_VALUES = frozenset({"deleted", "dead"})

ObjectsArg = Union[Mapping[str, WorldObject], Iterable[WorldObject]]


def _index_objects(objects: ObjectsArg) -> Mapping[str, WorldObject]:
    if isinstance(objects, Mapping):
        return objects
    return {obj.id: obj for obj in objects}


def _winning_changes(
    object_id: str,
    timestamp: float,
    events: Iterable[AttributeEvent],
    attribute_ids: Optional[set[str]] = None,
) -> dict[str, AttributeEvent]:
    winners: dict[str, AttributeEvent] = {}
    for event in events:
        if event.object_id != object_id or event.timestamp > timestamp:
            continue
        if attribute_ids is not None and event.attribute_id not in attribute_ids:
            continue
        current = winners.get(event.attribute_id)
        if current is None or event.order_key() > current.order_key():
            winners[event.attribute_id] = event
    return winners


def resolve_state(
    world_object: WorldObject,
    timestamp: float,
    events: Iterable[AttributeEvent],
) -> ObjectState:
    """
    Resolve every declared attribute of ``world_object`` at ``timestamp``.

    Changes addressing attributes the object does not declare are skipped.
    """
    values = world_object.base_values()
    winners = _winning_changes(world_object.id, timestamp, events, set(values))
    for attribute_id, event in winners.items():
        values[attribute_id] = event.new_value
    return ObjectState(object_id=world_object.id, timestamp=timestamp, attribute_values=values)


def resolve_attribute_at(
    object_id: str,
    timestamp: float,
    objects: ObjectsArg,
    events: Iterable[AttributeEvent],
) -> ObjectState | None:
    """
    Point-in-time state of one object.

    :return: The resolved state, or None when ``object_id`` is unknown
    """
    world_object = _index_objects(objects).get(object_id)
    if world_object is None:
        return None
    return resolve_state(world_object, timestamp, events)


def last_event_for_attribute(
    object_id: str,
    attribute_id: str,
    timestamp: float,
    events: Iterable[AttributeEvent],
) -> AttributeEvent | None:
    """The change that determines the attribute's value at ``timestamp``, if any."""
    winners = _winning_changes(object_id, timestamp, events, {attribute_id})
    return winners.get(attribute_id)


class TemporalEngine:
    """
    Memoizing front for the resolver plus history and existence queries.

    Only lookups that carry a ``version`` are cached. The version is an opaque
    token the caller changes whenever the object or its changes are edited;
    the cache key is (object id, timestamp, version).
    """

    def __init__(self, cache_size: int | None = None):
        self.cache_size = cache_size if cache_size is not None else settings.RESOLVER_CACHE_SIZE
        self._state_cache: OrderedDict[tuple, ObjectState] = OrderedDict()

    def state_at(
        self,
        world_object: WorldObject,
        timestamp: float,
        events: Iterable[AttributeEvent],
        version: Optional[Hashable] = None,
    ) -> ObjectState:
        if version is None:
            return resolve_state(world_object, timestamp, events)
        cached = self.cached_state(world_object.id, timestamp, version)
        if cached is not None:
            return cached

        key = (world_object.id, timestamp, version)
        state = resolve_state(world_object, timestamp, events)
        if self.cache_size > 0:
            if len(self._state_cache) >= self.cache_size:
                self._state_cache.popitem(last=False)
            self._state_cache[key] = state
        return state

    def cached_state(self, object_id: str, timestamp: float, version: Hashable) -> ObjectState | None:
        return self._state_cache.get((object_id, timestamp, version))

    def states_at(
        self,
        object_ids: Iterable[str],
        timestamp: float,
        objects: ObjectsArg,
        events: Iterable[AttributeEvent],
    ) -> dict[str, ObjectState]:
        """Resolve several objects at once; unknown ids are left out."""
        index = _index_objects(objects)
        events = list(events)
        results: dict[str, ObjectState] = {}
        for object_id in object_ids:
            world_object = index.get(object_id)
            if world_object is None:
                logger.debug(f"Skipping unknown object {object_id} in batch resolution")
                continue
            results[object_id] = self.state_at(world_object, timestamp, events)
        return results

    def state_history(
        self,
        world_object: WorldObject,
        start: float,
        end: float,
        events: Iterable[AttributeEvent],
        sample_interval: float,
        max_samples: int = 10_000,
        version: Optional[Hashable] = None,
    ) -> list[ObjectState]:
        """
        States at every sample point, every change time inside the range, and ``end``.

        :raises ValueError: On an empty range, a non-positive interval or too many samples
        """
        if start > end:
            raise ValueError("start must not be after end")
        if sample_interval <= 0:
            raise ValueError("sample_interval must be positive")
        if (end - start) / sample_interval > max_samples:
            raise ValueError(f"history would exceed {max_samples} samples")

        own_events = [e for e in events if e.object_id == world_object.id]
        times = {e.timestamp for e in own_events if start <= e.timestamp <= end}
        step = 0
        while start + step * sample_interval <= end:
            times.add(start + step * sample_interval)
            step += 1
        times.add(end)

        return [self.state_at(world_object, t, own_events, version) for t in sorted(times)]

    def object_exists_at(
        self,
        world_object: WorldObject,
        timestamp: float,
        events: Iterable[AttributeEvent],
    ) -> bool:
        """False before the object is introduced and from its first terminal change on."""
        if world_object.introduced_at is not None and timestamp < world_object.introduced_at:
            return False
        for event in events:
            if event.object_id != world_object.id or event.timestamp > timestamp:
                continue
            value = event.new_value.plain() if event.new_value is not None else None
            if isinstance(value, str) and value in TERMINAL_VALUES:
                return False
        return True

    @staticmethod
    def attribute_change_count(
        object_id: str,
        attribute_id: str,
        start: float,
        end: float,
        events: Iterable[AttributeEvent],
    ) -> int:
        return sum(
            1 for e in events
            if e.object_id == object_id and e.attribute_id == attribute_id and start <= e.timestamp <= end
        )

    def clear_cache(self) -> None:
        self._state_cache.clear()

    def cache_stats(self) -> dict[str, int]:
        return {"state_cache_size": len(self._state_cache), "max_cache_size": self.cache_size}
