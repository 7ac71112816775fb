"""Project storage service: objects, attributes, attribute changes and timeline events."""

import json
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

import aiosqlite
from pydantic import TypeAdapter

from worldline.database.db import connect
from worldline.logging import get_logger
from worldline.models import (
    Attribute,
    AttributeCreate,
    AttributeEvent,
    AttributeEventCreate,
    AttributeEventUpdate,
    AttributeUpdate,
    AttributeValue,
    ConflictReport,
    ObjectState,
    Project,
    ProjectCreate,
    ProjectUpdate,
    TimelineEvent,
    TimelineEventCreate,
    TimelineEventUpdate,
    WorldObject,
    WorldObjectCreate,
    WorldObjectUpdate,
    check_value,
    ensure_interval,
    new_event_id,
    normalize_type,
)
from worldline.services.conflicts import ConflictDetector
from worldline.services.event_log import EventLog
from worldline.services.temporal import TemporalEngine

logger = get_logger('services.project')

_value_adapter = TypeAdapter(Optional[AttributeValue])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dump_value(value: Optional[AttributeValue]) -> str | None:
    return value.model_dump_json() if value is not None else None


def _load_value(raw: str | None) -> Optional[AttributeValue]:
    if not raw:
        return None
    return _value_adapter.validate_json(raw)


def _load_json(raw: str | None, fallback: Any) -> Any:
    if not raw:
        return fallback
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return fallback


def _row_to_project(row: dict) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        description=row.get("description"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_attribute(row: dict) -> Attribute:
    return Attribute(
        id=row["id"],
        object_id=row["object_id"],
        name=row["name"],
        type=row["type"],
        value=_load_value(row.get("value")),
        enum_values=_load_json(row.get("enum_values"), []),
        description=row.get("description"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_object(row: dict, attributes: list[Attribute]) -> WorldObject:
    return WorldObject(
        id=row["id"],
        project_id=row["project_id"],
        name=row["name"],
        category=row["category"],
        description=row.get("description"),
        tags=_load_json(row.get("tags"), []),
        introduced_at=row.get("introduced_at"),
        attributes=attributes,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_attribute_event(row: dict) -> AttributeEvent:
    return AttributeEvent(
        id=row["id"],
        project_id=row["project_id"],
        timestamp=row["timestamp"],
        object_id=row["object_id"],
        attribute_id=row["attribute_id"],
        new_value=_load_value(row.get("new_value")),
        old_value=_load_value(row.get("old_value")),
        description=row.get("description"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_timeline_event(row: dict) -> TimelineEvent:
    return TimelineEvent(
        id=row["id"],
        project_id=row["project_id"],
        title=row["title"],
        start_time=row["start_time"],
        end_time=row.get("end_time"),
        category=row["category"],
        participants=_load_json(row.get("participants"), []),
        description=row.get("description"),
        location=row.get("location"),
        tags=_load_json(row.get("tags"), []),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class ProjectService:
    """Storage-backed access to a project's timeline data plus resolver queries."""

    def __init__(
        self,
        db_path: str,
        engine: TemporalEngine | None = None,
        detector: ConflictDetector | None = None,
    ):
        self.db_path = db_path
        self.engine = engine or TemporalEngine()
        self.detector = detector or ConflictDetector()

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.db_path)

    async def _project_exists(self, db: aiosqlite.Connection, project_id: str) -> bool:
        cursor = await db.execute("SELECT 1 FROM projects WHERE id = ?", (project_id,))
        return await cursor.fetchone() is not None

    # --- projects ---

    async def list_projects(self) -> list[Project]:
        db = await self._get_db()
        try:
            cursor = await db.execute("SELECT * FROM projects ORDER BY created_at DESC")
            rows = await cursor.fetchall()
            return [_row_to_project(dict(r)) for r in rows]
        finally:
            await db.close()

    async def get_project(self, project_id: str) -> Project | None:
        db = await self._get_db()
        try:
            cursor = await db.execute("SELECT * FROM projects WHERE id = ?", (project_id,))
            row = await cursor.fetchone()
            return _row_to_project(dict(row)) if row else None
        finally:
            await db.close()

    async def create_project(self, data: ProjectCreate) -> Project:
        now = _now()
        project = Project(name=data.name, description=data.description, created_at=now, updated_at=now)
        db = await self._get_db()
        try:
            await db.execute(
                "INSERT INTO projects (id, name, description, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (project.id, project.name, project.description, now, now),
            )
            await db.commit()
        finally:
            await db.close()
        logger.info(f"Created project: {project.name} ({project.id[:8]})")
        return project

    async def update_project(self, project_id: str, data: ProjectUpdate) -> Project | None:
        existing = await self.get_project(project_id)
        if not existing:
            return None

        fields: dict[str, Any] = {}
        if data.name is not None:
            fields["name"] = data.name
        if data.description is not None:
            fields["description"] = data.description
        if not fields:
            return existing

        fields["updated_at"] = _now()
        set_clause = ", ".join(f"{key} = ?" for key in fields)
        db = await self._get_db()
        try:
            await db.execute(
                f"UPDATE projects SET {set_clause} WHERE id = ?",
                [*fields.values(), project_id],
            )
            await db.commit()
        finally:
            await db.close()
        return await self.get_project(project_id)

    async def delete_project(self, project_id: str) -> bool:
        db = await self._get_db()
        try:
            cursor = await db.execute("DELETE FROM projects WHERE id = ?", (project_id,))
            await db.commit()
            deleted = cursor.rowcount > 0
        finally:
            await db.close()
        if deleted:
            self.engine.clear_cache()
            logger.info(f"Deleted project {project_id[:8]} and all associated data")
        return deleted

    # --- world objects ---

    async def _attributes_for(
        self,
        db: aiosqlite.Connection,
        object_ids: list[str],
    ) -> dict[str, list[Attribute]]:
        by_object: dict[str, list[Attribute]] = {object_id: [] for object_id in object_ids}
        if not object_ids:
            return by_object
        placeholders = ", ".join("?" for _ in object_ids)
        cursor = await db.execute(
            f"""SELECT * FROM attributes
                WHERE object_id IN ({placeholders})
                ORDER BY object_id ASC, position ASC, created_at ASC""",
            object_ids,
        )
        for row in await cursor.fetchall():
            attribute = _row_to_attribute(dict(row))
            by_object.setdefault(attribute.object_id, []).append(attribute)
        return by_object

    async def list_objects(self, project_id: str) -> list[WorldObject]:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM world_objects WHERE project_id = ? ORDER BY name ASC, id ASC",
                (project_id,),
            )
            rows = [dict(r) for r in await cursor.fetchall()]
            attributes = await self._attributes_for(db, [r["id"] for r in rows])
            return [_row_to_object(r, attributes.get(r["id"], [])) for r in rows]
        finally:
            await db.close()

    async def get_object(self, project_id: str, object_id: str) -> WorldObject | None:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM world_objects WHERE project_id = ? AND id = ?",
                (project_id, object_id),
            )
            row = await cursor.fetchone()
            if not row:
                return None
            attributes = await self._attributes_for(db, [object_id])
            return _row_to_object(dict(row), attributes[object_id])
        finally:
            await db.close()

    async def _insert_attribute(
        self,
        db: aiosqlite.Connection,
        object_id: str,
        data: AttributeCreate,
        position: int,
        now: str,
    ) -> str:
        attribute_id = data.id or str(uuid4())
        await db.execute(
            """INSERT INTO attributes
               (id, object_id, name, type, value, enum_values, description, position, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                attribute_id,
                object_id,
                data.name,
                data.type.value,
                _dump_value(data.value),
                json.dumps(data.enum_values),
                data.description,
                position,
                now,
                now,
            ),
        )
        return attribute_id

    async def create_object(self, project_id: str, data: WorldObjectCreate) -> WorldObject | None:
        ids = [a.id for a in data.attributes if a.id]
        if len(ids) != len(set(ids)):
            raise ValueError("attribute ids must be unique within an object")

        now = _now()
        object_id = str(uuid4())
        db = await self._get_db()
        try:
            if not await self._project_exists(db, project_id):
                return None
            await db.execute(
                """INSERT INTO world_objects
                   (id, project_id, name, category, description, tags, introduced_at, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    object_id,
                    project_id,
                    data.name,
                    normalize_type(data.category),
                    data.description,
                    json.dumps(data.tags),
                    data.introduced_at,
                    now,
                    now,
                ),
            )
            for position, attribute in enumerate(data.attributes):
                await self._insert_attribute(db, object_id, attribute, position, now)
            await db.commit()
        finally:
            await db.close()
        return await self.get_object(project_id, object_id)

    async def update_object(
        self,
        project_id: str,
        object_id: str,
        data: WorldObjectUpdate,
    ) -> WorldObject | None:
        existing = await self.get_object(project_id, object_id)
        if not existing:
            return None

        fields: dict[str, Any] = {}
        if data.name is not None:
            fields["name"] = data.name
        if data.category is not None:
            fields["category"] = normalize_type(data.category)
        if data.description is not None:
            fields["description"] = data.description
        if data.tags is not None:
            fields["tags"] = json.dumps(data.tags)
        if data.introduced_at is not None:
            fields["introduced_at"] = data.introduced_at
        if not fields:
            return existing

        fields["updated_at"] = _now()
        set_clause = ", ".join(f"{key} = ?" for key in fields)
        db = await self._get_db()
        try:
            await db.execute(
                f"UPDATE world_objects SET {set_clause} WHERE project_id = ? AND id = ?",
                [*fields.values(), project_id, object_id],
            )
            await db.commit()
        finally:
            await db.close()
        return await self.get_object(project_id, object_id)

    async def remove_object(self, project_id: str, object_id: str, cascade: bool = False) -> bool:
        """
        Delete an object and its attribute changes.

        Timeline events lose the object as a participant. With ``cascade``,
        events left without participants are deleted as well.
        """
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "DELETE FROM world_objects WHERE project_id = ? AND id = ?",
                (project_id, object_id),
            )
            if cursor.rowcount <= 0:
                await db.commit()
                return False

            cursor = await db.execute(
                "SELECT * FROM timeline_events WHERE project_id = ?",
                (project_id,),
            )
            now = _now()
            for row in await cursor.fetchall():
                participants = _load_json(row["participants"], [])
                if object_id not in participants:
                    continue
                remaining = [p for p in participants if p != object_id]
                if cascade and not remaining:
                    await db.execute("DELETE FROM timeline_events WHERE id = ?", (row["id"],))
                else:
                    await db.execute(
                        "UPDATE timeline_events SET participants = ?, updated_at = ? WHERE id = ?",
                        (json.dumps(remaining), now, row["id"]),
                    )
            await db.commit()
        finally:
            await db.close()
        logger.info(f"Removed object {object_id[:8]} from project {project_id[:8]} (cascade={cascade})")
        return True

    # --- attributes ---

    async def add_attribute(
        self,
        project_id: str,
        object_id: str,
        data: AttributeCreate,
    ) -> Attribute | None:
        world_object = await self.get_object(project_id, object_id)
        if not world_object:
            return None
        if data.id and world_object.attribute(data.id):
            raise ValueError(f"attribute '{data.id}' already exists on this object")

        db = await self._get_db()
        try:
            attribute_id = await self._insert_attribute(
                db, object_id, data, len(world_object.attributes), _now()
            )
            await db.commit()
        finally:
            await db.close()
        updated = await self.get_object(project_id, object_id)
        return updated.attribute(attribute_id) if updated else None

    async def update_attribute(
        self,
        project_id: str,
        object_id: str,
        attribute_id: str,
        data: AttributeUpdate,
    ) -> Attribute | None:
        world_object = await self.get_object(project_id, object_id)
        existing = world_object.attribute(attribute_id) if world_object else None
        if not existing:
            return None

        value = None if data.clear_value else (data.value if data.value is not None else existing.value)
        enum_values = data.enum_values if data.enum_values is not None else existing.enum_values
        check_value(existing.type, value, enum_values)

        fields: dict[str, Any] = {
            "value": _dump_value(value),
            "enum_values": json.dumps(enum_values),
            "updated_at": _now(),
        }
        if data.name is not None:
            fields["name"] = data.name
        if data.description is not None:
            fields["description"] = data.description

        set_clause = ", ".join(f"{key} = ?" for key in fields)
        db = await self._get_db()
        try:
            await db.execute(
                f"UPDATE attributes SET {set_clause} WHERE object_id = ? AND id = ?",
                [*fields.values(), object_id, attribute_id],
            )
            await db.commit()
        finally:
            await db.close()
        updated = await self.get_object(project_id, object_id)
        return updated.attribute(attribute_id) if updated else None

    async def delete_attribute(self, project_id: str, object_id: str, attribute_id: str) -> bool:
        """Delete an attribute together with the changes recorded against it."""
        if not await self.get_object(project_id, object_id):
            return False
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "DELETE FROM attributes WHERE object_id = ? AND id = ?",
                (object_id, attribute_id),
            )
            deleted = cursor.rowcount > 0
            if deleted:
                await db.execute(
                    """DELETE FROM attribute_events
                       WHERE project_id = ? AND object_id = ? AND attribute_id = ?""",
                    (project_id, object_id, attribute_id),
                )
            await db.commit()
        finally:
            await db.close()
        return deleted

    # --- attribute changes ---

    async def list_attribute_events(
        self,
        project_id: str,
        object_id: Optional[str] = None,
        attribute_id: Optional[str] = None,
        start: Optional[float] = None,
        end: Optional[float] = None,
    ) -> list[AttributeEvent]:
        clauses = ["project_id = ?"]
        params: list[Any] = [project_id]
        if object_id is not None:
            clauses.append("object_id = ?")
            params.append(object_id)
        if attribute_id is not None:
            clauses.append("attribute_id = ?")
            params.append(attribute_id)
        if start is not None:
            clauses.append("timestamp >= ?")
            params.append(start)
        if end is not None:
            clauses.append("timestamp <= ?")
            params.append(end)

        db = await self._get_db()
        try:
            cursor = await db.execute(
                f"""SELECT * FROM attribute_events
                    WHERE {' AND '.join(clauses)}
                    ORDER BY timestamp ASC, id ASC""",
                params,
            )
            rows = await cursor.fetchall()
            return [_row_to_attribute_event(dict(r)) for r in rows]
        finally:
            await db.close()

    async def get_attribute_event(self, project_id: str, event_id: str) -> AttributeEvent | None:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM attribute_events WHERE project_id = ? AND id = ?",
                (project_id, event_id),
            )
            row = await cursor.fetchone()
            return _row_to_attribute_event(dict(row)) if row else None
        finally:
            await db.close()

    async def create_attribute_event(
        self,
        project_id: str,
        data: AttributeEventCreate,
    ) -> AttributeEvent | None:
        """
        Record an attribute change.

        :return: The stored change, or None if the project does not exist
        :raises ValueError: For an unknown object or attribute, or a value
            that does not fit the attribute
        """
        if not await self.get_project(project_id):
            return None
        world_object = await self.get_object(project_id, data.object_id)
        if not world_object:
            raise ValueError(f"Unknown object '{data.object_id}'")
        attribute = world_object.attribute(data.attribute_id)
        if not attribute:
            raise ValueError(f"Object '{world_object.name}' has no attribute '{data.attribute_id}'")
        check_value(attribute.type, data.new_value, attribute.enum_values)
        check_value(attribute.type, data.old_value, attribute.enum_values)

        now = _now()
        event_id = new_event_id()
        db = await self._get_db()
        try:
            await db.execute(
                """INSERT INTO attribute_events
                   (id, project_id, object_id, attribute_id, timestamp, new_value, old_value, description, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    project_id,
                    data.object_id,
                    data.attribute_id,
                    data.timestamp,
                    _dump_value(data.new_value),
                    _dump_value(data.old_value),
                    data.description,
                    now,
                    now,
                ),
            )
            await db.commit()
        finally:
            await db.close()
        return await self.get_attribute_event(project_id, event_id)

    async def update_attribute_event(
        self,
        project_id: str,
        event_id: str,
        data: AttributeEventUpdate,
    ) -> AttributeEvent | None:
        existing = await self.get_attribute_event(project_id, event_id)
        if not existing:
            return None

        fields: dict[str, Any] = {}
        if data.timestamp is not None:
            fields["timestamp"] = data.timestamp
        if data.clear_value or data.new_value is not None:
            new_value = None if data.clear_value else data.new_value
            world_object = await self.get_object(project_id, existing.object_id)
            attribute = world_object.attribute(existing.attribute_id) if world_object else None
            if attribute:
                check_value(attribute.type, new_value, attribute.enum_values)
            fields["new_value"] = _dump_value(new_value)
        if data.description is not None:
            fields["description"] = data.description
        if not fields:
            return existing

        fields["updated_at"] = _now()
        set_clause = ", ".join(f"{key} = ?" for key in fields)
        db = await self._get_db()
        try:
            await db.execute(
                f"UPDATE attribute_events SET {set_clause} WHERE project_id = ? AND id = ?",
                [*fields.values(), project_id, event_id],
            )
            await db.commit()
        finally:
            await db.close()
        return await self.get_attribute_event(project_id, event_id)

    async def delete_attribute_event(self, project_id: str, event_id: str) -> bool:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "DELETE FROM attribute_events WHERE project_id = ? AND id = ?",
                (project_id, event_id),
            )
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()

    # --- timeline events ---

    async def list_timeline_events(
        self,
        project_id: str,
        start: Optional[float] = None,
        end: Optional[float] = None,
        object_id: Optional[str] = None,
        descending: bool = False,
    ) -> list[TimelineEvent]:
        log = await self.load_event_log(project_id, include_changes=False)
        if object_id is not None:
            return log.timeline_events_for_object(object_id, start=start, end=end, descending=descending)
        return log.timeline_events(start=start, end=end, descending=descending)

    async def get_timeline_event(self, project_id: str, event_id: str) -> TimelineEvent | None:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "SELECT * FROM timeline_events WHERE project_id = ? AND id = ?",
                (project_id, event_id),
            )
            row = await cursor.fetchone()
            return _row_to_timeline_event(dict(row)) if row else None
        finally:
            await db.close()

    async def create_timeline_event(
        self,
        project_id: str,
        data: TimelineEventCreate,
    ) -> TimelineEvent | None:
        now = _now()
        event_id = str(uuid4())
        db = await self._get_db()
        try:
            if not await self._project_exists(db, project_id):
                return None
            await db.execute(
                """INSERT INTO timeline_events
                   (id, project_id, title, start_time, end_time, category, participants, description, location, tags, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    project_id,
                    data.title,
                    data.start_time,
                    data.end_time,
                    normalize_type(data.category),
                    json.dumps(data.participants),
                    data.description,
                    data.location,
                    json.dumps(data.tags),
                    now,
                    now,
                ),
            )
            await db.commit()
        finally:
            await db.close()
        return await self.get_timeline_event(project_id, event_id)

    async def update_timeline_event(
        self,
        project_id: str,
        event_id: str,
        data: TimelineEventUpdate,
    ) -> TimelineEvent | None:
        """
        Patch a timeline event.

        :raises InvalidIntervalError: If the merged times end before they start
        """
        existing = await self.get_timeline_event(project_id, event_id)
        if not existing:
            return None

        start = data.start_time if data.start_time is not None else existing.start_time
        if data.clear_end_time:
            end = None
        else:
            end = data.end_time if data.end_time is not None else existing.end_time
        ensure_interval(start, end, event_id)

        fields: dict[str, Any] = {"start_time": start, "end_time": end}
        if data.title is not None:
            fields["title"] = data.title
        if data.category is not None:
            fields["category"] = normalize_type(data.category)
        if data.participants is not None:
            fields["participants"] = json.dumps(data.participants)
        if data.description is not None:
            fields["description"] = data.description
        if data.location is not None:
            fields["location"] = data.location
        if data.tags is not None:
            fields["tags"] = json.dumps(data.tags)

        fields["updated_at"] = _now()
        set_clause = ", ".join(f"{key} = ?" for key in fields)
        db = await self._get_db()
        try:
            await db.execute(
                f"UPDATE timeline_events SET {set_clause} WHERE project_id = ? AND id = ?",
                [*fields.values(), project_id, event_id],
            )
            await db.commit()
        finally:
            await db.close()
        return await self.get_timeline_event(project_id, event_id)

    async def retime_timeline_event(
        self,
        project_id: str,
        event_id: str,
        start: float,
        end: Optional[float],
    ) -> TimelineEvent | None:
        """Persist drag-committed times; id and all other fields are kept."""
        ensure_interval(start, end, event_id)
        db = await self._get_db()
        try:
            cursor = await db.execute(
                """UPDATE timeline_events
                   SET start_time = ?, end_time = ?, updated_at = ?
                   WHERE project_id = ? AND id = ?""",
                (start, end, _now(), project_id, event_id),
            )
            await db.commit()
            if cursor.rowcount <= 0:
                return None
        finally:
            await db.close()
        return await self.get_timeline_event(project_id, event_id)

    async def delete_timeline_event(self, project_id: str, event_id: str) -> bool:
        db = await self._get_db()
        try:
            cursor = await db.execute(
                "DELETE FROM timeline_events WHERE project_id = ? AND id = ?",
                (project_id, event_id),
            )
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()

    async def load_event_log(self, project_id: str, include_changes: bool = True) -> EventLog:
        """Snapshot of the project's changes and timeline events as an in-memory log."""
        db = await self._get_db()
        try:
            changes: list[AttributeEvent] = []
            if include_changes:
                cursor = await db.execute(
                    "SELECT * FROM attribute_events WHERE project_id = ?",
                    (project_id,),
                )
                changes = [_row_to_attribute_event(dict(r)) for r in await cursor.fetchall()]
            cursor = await db.execute(
                "SELECT * FROM timeline_events WHERE project_id = ?",
                (project_id,),
            )
            timeline = [_row_to_timeline_event(dict(r)) for r in await cursor.fetchall()]
        finally:
            await db.close()
        return EventLog(changes=changes, timeline=timeline)

    # --- resolver queries ---

    async def _state_version(self, project_id: str, object_id: str) -> tuple:
        """Changes whenever the object's attributes or attribute changes are edited."""
        db = await self._get_db()
        try:
            cursor = await db.execute(
                """SELECT
                       (SELECT COUNT(*) FROM attributes WHERE object_id = ?),
                       (SELECT MAX(updated_at) FROM attributes WHERE object_id = ?),
                       (SELECT COUNT(*) FROM attribute_events WHERE project_id = ? AND object_id = ?),
                       (SELECT MAX(updated_at) FROM attribute_events WHERE project_id = ? AND object_id = ?)""",
                (object_id, object_id, project_id, object_id, project_id, object_id),
            )
            row = await cursor.fetchone()
            return tuple(row)
        finally:
            await db.close()

    async def get_object_state(
        self,
        project_id: str,
        object_id: str,
        timestamp: float,
    ) -> ObjectState | None:
        world_object = await self.get_object(project_id, object_id)
        if not world_object:
            return None
        version = await self._state_version(project_id, object_id)
        cached = self.engine.cached_state(object_id, timestamp, version)
        if cached is not None:
            return cached
        events = await self.list_attribute_events(project_id, object_id=object_id)
        return self.engine.state_at(world_object, timestamp, events, version)

    async def get_object_states(
        self,
        project_id: str,
        timestamp: float,
        object_ids: Optional[list[str]] = None,
    ) -> dict[str, ObjectState]:
        objects = await self.list_objects(project_id)
        events = await self.list_attribute_events(project_id)
        ids = object_ids if object_ids is not None else [obj.id for obj in objects]
        return self.engine.states_at(ids, timestamp, objects, events)

    async def get_object_history(
        self,
        project_id: str,
        object_id: str,
        start: float,
        end: float,
        sample_interval: float,
    ) -> list[ObjectState] | None:
        world_object = await self.get_object(project_id, object_id)
        if not world_object:
            return None
        version = await self._state_version(project_id, object_id)
        events = await self.list_attribute_events(project_id, object_id=object_id)
        return self.engine.state_history(world_object, start, end, events, sample_interval, version=version)

    async def object_exists_at(self, project_id: str, object_id: str, timestamp: float) -> bool | None:
        world_object = await self.get_object(project_id, object_id)
        if not world_object:
            return None
        events = await self.list_attribute_events(project_id, object_id=object_id)
        return self.engine.object_exists_at(world_object, timestamp, events)

    async def count_attribute_changes(
        self,
        project_id: str,
        object_id: str,
        attribute_id: str,
        start: float,
        end: float,
    ) -> int | None:
        if not await self.get_object(project_id, object_id):
            return None
        events = await self.list_attribute_events(project_id, object_id=object_id, attribute_id=attribute_id)
        return self.engine.attribute_change_count(object_id, attribute_id, start, end, events)

    async def detect_conflicts(self, project_id: str) -> ConflictReport:
        objects = await self.list_objects(project_id)
        events = await self.list_attribute_events(project_id)
        conflicts = self.detector.detect(events, objects)
        return ConflictReport(conflicts=conflicts, statistics=self.detector.statistics(conflicts))
