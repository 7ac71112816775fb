"""ProjectService against a temporary sqlite database."""

import asyncio

import pytest

from worldline.database.db import init_db
from worldline.errors import InvalidIntervalError
from worldline.models import (
    AttributeCreate,
    AttributeEventCreate,
    AttributeEventUpdate,
    AttributeType,
    AttributeUpdate,
    EnumValue,
    NumberValue,
    ProjectCreate,
    ProjectUpdate,
    TextValue,
    TimelineEventCreate,
    TimelineEventUpdate,
    WorldObjectCreate,
    WorldObjectUpdate,
)
from worldline.services.project import ProjectService


@pytest.fixture
def service(tmp_path):
    db_path = str(tmp_path / "worldline.db")
    asyncio.run(init_db(db_path))
    return ProjectService(db_path)


def hero_payload(introduced_at=None) -> WorldObjectCreate:
    return WorldObjectCreate(
        name="Hero",
        category="Person",
        introduced_at=introduced_at,
        attributes=[
            AttributeCreate(id="hp", name="HP", type=AttributeType.NUMBER, value=NumberValue(value=100)),
            AttributeCreate(id="status", name="Status", type=AttributeType.ENUM,
                            value=EnumValue(value="alive"), enum_values=["alive", "injured", "dead"]),
        ],
    )


async def seed(service: ProjectService):
    project = await service.create_project(ProjectCreate(name="Saga"))
    hero = await service.create_object(project.id, hero_payload())
    return project, hero


class TestProjects:

    def test_crud(self, service):
        async def scenario():
            project = await service.create_project(ProjectCreate(name="Saga", description="An epic"))
            assert [p.id for p in await service.list_projects()] == [project.id]

            updated = await service.update_project(project.id, ProjectUpdate(name="Saga II"))
            assert updated.name == "Saga II"
            assert updated.description == "An epic"

            assert await service.delete_project(project.id)
            assert await service.get_project(project.id) is None
            assert not await service.delete_project(project.id)
            assert await service.update_project(project.id, ProjectUpdate(name="x")) is None

        asyncio.run(scenario())

    def test_delete_cascades_to_contents(self, service):
        async def scenario():
            project, hero = await seed(service)
            await service.create_timeline_event(project.id, TimelineEventCreate(title="War", start_time=0))
            await service.delete_project(project.id)
            assert await service.get_object(project.id, hero.id) is None
            assert await service.list_timeline_events(project.id) == []

        asyncio.run(scenario())


class TestObjects:

    def test_create_with_attributes(self, service):
        async def scenario():
            project, hero = await seed(service)
            assert hero.category == "person"
            assert [a.id for a in hero.attributes] == ["hp", "status"]
            assert hero.attribute("hp").value == NumberValue(value=100)
            assert hero.attribute("status").enum_values == ["alive", "injured", "dead"]
            assert [o.id for o in await service.list_objects(project.id)] == [hero.id]

        asyncio.run(scenario())

    def test_create_in_unknown_project(self, service):
        assert asyncio.run(service.create_object("missing", hero_payload())) is None

    def test_duplicate_attribute_ids_rejected(self, service):
        async def scenario():
            project = await service.create_project(ProjectCreate(name="Saga"))
            payload = WorldObjectCreate(name="Twin", attributes=[
                AttributeCreate(id="x", name="X", type=AttributeType.TEXT),
                AttributeCreate(id="x", name="Y", type=AttributeType.TEXT),
            ])
            with pytest.raises(ValueError):
                await service.create_object(project.id, payload)

        asyncio.run(scenario())

    def test_update_object(self, service):
        async def scenario():
            project, hero = await seed(service)
            updated = await service.update_object(
                project.id, hero.id, WorldObjectUpdate(tags=["main"], introduced_at=5)
            )
            assert updated.tags == ["main"]
            assert updated.introduced_at == 5
            assert updated.name == "Hero"

        asyncio.run(scenario())

    def test_attribute_lifecycle(self, service):
        async def scenario():
            project, hero = await seed(service)
            title = await service.add_attribute(
                project.id, hero.id, AttributeCreate(id="title", name="Title", type=AttributeType.TEXT)
            )
            assert title.value is None

            with pytest.raises(ValueError):
                await service.add_attribute(
                    project.id, hero.id, AttributeCreate(id="title", name="Again", type=AttributeType.TEXT)
                )

            title = await service.update_attribute(
                project.id, hero.id, "title", AttributeUpdate(value=TextValue(value="Knight"))
            )
            assert title.value == TextValue(value="Knight")

            with pytest.raises(ValueError):
                await service.update_attribute(
                    project.id, hero.id, "hp", AttributeUpdate(value=TextValue(value="lots"))
                )

            assert await service.delete_attribute(project.id, hero.id, "title")
            assert not await service.delete_attribute(project.id, hero.id, "title")
            assert (await service.get_object(project.id, hero.id)).attribute("title") is None

        asyncio.run(scenario())

    def test_remove_object_cascade(self, service):
        async def scenario():
            project, hero = await seed(service)
            villain = await service.create_object(project.id, WorldObjectCreate(name="Villain"))
            solo = await service.create_timeline_event(
                project.id, TimelineEventCreate(title="Training", start_time=0, participants=[hero.id])
            )
            duel = await service.create_timeline_event(
                project.id,
                TimelineEventCreate(title="Duel", start_time=5, participants=[hero.id, villain.id]),
            )
            await service.create_attribute_event(
                project.id, AttributeEventCreate(timestamp=1, object_id=hero.id, attribute_id="hp",
                                                 new_value=NumberValue(value=50))
            )

            assert await service.remove_object(project.id, hero.id, cascade=True)
            assert await service.get_timeline_event(project.id, solo.id) is None
            assert (await service.get_timeline_event(project.id, duel.id)).participants == [villain.id]
            assert await service.list_attribute_events(project.id) == []
            assert not await service.remove_object(project.id, hero.id)

        asyncio.run(scenario())


class TestAttributeEvents:

    def test_state_resolution_through_storage(self, service):
        async def scenario():
            project, hero = await seed(service)
            for t, hp in ((20, 50), (10, 80)):
                await service.create_attribute_event(
                    project.id, AttributeEventCreate(timestamp=t, object_id=hero.id, attribute_id="hp",
                                                     new_value=NumberValue(value=hp))
                )
            state = await service.get_object_state(project.id, hero.id, 15)
            assert state.value_of("hp") == 80
            assert (await service.get_object_state(project.id, hero.id, 5)).value_of("hp") == 100

            states = await service.get_object_states(project.id, 25)
            assert states[hero.id].value_of("hp") == 50

            history = await service.get_object_history(project.id, hero.id, 0, 20, 10)
            assert [s.value_of("hp") for s in history] == [100, 80, 50]

            assert await service.get_object_state(project.id, "ghost", 15) is None

        asyncio.run(scenario())

    def test_same_timestamp_later_insert_wins(self, service):
        async def scenario():
            project, hero = await seed(service)
            for hp in (1, 2):
                await service.create_attribute_event(
                    project.id, AttributeEventCreate(timestamp=10, object_id=hero.id, attribute_id="hp",
                                                     new_value=NumberValue(value=hp))
                )
            state = await service.get_object_state(project.id, hero.id, 10)
            assert state.value_of("hp") == 2

        asyncio.run(scenario())

    def test_rejects_bad_targets_and_values(self, service):
        async def scenario():
            project, hero = await seed(service)
            with pytest.raises(ValueError):
                await service.create_attribute_event(
                    project.id, AttributeEventCreate(timestamp=1, object_id="ghost", attribute_id="hp")
                )
            with pytest.raises(ValueError):
                await service.create_attribute_event(
                    project.id, AttributeEventCreate(timestamp=1, object_id=hero.id, attribute_id="mana")
                )
            with pytest.raises(ValueError):
                await service.create_attribute_event(
                    project.id, AttributeEventCreate(timestamp=1, object_id=hero.id, attribute_id="status",
                                                     new_value=EnumValue(value="asleep"))
                )
            missing = await service.create_attribute_event(
                "missing", AttributeEventCreate(timestamp=1, object_id=hero.id, attribute_id="hp")
            )
            assert missing is None

        asyncio.run(scenario())

    def test_update_and_delete(self, service):
        async def scenario():
            project, hero = await seed(service)
            event = await service.create_attribute_event(
                project.id, AttributeEventCreate(timestamp=10, object_id=hero.id, attribute_id="hp",
                                                 new_value=NumberValue(value=80))
            )
            updated = await service.update_attribute_event(
                project.id, event.id, AttributeEventUpdate(timestamp=12, description="wounded")
            )
            assert updated.id == event.id
            assert updated.timestamp == 12
            assert updated.new_value == NumberValue(value=80)

            cleared = await service.update_attribute_event(project.id, event.id, AttributeEventUpdate(clear_value=True))
            assert cleared.new_value is None

            assert [e.id for e in await service.list_attribute_events(project.id, start=11, end=13)] == [event.id]
            assert await service.delete_attribute_event(project.id, event.id)
            assert await service.get_attribute_event(project.id, event.id) is None

        asyncio.run(scenario())

    def test_conflicts_and_existence(self, service):
        async def scenario():
            project, hero = await seed(service)
            await service.create_attribute_event(
                project.id, AttributeEventCreate(timestamp=10, object_id=hero.id, attribute_id="status",
                                                 new_value=EnumValue(value="dead"))
            )
            await service.create_attribute_event(
                project.id, AttributeEventCreate(timestamp=20, object_id=hero.id, attribute_id="hp",
                                                 new_value=NumberValue(value=5))
            )
            report = await service.detect_conflicts(project.id)
            assert report.statistics.total == 1
            assert report.conflicts[0].title == "Activity after death"

            assert await service.object_exists_at(project.id, hero.id, 5)
            assert not await service.object_exists_at(project.id, hero.id, 15)
            assert await service.object_exists_at(project.id, "ghost", 15) is None

        asyncio.run(scenario())


class TestResolverCache:

    def test_repeat_lookup_is_served_from_cache(self, service):
        async def scenario():
            project, hero = await seed(service)
            first = await service.get_object_state(project.id, hero.id, 15)
            second = await service.get_object_state(project.id, hero.id, 15)
            assert second is first
            assert service.engine.cache_stats()["state_cache_size"] == 1

        asyncio.run(scenario())

    def test_edits_invalidate_cached_state(self, service):
        async def scenario():
            project, hero = await seed(service)
            event = await service.create_attribute_event(
                project.id, AttributeEventCreate(timestamp=10, object_id=hero.id, attribute_id="hp",
                                                 new_value=NumberValue(value=80))
            )
            assert (await service.get_object_state(project.id, hero.id, 15)).value_of("hp") == 80

            await service.update_attribute_event(
                project.id, event.id, AttributeEventUpdate(new_value=NumberValue(value=70))
            )
            assert (await service.get_object_state(project.id, hero.id, 15)).value_of("hp") == 70

            await service.delete_attribute_event(project.id, event.id)
            assert (await service.get_object_state(project.id, hero.id, 15)).value_of("hp") == 100

            await service.update_attribute(project.id, hero.id, "hp", AttributeUpdate(value=NumberValue(value=90)))
            assert (await service.get_object_state(project.id, hero.id, 15)).value_of("hp") == 90

        asyncio.run(scenario())

    def test_project_delete_clears_cache(self, service):
        async def scenario():
            project, hero = await seed(service)
            await service.get_object_state(project.id, hero.id, 1)
            assert await service.delete_project(project.id)
            assert service.engine.cache_stats()["state_cache_size"] == 0

        asyncio.run(scenario())

    def test_count_attribute_changes(self, service):
        async def scenario():
            project, hero = await seed(service)
            for t in (0, 10, 20, 30):
                await service.create_attribute_event(
                    project.id, AttributeEventCreate(timestamp=t, object_id=hero.id, attribute_id="hp",
                                                     new_value=NumberValue(value=100 - t))
                )
            await service.create_attribute_event(
                project.id, AttributeEventCreate(timestamp=15, object_id=hero.id, attribute_id="status",
                                                 new_value=EnumValue(value="injured"))
            )
            assert await service.count_attribute_changes(project.id, hero.id, "hp", 10, 20) == 2
            assert await service.count_attribute_changes(project.id, hero.id, "status", 0, 30) == 1
            assert await service.count_attribute_changes(project.id, "ghost", "hp", 0, 30) is None

        asyncio.run(scenario())


class TestTimelineEvents:

    def test_crud_and_retime(self, service):
        async def scenario():
            project, hero = await seed(service)
            siege = await service.create_timeline_event(
                project.id,
                TimelineEventCreate(title="Siege", start_time=10, end_time=30, participants=[hero.id]),
            )
            assert siege.duration == 20

            moved = await service.retime_timeline_event(project.id, siege.id, 40, 60)
            assert (moved.id, moved.start_time, moved.end_time, moved.title) == (siege.id, 40, 60, "Siege")
            assert await service.retime_timeline_event(project.id, "nope", 1, 2) is None

            with pytest.raises(InvalidIntervalError):
                await service.update_timeline_event(project.id, siege.id, TimelineEventUpdate(start_time=70))

            instant = await service.update_timeline_event(
                project.id, siege.id, TimelineEventUpdate(clear_end_time=True, title="Sack")
            )
            assert instant.end_time is None
            assert instant.title == "Sack"

            assert await service.delete_timeline_event(project.id, siege.id)
            assert not await service.delete_timeline_event(project.id, siege.id)

        asyncio.run(scenario())

    def test_event_log_snapshot(self, service):
        async def scenario():
            project, hero = await seed(service)
            await service.create_timeline_event(project.id, TimelineEventCreate(title="B", start_time=20))
            await service.create_timeline_event(project.id, TimelineEventCreate(title="A", start_time=5, end_time=50))
            await service.create_attribute_event(
                project.id, AttributeEventCreate(timestamp=1, object_id=hero.id, attribute_id="hp")
            )
            log = await service.load_event_log(project.id)
            assert [e.title for e in log.timeline_events()] == ["A", "B"]
            assert len(log.changes) == 1

            listed = await service.list_timeline_events(project.id, start=30)
            assert [e.title for e in listed] == ["A"]

        asyncio.run(scenario())
