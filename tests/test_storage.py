import asyncio
import random
from datetime import datetime

import pytest
from pydantic import ValidationError

from projecthub.api.schemas.project import ProjectCreate
from projecthub.api.services.storage import (
    NetworkSimulation,
    ProjectStorage,
    ScheduleConflictError,
    SimulatedNetworkError,
)


def make_project(name="Alpha", **overrides):
    data = {
        "name": name,
        "description": "Alpha description",
        "start_date": datetime(2024, 1, 1),
        "end_date": datetime(2024, 2, 1),
        "project_manager": "Jane Roe",
    }
    data.update(overrides)
    return ProjectCreate(**data)


@pytest.mark.asyncio
async def test_create_assigns_id_and_default_favorite(storage):
    """New projects get a fresh id and are not favorites"""
    project = await storage.create(make_project())

    assert project.id == 1
    assert project.is_favorite is False
    assert project.name == "Alpha"
    assert await storage.get(1) == project


@pytest.mark.asyncio
async def test_ids_are_not_reused_after_delete(storage):
    first = await storage.create(make_project("One"))
    second = await storage.create(make_project("Two"))
    assert await storage.delete(second.id) is True

    third = await storage.create(make_project("Three"))

    assert [first.id, second.id, third.id] == [1, 2, 3]


@pytest.mark.asyncio
async def test_toggle_favorite_twice_restores_state(storage):
    project = await storage.create(make_project())

    toggled = await storage.toggle_favorite(project.id)
    assert toggled.is_favorite is True

    restored = await storage.toggle_favorite(project.id)
    assert restored.is_favorite is False
    assert restored == project


@pytest.mark.asyncio
async def test_toggle_favorite_unknown_id(storage):
    assert await storage.toggle_favorite(42) is None


@pytest.mark.asyncio
async def test_partial_update_keeps_unspecified_fields(storage):
    project = await storage.create(make_project())

    updated = await storage.update(project.id, {"name": "Renamed"})

    assert updated.name == "Renamed"
    assert updated.description == project.description
    assert updated.start_date == project.start_date
    assert updated.end_date == project.end_date
    assert updated.project_manager == project.project_manager
    assert updated.is_favorite == project.is_favorite


@pytest.mark.asyncio
async def test_update_never_changes_id(storage):
    project = await storage.create(make_project())

    updated = await storage.update(project.id, {"id": 99, "description": "new"})

    assert updated.id == project.id
    assert await storage.get(99) is None


@pytest.mark.asyncio
async def test_update_unknown_id(storage):
    assert await storage.update(7, {"name": "Ghost"}) is None


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found(storage):
    project = await storage.create(make_project())

    assert await storage.delete(project.id) is True
    assert await storage.get(project.id) is None
    assert await storage.delete(project.id) is False


@pytest.mark.asyncio
async def test_favorites_are_subset_of_list(storage):
    for name in ["A", "B", "C", "D"]:
        await storage.create(make_project(name))
    await storage.toggle_favorite(2)
    await storage.toggle_favorite(4)

    all_projects = await storage.list()
    favorites = await storage.list_favorites()

    assert favorites == [p for p in all_projects if p.is_favorite]
    assert [p.name for p in favorites] == ["B", "D"]


@pytest.mark.asyncio
async def test_list_preserves_insertion_order(storage):
    for name in ["C", "A", "B"]:
        await storage.create(make_project(name))

    assert [p.name for p in await storage.list()] == ["C", "A", "B"]


@pytest.mark.asyncio
async def test_returned_projects_are_copies(storage):
    project = await storage.create(make_project())
    project.name = "Mutated outside"

    listed = await storage.list()
    listed[0].is_favorite = True

    stored = await storage.get(project.id)
    assert stored.name == "Alpha"
    assert stored.is_favorite is False


@pytest.mark.asyncio
async def test_seed_sample_data(storage):
    seeded = storage.seed_sample_data()

    assert [p.name for p in seeded] == [f"Project {c}" for c in "ABCDE"]
    assert [p.id for p in seeded] == [1, 2, 3, 4, 5]
    favorites = await storage.list_favorites()
    assert [p.name for p in favorites] == ["Project A", "Project B"]

    created = await storage.create(make_project())
    assert created.id == 6


@pytest.mark.asyncio
async def test_injected_failure_leaves_state_untouched():
    storage = ProjectStorage(NetworkSimulation(min_delay_ms=0, max_delay_ms=0, failure_rate=1.0))

    with pytest.raises(SimulatedNetworkError, match="Network error"):
        await storage.create(make_project())

    assert len(storage) == 0


@pytest.mark.asyncio
async def test_simulation_delay_within_range(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    simulation = NetworkSimulation(
        min_delay_ms=400, max_delay_ms=1500, failure_rate=0.0, rng=random.Random(7)
    )

    for _ in range(20):
        await simulation("list")

    assert len(delays) == 20
    assert all(0.4 <= d <= 1.5 for d in delays)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_delay_ms": -1},
        {"min_delay_ms": 500, "max_delay_ms": 100},
        {"failure_rate": 1.5},
        {"failure_rate": -0.1},
    ],
)
def test_simulation_rejects_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        NetworkSimulation(**kwargs)


def test_disabled_simulation():
    simulation = NetworkSimulation.disabled()

    assert simulation.enabled is False
    assert simulation.failure_rate == 0.0


class StubConfig:
    def __init__(self, enabled, values):
        self._enabled = enabled
        self._values = values

    def simulation_enabled(self):
        return self._enabled

    def get(self, section, key=None, default=None):
        return self._values.get(key, default)


def test_simulation_from_config():
    simulation = NetworkSimulation.from_config(
        StubConfig(True, {"min_delay_ms": 10, "max_delay_ms": 20, "failure_rate": 0.5})
    )

    assert (simulation.min_delay_ms, simulation.max_delay_ms) == (10, 20)
    assert simulation.failure_rate == 0.5

    assert NetworkSimulation.from_config(StubConfig(False, {})).enabled is False


@pytest.mark.asyncio
async def test_update_accepts_camel_case_and_ignores_unknown_keys(storage):
    project = await storage.create(make_project())

    updated = await storage.update(project.id, {"isFavorite": True, "bogus": 1})

    assert updated.is_favorite is True
    assert not hasattr(updated, "bogus")
    assert (await storage.get(project.id)).is_favorite is True


@pytest.mark.asyncio
async def test_update_rejects_invalid_values(storage):
    project = await storage.create(make_project())

    with pytest.raises(ValidationError):
        await storage.update(project.id, {"name": None})

    assert await storage.get(project.id) == project


@pytest.mark.asyncio
async def test_update_checks_schedule_against_stored_dates(storage):
    project = await storage.create(make_project())

    with pytest.raises(ScheduleConflictError, match="End date cannot be before start date"):
        await storage.update(project.id, {"end_date": datetime(2023, 12, 1)})

    assert await storage.get(project.id) == project


@pytest.mark.asyncio
async def test_concurrent_single_date_updates_cannot_invert_schedule():
    storage = ProjectStorage(NetworkSimulation(min_delay_ms=5, max_delay_ms=30, failure_rate=0.0))

    for _ in range(20):
        project = await storage.create(make_project())
        results = await asyncio.gather(
            storage.update(project.id, {"start_date": datetime(2024, 1, 20)}),
            storage.update(project.id, {"end_date": datetime(2024, 1, 10)}),
            return_exceptions=True,
        )

        assert sum(isinstance(r, ScheduleConflictError) for r in results) == 1
        stored = await storage.get(project.id)
        assert stored.end_date >= stored.start_date
