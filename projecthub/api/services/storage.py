"""
In-memory project storage with simulated network conditions
"""

import asyncio
import logging
import random
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from projecthub.api.schemas.project import Project, ProjectCreate, ProjectUpdate, check_schedule

logger = logging.getLogger(__name__)

SAMPLE_PROJECTS = [
    {
        "name": "Project A",
        "description": "Project A Description: Lorem ipsum dolor sit amet, consectetur adipiscing elit.",
        "is_favorite": True,
    },
    {
        "name": "Project B",
        "description": "Project B Description: A detailed overview of the project objectives and timelines.",
        "is_favorite": True,
    },
    {
        "name": "Project C",
        "description": "Project C Description: An overview of the project with key milestones and deliverables.",
        "is_favorite": False,
    },
    {
        "name": "Project D",
        "description": "Project D Description: Detailed planning and execution strategy for the project.",
        "is_favorite": False,
    },
    {
        "name": "Project E",
        "description": "Project E Description: Goals, objectives, and implementation approach for the project.",
        "is_favorite": False,
    },
]


class SimulatedNetworkError(Exception):
    """Injected failure raised by NetworkSimulation"""

    def __init__(self, message: str = "Network error: API request failed"):
        super().__init__(message)


class ScheduleConflictError(ValueError):
    """Update would leave a project ending before it starts"""


class NetworkSimulation:
    """
    Artificial latency and random failures applied before every storage call.

    Args:
        min_delay_ms: lower bound of the random delay
        max_delay_ms: upper bound of the random delay (inclusive)
        failure_rate: probability in [0, 1] that a call raises SimulatedNetworkError
        rng: random source, injectable for deterministic tests
    """

    def __init__(
        self,
        min_delay_ms: int = 400,
        max_delay_ms: int = 1500,
        failure_rate: float = 0.2,
        rng: Optional[random.Random] = None,
    ):
        if min_delay_ms < 0 or max_delay_ms < min_delay_ms:
            raise ValueError(f"Invalid delay range: {min_delay_ms}-{max_delay_ms}ms")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be between 0 and 1, got {failure_rate}")

        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()

    @classmethod
    def disabled(cls) -> "NetworkSimulation":
        return cls(min_delay_ms=0, max_delay_ms=0, failure_rate=0.0)

    @classmethod
    def from_config(cls, cfg) -> "NetworkSimulation":
        if not cfg.simulation_enabled():
            return cls.disabled()
        return cls(
            min_delay_ms=int(cfg.get("network_simulation", "min_delay_ms", 400)),
            max_delay_ms=int(cfg.get("network_simulation", "max_delay_ms", 1500)),
            failure_rate=float(cfg.get("network_simulation", "failure_rate", 0.2)),
        )

    @property
    def enabled(self) -> bool:
        return self.max_delay_ms > 0 or self.failure_rate > 0

    async def __call__(self, operation: str) -> None:
        delay_ms = self._rng.randint(self.min_delay_ms, self.max_delay_ms)
        if delay_ms:
            await asyncio.sleep(delay_ms / 1000)

        if self.failure_rate and self._rng.random() < self.failure_rate:
            logger.warning(f"Injected failure in {operation} after {delay_ms}ms")
            raise SimulatedNetworkError()


class ProjectStorage:
    """
    Keyed collection of projects.

    Ids start at 1 and are never reused, even after deletion. Every public
    operation awaits the network simulation first and touches the collection
    only afterwards, so a call never observes a half-applied change.
    Returned projects are copies of the stored records.
    """

    def __init__(self, simulation: Optional[NetworkSimulation] = None):
        self.simulation = simulation or NetworkSimulation.disabled()
        self._projects: Dict[int, Project] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._projects)

    def _insert(self, data: ProjectCreate) -> Project:
        project = Project(id=self._next_id, **data.model_dump())
        self._next_id += 1
        self._projects[project.id] = project
        return project.model_copy()

    async def list(self) -> List[Project]:
        await self.simulation("list")
        return [project.model_copy() for project in self._projects.values()]

    async def get(self, project_id: int) -> Optional[Project]:
        await self.simulation("get")
        project = self._projects.get(project_id)
        return project.model_copy() if project else None

    async def list_favorites(self) -> List[Project]:
        await self.simulation("list_favorites")
        return [project.model_copy() for project in self._projects.values() if project.is_favorite]

    async def create(self, data: ProjectCreate) -> Project:
        await self.simulation("create")
        project = self._insert(data)
        logger.info(f"Created project {project.id}: {project.name}")
        return project

    async def update(self, project_id: int, changes: Mapping[str, Any]) -> Optional[Project]:
        """
        Merge the given fields onto an existing project; unspecified fields are kept.

        Keys may be snake_case or camelCase and are validated like a PATCH body;
        unknown keys, including "id", are ignored. The schedule rule is checked
        on the merged record after the simulated delay, right before the write.

        Raises:
            pydantic.ValidationError: a field value is invalid
            ScheduleConflictError: the merged record ends before it starts
        """
        changes = ProjectUpdate.model_validate(dict(changes)).changes()
        await self.simulation("update")

        existing = self._projects.get(project_id)
        if existing is None:
            return None

        updated = existing.model_copy(update=changes)
        try:
            check_schedule(updated.start_date, updated.end_date)
        except ValueError as e:
            raise ScheduleConflictError(str(e)) from e

        self._projects[project_id] = updated
        return updated.model_copy()

    async def delete(self, project_id: int) -> bool:
        await self.simulation("delete")
        removed = self._projects.pop(project_id, None)
        if removed is not None:
            logger.info(f"Deleted project {project_id}")
        return removed is not None

    async def toggle_favorite(self, project_id: int) -> Optional[Project]:
        await self.simulation("toggle_favorite")

        existing = self._projects.get(project_id)
        if existing is None:
            return None

        updated = existing.model_copy(update={"is_favorite": not existing.is_favorite})
        self._projects[project_id] = updated
        return updated.model_copy()

    def seed_sample_data(self) -> List[Project]:
        """Insert the demo projects directly, bypassing the network simulation."""
        seeded = []
        for sample in SAMPLE_PROJECTS:
            data = ProjectCreate(
                start_date=datetime(2023, 1, 1),
                end_date=datetime(2023, 12, 31),
                project_manager="John Doe",
                **sample,
            )
            seeded.append(self._insert(data))
        logger.info(f"Seeded {len(seeded)} sample projects")
        return seeded
