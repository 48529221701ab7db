"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.entities import Campaign, Project, StageDate, Task  # noqa: E402
from services.scheduler import PlanningSnapshot  # noqa: E402


class FakeStore:
    """In-memory EntityStore that records every call and can fail on demand."""

    def __init__(self, fail_on: set[tuple[str, str]] | None = None):
        self.calls: list[tuple[str, str, dict]] = []
        self.fail_on = fail_on or set()

    async def _record(self, kind: str, entity_id: str, changes: dict):
        self.calls.append((kind, entity_id, dict(changes)))
        if (kind, entity_id) in self.fail_on:
            raise RuntimeError(f"{kind} {entity_id} update rejected")

    async def update_task(self, task_id, changes):
        await self._record("task", task_id, changes)

    async def update_campaign(self, campaign_id, changes):
        await self._record("campaign", campaign_id, changes)

    async def update_project(self, project_id, changes):
        await self._record("project", project_id, changes)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def june_campaign():
    """Campaign C running Jun 1 - Jun 10, 2025 (Jun 1 is a Sunday)."""
    return Campaign(
        id="C",
        title="Summer Launch",
        project_id="P",
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 10),
        stage_dates=[
            StageDate(id="s1", stage_name="Creative", start_date=date(2025, 6, 2), end_date=date(2025, 6, 4)),
            StageDate(id="s2", stage_name="Review"),
        ],
    )


@pytest.fixture
def june_task():
    """Task T on Jun 2 - Jun 3 inside campaign C."""
    return Task(
        id="T",
        title="Draft copy",
        campaign_id="C",
        start_date=date(2025, 6, 2),
        due_date=date(2025, 6, 3),
        assigned_to=["ana"],
    )


@pytest.fixture
def june_project():
    return Project(
        id="P",
        title="Brand Refresh",
        start_date=date(2025, 5, 15),
        end_date=date(2025, 7, 31),
    )


@pytest.fixture
def snapshot(june_task, june_campaign, june_project):
    """Project P > campaign C > task T, plus one undated task."""
    undated = Task(id="U", title="Write brief", campaign_id="C")
    return PlanningSnapshot(
        tasks=[june_task, undated],
        campaigns=[june_campaign],
        projects=[june_project],
    )


@pytest.fixture
def store_factory():
    """Build a FakeStore, e.g. store_factory(fail_on={("task", "T")})."""
    return FakeStore
