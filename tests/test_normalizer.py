"""Tests for converting planning records into calendar events."""

from datetime import date

from core.config import CAMPAIGN_COLOR, COMPLETED_COLOR, PROJECT_COLOR, STAGE_COLOR, TASK_COLOR
from models.entities import Campaign, Project, StageDate, Task
from models.events import EventKind
from services.normalizer import (
    campaigns_to_events,
    normalize,
    projects_to_events,
    tasks_to_events,
)


class TestTasks:
    def test_task_title_carries_campaign_name(self, june_task, june_campaign):
        (event,) = tasks_to_events([june_task], [june_campaign])
        assert event.id == "task-T"
        assert event.title == "Draft copy (Summer Launch)"
        assert event.kind == EventKind.TASK
        assert event.color == TASK_COLOR
        assert (event.start_date, event.end_date) == (date(2025, 6, 2), date(2025, 6, 3))
        assert event.metadata.campaign_id == "C"
        assert event.metadata.assigned_to == ("ana",)

    def test_task_without_due_date_is_skipped(self):
        task = Task(id="1", title="Someday", start_date=date(2025, 6, 2))
        assert tasks_to_events([task], []) == []

    def test_task_without_start_is_single_day(self):
        task = Task(id="1", title="Deadline", due_date=date(2025, 6, 9))
        (event,) = tasks_to_events([task], [])
        assert event.start_date == event.end_date == date(2025, 6, 9)
        assert event.title == "Deadline"

    def test_start_after_due_is_pulled_back(self):
        task = Task(id="1", title="Odd", start_date=date(2025, 6, 12), due_date=date(2025, 6, 9))
        (event,) = tasks_to_events([task], [])
        assert event.start_date == date(2025, 6, 9)

    def test_completed_task_is_green(self):
        task = Task(id="1", title="Done", due_date=date(2025, 6, 9), completed=True)
        (event,) = tasks_to_events([task], [])
        assert event.color == COMPLETED_COLOR

    def test_task_stages_follow_the_task(self):
        task = Task(
            id="1",
            title="Shoot",
            due_date=date(2025, 6, 9),
            stage_dates=[StageDate(id="a", stage_name="Prep", start_date=date(2025, 6, 7), end_date=date(2025, 6, 8))],
        )
        task_event, stage_event = tasks_to_events([task], [])
        assert stage_event.id == "task-stage-a"
        assert stage_event.metadata.task_id == "1"
        assert stage_event.metadata.parent_kind == EventKind.TASK


class TestCampaigns:
    def test_campaign_and_dated_stages(self, june_campaign):
        events = campaigns_to_events([june_campaign])
        assert [e.id for e in events] == ["campaign-C", "stage-s1"]
        campaign, stage = events
        assert campaign.color == CAMPAIGN_COLOR
        assert stage.title == "Summer Launch: Creative"
        assert stage.color == STAGE_COLOR
        assert stage.metadata.campaign_id == "C"
        assert stage.metadata.stage_id == "s1"

    def test_stages_render_without_campaign_dates(self):
        campaign = Campaign(
            id="X",
            title="Undated",
            stage_dates=[StageDate(id="k", stage_name="Kickoff", start_date=date(2025, 6, 3), end_date=date(2025, 6, 3), color="#123456")],
        )
        (event,) = campaigns_to_events([campaign])
        assert event.id == "stage-k"
        assert event.color == "#123456"


class TestProjects:
    def test_open_project_uses_target_end(self, june_project):
        (event,) = projects_to_events([june_project])
        assert event.id == "project-P"
        assert event.title == "Brand Refresh"
        assert event.color == PROJECT_COLOR
        assert event.end_date == date(2025, 7, 31)

    def test_completed_project_uses_actual_end(self):
        project = Project(
            id="P",
            title="Old Site",
            start_date=date(2025, 5, 1),
            end_date=date(2025, 6, 30),
            actual_end_date=date(2025, 6, 20),
        )
        (event,) = projects_to_events([project])
        assert event.title == "Old Site (Completed)"
        assert event.color == COMPLETED_COLOR
        assert event.end_date == date(2025, 6, 20)

    def test_project_stage_ids(self):
        project = Project(
            id="P",
            title="Site",
            stage_dates=[StageDate(id="d", stage_name="Design", start_date=date(2025, 6, 1), end_date=date(2025, 6, 5))],
        )
        (event,) = projects_to_events([project])
        assert event.id == "project-stage-d"
        assert event.metadata.project_id == "P"


def test_normalize_orders_projects_campaigns_tasks(snapshot):
    events = normalize(snapshot.tasks, snapshot.campaigns, snapshot.projects)
    assert [e.id for e in events] == ["project-P", "campaign-C", "stage-s1", "task-T"]
    # Every event has a non-negative range
    assert all(e.start_date <= e.end_date for e in events)
