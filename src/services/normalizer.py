"""
Convert planning records into calendar events.

Output order (projects, then campaigns, then tasks, each followed by its
stages) is the default stacking priority when layers tie.
"""

from core.config import (
    CAMPAIGN_COLOR,
    COMPLETED_COLOR,
    PROJECT_COLOR,
    STAGE_COLOR,
    TASK_COLOR,
)
from models.entities import Campaign, Project, StageDate, Task
from models.events import CalendarEvent, EventKind, EventMetadata

# Event id prefix per stage owner
STAGE_ID_PREFIX = {
    EventKind.CAMPAIGN: "stage",
    EventKind.PROJECT: "project-stage",
    EventKind.TASK: "task-stage",
}


def stage_events(
    stages: list[StageDate],
    parent_kind: EventKind,
    parent_id: str,
    parent_title: str,
) -> list[CalendarEvent]:
    """One event per stage that has both dates."""
    events = []
    back_ref = {
        EventKind.PROJECT: "project_id",
        EventKind.CAMPAIGN: "campaign_id",
        EventKind.TASK: "task_id",
    }[parent_kind]

    for stage in stages:
        if not stage.is_scheduled:
            continue
        start, end = stage.start_date, stage.end_date
        if end < start:
            end = start
        events.append(
            CalendarEvent(
                id=f"{STAGE_ID_PREFIX[parent_kind]}-{stage.id}",
                title=f"{parent_title}: {stage.stage_name}",
                start_date=start,
                end_date=end,
                color=stage.color or STAGE_COLOR,
                kind=EventKind.STAGE,
                metadata=EventMetadata(
                    stage_id=stage.id,
                    parent_kind=parent_kind,
                    description=stage.stage_name,
                    completed=stage.completed,
                    **{back_ref: parent_id},
                ),
            )
        )
    return events


def tasks_to_events(tasks: list[Task], campaigns: list[Campaign]) -> list[CalendarEvent]:
    """
    Convert tasks to calendar events.

    Tasks without a due date are unscheduled and skipped. A task with no
    start date becomes a single-day event on its due date.
    """
    campaign_names = {c.id: c.title for c in campaigns}
    events = []

    for task in tasks:
        if task.due_date is not None:
            start = task.start_date or task.due_date
            if start > task.due_date:
                start = task.due_date

            campaign_name = campaign_names.get(task.campaign_id) if task.campaign_id else None
            title = f"{task.title} ({campaign_name})" if campaign_name else task.title

            events.append(
                CalendarEvent(
                    id=f"task-{task.id}",
                    title=title,
                    start_date=start,
                    end_date=task.due_date,
                    color=COMPLETED_COLOR if task.completed else TASK_COLOR,
                    kind=EventKind.TASK,
                    metadata=EventMetadata(
                        task_id=task.id,
                        campaign_id=task.campaign_id,
                        campaign_name=campaign_name,
                        description=task.description,
                        completed=task.completed,
                        assigned_to=tuple(task.assigned_to),
                    ),
                )
            )

        events.extend(stage_events(task.stage_dates, EventKind.TASK, task.id, task.title))

    return events


def campaigns_to_events(campaigns: list[Campaign]) -> list[CalendarEvent]:
    """Convert campaigns (and their stages) to calendar events."""
    events = []

    for campaign in campaigns:
        if campaign.is_scheduled and campaign.end_date >= campaign.start_date:
            events.append(
                CalendarEvent(
                    id=f"campaign-{campaign.id}",
                    title=campaign.title,
                    start_date=campaign.start_date,
                    end_date=campaign.end_date,
                    color=CAMPAIGN_COLOR,
                    kind=EventKind.CAMPAIGN,
                    metadata=EventMetadata(
                        campaign_id=campaign.id,
                        project_id=campaign.project_id,
                        campaign_name=campaign.title,
                    ),
                )
            )

        # Stages render even when the campaign itself has no dates
        events.extend(
            stage_events(campaign.stage_dates, EventKind.CAMPAIGN, campaign.id, campaign.title)
        )

    return events


def projects_to_events(projects: list[Project]) -> list[CalendarEvent]:
    """Convert projects (and their stages) to calendar events."""
    events = []

    for project in projects:
        if project.is_scheduled and project.effective_end >= project.start_date:
            completed = project.actual_end_date is not None
            events.append(
                CalendarEvent(
                    id=f"project-{project.id}",
                    title=f"{project.title} (Completed)" if completed else project.title,
                    start_date=project.start_date,
                    end_date=project.effective_end,
                    color=COMPLETED_COLOR if completed else PROJECT_COLOR,
                    kind=EventKind.PROJECT,
                    metadata=EventMetadata(
                        project_id=project.id,
                        description=project.description,
                        completed=completed,
                    ),
                )
            )

        events.extend(
            stage_events(project.stage_dates, EventKind.PROJECT, project.id, project.title)
        )

    return events


def normalize(
    tasks: list[Task],
    campaigns: list[Campaign],
    projects: list[Project],
) -> list[CalendarEvent]:
    """Convert all planning data to calendar events in stacking order."""
    return [
        *projects_to_events(projects),
        *campaigns_to_events(campaigns),
        *tasks_to_events(tasks, campaigns),
    ]
