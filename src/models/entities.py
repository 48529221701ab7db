"""
Planning records consumed by the calendar core.

The core treats these as in-memory snapshots handed in on every call;
persistence lives with the collaborator (see core.database).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import TypedDict

from core.dates import to_day


@dataclass
class StageDate:
    """Stage marker attached to a project, campaign or task."""

    id: str
    stage_name: str
    start_date: date | None = None
    end_date: date | None = None
    color: str | None = None
    completed: bool = False

    @property
    def is_scheduled(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @classmethod
    def from_dict(cls, data: dict) -> "StageDate":
        return cls(
            id=str(data["id"]),
            stage_name=data.get("stage_name", ""),
            start_date=to_day(data.get("start_date")),
            end_date=to_day(data.get("end_date")),
            color=data.get("color"),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class Task:
    id: str
    title: str
    campaign_id: str | None = None
    start_date: date | None = None
    due_date: date | None = None
    completed: bool = False
    description: str = ""
    assigned_to: list[str] = field(default_factory=list)
    stage_dates: list[StageDate] = field(default_factory=list)

    @property
    def is_scheduled(self) -> bool:
        return self.due_date is not None

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            campaign_id=data.get("campaign_id"),
            start_date=to_day(data.get("start_date")),
            due_date=to_day(data.get("due_date")),
            completed=bool(data.get("completed", False)),
            description=data.get("description") or "",
            assigned_to=list(data.get("assigned_to") or []),
            stage_dates=[StageDate.from_dict(s) for s in data.get("stage_dates") or []],
        )


@dataclass
class Campaign:
    id: str
    title: str
    project_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    stage_dates: list[StageDate] = field(default_factory=list)

    @property
    def is_scheduled(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @classmethod
    def from_dict(cls, data: dict) -> "Campaign":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            project_id=data.get("project_id"),
            start_date=to_day(data.get("start_date")),
            end_date=to_day(data.get("end_date")),
            stage_dates=[StageDate.from_dict(s) for s in data.get("stage_dates") or []],
        )


@dataclass
class Project:
    id: str
    title: str
    description: str = ""
    start_date: date | None = None
    end_date: date | None = None  # Target end
    actual_end_date: date | None = None
    stage_dates: list[StageDate] = field(default_factory=list)

    @property
    def effective_end(self) -> date | None:
        """Actual end when the project is finished, target end otherwise."""
        return self.actual_end_date or self.end_date

    @property
    def is_scheduled(self) -> bool:
        return self.start_date is not None and self.effective_end is not None

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description") or "",
            start_date=to_day(data.get("start_date")),
            end_date=to_day(data.get("end_date")),
            actual_end_date=to_day(data.get("actual_end_date")),
            stage_dates=[StageDate.from_dict(s) for s in data.get("stage_dates") or []],
        )


# =============================================================================
# COLLABORATOR UPDATE PAYLOADS
# =============================================================================


class TaskUpdate(TypedDict, total=False):
    start_date: date | None
    due_date: date | None
    stage_dates: list[StageDate]


class CampaignUpdate(TypedDict, total=False):
    start_date: date | None
    end_date: date | None
    stage_dates: list[StageDate]


class ProjectUpdate(TypedDict, total=False):
    start_date: date | None
    end_date: date | None
    stage_dates: list[StageDate]
