"""
Data models for calendar events and their rendered segments.

CalendarEvent instances are rebuilt on every data refresh; only the `id`
(derived from the kind and the source record id) is stable across renders.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class EventKind(str, Enum):
    TASK = "task"
    CAMPAIGN = "campaign"
    PROJECT = "project"
    STAGE = "stage"


@dataclass(frozen=True)
class EventMetadata:
    """Back-references and display data carried by an event."""

    task_id: str | None = None
    campaign_id: str | None = None
    campaign_name: str | None = None
    project_id: str | None = None
    stage_id: str | None = None
    parent_kind: EventKind | None = None  # Stage events only
    description: str = ""
    completed: bool = False
    assigned_to: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CalendarEvent:
    """Normalized calendar event."""

    id: str
    title: str
    start_date: date
    end_date: date
    color: str
    kind: EventKind
    metadata: EventMetadata = field(default_factory=EventMetadata)

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError(
                f"Event '{self.id}' ends ({self.end_date}) before it starts ({self.start_date})"
            )

    @property
    def duration_days(self) -> int:
        """Days between start and end (0 for single-day events)."""
        return (self.end_date - self.start_date).days


@dataclass(frozen=True)
class EventSegment:
    """Portion of an event inside one week row of the visible window."""

    event: CalendarEvent
    segment_start: date
    segment_end: date
    is_start: bool  # Touches the event's real start
    is_end: bool  # Touches the event's real end
    row: int
    start_col: int  # 0-6
    span: int  # 1-7

    @property
    def end_col(self) -> int:
        return self.start_col + self.span - 1

    def overlaps(self, other: "EventSegment") -> bool:
        """Column-range overlap within the same row."""
        return not (self.end_col < other.start_col or self.start_col > other.end_col)
