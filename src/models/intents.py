"""
Intents emitted by the interaction controller.

An intent describes a desired new date range; applying it is the
scheduler's job.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from models.events import CalendarEvent, EventKind


class IntentAction(str, Enum):
    MOVE = "move"
    RESIZE = "resize"


@dataclass(frozen=True)
class DateChangeIntent:
    """Move or resize of an event already on the calendar."""

    action: IntentAction
    event_id: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class ScheduleIntent:
    """Drop of an unscheduled item onto a calendar cell."""

    item_kind: EventKind
    item_id: str
    start_date: date
    end_date: date
    parent_id: str | None = None  # Owning project/campaign/task for stages
    parent_kind: EventKind | None = None


@dataclass(frozen=True)
class ClickIntent:
    """Press released below the drag threshold: select the event."""

    event: CalendarEvent


@dataclass(frozen=True)
class DroppedItem:
    """Metadata attached to an item dragged from the unscheduled list."""

    kind: EventKind
    id: str
    title: str = ""
    parent_id: str | None = None
    parent_kind: EventKind | None = None
