"""Pydantic request bodies for calendar endpoints."""

from datetime import date
from typing import Literal

from pydantic import BaseModel


class DateChangeRequest(BaseModel):
    """Committed move or resize gesture."""

    action: Literal["move", "resize"]
    event_id: str
    start_date: date
    end_date: date


class ScheduleRequest(BaseModel):
    """Drop of an unscheduled item on a calendar cell."""

    item_kind: Literal["task", "campaign", "project", "stage"]
    item_id: str
    drop_date: date
    parent_id: str | None = None
    parent_kind: Literal["task", "campaign", "project"] | None = None


class ShiftPreviewRequest(BaseModel):
    """Container start change to preview before confirming."""

    container_kind: Literal["campaign", "project"]
    container_id: str
    new_start: date
    new_end: date | None = None
    clamp: bool | None = None
