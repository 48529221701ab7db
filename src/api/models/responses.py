"""Pydantic response models for API endpoints."""

from datetime import date

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONTAINMENT_VIOLATION = "CONTAINMENT_VIOLATION"
    MISSING_PREREQUISITE = "MISSING_PREREQUISITE"
    SCHEDULING_ERROR = "SCHEDULING_ERROR"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PlacementResponse(BaseModel):
    """One event bar on the grid."""

    event_id: str
    title: str
    color: str
    kind: str
    row: int
    start_col: int
    span: int
    layer: int
    is_start: bool
    is_end: bool
    segment_start: date
    segment_end: date


class EventResponse(BaseModel):
    id: str
    title: str
    start_date: date
    end_date: date
    color: str
    kind: str


class DayEventsResponse(BaseModel):
    """Everything on one day, for the overflow list of a collapsed row."""

    day: date
    events: list[EventResponse]


class MonthLayoutResponse(BaseModel):
    year: int
    month: int
    window_start: date
    window_end: date
    placements: list[PlacementResponse]
    layer_counts: dict[int, int]


class WeekRowResponse(BaseModel):
    row_key: str
    week_start: date
    week_end: date
    placements: list[PlacementResponse]
    hidden_count: int
    expanded: bool


class MonthBlockResponse(BaseModel):
    month_key: str
    weeks: list[WeekRowResponse]


class ContinuousLayoutResponse(BaseModel):
    anchor: date
    months: list[MonthBlockResponse]


class NotificationResponse(BaseModel):
    level: str  # "success", "warning" or "error"
    message: str


class CommitResponse(BaseModel):
    """Outcome of a move, resize, schedule or auto-schedule request."""

    ok: bool
    attempted: int
    applied: int
    notifications: list[NotificationResponse]


class ShiftStatsResponse(BaseModel):
    affected_count: int
    days_difference: int
    direction: str  # "earlier", "later" or "none"
    affected_ids: list[str]
