"""API Pydantic models."""

from .requests import DateChangeRequest, ScheduleRequest, ShiftPreviewRequest
from .responses import (
    CommitResponse,
    ContinuousLayoutResponse,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    MonthLayoutResponse,
    ShiftStatsResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "MonthLayoutResponse",
    "ContinuousLayoutResponse",
    "CommitResponse",
    "ShiftStatsResponse",
    "DateChangeRequest",
    "ScheduleRequest",
    "ShiftPreviewRequest",
]
