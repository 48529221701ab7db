"""Calendar layout and scheduling endpoints."""

import time
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status

from api.dependencies import get_scheduler, get_snapshot, verify_api_key
from api.logging import RequestLog, log_request
from api.models.requests import DateChangeRequest, ScheduleRequest, ShiftPreviewRequest
from api.models.responses import (
    CommitResponse,
    ContinuousLayoutResponse,
    DayEventsResponse,
    ErrorCodes,
    EventResponse,
    MonthBlockResponse,
    MonthLayoutResponse,
    NotificationResponse,
    PlacementResponse,
    ShiftStatsResponse,
    WeekRowResponse,
)
from core.validation import SchedulingError
from models.events import EventKind
from models.intents import DateChangeIntent, DroppedItem, IntentAction
from services.calendar import (
    EventFilters,
    ExpansionState,
    Placement,
    day_events,
    render_continuous,
    render_month,
)
from services.interaction import InteractionController
from services.scheduler import CommitResult, PlanningSnapshot, Scheduler

router = APIRouter(prefix="/v1/calendar", dependencies=[Depends(verify_api_key)])

# Failed commit -> HTTP status
COMMIT_ERROR_STATUS = {
    ErrorCodes.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.PERSISTENCE_FAILURE: status.HTTP_502_BAD_GATEWAY,
}


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def placement_response(p: Placement) -> PlacementResponse:
    return PlacementResponse(
        event_id=p.event_id,
        title=p.title,
        color=p.color,
        kind=p.kind.value,
        row=p.row,
        start_col=p.start_col,
        span=p.span,
        layer=p.layer,
        is_start=p.is_start,
        is_end=p.is_end,
        segment_start=p.segment_start,
        segment_end=p.segment_end,
    )


def get_filters(
    tasks: bool = True, campaigns: bool = True, projects: bool = True, stages: bool = True
) -> EventFilters:
    """Event kind filters from query parameters."""
    return EventFilters(tasks=tasks, campaigns=campaigns, projects=projects, stages=stages)


def commit_response(result: CommitResult, request_log: RequestLog) -> CommitResponse:
    """
    Record the outcome and convert it to a response.

    Raises:
        HTTPException: when the commit was rejected or the primary update failed
    """
    request_log.updates_attempted = result.attempted
    request_log.updates_applied = result.applied
    for notification in result.notifications:
        request_log.details.append(("notification", notification.message))

    if not result.ok:
        messages = [n.message for n in result.notifications if n.level == "error"]
        raise HTTPException(
            status_code=COMMIT_ERROR_STATUS.get(
                result.error_code, status.HTTP_422_UNPROCESSABLE_ENTITY
            ),
            detail={
                "error": messages[0] if messages else "Update rejected",
                "code": result.error_code or ErrorCodes.SCHEDULING_ERROR,
                "details": messages[1:],
            },
        )

    return CommitResponse(
        ok=result.ok,
        attempted=result.attempted,
        applied=result.applied,
        notifications=[
            NotificationResponse(level=n.level, message=n.message) for n in result.notifications
        ],
    )


async def run_logged(request_log: RequestLog, start_time: float, work):
    """Await a commit coroutine, logging the outcome whatever happens."""
    try:
        response = await work
        request_log.status_code = 200
        return response

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
        else:
            request_log.error_message = str(e.detail)
        raise

    except Exception as e:
        # Unexpected errors
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Internal server error",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    finally:
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        # Always log the request
        try:
            log_request(request_log)
        except Exception:
            # Don't fail the request if logging fails
            pass


# =============================================================================
# LAYOUT
# =============================================================================


@router.get("/month/{year}/{month}", response_model=MonthLayoutResponse)
async def month_layout(
    year: Annotated[int, Path(ge=1, le=9999)],
    month: Annotated[int, Path(ge=1, le=12)],
    filters: EventFilters = Depends(get_filters),
    snapshot: PlanningSnapshot = Depends(get_snapshot),
):
    """Fixed 6-week month grid with every layer."""
    layout = render_month(snapshot.events, year, month, filters)
    return MonthLayoutResponse(
        year=layout.year,
        month=layout.month,
        window_start=layout.window_start,
        window_end=layout.window_end,
        placements=[placement_response(p) for p in layout.placements],
        layer_counts=layout.layer_counts,
    )


@router.get("/continuous", response_model=ContinuousLayoutResponse)
async def continuous_layout(
    anchor: Annotated[date | None, Query(description="Month to center on (YYYY-MM-DD)")] = None,
    expanded: Annotated[list[str], Query(description="Expanded week row keys")] = [],
    filters: EventFilters = Depends(get_filters),
    snapshot: PlanningSnapshot = Depends(get_snapshot),
):
    """Continuously scrolling grid with collapsed overflow rows."""
    anchor = anchor or date.today()
    blocks = render_continuous(
        snapshot.events, anchor, ExpansionState(set(expanded)), filters
    )
    return ContinuousLayoutResponse(
        anchor=anchor,
        months=[
            MonthBlockResponse(
                month_key=block.month_key,
                weeks=[
                    WeekRowResponse(
                        row_key=week.row_key,
                        week_start=week.week_start,
                        week_end=week.week_end,
                        placements=[placement_response(p) for p in week.placements],
                        hidden_count=week.hidden_count,
                        expanded=week.expanded,
                    )
                    for week in block.weeks
                ],
            )
            for block in blocks
        ],
    )


@router.get("/day/{day}", response_model=DayEventsResponse)
async def day_listing(
    day: date,
    filters: EventFilters = Depends(get_filters),
    snapshot: PlanningSnapshot = Depends(get_snapshot),
):
    """Every event on one day, including layers hidden behind "+N more"."""
    return DayEventsResponse(
        day=day,
        events=[
            EventResponse(
                id=e.id,
                title=e.title,
                start_date=e.start_date,
                end_date=e.end_date,
                color=e.color,
                kind=e.kind.value,
            )
            for e in day_events(snapshot.events, day, filters)
        ],
    )


# =============================================================================
# SCHEDULING
# =============================================================================


@router.post("/intents", response_model=CommitResponse)
async def commit_intent(
    request: Request,
    body: DateChangeRequest,
    snapshot: PlanningSnapshot = Depends(get_snapshot),
    scheduler: Scheduler = Depends(get_scheduler),
):
    """
    Apply a committed move or resize.

    Container changes cascade to their dependents; the response lists the
    notifications to show.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/calendar/intents",
        method="POST",
        client_ip=get_client_ip(request),
        event_id=body.event_id,
    )

    async def work():
        intent = DateChangeIntent(
            action=IntentAction(body.action),
            event_id=body.event_id,
            start_date=body.start_date,
            end_date=body.end_date,
        )
        result = await scheduler.apply(intent, snapshot)
        return commit_response(result, request_log)

    return await run_logged(request_log, start_time, work())


@router.post("/schedule", response_model=CommitResponse)
async def schedule_item(
    request: Request,
    body: ScheduleRequest,
    snapshot: PlanningSnapshot = Depends(get_snapshot),
    scheduler: Scheduler = Depends(get_scheduler),
):
    """Schedule an unscheduled item dropped on a calendar cell."""
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/calendar/schedule",
        method="POST",
        client_ip=get_client_ip(request),
        event_id=f"{body.item_kind}-{body.item_id}",
    )

    async def work():
        item = DroppedItem(
            kind=EventKind(body.item_kind),
            id=body.item_id,
            parent_id=body.parent_id,
            parent_kind=EventKind(body.parent_kind) if body.parent_kind else None,
        )
        intent = InteractionController().drop_external(item, body.drop_date)
        result = await scheduler.schedule(intent, snapshot)
        return commit_response(result, request_log)

    return await run_logged(request_log, start_time, work())


@router.post("/auto-schedule", response_model=CommitResponse)
async def auto_schedule(
    request: Request,
    snapshot: PlanningSnapshot = Depends(get_snapshot),
    scheduler: Scheduler = Depends(get_scheduler),
):
    """Place every undated task at its campaign's start."""
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/calendar/auto-schedule",
        method="POST",
        client_ip=get_client_ip(request),
    )

    async def work():
        result = await scheduler.auto_schedule_tasks(snapshot)
        return commit_response(result, request_log)

    return await run_logged(request_log, start_time, work())


@router.post("/shift-preview", response_model=ShiftStatsResponse)
async def shift_preview(
    body: ShiftPreviewRequest,
    snapshot: PlanningSnapshot = Depends(get_snapshot),
    scheduler: Scheduler = Depends(get_scheduler),
):
    """How many dependents a container move would shift, and by how much."""
    try:
        stats = scheduler.preview_shift(
            EventKind(body.container_kind),
            body.container_id,
            body.new_start,
            body.new_end,
            snapshot,
            body.clamp,
        )
    except SchedulingError as e:
        raise HTTPException(
            status_code=COMMIT_ERROR_STATUS.get(e.code, status.HTTP_422_UNPROCESSABLE_ENTITY),
            detail={"error": str(e), "code": e.code, "details": []},
        )

    return ShiftStatsResponse(
        affected_count=stats.affected_count,
        days_difference=stats.days_difference,
        direction=stats.direction,
        affected_ids=stats.affected_ids,
    )
