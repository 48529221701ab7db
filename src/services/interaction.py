"""
Drag-move and drag-resize state machine.

One controller serves every render strategy. It owns at most one
DragSession; the front end feeds it pointer positions and the controller
turns them into dates through the injected hit-testing callable.

States:
    idle -> moving -> idle
    idle -> resizing -> idle
"""

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

from core.config import DEFAULT_SCHEDULE_DAYS, DRAG_THRESHOLD
from core.dates import add_days, to_day
from models.events import CalendarEvent, EventSegment
from models.intents import (
    ClickIntent,
    DateChangeIntent,
    DroppedItem,
    IntentAction,
    ScheduleIntent,
)

DateResolver = Callable[[float, float], date | None]


class GestureMode(str, Enum):
    IDLE = "idle"
    MOVING = "moving"
    RESIZING = "resizing"


class ResizeHandle(str, Enum):
    START = "start"
    END = "end"
    NONE = "none"


class GestureInProgressError(RuntimeError):
    """A gesture was started while another one is still active."""


@dataclass
class DragSession:
    event_id: str
    mode: GestureMode
    resize_handle: ResizeHandle
    live_start: date
    live_end: date
    original_start: date
    original_end: date
    live_over_date: date | None = None

    @property
    def original_duration_days(self) -> int:
        return (self.original_end - self.original_start).days


@dataclass
class PendingPress:
    """Pointer-down on an event that has not yet travelled far enough to drag."""

    event: CalendarEvent
    x: float
    y: float


class InteractionController:
    """
    Stateful session for one in-progress move or resize gesture.

    Args:
        resolve_date_at_position: maps a pointer position to the date of the
            calendar cell under it, or None when no cell is hit
        drag_threshold: pointer travel needed before a press becomes a move
    """

    def __init__(
        self,
        resolve_date_at_position: DateResolver | None = None,
        drag_threshold: float = DRAG_THRESHOLD,
    ):
        self._resolve = resolve_date_at_position
        self.drag_threshold = drag_threshold
        self._session: DragSession | None = None
        self._pending: PendingPress | None = None

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def mode(self) -> GestureMode:
        return self._session.mode if self._session else GestureMode.IDLE

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def _ensure_idle(self) -> None:
        if self._session is not None:
            raise GestureInProgressError(
                f"Cannot start a new gesture while {self._session.mode.value} "
                f"'{self._session.event_id}'"
            )

    def _resolve_position(self, x: float, y: float) -> date | None:
        if self._resolve is None:
            return None
        return to_day(self._resolve(x, y))

    # -------------------------------------------------------------------------
    # Pointer protocol
    # -------------------------------------------------------------------------

    def press(self, event: CalendarEvent, x: float, y: float) -> None:
        """
        Pointer-down on an event surface; may become a click or a move.

        A press that is still pending lost its pointer-up and is replaced.
        """
        self._ensure_idle()
        self._pending = PendingPress(event=event, x=x, y=y)

    def pointer_move(self, x: float, y: float) -> DragSession | None:
        """Track pointer travel and, during a gesture, the hovered date."""
        if self._pending is not None and self._session is None:
            travel = math.hypot(x - self._pending.x, y - self._pending.y)
            if travel <= self.drag_threshold:
                return None
            pending, self._pending = self._pending, None
            self.begin_move(pending.event)

        if self._session is None:
            return None

        self.update_hover(self._resolve_position(x, y))
        return self._session

    def release(
        self, x: float | None = None, y: float | None = None
    ) -> ClickIntent | DateChangeIntent | None:
        """
        Pointer-up. A press released within the threshold is a click;
        one released past it is a move. An active gesture is committed.
        """
        if self._pending is not None:
            pending, self._pending = self._pending, None
            if x is None or y is None:
                return ClickIntent(event=pending.event)
            if math.hypot(x - pending.x, y - pending.y) <= self.drag_threshold:
                return ClickIntent(event=pending.event)
            self.begin_move(pending.event)

        if self._session is None:
            return None

        if x is not None and y is not None:
            self.update_hover(self._resolve_position(x, y))
        return self.commit()

    # -------------------------------------------------------------------------
    # Gesture API
    # -------------------------------------------------------------------------

    def begin_move(self, event: CalendarEvent) -> DragSession:
        """Start a move; any pending press is absorbed into it."""
        self._ensure_idle()
        self._pending = None
        self._session = DragSession(
            event_id=event.id,
            mode=GestureMode.MOVING,
            resize_handle=ResizeHandle.NONE,
            live_start=event.start_date,
            live_end=event.end_date,
            original_start=event.start_date,
            original_end=event.end_date,
        )
        return self._session

    def begin_resize(self, event: CalendarEvent, handle: ResizeHandle | str) -> DragSession:
        """Start a resize from one edge; any pending press is discarded."""
        handle = ResizeHandle(handle)
        if handle == ResizeHandle.NONE:
            raise ValueError("Resize needs a start or end handle")
        self._ensure_idle()
        self._pending = None
        self._session = DragSession(
            event_id=event.id,
            mode=GestureMode.RESIZING,
            resize_handle=handle,
            live_start=event.start_date,
            live_end=event.end_date,
            original_start=event.start_date,
            original_end=event.end_date,
        )
        return self._session

    def update_hover(self, day: date | None) -> DragSession | None:
        """
        Record the date under the pointer and refresh the live preview.

        Off-grid positions (None) fall back to the original range.
        """
        session = self._session
        if session is None:
            return None

        session.live_over_date = day
        if day is None:
            session.live_start = session.original_start
            session.live_end = session.original_end
            return session

        if session.mode == GestureMode.MOVING:
            session.live_start = day
            session.live_end = add_days(day, session.original_duration_days)
        elif session.resize_handle == ResizeHandle.START:
            # Start may not pass the end; same-day result is allowed
            session.live_start = min(day, session.live_end)
        else:
            session.live_end = max(day, session.live_start)

        return session

    def preview(self) -> tuple[date, date] | None:
        """Live range to draw while the gesture is in progress."""
        if self._session is None:
            return None
        return self._session.live_start, self._session.live_end

    def commit(self) -> DateChangeIntent | None:
        """
        End the gesture and return the resulting intent.

        The session is discarded whatever the outcome. Nothing is emitted
        when the last hover did not resolve to a date.
        """
        session, self._session = self._session, None
        if session is None or session.live_over_date is None:
            return None

        action = IntentAction.MOVE if session.mode == GestureMode.MOVING else IntentAction.RESIZE
        return DateChangeIntent(
            action=action,
            event_id=session.event_id,
            start_date=session.live_start,
            end_date=session.live_end,
        )

    def cancel(self) -> None:
        self._session = None
        self._pending = None

    # -------------------------------------------------------------------------
    # Session-less operations
    # -------------------------------------------------------------------------

    def drop_external(
        self, item: DroppedItem, day: date, duration_days: int = DEFAULT_SCHEDULE_DAYS
    ) -> ScheduleIntent:
        """Schedule an item dropped from the unscheduled list onto a cell."""
        start = to_day(day)
        return ScheduleIntent(
            item_kind=item.kind,
            item_id=item.id,
            start_date=start,
            end_date=add_days(start, duration_days),
            parent_id=item.parent_id,
            parent_kind=item.parent_kind,
        )

    @staticmethod
    def handles_for(seg: EventSegment) -> list[ResizeHandle]:
        """Resize handles a segment may render (only on real boundaries)."""
        handles = []
        if seg.is_start:
            handles.append(ResizeHandle.START)
        if seg.is_end:
            handles.append(ResizeHandle.END)
        return handles
