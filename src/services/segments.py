"""
Split events into per-week-row segments for a visible calendar window.
"""

from datetime import date

from core.config import DAYS_PER_WEEK
from core.dates import add_days, days_between
from models.events import CalendarEvent, EventSegment


def segment(event: CalendarEvent, window_start: date, window_end: date) -> list[EventSegment]:
    """
    Break an event into one segment per week row it touches.

    The window must start on the first column of a row. Segments never span
    two rows; `is_start`/`is_end` refer to the event's real boundaries, not
    the clamped ones.
    """
    segments: list[EventSegment] = []

    # Clamp event to window bounds
    display_start = max(event.start_date, window_start)
    display_end = min(event.end_date, window_end)

    if display_start > display_end:
        return segments  # Not visible in this window

    current = display_start
    while current <= display_end:
        days_since_start = days_between(window_start, current)
        row = days_since_start // DAYS_PER_WEEK
        start_col = days_since_start % DAYS_PER_WEEK

        # Segment ends at the row's last day or the event's end
        row_end = add_days(window_start, (row + 1) * DAYS_PER_WEEK - 1)
        segment_end = min(display_end, row_end)

        segments.append(
            EventSegment(
                event=event,
                segment_start=current,
                segment_end=segment_end,
                is_start=current == event.start_date,
                is_end=segment_end == event.end_date,
                row=row,
                start_col=start_col,
                span=days_between(current, segment_end) + 1,
            )
        )

        current = add_days(segment_end, 1)

    return segments


def segment_all(
    events: list[CalendarEvent], window_start: date, window_end: date
) -> list[EventSegment]:
    """Segments for every event, preserving event order."""
    return [s for event in events for s in segment(event, window_start, window_end)]


def events_for_date(events: list[CalendarEvent], day: date) -> list[CalendarEvent]:
    """Events whose range covers the given day."""
    return [e for e in events if e.start_date <= day <= e.end_date]
