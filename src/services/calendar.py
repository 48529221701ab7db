"""
Calendar render strategies: fixed month grid and continuous multi-month grid.

Both strategies share the segment and layout engines and produce plain
placement records; drawing them is the front end's concern.
"""

from dataclasses import dataclass, field
from datetime import date

from core.config import DAYS_PER_WEEK, MAX_VISIBLE_LAYERS, MONTHS_BEFORE, MONTHS_TO_RENDER
from core.dates import add_days, add_months, month_end, month_grid_window, month_start, week_start
from models.events import CalendarEvent, EventKind, EventSegment
from services.layout import layout_bounded, layout_rows
from services.segments import events_for_date, segment_all


# =============================================================================
# VIEW STATE
# =============================================================================


@dataclass
class EventFilters:
    """Which event kinds are shown."""

    tasks: bool = True
    campaigns: bool = True
    projects: bool = True
    stages: bool = True

    def allows(self, kind: EventKind) -> bool:
        return {
            EventKind.TASK: self.tasks,
            EventKind.CAMPAIGN: self.campaigns,
            EventKind.PROJECT: self.projects,
            EventKind.STAGE: self.stages,
        }[kind]

    def apply(self, events: list[CalendarEvent]) -> list[CalendarEvent]:
        return [e for e in events if self.allows(e.kind)]


@dataclass
class ExpansionState:
    """Week rows the user has expanded to show every layer."""

    expanded: set[str] = field(default_factory=set)

    def is_expanded(self, row_key: str) -> bool:
        return row_key in self.expanded

    def expand(self, row_key: str) -> None:
        self.expanded.add(row_key)

    def collapse(self, row_key: str) -> None:
        self.expanded.discard(row_key)

    def toggle(self, row_key: str) -> bool:
        """Flip a row; returns the new expanded state."""
        if row_key in self.expanded:
            self.expanded.remove(row_key)
            return False
        self.expanded.add(row_key)
        return True


# =============================================================================
# RENDER RESULTS
# =============================================================================


@dataclass(frozen=True)
class Placement:
    """One event bar: where it sits on the grid and how it is capped."""

    event_id: str
    title: str
    color: str
    kind: EventKind
    row: int
    start_col: int
    span: int
    layer: int
    is_start: bool
    is_end: bool
    segment_start: date
    segment_end: date

    @classmethod
    def from_segment(cls, seg: EventSegment, layer: int) -> "Placement":
        return cls(
            event_id=seg.event.id,
            title=seg.event.title,
            color=seg.event.color,
            kind=seg.event.kind,
            row=seg.row,
            start_col=seg.start_col,
            span=seg.span,
            layer=layer,
            is_start=seg.is_start,
            is_end=seg.is_end,
            segment_start=seg.segment_start,
            segment_end=seg.segment_end,
        )


@dataclass
class MonthLayout:
    year: int
    month: int
    window_start: date
    window_end: date
    placements: list[Placement] = field(default_factory=list)
    layer_counts: dict[int, int] = field(default_factory=dict)  # row -> layers


@dataclass
class WeekRow:
    row_key: str  # e.g. "2025-06-week-2"
    week_start: date
    week_end: date
    placements: list[Placement] = field(default_factory=list)
    hidden_count: int = 0
    expanded: bool = False


@dataclass
class MonthBlock:
    month_key: str  # e.g. "2025-06"
    month: date
    weeks: list[WeekRow] = field(default_factory=list)


# =============================================================================
# MONTH GRID
# =============================================================================


def render_month(
    events: list[CalendarEvent],
    year: int,
    month: int,
    filters: EventFilters | None = None,
) -> MonthLayout:
    """Lay out the fixed 6-week month grid with unbounded stacking."""
    filters = filters or EventFilters()
    window_start, window_end = month_grid_window(year, month)

    segments = segment_all(filters.apply(events), window_start, window_end)
    rows = layout_rows(segments)

    result = MonthLayout(year=year, month=month, window_start=window_start, window_end=window_end)
    for row in sorted(rows):
        layers = rows[row]
        result.layer_counts[row] = len(layers)
        for layer_idx, layer in enumerate(layers):
            for seg in layer:
                result.placements.append(Placement.from_segment(seg, layer_idx))

    return result


def day_events(
    events: list[CalendarEvent], day: date, filters: EventFilters | None = None
) -> list[CalendarEvent]:
    """Every visible event covering one day, hidden layers included."""
    return events_for_date((filters or EventFilters()).apply(events), day)


# =============================================================================
# CONTINUOUS GRID
# =============================================================================


def continuous_months(
    anchor: date,
    months_to_render: int = MONTHS_TO_RENDER,
    months_before: int = MONTHS_BEFORE,
) -> list[date]:
    """First day of each month rendered around the anchor month."""
    return [add_months(anchor, i - months_before) for i in range(months_to_render)]


def month_weeks(month: date) -> list[tuple[date, date]]:
    """(start, end) of every week row touching the month."""
    first = week_start(month_start(month))
    last = month_end(month)
    weeks = []
    current = first
    while current <= last:
        weeks.append((current, add_days(current, DAYS_PER_WEEK - 1)))
        current = add_days(current, DAYS_PER_WEEK)
    return weeks


def render_week(
    events: list[CalendarEvent],
    row_key: str,
    start: date,
    end: date,
    expansion: ExpansionState,
    max_visible_layers: int = MAX_VISIBLE_LAYERS,
) -> WeekRow:
    """Lay out a single week row with a visible-layer cutoff."""
    week_events = [e for e in events if e.start_date <= end and e.end_date >= start]
    segments = segment_all(week_events, start, end)

    expanded = expansion.is_expanded(row_key)
    bounded = layout_bounded(segments, max_visible_layers)
    layers = bounded.visible_layers
    if expanded:
        layers = layout_bounded(segments, bounded.total_layers).visible_layers

    # hidden_count keeps the collapsed figure so the toggle can still show it
    row = WeekRow(
        row_key=row_key,
        week_start=start,
        week_end=end,
        hidden_count=bounded.hidden_count,
        expanded=expanded,
    )
    for layer_idx, layer in enumerate(layers):
        for seg in layer:
            row.placements.append(Placement.from_segment(seg, layer_idx))
    return row


def render_continuous(
    events: list[CalendarEvent],
    anchor: date,
    expansion: ExpansionState | None = None,
    filters: EventFilters | None = None,
    max_visible_layers: int = MAX_VISIBLE_LAYERS,
    months_to_render: int = MONTHS_TO_RENDER,
    months_before: int = MONTHS_BEFORE,
) -> list[MonthBlock]:
    """Lay out the continuously scrolling grid, month by month, week by week."""
    expansion = expansion or ExpansionState()
    visible = (filters or EventFilters()).apply(events)

    blocks = []
    for month in continuous_months(anchor, months_to_render, months_before):
        month_key = month.strftime("%Y-%m")
        block = MonthBlock(month_key=month_key, month=month)
        for week_idx, (start, end) in enumerate(month_weeks(month)):
            block.weeks.append(
                render_week(
                    visible,
                    f"{month_key}-week-{week_idx}",
                    start,
                    end,
                    expansion,
                    max_visible_layers,
                )
            )
        blocks.append(block)

    return blocks
