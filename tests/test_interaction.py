"""Tests for the drag-move / drag-resize state machine."""

from datetime import date

import pytest

from models.events import CalendarEvent, EventKind, EventSegment
from models.intents import ClickIntent, DateChangeIntent, DroppedItem, IntentAction
from services.interaction import (
    GestureInProgressError,
    GestureMode,
    InteractionController,
    ResizeHandle,
)


@pytest.fixture
def event():
    """Jun 2 - Jun 4 (two days long)."""
    return CalendarEvent(
        id="task-T",
        title="Draft copy",
        start_date=date(2025, 6, 2),
        end_date=date(2025, 6, 4),
        color="#3b82f6",
        kind=EventKind.TASK,
    )


def grid_resolver(x: float, y: float) -> date | None:
    """One 100px column per day of June, off-grid below y=0."""
    if y < 0:
        return None
    return date(2025, 6, 1 + int(x // 100))


class TestMove:
    def test_move_preserves_duration(self, event):
        controller = InteractionController()
        controller.begin_move(event)
        assert controller.mode == GestureMode.MOVING

        controller.update_hover(date(2025, 6, 10))
        assert controller.preview() == (date(2025, 6, 10), date(2025, 6, 12))

        intent = controller.commit()
        assert intent == DateChangeIntent(IntentAction.MOVE, "task-T", date(2025, 6, 10), date(2025, 6, 12))
        assert controller.mode == GestureMode.IDLE

    def test_off_grid_hover_shows_original_and_commits_nothing(self, event):
        controller = InteractionController()
        controller.begin_move(event)
        controller.update_hover(date(2025, 6, 10))
        controller.update_hover(None)
        assert controller.preview() == (date(2025, 6, 2), date(2025, 6, 4))
        assert controller.commit() is None
        assert not controller.is_active

    def test_move_onto_same_date_still_emits(self, event):
        controller = InteractionController()
        controller.begin_move(event)
        controller.update_hover(date(2025, 6, 2))
        intent = controller.commit()
        assert (intent.start_date, intent.end_date) == (event.start_date, event.end_date)

    def test_cancel_returns_to_idle(self, event):
        controller = InteractionController()
        controller.begin_move(event)
        controller.cancel()
        assert controller.session is None
        assert controller.preview() is None
        assert controller.commit() is None

    def test_second_gesture_is_rejected(self, event):
        controller = InteractionController()
        controller.begin_move(event)
        with pytest.raises(GestureInProgressError):
            controller.begin_resize(event, ResizeHandle.END)


class TestResize:
    def test_end_handle_extends(self, event):
        controller = InteractionController()
        controller.begin_resize(event, ResizeHandle.END)
        controller.update_hover(date(2025, 6, 8))
        intent = controller.commit()
        assert intent.action == IntentAction.RESIZE
        assert (intent.start_date, intent.end_date) == (date(2025, 6, 2), date(2025, 6, 8))

    def test_start_handle_past_end_collapses_to_one_day(self, event):
        controller = InteractionController()
        controller.begin_resize(event, "start")
        controller.update_hover(date(2025, 6, 9))
        assert controller.preview() == (date(2025, 6, 4), date(2025, 6, 4))

    def test_end_handle_before_start_collapses_to_one_day(self, event):
        controller = InteractionController()
        controller.begin_resize(event, ResizeHandle.END)
        controller.update_hover(date(2025, 5, 28))
        intent = controller.commit()
        assert intent.start_date == intent.end_date == date(2025, 6, 2)

    def test_resize_needs_a_handle(self, event):
        with pytest.raises(ValueError):
            InteractionController().begin_resize(event, ResizeHandle.NONE)


class TestPointerProtocol:
    def test_short_press_is_a_click(self, event):
        controller = InteractionController(grid_resolver)
        controller.press(event, 150, 10)
        assert controller.pointer_move(153, 13) is None  # 4.2px
        result = controller.release(153, 13)
        assert result == ClickIntent(event)
        assert controller.mode == GestureMode.IDLE

    def test_travel_exactly_at_threshold_does_not_drag(self, event):
        controller = InteractionController(grid_resolver)
        controller.press(event, 150, 10)
        assert controller.pointer_move(153, 14) is None  # exactly 5px
        assert not controller.is_active

    def test_drag_past_threshold_moves(self, event):
        controller = InteractionController(grid_resolver)
        controller.press(event, 150, 10)
        session = controller.pointer_move(450, 10)
        assert session.mode == GestureMode.MOVING
        assert session.live_over_date == date(2025, 6, 5)

        intent = controller.release(750, 10)
        assert (intent.start_date, intent.end_date) == (date(2025, 6, 8), date(2025, 6, 10))
        assert controller.mode == GestureMode.IDLE

    def test_release_past_threshold_without_move_is_a_move(self, event):
        controller = InteractionController(grid_resolver)
        controller.press(event, 150, 10)
        intent = controller.release(750, 10)
        assert intent == DateChangeIntent(IntentAction.MOVE, "task-T", date(2025, 6, 8), date(2025, 6, 10))
        assert controller.mode == GestureMode.IDLE

    def test_second_press_replaces_the_first(self, event):
        other = CalendarEvent(
            id="campaign-C",
            title="Summer Launch",
            start_date=date(2025, 6, 1),
            end_date=date(2025, 6, 10),
            color="#8b5cf6",
            kind=EventKind.CAMPAIGN,
        )
        controller = InteractionController(grid_resolver)
        controller.press(event, 150, 10)
        controller.press(other, 350, 10)
        assert controller.release(351, 10) == ClickIntent(other)
        assert controller.release(351, 10) is None

    def test_resize_after_press_drops_the_click(self, event):
        controller = InteractionController(grid_resolver)
        controller.press(event, 350, 10)
        controller.begin_resize(event, ResizeHandle.END)
        intent = controller.release(550, 10)
        assert intent == DateChangeIntent(IntentAction.RESIZE, "task-T", date(2025, 6, 2), date(2025, 6, 6))

    def test_release_off_grid_cancels(self, event):
        controller = InteractionController(grid_resolver)
        controller.press(event, 150, 10)
        controller.pointer_move(450, 10)
        assert controller.release(450, -20) is None
        assert controller.mode == GestureMode.IDLE

    def test_release_without_press(self):
        assert InteractionController(grid_resolver).release(10, 10) is None


class TestDropExternal:
    def test_project_drop_gets_one_day_span(self):
        item = DroppedItem(kind=EventKind.PROJECT, id="P2", title="New Site")
        intent = InteractionController().drop_external(item, date(2025, 6, 12))
        assert intent.item_kind == EventKind.PROJECT
        assert (intent.start_date, intent.end_date) == (date(2025, 6, 12), date(2025, 6, 13))

    def test_stage_drop_keeps_parent(self):
        item = DroppedItem(kind=EventKind.STAGE, id="s2", parent_id="C", parent_kind=EventKind.CAMPAIGN)
        intent = InteractionController().drop_external(item, date(2025, 6, 5), duration_days=3)
        assert intent.parent_id == "C"
        assert intent.parent_kind == EventKind.CAMPAIGN
        assert intent.end_date == date(2025, 6, 8)


def test_handles_only_on_real_boundaries(event):
    middle = EventSegment(
        event=event,
        segment_start=date(2025, 6, 3),
        segment_end=date(2025, 6, 3),
        is_start=False,
        is_end=False,
        row=0,
        start_col=2,
        span=1,
    )
    assert InteractionController.handles_for(middle) == []
    first = EventSegment(event, date(2025, 6, 2), date(2025, 6, 4), True, True, 0, 1, 3)
    assert InteractionController.handles_for(first) == [ResizeHandle.START, ResizeHandle.END]
