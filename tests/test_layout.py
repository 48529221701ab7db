"""Tests for first-fit layer stacking."""

from datetime import date, timedelta

import pytest

from models.events import CalendarEvent, EventKind, EventSegment
from services.layout import layout_bounded, layout_rows, place_segments


def make_segment(start_col: int, span: int, row: int = 0, name: str = "e") -> EventSegment:
    day = date(2025, 6, 1) + timedelta(days=row * 7 + start_col)
    event = CalendarEvent(
        id=name,
        title=name,
        start_date=day,
        end_date=day + timedelta(days=span - 1),
        color="#000000",
        kind=EventKind.TASK,
    )
    return EventSegment(
        event=event,
        segment_start=event.start_date,
        segment_end=event.end_date,
        is_start=True,
        is_end=True,
        row=row,
        start_col=start_col,
        span=span,
    )


def test_disjoint_segments_share_layer_zero():
    segments = [make_segment(0, 2, name="a"), make_segment(2, 1, name="b"), make_segment(4, 3, name="c")]
    layers = place_segments(segments)
    assert len(layers) == 1
    assert [s.event.id for s in layers[0]] == ["a", "b", "c"]


@pytest.mark.parametrize("n", [1, 2, 5, 9])
def test_n_mutually_overlapping_segments_need_n_layers(n):
    segments = [make_segment(3, 1 + (i % 4), name=f"e{i}") for i in range(n)]
    assert len(place_segments(segments)) == n


def test_first_fit_reuses_lowest_free_layer():
    a = make_segment(0, 3, name="a")  # cols 0-2
    b = make_segment(1, 3, name="b")  # cols 1-3, overlaps a
    c = make_segment(4, 2, name="c")  # cols 4-5, fits beside a
    layers = place_segments([a, b, c])
    assert [[s.event.id for s in layer] for layer in layers] == [["a", "c"], ["b"]]


def test_touching_columns_overlap():
    a = make_segment(0, 3, name="a")  # ends col 2
    b = make_segment(2, 2, name="b")  # starts col 2
    assert len(place_segments([a, b])) == 2


def test_layout_rows_groups_by_row():
    rows = layout_rows([make_segment(0, 7, row=0), make_segment(0, 7, row=2), make_segment(1, 1, row=0)])
    assert sorted(rows) == [0, 2]
    assert len(rows[0]) == 2
    assert len(rows[2]) == 1


def test_bounded_layout_counts_hidden_segments():
    segments = [make_segment(0, 7, name=f"full{i}") for i in range(5)]
    segments.append(make_segment(0, 1, name="x"))  # layer 5
    segments.append(make_segment(3, 1, name="y"))  # layer 5
    bounded = layout_bounded(segments, 4)
    assert len(bounded.visible_layers) == 4
    assert bounded.total_layers == 6
    assert bounded.hidden_count == 3


def test_bounded_layout_without_overflow():
    bounded = layout_bounded([make_segment(0, 2)], 4)
    assert bounded.hidden_count == 0
    assert bounded.total_layers == 1


def test_bounded_layout_rejects_negative_limit():
    with pytest.raises(ValueError):
        layout_bounded([], -1)
