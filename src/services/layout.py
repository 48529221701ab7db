"""
Stack segments into non-overlapping layers.

Greedy first-fit in input order: a segment goes into the first layer where
it overlaps nothing, otherwise opens a new layer. Not optimal in layer
count, but deterministic and cheap for the handful of segments per row.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from models.events import EventSegment

Layer = list[EventSegment]


@dataclass
class BoundedLayout:
    """Layers of one week row, cut off at a visible maximum."""

    visible_layers: list[Layer] = field(default_factory=list)
    hidden_count: int = 0  # Segments in layers beyond the cutoff
    total_layers: int = 0


def place_segments(segments: list[EventSegment]) -> list[Layer]:
    """First-fit placement of segments that share a row."""
    layers: list[Layer] = []
    for seg in segments:
        for layer in layers:
            if not any(seg.overlaps(existing) for existing in layer):
                layer.append(seg)
                break
        else:
            layers.append([seg])
    return layers


def layout_rows(segments: list[EventSegment]) -> dict[int, list[Layer]]:
    """
    Organize segments by row and layer.

    Returns:
        Dict of row index -> layers, in first-seen row order
    """
    by_row: dict[int, list[EventSegment]] = defaultdict(list)
    for seg in segments:
        by_row[seg.row].append(seg)
    return {row: place_segments(row_segments) for row, row_segments in by_row.items()}


def layout_bounded(segments: list[EventSegment], max_visible_layers: int) -> BoundedLayout:
    """
    Lay out one week row and split it at `max_visible_layers`.

    Used by the continuous view, which renders week by week and hides
    overflow behind a "+ N more" toggle.
    """
    if max_visible_layers < 0:
        raise ValueError(f"max_visible_layers must be >= 0, got {max_visible_layers}")

    layers = place_segments(segments)
    hidden = layers[max_visible_layers:]

    return BoundedLayout(
        visible_layers=layers[:max_visible_layers],
        hidden_count=sum(len(layer) for layer in hidden),
        total_layers=len(layers),
    )
