"""
Propagate a container's date change to its dependents.

When a campaign (or project) start moves by N days, every dated dependent
moves by the same N days. With clamping, each shifted date is pulled back
inside the container's new bounds independently, so a dependent pushed
fully outside collapses onto the nearest boundary.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import TypeVar

from core.dates import add_days, clamp_day, days_between
from models.entities import Campaign, Task

Dependent = TypeVar("Dependent", Task, Campaign)


@dataclass(frozen=True)
class DependentFields:
    """Where a dependent keeps its container link and its dates."""

    container_field: str
    date_fields: tuple[str, ...]
    required_field: str | None  # Field that must be set for the record to count as dated


# Task -> campaign, Campaign -> project
DEPENDENT_FIELDS = {
    Task: DependentFields("campaign_id", ("start_date", "due_date"), "due_date"),
    Campaign: DependentFields("project_id", ("start_date", "end_date"), None),
}


@dataclass
class ShiftStats:
    """Preview of a cascade, for confirmation messages."""

    affected_count: int
    days_difference: int
    direction: str  # "earlier", "later" or "none"
    affected_ids: list[str] = field(default_factory=list)


def _fields(entity) -> DependentFields:
    try:
        return DEPENDENT_FIELDS[type(entity)]
    except KeyError:
        raise TypeError(f"{type(entity).__name__} records cannot depend on a container")


def belongs_to(entity, container_id: str) -> bool:
    return getattr(entity, _fields(entity).container_field) == container_id


def is_dated(entity) -> bool:
    fields = _fields(entity)
    if fields.required_field is not None:
        return getattr(entity, fields.required_field) is not None
    return any(getattr(entity, name) is not None for name in fields.date_fields)


def shift_entity(entity: Dependent, delta_days: int, bounds: tuple[date, date] | None = None) -> Dependent:
    """
    Shift one dependent's set dates by delta_days, clamping into bounds.

    Returns the same object when nothing changes.
    """
    changes = {}
    for name in _fields(entity).date_fields:
        value = getattr(entity, name)
        if value is None:
            continue
        shifted = add_days(value, delta_days)
        if bounds is not None:
            shifted = clamp_day(shifted, *bounds)
        if shifted != value:
            changes[name] = shifted

    return replace(entity, **changes) if changes else entity


def shift_dependents(
    entities: list[Dependent],
    container_id: str,
    old_start: date,
    new_start: date,
    new_end: date | None = None,
    clamp: bool = False,
) -> list[Dependent]:
    """
    Shift every dated dependent of a container after its start moved.

    Args:
        entities: all tasks (container = campaign) or campaigns (container = project)
        container_id: the container whose start changed
        old_start: container start before the change
        new_start: container start after the change
        new_end: container end after the change (needed for clamping)
        clamp: keep shifted dates within [new_start, new_end]

    Returns:
        Full list in input order; untouched entities are the same objects
    """
    delta = days_between(old_start, new_start)
    bounds = None
    if clamp and new_end is not None:
        if new_end < new_start:
            raise ValueError(f"Container ends ({new_end}) before it starts ({new_start})")
        bounds = (new_start, new_end)

    if delta == 0 and bounds is None:
        return list(entities)

    return [
        shift_entity(e, delta, bounds) if belongs_to(e, container_id) and is_dated(e) else e
        for e in entities
    ]


def shift_project(
    campaigns: list[Campaign],
    tasks: list[Task],
    project_id: str,
    old_start: date,
    new_start: date,
    new_end: date | None = None,
    clamp: bool = False,
) -> tuple[list[Campaign], list[Task]]:
    """
    Two-level cascade for a project move.

    Campaigns shift by the project delta first; each shifted campaign then
    shifts its tasks by its own effective delta, which differs from the
    project's whenever clamping moved the campaign's start.
    """
    shifted_campaigns = shift_dependents(campaigns, project_id, old_start, new_start, new_end, clamp)

    shifted_tasks = list(tasks)
    for before, after in zip(campaigns, shifted_campaigns):
        if after is before or before.start_date is None or after.start_date is None:
            continue
        shifted_tasks = shift_dependents(
            shifted_tasks,
            after.id,
            before.start_date,
            after.start_date,
            after.end_date,
            clamp,
        )

    return shifted_campaigns, shifted_tasks


def changed_pairs(before: list, after: list) -> list[tuple]:
    """(old, new) pairs for entities a shift actually replaced."""
    return [(old, new) for old, new in zip(before, after) if new is not old]


def _direction(days: int) -> str:
    if days > 0:
        return "later"
    if days < 0:
        return "earlier"
    return "none"


def compute_shift_stats(
    entities: list[Dependent],
    container_id: str,
    old_start: date,
    new_start: date,
    new_end: date | None = None,
    clamp: bool = False,
) -> ShiftStats:
    """
    Count what shift_dependents would change, without keeping the result.
    """
    shifted = shift_dependents(entities, container_id, old_start, new_start, new_end, clamp)
    affected = [new.id for _old, new in changed_pairs(entities, shifted)]
    days = days_between(old_start, new_start)
    return ShiftStats(
        affected_count=len(affected),
        days_difference=days,
        direction=_direction(days),
        affected_ids=affected,
    )


def compute_project_shift_stats(
    campaigns: list[Campaign],
    tasks: list[Task],
    project_id: str,
    old_start: date,
    new_start: date,
    new_end: date | None = None,
    clamp: bool = False,
) -> ShiftStats:
    """Statistics for shift_project: campaigns and tasks it would change."""
    new_campaigns, new_tasks = shift_project(
        campaigns, tasks, project_id, old_start, new_start, new_end, clamp
    )
    affected = [new.id for _old, new in changed_pairs(campaigns, new_campaigns)]
    affected += [new.id for _old, new in changed_pairs(tasks, new_tasks)]
    days = days_between(old_start, new_start)
    return ShiftStats(
        affected_count=len(affected),
        days_difference=days,
        direction=_direction(days),
        affected_ids=affected,
    )


def find_undated_dependents(entities: list[Dependent], container_id: str) -> list[Dependent]:
    """Dependents the cascade will leave alone because they have no dates."""
    return [e for e in entities if belongs_to(e, container_id) and not is_dated(e)]
