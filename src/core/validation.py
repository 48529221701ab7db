"""
Scheduling validation: containment and prerequisite checks.
"""

from datetime import date

from core.dates import is_within
from models.entities import Campaign, Project


class SchedulingError(ValueError):
    """Base class for commits rejected before any persistence call."""

    code = "SCHEDULING_ERROR"


class ContainmentViolation(SchedulingError):
    """Child range would fall outside its container's range."""

    code = "CONTAINMENT_VIOLATION"


class MissingPrerequisite(SchedulingError):
    """Container has no dates, or a required record/link is missing."""

    code = "MISSING_PREREQUISITE"


class EntityNotFound(MissingPrerequisite):
    """Intent refers to an event or record absent from the snapshot."""

    code = "NOT_FOUND"


def format_range(start: date, end: date) -> str:
    """Format a range as 'Jun 1 - Jun 10' (no zero-padding)."""
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}"


def campaign_bounds(campaign: Campaign) -> tuple[date, date]:
    """
    Dates a task may occupy inside this campaign.

    Raises:
        MissingPrerequisite: if the campaign lacks a start or end date
    """
    if campaign.start_date is None or campaign.end_date is None:
        missing = "start date" if campaign.start_date is None else "end date"
        raise MissingPrerequisite(f"Campaign '{campaign.title}' has no {missing}")
    return campaign.start_date, campaign.end_date


def project_bounds(project: Project) -> tuple[date, date]:
    """
    Dates a campaign may occupy inside this project.

    Raises:
        MissingPrerequisite: if the project lacks a start or end date
    """
    if project.start_date is None or project.effective_end is None:
        missing = "start date" if project.start_date is None else "end date"
        raise MissingPrerequisite(f"Project '{project.title}' has no {missing}")
    return project.start_date, project.effective_end


def check_range(start: date, end: date, label: str) -> None:
    """Reject inverted ranges."""
    if end < start:
        raise SchedulingError(f"{label} cannot end before it starts")


def check_containment(
    start: date,
    end: date,
    bounds: tuple[date, date],
    child_label: str,
    container_label: str,
) -> None:
    """
    Verify that [start, end] lies inside the container bounds.

    Raises:
        ContainmentViolation: with a short user-facing message
    """
    bound_start, bound_end = bounds
    if not is_within(start, end, bound_start, bound_end):
        raise ContainmentViolation(
            f"{child_label} must stay within {container_label} "
            f"({format_range(bound_start, bound_end)})"
        )
