"""
Turn interaction intents into validated, ordered collaborator updates.

Planning is pure: it resolves the intent against an in-memory snapshot,
enforces containment, and computes cascade updates. Execution awaits each
update in order and never rolls back; partial cascade failures show up as
applied < attempted.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from functools import cached_property
from typing import Protocol

from core.config import CASCADE_CLAMP, DEFAULT_SCHEDULE_DAYS
from core.dates import add_days, days_between
from core.validation import (
    EntityNotFound,
    MissingPrerequisite,
    SchedulingError,
    campaign_bounds,
    check_containment,
    check_range,
    format_range,
    project_bounds,
)
from models.entities import (
    Campaign,
    CampaignUpdate,
    Project,
    ProjectUpdate,
    StageDate,
    Task,
    TaskUpdate,
)
from models.events import CalendarEvent, EventKind
from models.intents import DateChangeIntent, ScheduleIntent
from services.cascade import (
    ShiftStats,
    changed_pairs,
    compute_project_shift_stats,
    compute_shift_stats,
    find_undated_dependents,
    shift_dependents,
    shift_project,
)
from services.normalizer import normalize

PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


class EntityStore(Protocol):
    """Persistence collaborator. Each call raises on network/validation failure."""

    async def update_task(self, task_id: str, changes: TaskUpdate) -> None: ...

    async def update_campaign(self, campaign_id: str, changes: CampaignUpdate) -> None: ...

    async def update_project(self, project_id: str, changes: ProjectUpdate) -> None: ...


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PlanningSnapshot:
    """Records the calendar was rendered from."""

    tasks: list[Task] = field(default_factory=list)
    campaigns: list[Campaign] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)

    @cached_property
    def events(self) -> list[CalendarEvent]:
        return normalize(self.tasks, self.campaigns, self.projects)

    @cached_property
    def _events_by_id(self) -> dict[str, CalendarEvent]:
        return {e.id: e for e in self.events}

    def find_event(self, event_id: str) -> CalendarEvent | None:
        return self._events_by_id.get(event_id)

    def task(self, task_id: str | None) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def campaign(self, campaign_id: str | None) -> Campaign | None:
        return next((c for c in self.campaigns if c.id == campaign_id), None)

    def project(self, project_id: str | None) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)


@dataclass(frozen=True)
class PlannedUpdate:
    """One collaborator call."""

    kind: EventKind  # task, campaign or project
    entity_id: str
    changes: dict
    label: str
    primary: bool = False  # The update the user asked for, as opposed to a cascade


@dataclass
class SchedulePlan:
    updates: list[PlannedUpdate] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Notification:
    """Short, non-blocking message for the user."""

    level: str  # "success", "warning" or "error"
    message: str


@dataclass
class CommitResult:
    ok: bool = True
    attempted: int = 0
    applied: int = 0
    error_code: str | None = None
    notifications: list[Notification] = field(default_factory=list)
    updates: list[PlannedUpdate] = field(default_factory=list)

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def _date_changes(before, after, names: tuple[str, ...]) -> dict:
    return {name: getattr(after, name) for name in names if getattr(before, name) != getattr(after, name)}


# =============================================================================
# SCHEDULER
# =============================================================================


class Scheduler:
    """
    Apply move, resize and schedule intents through an EntityStore.

    Args:
        store: persistence collaborator
        clamp_cascade: clamp shifted dependents into their container's new bounds
    """

    def __init__(self, store: EntityStore, clamp_cascade: bool = CASCADE_CLAMP):
        self.store = store
        self.clamp_cascade = clamp_cascade

    # -------------------------------------------------------------------------
    # Planning (pure)
    # -------------------------------------------------------------------------

    def plan(self, intent: DateChangeIntent, snapshot: PlanningSnapshot) -> SchedulePlan:
        """
        Validate a move/resize intent and compute every resulting update.

        Raises:
            SchedulingError: containment violation or missing prerequisite
        """
        event = snapshot.find_event(intent.event_id)
        if event is None:
            raise EntityNotFound(f"Event '{intent.event_id}' not found")

        check_range(intent.start_date, intent.end_date, event.title)
        meta = event.metadata

        if event.kind == EventKind.STAGE:
            return self._plan_stage(
                meta.parent_kind,
                meta.task_id or meta.campaign_id or meta.project_id,
                meta.stage_id,
                intent.start_date,
                intent.end_date,
                snapshot,
            )

        source_id = {
            EventKind.TASK: meta.task_id,
            EventKind.CAMPAIGN: meta.campaign_id,
            EventKind.PROJECT: meta.project_id,
        }[event.kind]
        return self._plan_record(event.kind, source_id, intent.start_date, intent.end_date, snapshot)

    def plan_schedule(self, intent: ScheduleIntent, snapshot: PlanningSnapshot) -> SchedulePlan:
        """Validate a drop from the unscheduled list."""
        check_range(intent.start_date, intent.end_date, "Scheduled item")
        kind = EventKind(intent.item_kind)
        if kind == EventKind.STAGE:
            if intent.parent_kind is None:
                raise MissingPrerequisite("Stage drop has no owning project, campaign or task")
            return self._plan_stage(
                EventKind(intent.parent_kind),
                intent.parent_id,
                intent.item_id,
                intent.start_date,
                intent.end_date,
                snapshot,
            )
        return self._plan_record(kind, intent.item_id, intent.start_date, intent.end_date, snapshot)

    def _plan_record(
        self, kind: EventKind, source_id: str, start: date, end: date, snapshot: PlanningSnapshot
    ) -> SchedulePlan:
        planners = {
            EventKind.TASK: (snapshot.task, self._plan_task),
            EventKind.CAMPAIGN: (snapshot.campaign, self._plan_campaign),
            EventKind.PROJECT: (snapshot.project, self._plan_project),
        }
        lookup, planner = planners[kind]
        record = lookup(source_id)
        if record is None:
            raise EntityNotFound(f"{kind.value.capitalize()} '{source_id}' not found")
        return planner(record, start, end, snapshot)

    def _plan_task(self, task: Task, start: date, end: date, snapshot: PlanningSnapshot) -> SchedulePlan:
        if task.campaign_id:
            campaign = snapshot.campaign(task.campaign_id)
            if campaign is None:
                raise MissingPrerequisite(
                    f"Task '{task.title}' belongs to a campaign that is not loaded"
                )
            check_containment(
                start, end, campaign_bounds(campaign), f"Task '{task.title}'", f"campaign '{campaign.title}'"
            )

        return SchedulePlan(
            updates=[
                PlannedUpdate(
                    EventKind.TASK, task.id, {"start_date": start, "due_date": end}, task.title, primary=True
                )
            ]
        )

    def _plan_campaign(
        self, campaign: Campaign, start: date, end: date, snapshot: PlanningSnapshot
    ) -> SchedulePlan:
        if campaign.project_id:
            project = snapshot.project(campaign.project_id)
            if project is None:
                raise MissingPrerequisite(
                    f"Campaign '{campaign.title}' belongs to a project that is not loaded"
                )
            check_containment(
                start,
                end,
                project_bounds(project),
                f"Campaign '{campaign.title}'",
                f"project '{project.title}'",
            )

        plan = SchedulePlan(
            updates=[
                PlannedUpdate(
                    EventKind.CAMPAIGN,
                    campaign.id,
                    {"start_date": start, "end_date": end},
                    campaign.title,
                    primary=True,
                )
            ]
        )

        if campaign.start_date is not None:
            shifted = shift_dependents(
                snapshot.tasks, campaign.id, campaign.start_date, start, end, self.clamp_cascade
            )
            plan.updates.extend(self._task_updates(snapshot.tasks, shifted))

        undated = find_undated_dependents(snapshot.tasks, campaign.id)
        if undated and campaign.start_date is not None:
            plan.warnings.append(f"Skipped {_plural(len(undated), 'task')} without dates")
        return plan

    def _plan_project(
        self, project: Project, start: date, end: date, snapshot: PlanningSnapshot
    ) -> SchedulePlan:
        if project.actual_end_date is not None:
            raise SchedulingError(f"Project '{project.title}' is completed and cannot be rescheduled")

        plan = SchedulePlan(
            updates=[
                PlannedUpdate(
                    EventKind.PROJECT,
                    project.id,
                    {"start_date": start, "end_date": end},
                    project.title,
                    primary=True,
                )
            ]
        )

        if project.start_date is not None:
            campaigns, tasks = shift_project(
                snapshot.campaigns,
                snapshot.tasks,
                project.id,
                project.start_date,
                start,
                end,
                self.clamp_cascade,
            )
            for old, new in changed_pairs(snapshot.campaigns, campaigns):
                plan.updates.append(
                    PlannedUpdate(
                        EventKind.CAMPAIGN,
                        new.id,
                        _date_changes(old, new, ("start_date", "end_date")),
                        new.title,
                    )
                )
            plan.updates.extend(self._task_updates(snapshot.tasks, tasks))

        return plan

    def _plan_stage(
        self,
        parent_kind: EventKind | None,
        parent_id: str | None,
        stage_id: str | None,
        start: date,
        end: date,
        snapshot: PlanningSnapshot,
    ) -> SchedulePlan:
        lookups = {
            EventKind.TASK: snapshot.task,
            EventKind.CAMPAIGN: snapshot.campaign,
            EventKind.PROJECT: snapshot.project,
        }
        if parent_kind not in lookups:
            raise MissingPrerequisite(f"Stage '{stage_id}' has no owning record")

        parent = lookups[parent_kind](parent_id)
        if parent is None:
            raise EntityNotFound(f"{parent_kind.value.capitalize()} '{parent_id}' not found")

        stage = next((s for s in parent.stage_dates if s.id == stage_id), None)
        if stage is None:
            raise EntityNotFound(f"Stage '{stage_id}' not found on '{parent.title}'")

        bounds = self._stage_bounds(parent_kind, parent)
        if bounds is not None:
            check_containment(
                start, end, bounds, f"Stage '{stage.stage_name}'", f"{parent_kind.value} '{parent.title}'"
            )

        stages: list[StageDate] = [
            replace(s, start_date=start, end_date=end) if s.id == stage.id else s
            for s in parent.stage_dates
        ]
        return SchedulePlan(
            updates=[
                PlannedUpdate(
                    parent_kind,
                    parent.id,
                    {"stage_dates": stages},
                    f"{parent.title}: {stage.stage_name}",
                    primary=True,
                )
            ]
        )

    @staticmethod
    def _stage_bounds(parent_kind: EventKind, parent) -> tuple[date, date] | None:
        """Parent range a stage must stay in; None while the parent is unscheduled."""
        if not parent.is_scheduled:
            return None
        if parent_kind == EventKind.TASK:
            # A start after the due date collapses onto it
            start = min(parent.start_date or parent.due_date, parent.due_date)
            return start, parent.due_date
        if parent_kind == EventKind.PROJECT:
            return project_bounds(parent)
        return campaign_bounds(parent)

    @staticmethod
    def _task_updates(before: list[Task], after: list[Task]) -> list[PlannedUpdate]:
        return [
            PlannedUpdate(
                EventKind.TASK,
                new.id,
                _date_changes(old, new, ("start_date", "due_date")),
                new.title,
            )
            for old, new in changed_pairs(before, after)
        ]

    def preview_shift(
        self,
        container_kind: EventKind,
        container_id: str,
        new_start: date,
        new_end: date | None,
        snapshot: PlanningSnapshot,
        clamp: bool | None = None,
    ) -> ShiftStats:
        """
        Cascade statistics for a container moving to new_start.

        Without new_end the container keeps its length, so clamping still
        has an end to clamp to.

        Raises:
            EntityNotFound: unknown container
            MissingPrerequisite: container has no start date to shift from
        """
        clamp = self.clamp_cascade if clamp is None else clamp
        if container_kind == EventKind.CAMPAIGN:
            container = snapshot.campaign(container_id)
        elif container_kind == EventKind.PROJECT:
            container = snapshot.project(container_id)
        else:
            raise SchedulingError(f"{container_kind.value.capitalize()} records have no dependents")

        if container is None:
            raise EntityNotFound(f"{container_kind.value.capitalize()} '{container_id}' not found")
        if container.start_date is None:
            raise MissingPrerequisite(f"'{container.title}' has no start date to shift from")

        if new_end is None:
            old_end = container.end_date if container_kind == EventKind.CAMPAIGN else container.effective_end
            if old_end is not None:
                new_end = add_days(old_end, days_between(container.start_date, new_start))

        if container_kind == EventKind.CAMPAIGN:
            return compute_shift_stats(
                snapshot.tasks, container_id, container.start_date, new_start, new_end, clamp
            )
        return compute_project_shift_stats(
            snapshot.campaigns, snapshot.tasks, container_id, container.start_date, new_start, new_end, clamp
        )

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def apply(self, intent: DateChangeIntent, snapshot: PlanningSnapshot) -> CommitResult:
        """Validate and persist a move/resize, cascading to dependents."""
        try:
            plan = self.plan(intent, snapshot)
        except SchedulingError as e:
            return self._rejected(e)
        return await self._execute(plan)

    async def schedule(self, intent: ScheduleIntent, snapshot: PlanningSnapshot) -> CommitResult:
        """Validate and persist a drop from the unscheduled list."""
        try:
            plan = self.plan_schedule(intent, snapshot)
        except SchedulingError as e:
            return self._rejected(e)
        return await self._execute(plan)

    async def auto_schedule_tasks(self, snapshot: PlanningSnapshot) -> CommitResult:
        """
        Place every undated task at its campaign's start for one day.

        Tasks whose campaign is missing or has no dates are skipped.
        """
        updates = []
        skipped = 0
        for task in snapshot.tasks:
            if task.start_date is not None or task.due_date is not None:
                continue
            campaign = snapshot.campaign(task.campaign_id)
            if campaign is None or not campaign.is_scheduled:
                skipped += 1
                continue
            start = campaign.start_date
            due = min(add_days(start, DEFAULT_SCHEDULE_DAYS), campaign.end_date)
            updates.append(
                PlannedUpdate(EventKind.TASK, task.id, {"start_date": start, "due_date": due}, task.title)
            )

        result = await self._run(updates)
        if result.applied:
            result.notify("success", f"Auto-scheduled {_plural(result.applied, 'task')}")
        failed = result.attempted - result.applied
        if failed:
            result.notify("error", f"Failed to schedule {_plural(failed, 'task')}")
        if skipped:
            result.notify("warning", f"Skipped {_plural(skipped, 'task')} (no campaign dates)")
        return result

    @staticmethod
    def _rejected(error: SchedulingError) -> CommitResult:
        result = CommitResult(ok=False, error_code=error.code)
        result.notify("error", str(error))
        return result

    async def _send(self, update: PlannedUpdate) -> None:
        senders = {
            EventKind.TASK: self.store.update_task,
            EventKind.CAMPAIGN: self.store.update_campaign,
            EventKind.PROJECT: self.store.update_project,
        }
        await senders[update.kind](update.entity_id, update.changes)

    async def _run(self, updates: list[PlannedUpdate]) -> CommitResult:
        """
        Await updates one at a time, in order.

        A failing primary update stops the batch; a failing cascade update is
        counted and the batch continues.
        """
        result = CommitResult(updates=updates)
        for update in updates:
            result.attempted += 1
            try:
                await self._send(update)
            except Exception as e:
                print(f"  Error updating {update.kind.value} {update.entity_id}: {e}")
                if update.primary:
                    result.ok = False
                    result.error_code = PERSISTENCE_FAILURE
                    return result
                continue
            result.applied += 1
        return result

    async def _execute(self, plan: SchedulePlan) -> CommitResult:
        result = await self._run(plan.updates)
        primary = next((u for u in plan.updates if u.primary), None)

        if not result.ok:
            label = primary.label if primary else "item"
            result.notify("error", f"Failed to update '{label}'")
            return result

        if primary is not None:
            result.notify("success", self._success_message(primary))

        dependents = result.attempted - 1
        if dependents > 0:
            shifted = result.applied - 1
            if shifted == dependents:
                result.notify("success", f"Shifted {_plural(dependents, 'dependent item')}")
            else:
                result.notify(
                    "warning",
                    f"Shifted {shifted} of {_plural(dependents, 'dependent item')}; "
                    f"{dependents - shifted} failed",
                )

        for warning in plan.warnings:
            result.notify("warning", warning)
        return result

    @staticmethod
    def _success_message(update: PlannedUpdate) -> str:
        changes = update.changes
        start = changes.get("start_date")
        end = changes.get("due_date", changes.get("end_date"))
        if start is not None and end is not None:
            return f"'{update.label}' scheduled for {format_range(start, end)}"
        return f"'{update.label}' updated"
