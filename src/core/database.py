"""
SQLite persistence for planning records.

Implements the scheduler's EntityStore collaborator: synchronous sqlite3
work runs in a worker thread so the async update calls never block the
event loop.
"""

import asyncio
import sqlite3
from datetime import date
from pathlib import Path

from core.config import DB_PATH
from models.entities import (
    Campaign,
    CampaignUpdate,
    Project,
    ProjectUpdate,
    StageDate,
    Task,
    TaskUpdate,
)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS projects (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT DEFAULT '',
        start_date TEXT,
        end_date TEXT,
        actual_end_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS campaigns (
        id TEXT PRIMARY KEY,
        project_id TEXT,
        title TEXT NOT NULL,
        start_date TEXT,
        end_date TEXT,
        FOREIGN KEY (project_id) REFERENCES projects(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        campaign_id TEXT,
        title TEXT NOT NULL,
        description TEXT DEFAULT '',
        start_date TEXT,
        due_date TEXT,
        completed INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (campaign_id) REFERENCES campaigns(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS stage_dates (
        id TEXT PRIMARY KEY,
        owner_kind TEXT NOT NULL CHECK(owner_kind IN ('project', 'campaign', 'task')),
        owner_id TEXT NOT NULL,
        stage_name TEXT NOT NULL,
        start_date TEXT,
        end_date TEXT,
        color TEXT,
        completed INTEGER NOT NULL DEFAULT 0,
        position INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        event_id TEXT,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL,
        updates_attempted INTEGER,
        updates_applied INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'notification', 'warning')),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_campaigns_project ON campaigns(project_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_campaign ON tasks(campaign_id)",
    "CREATE INDEX IF NOT EXISTS idx_stage_dates_owner ON stage_dates(owner_kind, owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
]


def get_connection(db_path: Path = DB_PATH) -> sqlite3.Connection:
    """Get a database connection with dict-like rows."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def create_tables(conn: sqlite3.Connection):
    """Create all tables and indexes if they don't exist."""
    cursor = conn.cursor()
    for statement in SCHEMA:
        cursor.execute(statement)
    conn.commit()


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


# =============================================================================
# READS
# =============================================================================


def read_stage_dates(conn: sqlite3.Connection) -> dict[tuple[str, str], list[StageDate]]:
    """All stage markers keyed by (owner_kind, owner_id), in position order."""
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM stage_dates ORDER BY owner_kind, owner_id, position")
    stages: dict[tuple[str, str], list[StageDate]] = {}
    for row in cursor.fetchall():
        key = (row["owner_kind"], row["owner_id"])
        stages.setdefault(key, []).append(StageDate.from_dict(dict(row)))
    return stages


def read_planning_data(
    conn: sqlite3.Connection,
) -> tuple[list[Task], list[Campaign], list[Project]]:
    """Load every task, campaign and project with their stage markers."""
    stages = read_stage_dates(conn)
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM projects ORDER BY rowid")
    projects = []
    for row in cursor.fetchall():
        project = Project.from_dict(dict(row))
        project.stage_dates = stages.get(("project", project.id), [])
        projects.append(project)

    cursor.execute("SELECT * FROM campaigns ORDER BY rowid")
    campaigns = []
    for row in cursor.fetchall():
        campaign = Campaign.from_dict(dict(row))
        campaign.stage_dates = stages.get(("campaign", campaign.id), [])
        campaigns.append(campaign)

    cursor.execute("SELECT * FROM tasks ORDER BY rowid")
    tasks = []
    for row in cursor.fetchall():
        task = Task.from_dict(dict(row))
        task.stage_dates = stages.get(("task", task.id), [])
        tasks.append(task)

    return tasks, campaigns, projects


# =============================================================================
# WRITES
# =============================================================================


def insert_project(conn: sqlite3.Connection, project: Project):
    conn.execute(
        "INSERT INTO projects (id, title, description, start_date, end_date, actual_end_date) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (
            project.id,
            project.title,
            project.description,
            _iso(project.start_date),
            _iso(project.end_date),
            _iso(project.actual_end_date),
        ),
    )
    replace_stage_dates(conn, "project", project.id, project.stage_dates)
    conn.commit()


def insert_campaign(conn: sqlite3.Connection, campaign: Campaign):
    conn.execute(
        "INSERT INTO campaigns (id, project_id, title, start_date, end_date) VALUES (?, ?, ?, ?, ?)",
        (
            campaign.id,
            campaign.project_id,
            campaign.title,
            _iso(campaign.start_date),
            _iso(campaign.end_date),
        ),
    )
    replace_stage_dates(conn, "campaign", campaign.id, campaign.stage_dates)
    conn.commit()


def insert_task(conn: sqlite3.Connection, task: Task):
    conn.execute(
        "INSERT INTO tasks (id, campaign_id, title, description, start_date, due_date, completed) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (
            task.id,
            task.campaign_id,
            task.title,
            task.description,
            _iso(task.start_date),
            _iso(task.due_date),
            int(task.completed),
        ),
    )
    replace_stage_dates(conn, "task", task.id, task.stage_dates)
    conn.commit()


def replace_stage_dates(
    conn: sqlite3.Connection, owner_kind: str, owner_id: str, stages: list[StageDate]
):
    """Delete an owner's stage markers and insert the given list in order."""
    conn.execute(
        "DELETE FROM stage_dates WHERE owner_kind = ? AND owner_id = ?",
        (owner_kind, owner_id),
    )
    for position, stage in enumerate(stages):
        conn.execute(
            """
            INSERT INTO stage_dates (
                id, owner_kind, owner_id, stage_name, start_date,
                end_date, color, completed, position
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                stage.id,
                owner_kind,
                owner_id,
                stage.stage_name,
                _iso(stage.start_date),
                _iso(stage.end_date),
                stage.color,
                int(stage.completed),
                position,
            ),
        )


def update_record(
    conn: sqlite3.Connection,
    table: str,
    owner_kind: str,
    record_id: str,
    changes: dict,
    date_columns: tuple[str, ...],
):
    """
    Apply date changes (and an optional stage list) to one row.

    Raises:
        ValueError: if the record does not exist
    """
    cursor = conn.cursor()
    cursor.execute(f"SELECT 1 FROM {table} WHERE id = ?", (record_id,))
    if cursor.fetchone() is None:
        raise ValueError(f"{owner_kind.capitalize()} '{record_id}' not found")

    columns = [c for c in date_columns if c in changes]
    if columns:
        assignments = ", ".join(f"{c} = ?" for c in columns)
        values = [_iso(changes[c]) for c in columns]
        cursor.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", (*values, record_id))

    if "stage_dates" in changes:
        replace_stage_dates(conn, owner_kind, record_id, changes["stage_dates"])

    conn.commit()


class SQLiteEntityStore:
    """EntityStore backed by the planner database."""

    def __init__(self, db_path: Path = DB_PATH):
        self.db_path = db_path

    def _update(self, table: str, owner_kind: str, record_id: str, changes: dict, columns: tuple[str, ...]):
        conn = get_connection(self.db_path)
        try:
            update_record(conn, table, owner_kind, record_id, changes, columns)
        finally:
            conn.close()

    def _load(self) -> tuple[list[Task], list[Campaign], list[Project]]:
        conn = get_connection(self.db_path)
        try:
            return read_planning_data(conn)
        finally:
            conn.close()

    def is_available(self) -> bool:
        return Path(self.db_path).exists()

    async def load(self) -> tuple[list[Task], list[Campaign], list[Project]]:
        return await asyncio.to_thread(self._load)

    async def update_task(self, task_id: str, changes: TaskUpdate) -> None:
        await asyncio.to_thread(
            self._update, "tasks", "task", task_id, dict(changes), ("start_date", "due_date")
        )

    async def update_campaign(self, campaign_id: str, changes: CampaignUpdate) -> None:
        await asyncio.to_thread(
            self._update, "campaigns", "campaign", campaign_id, dict(changes), ("start_date", "end_date")
        )

    async def update_project(self, project_id: str, changes: ProjectUpdate) -> None:
        await asyncio.to_thread(
            self._update, "projects", "project", project_id, dict(changes), ("start_date", "end_date")
        )
