"""Tests for the SQLite planning store."""

import asyncio
from datetime import date

import pytest

from core.database import (
    SQLiteEntityStore,
    create_tables,
    get_connection,
    insert_campaign,
    insert_project,
    insert_task,
    read_planning_data,
)
from models.entities import StageDate


@pytest.fixture
def db_path(tmp_path, june_project, june_campaign, june_task):
    path = tmp_path / "planner.db"
    conn = get_connection(path)
    create_tables(conn)
    insert_project(conn, june_project)
    insert_campaign(conn, june_campaign)
    insert_task(conn, june_task)
    conn.close()
    return path


def test_round_trip_keeps_dates_and_stages(db_path, june_campaign):
    conn = get_connection(db_path)
    tasks, campaigns, projects = read_planning_data(conn)
    conn.close()

    assert [t.id for t in tasks] == ["T"]
    assert tasks[0].due_date == date(2025, 6, 3)
    assert projects[0].actual_end_date is None
    (campaign,) = campaigns
    assert campaign.project_id == "P"
    assert [s.id for s in campaign.stage_dates] == ["s1", "s2"]
    assert campaign.stage_dates == june_campaign.stage_dates


def test_store_updates_dates(db_path):
    store = SQLiteEntityStore(db_path)
    asyncio.run(store.update_task("T", {"start_date": date(2025, 6, 6), "due_date": date(2025, 6, 7)}))
    asyncio.run(store.update_campaign("C", {"end_date": date(2025, 6, 20)}))

    tasks, campaigns, _ = asyncio.run(store.load())
    assert (tasks[0].start_date, tasks[0].due_date) == (date(2025, 6, 6), date(2025, 6, 7))
    assert campaigns[0].start_date == date(2025, 6, 1)
    assert campaigns[0].end_date == date(2025, 6, 20)


def test_store_replaces_stage_list(db_path):
    store = SQLiteEntityStore(db_path)
    stages = [StageDate(id="s9", stage_name="Launch", start_date=date(2025, 6, 9), end_date=date(2025, 6, 9))]
    asyncio.run(store.update_project("P", {"stage_dates": stages}))

    _, _, projects = asyncio.run(store.load())
    assert projects[0].stage_dates == stages


def test_update_missing_record_raises(db_path):
    store = SQLiteEntityStore(db_path)
    with pytest.raises(ValueError, match="not found"):
        asyncio.run(store.update_task("nope", {"due_date": date(2025, 6, 7)}))


def test_is_available(tmp_path, db_path):
    assert SQLiteEntityStore(db_path).is_available()
    assert not SQLiteEntityStore(tmp_path / "missing.db").is_available()
