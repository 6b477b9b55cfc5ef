import os
import random
from uuid import uuid4

import pytest

pytestmark = pytest.mark.integration


def _database_url() -> str:
    return (os.environ.get("POSTGRES_URL") or os.environ.get("DATABASE_URL") or "").strip()


if not _database_url().startswith(("postgres://", "postgresql://")):
    pytest.skip("POSTGRES_URL not set to a PostgreSQL DSN; skipping store integration tests.", allow_module_level=True)

from src.domain.models import TASK_STATUS_RUNNING  # noqa: E402
from src.utils.database import (  # noqa: E402
    close_pool,
    configure_pool,
    delete_all_tasks,
    delete_task,
    get_all_tasks,
    get_running_tasks,
    get_task,
    get_task_by_id,
    get_tasks_by_user,
    get_user_by_id,
    init_task_schema,
    insert_task,
)


@pytest.fixture(scope="module", autouse=True)
def pool():
    configure_pool(_database_url(), minconn=1, maxconn=4)
    init_task_schema()
    yield
    close_pool()


def _user() -> str:
    return f"pytest-{uuid4()}"


def test_insert_then_fetch_round_trip():
    user_id = _user()
    created = insert_task(user_id, "AAPL", "1d", "macd_cross", "rsi_exit", TASK_STATUS_RUNNING)

    assert created.id > 0
    assert created.timestamp is not None
    assert get_task_by_id(created.id) == created
    assert get_task(user_id, created.id) == created
    assert get_task("someone-else", created.id) is None


def test_insert_returns_its_own_row_under_back_to_back_writes():
    user_id = _user()
    first = insert_task(user_id, "AAPL", "1h", "a", "b", "stopped")
    second = insert_task(user_id, "MSFT", "1h", "a", "b", "stopped")
    assert second.id > first.id
    assert (first.stock, second.stock) == ("AAPL", "MSFT")


def test_list_by_user_and_delete_one():
    user_id = _user()
    a = insert_task(user_id, "AAPL", "1d", "a", "b", "stopped")
    b = insert_task(user_id, "TSLA", "1d", "a", "b", "stopped")

    assert [t.id for t in get_tasks_by_user(user_id)] == [a.id, b.id]
    assert delete_task(user_id, a.id) == 1
    assert delete_task(user_id, a.id) == 0
    assert [t.id for t in get_tasks_by_user(user_id)] == [b.id]


def test_running_tasks_are_exactly_the_running_subset():
    user_id = _user()
    statuses = [TASK_STATUS_RUNNING, "stopped", TASK_STATUS_RUNNING, "paused", "Running", TASK_STATUS_RUNNING]
    random.shuffle(statuses)
    inserted = [insert_task(user_id, f"S{i}", "1d", "a", "b", s) for i, s in enumerate(statuses)]

    running = get_running_tasks()
    assert all(t.status == TASK_STATUS_RUNNING for t in running)
    mine = {t.id for t in running if t.user_id == user_id}
    assert mine == {t.id for t in inserted if t.status == TASK_STATUS_RUNNING}


def test_delete_all_returns_prior_count_and_empties_table():
    insert_task(_user(), "AAPL", "1d", "a", "b", TASK_STATUS_RUNNING)
    before = len(get_all_tasks())

    assert delete_all_tasks() == before
    assert get_all_tasks() == []


def test_unknown_user_lookup_returns_none():
    from src.db.postgres.schema import ensure_user_table
    from src.domain.errors import MissingTableError

    try:
        ensure_user_table()
    except MissingTableError:
        pytest.skip('"User" table not provisioned in this database')
    assert get_user_by_id(_user()) is None


def test_drop_table_then_schema_init_recreates_it():
    from src.utils.database import drop_tasks_table

    insert_task(_user(), "AAPL", "1d", "a", "b", TASK_STATUS_RUNNING)

    drop_tasks_table()
    init_task_schema()

    assert get_all_tasks() == []
    task = insert_task(_user(), "MSFT", "1h", "a", "b", TASK_STATUS_RUNNING)
    assert get_task_by_id(task.id) == task
